from pydantic import BaseModel, Field
from typing import Optional

class Product(BaseModel):
    id: str
    store_id: str
    name: str
    description: str = ""
    price: float = Field(ge=0)
    stock_quantity: int = 0
    category: str = "General"
    image_url: Optional[str] = None
    is_available: bool = True

    class Config:
        from_attributes = True
