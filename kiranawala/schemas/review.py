from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from kiranawala.schemas.result import DataSource

class StoreReview(BaseModel):
    id: str
    store_id: str
    customer_id: str
    customer_name: str
    rating: int = Field(ge=1, le=5)
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class ReviewUpsert(BaseModel):
    customer_id: str
    customer_name: str
    rating: int
    comment: Optional[str] = None

class RatingUpdate(BaseModel):
    store_id: str
    rating: float
    review_count: int
    source: DataSource  # CACHE means the remote store row was not written
