from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

class OrderItemCreate(BaseModel):
    product_id: str
    product_name: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)

class OrderCreate(BaseModel):
    customer_id: str
    store_id: str
    total_amount: float = Field(ge=0)
    delivery_fee: float = 30.0
    status: OrderStatus = OrderStatus.PENDING
    delivery_address: str
    customer_phone: str
    customer_name: str
    items: List[OrderItemCreate] = Field(min_length=1)

class OrderItem(OrderItemCreate):
    id: str
    order_id: str

class Order(BaseModel):
    id: str
    customer_id: str
    store_id: str
    store_name: str
    total_amount: float
    delivery_fee: float
    status: OrderStatus
    items: List[OrderItem]
    delivery_address: str = ""
    customer_phone: str = ""
    customer_name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class OrderPlaced(BaseModel):
    order_id: str
