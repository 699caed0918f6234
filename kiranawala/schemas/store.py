from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

class SubscriptionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    EXPIRED = "EXPIRED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value):
        return cls.UNKNOWN

class GeoPoint(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)

class Store(BaseModel):
    id: str
    name: str
    address: str
    description: Optional[str] = None
    latitude: float
    longitude: float
    contact: str = ""
    logo_url: Optional[str] = None
    rating: float = 4.5
    minimum_order_value: float = 100.0
    delivery_fee: float = 30.0
    estimated_delivery_time: int = 30  # minutes
    is_open: bool = True
    subscription_status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Filled in by discovery, never persisted
    distance_km: Optional[float] = None

    class Config:
        from_attributes = True

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(latitude=self.latitude, longitude=self.longitude)

    @property
    def discoverable(self) -> bool:
        return self.subscription_status == SubscriptionStatus.ACTIVE and self.is_open
