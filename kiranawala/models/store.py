from sqlalchemy import Column, String, Text, Float, Integer, Boolean, DateTime
from kiranawala.db.session import Base

class StoreEntity(Base):
    __tablename__ = "stores"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    contact = Column(String, nullable=False, default="")
    logo_url = Column(String, nullable=True)
    rating = Column(Float, nullable=False, default=4.5)
    minimum_order_value = Column(Float, nullable=False, default=100.0)
    delivery_fee = Column(Float, nullable=False, default=30.0)
    estimated_delivery_time = Column(Integer, nullable=False, default=30)
    is_open = Column(Boolean, nullable=False, default=True)
    subscription_status = Column(String, nullable=False, default="ACTIVE")
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
