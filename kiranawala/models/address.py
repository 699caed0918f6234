from sqlalchemy import Column, String, Float, Boolean, DateTime
from kiranawala.db.session import Base

class AddressEntity(Base):
    __tablename__ = "addresses"

    id = Column(String, primary_key=True, index=True)
    owner_id = Column(String, nullable=False, index=True)
    address_line = Column(String, nullable=False)
    building_name = Column(String, nullable=True)
    flat_number = Column(String, nullable=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    label = Column(String, nullable=False, default="Home")
    is_default = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
