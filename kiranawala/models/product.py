from sqlalchemy import Column, String, Text, Float, Integer, Boolean
from kiranawala.db.session import Base

class ProductEntity(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True, index=True)
    store_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False, default=0.0)
    stock_quantity = Column(Integer, nullable=False, default=0)
    category = Column(String, nullable=False, default="General")
    image_url = Column(String, nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
