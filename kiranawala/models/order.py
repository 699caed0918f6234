from sqlalchemy import Column, String, ForeignKey, Float, Integer, DateTime
from sqlalchemy.orm import relationship
from kiranawala.db.session import Base

class OrderEntity(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    store_id = Column(String, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="PENDING")
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)

    order_items = relationship("OrderItemEntity", back_populates="order")

class OrderItemEntity(Base):
    __tablename__ = "order_items"

    id = Column(String, primary_key=True, index=True)
    order_id = Column(String, ForeignKey("orders.id"), nullable=False, index=True)
    product_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("OrderEntity", back_populates="order_items")
