from sqlalchemy import Column, String, Float, Integer
from kiranawala.db.session import Base

class CartLineEntity(Base):
    __tablename__ = "cart_lines"

    # "<customer_id>:<product_id>", one line per product per customer
    id = Column(String, primary_key=True, index=True)
    customer_id = Column(String, nullable=False, index=True)
    store_id = Column(String, nullable=False)
    product_id = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)  # snapshot taken when the line was added
