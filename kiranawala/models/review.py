from sqlalchemy import Column, String, Text, Integer, DateTime, Index
from kiranawala.db.session import Base

class StoreReviewEntity(Base):
    __tablename__ = "store_reviews"
    __table_args__ = (
        Index("idx_store_reviews_store_customer", "store_id", "customer_id"),
    )

    id = Column(String, primary_key=True, index=True)
    store_id = Column(String, nullable=False, index=True)
    customer_id = Column(String, nullable=False)
    customer_name = Column(String, nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=True)
    updated_at = Column(DateTime, nullable=True)
