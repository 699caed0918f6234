from fastapi import APIRouter, Depends
from typing import Optional
from kiranawala.api.responses import listing
from kiranawala.db.deps import get_review_aggregator
from kiranawala.schemas.review import RatingUpdate, ReviewUpsert, StoreReview
from kiranawala.services.review_aggregator import ReviewAggregator

router = APIRouter()

@router.get("/stores/{store_id}/reviews")
async def store_reviews(store_id: str, reviews: ReviewAggregator = Depends(get_review_aggregator)):
    return listing(await reviews.get_store_reviews(store_id))

@router.put("/stores/{store_id}/reviews", response_model=StoreReview)
async def save_review(
    store_id: str,
    data: ReviewUpsert,
    reviews: ReviewAggregator = Depends(get_review_aggregator),
):
    return await reviews.add_or_update_review(
        store_id, data.customer_id, data.customer_name, data.rating, data.comment
    )

@router.delete("/reviews/{review_id}", response_model=Optional[RatingUpdate])
async def delete_review(
    review_id: str,
    customer_id: str,
    reviews: ReviewAggregator = Depends(get_review_aggregator),
):
    return await reviews.delete_review(review_id, customer_id)
