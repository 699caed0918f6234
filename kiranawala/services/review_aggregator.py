# kiranawala/services/review_aggregator.py
"""
Store reviews and the store's aggregate rating.

A customer has at most one review per store: saving again updates it. Every
mutation recomputes the store's average rating and writes it back to the
remote store row.
"""

import logging
import uuid
from statistics import mean
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from kiranawala.core.config import settings
from kiranawala.core.exceptions import RemoteUnavailable, ValidationError
from kiranawala.core.remote import eq
from kiranawala.schemas.result import DataSource, Fetched
from kiranawala.schemas.review import RatingUpdate, StoreReview
from kiranawala.services.sync_policy import EntityKind, SyncPolicy

logger = logging.getLogger(__name__)

REVIEWS = EntityKind("store_reviews", StoreReview)


def average_rating(ratings: List[int]) -> float:
    return float(mean(ratings)) if ratings else settings.DEFAULT_STORE_RATING


class ReviewAggregator:
    def __init__(self, sync: SyncPolicy):
        self.sync = sync

    def _validate(
        self, store_id: str, customer_id: str, customer_name: str, rating: int, comment: Optional[str]
    ) -> Optional[str]:
        if rating < 1 or rating > 5:
            raise ValidationError("Rating must be between 1 and 5")
        if not store_id.strip() or not customer_id.strip():
            raise ValidationError("Store ID and Customer ID are required")
        if not customer_name.strip():
            raise ValidationError("Customer name is required")
        if comment is not None and len(comment) > settings.MAX_REVIEW_COMMENT_LENGTH:
            raise ValidationError(
                f"Comment must be {settings.MAX_REVIEW_COMMENT_LENGTH} characters or less"
            )
        comment = comment.strip() if comment is not None else None
        return comment or None

    async def get_store_reviews(self, store_id: str) -> Fetched:
        return await self.sync.fetch(
            REVIEWS,
            filters=[eq("store_id", store_id)],
            cache_criteria={"store_id": store_id},
            mirror=True,
        )

    async def get_customer_review(self, store_id: str, customer_id: str) -> Optional[StoreReview]:
        fetched = await self.sync.fetch(
            REVIEWS,
            filters=[eq("store_id", store_id), eq("customer_id", customer_id)],
            cache_criteria={"store_id": store_id, "customer_id": customer_id},
            limit=1,
        )
        return fetched.items[0] if fetched.items else None

    async def add_or_update_review(
        self,
        store_id: str,
        customer_id: str,
        customer_name: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> StoreReview:
        comment = self._validate(store_id, customer_id, customer_name, rating, comment)
        payload = {
            "store_id": store_id,
            "customer_id": customer_id,
            "customer_name": customer_name.strip(),
            "rating": rating,
            "comment": comment,
        }

        # Existence is checked remotely only, a remote failure aborts the save
        try:
            rows = await self.sync.remote.select(
                REVIEWS.table, [eq("store_id", store_id), eq("customer_id", customer_id)], limit=1
            )
        except RemoteUnavailable as e:
            self.sync.monitor.record_error(str(e), REVIEWS.table, write=True)
            raise

        if rows:
            existing_id = rows[0]["id"]
            logger.info(f"Updating existing review {existing_id} for store {store_id}")
            review = await self.sync.update(
                REVIEWS,
                payload,
                [eq("id", existing_id), eq("customer_id", customer_id)],
                entity_id=existing_id,
            )
        else:
            logger.info(f"Adding review for store {store_id} by customer {customer_id}")
            review = await self.sync.insert(REVIEWS, {"id": str(uuid.uuid4()), **payload})

        await self.update_store_rating(store_id)
        return review

    async def delete_review(self, review_id: str, customer_id: str) -> Optional[RatingUpdate]:
        """Delete a review; ownership is enforced server-side by row-level policy"""
        logger.info(f"Deleting review {review_id}")
        cached = self.sync.cache.get(REVIEWS.table, review_id)
        store_id = cached["store_id"] if cached else None
        if store_id is None:
            rows = await self.sync.remote.select(REVIEWS.table, [eq("id", review_id)], limit=1)
            store_id = rows[0].get("store_id") if rows else None

        await self.sync.delete(
            REVIEWS, [eq("id", review_id), eq("customer_id", customer_id)], entity_id=review_id
        )
        if store_id is None:
            return None
        return await self.update_store_rating(store_id)

    async def update_store_rating(self, store_id: str) -> RatingUpdate:
        """Recompute avg(rating) for the store and persist it on the remote store row.

        If the remote cannot be read or written, the average is computed from
        cached reviews only and nothing is written remotely.
        """
        try:
            rows = await self.sync.remote.select(REVIEWS.table, [eq("store_id", store_id)])
            reviews = [REVIEWS.decode(row) for row in rows]
            rating = average_rating([review.rating for review in reviews])
            await self.sync.remote.update("stores", {"rating": rating}, [eq("id", store_id)])
        except (RemoteUnavailable, SchemaError) as e:
            logger.warning(f"Failed to update store rating remotely, using cache: {e}")
            self.sync.monitor.record_error(str(e), "stores", write=True)
            cached = self.sync.cache.get_all_by_index(REVIEWS.table, store_id=store_id)
            rating = average_rating([row["rating"] for row in cached])
            return RatingUpdate(
                store_id=store_id, rating=rating, review_count=len(cached), source=DataSource.CACHE
            )

        self.sync.cache.replace_all_by_index(
            REVIEWS.table, [REVIEWS.encode(review) for review in reviews], store_id=store_id
        )
        self.sync.cache.update_where("stores", {"rating": rating}, id=store_id)
        logger.info(f"Store {store_id} rating updated to: {rating}")
        return RatingUpdate(
            store_id=store_id, rating=rating, review_count=len(reviews), source=DataSource.REMOTE
        )
