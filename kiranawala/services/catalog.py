import logging

from kiranawala.core.remote import any_of, eq, ilike
from kiranawala.schemas.product import Product
from kiranawala.schemas.result import Fetched, Outcome
from kiranawala.services.sync_policy import EntityKind, SyncPolicy

logger = logging.getLogger(__name__)

PRODUCTS = EntityKind("products", Product)


class ProductCatalog:
    """Store products, remote-first with the cached catalogue as fallback"""

    def __init__(self, sync: SyncPolicy):
        self.sync = sync

    async def fetch_store_products(self, store_id: str) -> Fetched:
        fetched = await self.sync.fetch(
            PRODUCTS,
            filters=[eq("store_id", store_id), eq("is_available", True)],
            cache_criteria={"store_id": store_id},
        )
        logger.info(f"Found {len(fetched.items)} products for store {store_id} ({fetched.source.value})")
        return fetched

    async def get_product(self, product_id: str) -> Outcome:
        return await self.sync.fetch_one(PRODUCTS, product_id)

    async def search_products(self, store_id: str, query: str) -> Fetched:
        filters = [
            eq("store_id", store_id),
            eq("is_available", True),
            any_of(
                ilike("name", query),
                ilike("description", query),
                ilike("category", query),
            ),
        ]
        return await self.sync.fetch(PRODUCTS, filters=filters, cache_criteria={"store_id": store_id})

    async def filter_by_category(self, store_id: str, category: str) -> Fetched:
        filters = [
            eq("store_id", store_id),
            eq("category", category),
            eq("is_available", True),
        ]
        return await self.sync.fetch(PRODUCTS, filters=filters, cache_criteria={"store_id": store_id})
