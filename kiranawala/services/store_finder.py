# kiranawala/services/store_finder.py
"""
Store discovery around a customer's location.

The remote store has no geo index, so every lookup pulls candidate stores and
filters them client-side by haversine distance.
"""

import logging
import math
from typing import List, Optional

from kiranawala.core.config import settings
from kiranawala.core.remote import any_of, eq, ilike
from kiranawala.schemas.result import DataSource, Fetched, Outcome
from kiranawala.schemas.store import GeoPoint, Store, SubscriptionStatus
from kiranawala.services.sync_policy import EntityKind, SyncPolicy

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0

STORES = EntityKind("stores", Store)


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates, in kilometres"""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def distance_to(center: GeoPoint, store: Store) -> float:
    return haversine_km(center.latitude, center.longitude, store.latitude, store.longitude)


class GeoStoreFinder:
    def __init__(self, sync: SyncPolicy):
        self.sync = sync

    async def find_nearby(self, center: GeoPoint, radius_km: Optional[float] = None) -> Fetched:
        """Open, ACTIVE stores within radius_km of center, nearest first.

        When the remote is down the cached set is returned as-is: it is whatever
        the last successful lookup kept, possibly for a different radius.
        """
        radius_km = settings.DEFAULT_RADIUS_KM if radius_km is None else radius_km
        fetched = await self.sync.fetch(STORES, write_through=False)

        if fetched.degraded:
            stores = [self._with_distance(store, center) for store in fetched.items]
            return Fetched(stores, DataSource.CACHE, fetched.cause)

        active = [store for store in fetched.items if store.discoverable]
        logger.info(f"{len(active)} of {len(fetched.items)} stores are active and open")

        nearby = self._within(active, center, radius_km)
        self.sync.write_through(STORES, nearby)
        logger.info(f"Found {len(nearby)} stores within {radius_km}km of ({center.latitude}, {center.longitude})")
        return Fetched(nearby, DataSource.REMOTE)

    async def search(self, query: str, center: GeoPoint) -> Fetched:
        """Name/address/description search, always bounded by SEARCH_RADIUS_KM"""
        query = query.strip()
        radius_km = settings.SEARCH_RADIUS_KM
        if not query:
            return await self.find_nearby(center, radius_km)

        filters = [
            eq("subscription_status", SubscriptionStatus.ACTIVE.value),
            eq("is_open", True),
            any_of(
                ilike("name", query),
                ilike("address", query),
                ilike("description", query),
            ),
        ]
        fetched = await self.sync.fetch(STORES, filters=filters, write_through=False)
        results = self._within(fetched.items, center, radius_km)

        if not fetched.degraded:
            self.sync.write_through(STORES, results)
        logger.info(f"Found {len(results)} stores matching '{query}' within {radius_km}km")
        return Fetched(results, fetched.source, fetched.cause)

    async def get_store(self, store_id: str) -> Outcome:
        return await self.sync.fetch_one(STORES, store_id)

    def _with_distance(self, store: Store, center: GeoPoint) -> Store:
        return store.model_copy(update={"distance_km": distance_to(center, store)})

    def _within(self, stores: List[Store], center: GeoPoint, radius_km: float) -> List[Store]:
        measured = [self._with_distance(store, center) for store in stores]
        # sorted() is stable, equal distances keep fetch order
        return sorted(
            (store for store in measured if store.distance_km <= radius_km),
            key=lambda store: store.distance_km,
        )
