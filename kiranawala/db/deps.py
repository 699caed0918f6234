from typing import Optional
from fastapi import Depends
from sqlalchemy.orm import Session
from kiranawala.core.cache import LocalCache
from kiranawala.core.remote import RemoteStore
from kiranawala.db.session import SessionLocal
from kiranawala.services.address_book import AddressBook
from kiranawala.services.cart_engine import CartEngine
from kiranawala.services.catalog import ProductCatalog
from kiranawala.services.order_coordinator import OrderCoordinator
from kiranawala.services.review_aggregator import ReviewAggregator
from kiranawala.services.store_finder import GeoStoreFinder
from kiranawala.services.sync_policy import SyncPolicy

_remote: Optional[RemoteStore] = None

# Dependency to get the local cache session
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# One HTTP connection pool for the whole process
def get_remote() -> RemoteStore:
    global _remote
    if _remote is None:
        _remote = RemoteStore()
    return _remote

async def close_remote():
    global _remote
    if _remote is not None:
        await _remote.aclose()
        _remote = None

def get_cache(db: Session = Depends(get_db)) -> LocalCache:
    return LocalCache(db)

def get_sync(
    remote: RemoteStore = Depends(get_remote),
    cache: LocalCache = Depends(get_cache),
) -> SyncPolicy:
    return SyncPolicy(remote, cache)

def get_store_finder(sync: SyncPolicy = Depends(get_sync)) -> GeoStoreFinder:
    return GeoStoreFinder(sync)

def get_catalog(sync: SyncPolicy = Depends(get_sync)) -> ProductCatalog:
    return ProductCatalog(sync)

def get_cart_engine(cache: LocalCache = Depends(get_cache)) -> CartEngine:
    return CartEngine(cache)

def get_order_coordinator(sync: SyncPolicy = Depends(get_sync)) -> OrderCoordinator:
    return OrderCoordinator(sync)

def get_review_aggregator(sync: SyncPolicy = Depends(get_sync)) -> ReviewAggregator:
    return ReviewAggregator(sync)

def get_address_book(sync: SyncPolicy = Depends(get_sync)) -> AddressBook:
    return AddressBook(sync)
