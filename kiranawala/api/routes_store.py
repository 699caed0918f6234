from fastapi import APIRouter, Depends, Query
from typing import Optional
from kiranawala.api.responses import listing, unwrap
from kiranawala.db.deps import get_catalog, get_store_finder
from kiranawala.schemas.store import GeoPoint, Store
from kiranawala.services.catalog import ProductCatalog
from kiranawala.services.store_finder import GeoStoreFinder

router = APIRouter()

@router.get("/nearby")
async def nearby_stores(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    radius_km: Optional[float] = Query(None, gt=0),
    finder: GeoStoreFinder = Depends(get_store_finder),
):
    fetched = await finder.find_nearby(GeoPoint(latitude=lat, longitude=lon), radius_km)
    return listing(fetched)

@router.get("/search")
async def search_stores(
    q: str,
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    finder: GeoStoreFinder = Depends(get_store_finder),
):
    """Search is always limited to the fixed search radius, whatever radius the client browses with"""
    fetched = await finder.search(q, GeoPoint(latitude=lat, longitude=lon))
    return listing(fetched)

@router.get("/{store_id}", response_model=Store)
async def get_store(store_id: str, finder: GeoStoreFinder = Depends(get_store_finder)):
    return unwrap(await finder.get_store(store_id), "Store")

@router.get("/{store_id}/products")
async def store_products(
    store_id: str,
    q: Optional[str] = None,
    category: Optional[str] = None,
    catalog: ProductCatalog = Depends(get_catalog),
):
    if q:
        fetched = await catalog.search_products(store_id, q)
    elif category:
        fetched = await catalog.filter_by_category(store_id, category)
    else:
        fetched = await catalog.fetch_store_products(store_id)
    return listing(fetched)
