from fastapi import APIRouter, Depends, HTTPException
from typing import Optional
from kiranawala.api.responses import unwrap
from kiranawala.db.deps import get_cart_engine, get_catalog, get_store_finder
from kiranawala.schemas.cart import Cart, CartItemAdd, CartLine, CartQuantityUpdate
from kiranawala.services.cart_engine import CartEngine
from kiranawala.services.catalog import ProductCatalog
from kiranawala.services.store_finder import GeoStoreFinder

router = APIRouter()

@router.get("/{customer_id}", response_model=Optional[Cart])
async def get_cart(customer_id: str, carts: CartEngine = Depends(get_cart_engine)):
    return await carts.snapshot(customer_id)

@router.post("/{customer_id}/items", response_model=CartLine)
async def add_item(
    customer_id: str,
    data: CartItemAdd,
    carts: CartEngine = Depends(get_cart_engine),
    catalog: ProductCatalog = Depends(get_catalog),
    finder: GeoStoreFinder = Depends(get_store_finder),
):
    product = unwrap(await catalog.get_product(data.product_id), "Product")
    if product.store_id != data.store_id:
        raise HTTPException(status_code=400, detail="Product does not belong to this store")
    # lookup caches the store row so the cart can be rendered offline
    unwrap(await finder.get_store(data.store_id), "Store")
    return await carts.add_item(customer_id, data.store_id, product, data.quantity)

@router.put("/{customer_id}/items/{product_id}", response_model=CartLine)
async def update_quantity(
    customer_id: str,
    product_id: str,
    data: CartQuantityUpdate,
    carts: CartEngine = Depends(get_cart_engine),
):
    return await carts.update_quantity(customer_id, product_id, data.quantity)

@router.delete("/{customer_id}/items/{product_id}")
async def remove_item(customer_id: str, product_id: str, carts: CartEngine = Depends(get_cart_engine)):
    if not await carts.remove_item(customer_id, product_id):
        raise HTTPException(status_code=404, detail="Item not in cart")
    return {"removed": product_id}

@router.delete("/{customer_id}")
async def clear_cart(customer_id: str, carts: CartEngine = Depends(get_cart_engine)):
    return {"removed_lines": await carts.clear(customer_id)}
