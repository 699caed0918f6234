from fastapi import APIRouter, Depends
from typing import Optional
from kiranawala.api.responses import listing, unwrap
from kiranawala.db.deps import get_order_coordinator
from kiranawala.schemas.order import Order, OrderCreate, OrderPlaced
from kiranawala.services.order_coordinator import OrderCoordinator

router = APIRouter()

@router.post("/", response_model=OrderPlaced)
async def place_order(order_data: OrderCreate, orders: OrderCoordinator = Depends(get_order_coordinator)):
    return OrderPlaced(order_id=await orders.place_order(order_data))

@router.get("/customer/{customer_id}")
async def customer_orders(
    customer_id: str,
    phone: Optional[str] = None,
    orders: OrderCoordinator = Depends(get_order_coordinator),
):
    return listing(await orders.get_customer_orders(customer_id, phone))

@router.get("/{order_id}", response_model=Order)
async def get_order(order_id: str, orders: OrderCoordinator = Depends(get_order_coordinator)):
    return unwrap(await orders.get_order_by_id(order_id), "Order")

@router.post("/{order_id}/cancel")
async def cancel_order(order_id: str, orders: OrderCoordinator = Depends(get_order_coordinator)):
    await orders.cancel_order(order_id)
    return {"order_id": order_id, "status": "CANCELLED"}
