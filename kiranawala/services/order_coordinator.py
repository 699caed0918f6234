# kiranawala/services/order_coordinator.py
"""
Order placement and history.

Placement writes the header and the items to the remote store in two calls
(no transaction spans them) and mirrors the full order into the local cache.
History lookups fall back from customer id to phone-number variants, and
finally to the cache.
"""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as SchemaError

from kiranawala.core.config import settings
from kiranawala.core.exceptions import NotFoundError, PartialWriteError, RemoteUnavailable
from kiranawala.core.remote import eq
from kiranawala.schemas.order import Order, OrderCreate, OrderItem, OrderStatus
from kiranawala.schemas.result import DataSource, Fetched, NotFound, Ok, Outcome, Unavailable
from kiranawala.services.sync_policy import SyncPolicy

logger = logging.getLogger(__name__)

ORDERS = "orders"
ORDER_ITEMS = "order_items"


def phone_variants(phone: str) -> List[str]:
    """Spellings under which an order may have been recorded, most literal first"""
    variants = [phone]
    digits = "".join(ch for ch in phone if ch.isdigit())
    variants.append(digits)
    if digits.startswith("91") and len(digits) > 2:
        variants.append(digits[2:])
    if digits.startswith("0") and len(digits) > 1:
        variants.append(digits.lstrip("0"))

    unique = []
    for variant in variants:
        variant = variant.strip()
        if variant and variant not in unique:
            unique.append(variant)
    return unique


def _sort_key(order: Order) -> float:
    return order.created_at.timestamp() if order.created_at else 0.0


class OrderCoordinator:
    def __init__(self, sync: SyncPolicy):
        self.sync = sync
        self.remote = sync.remote
        self.cache = sync.cache

    async def place_order(self, order: OrderCreate) -> str:
        """Persist an order and return its id.

        Raises RemoteUnavailable if the header could not be written (nothing is
        cached then), and PartialWriteError if the header landed but the items
        did not; in that case the cache still holds the complete order.
        """
        logger.info(f"Placing order for store {order.store_id}")
        header = order.model_dump(mode="json", exclude={"items"})

        try:
            inserted = await self.remote.insert(ORDERS, header)
        except RemoteUnavailable as e:
            self.sync.monitor.record_error(str(e), ORDERS, write=True)
            raise

        returned = inserted[0] if inserted else {}
        order_id = returned.get("id")
        if not order_id:
            order_id = str(uuid.uuid4())
            logger.warning(f"Remote did not return an order id, using local id {order_id}")
        logger.info(f"Order header saved with ID: {order_id}")

        item_rows = [{"order_id": order_id, **item.model_dump()} for item in order.items]
        items_error = None
        returned_items: List[Dict[str, Any]] = []
        try:
            returned_items = await self.remote.insert(ORDER_ITEMS, item_rows)
        except RemoteUnavailable as e:
            self.sync.monitor.record_error(str(e), ORDER_ITEMS, write=True)
            items_error = e

        now = datetime.now(timezone.utc)
        returned_ids = {row.get("product_id"): row.get("id") for row in returned_items}
        placed = Order(
            id=order_id,
            customer_id=order.customer_id,
            store_id=order.store_id,
            store_name=returned.get("store_name") or order.store_id,
            total_amount=order.total_amount,
            delivery_fee=order.delivery_fee,
            status=order.status,
            items=[
                OrderItem(
                    id=returned_ids.get(item.product_id) or f"{order_id}-{item.product_id}",
                    order_id=order_id,
                    **item.model_dump(),
                )
                for item in order.items
            ],
            delivery_address=order.delivery_address,
            customer_phone=order.customer_phone,
            customer_name=order.customer_name,
            created_at=now,
            updated_at=now,
        )
        self._cache_orders([placed])

        if items_error is not None:
            logger.error(f"Order {order_id} saved without its items: {items_error}")
            raise PartialWriteError(
                f"Order {order_id} was created but its items could not be saved", order_id
            )
        return order_id

    async def get_order_by_id(self, order_id: str) -> Outcome:
        start_time = time.time()
        try:
            rows = await self.remote.select(ORDERS, [eq("id", order_id)], limit=1)
            if not rows:
                return NotFound(order_id)
            order = await self._hydrate(rows[0], lookup_store_name=True)
        except (RemoteUnavailable, SchemaError, KeyError) as e:
            self.sync.monitor.record_error(str(e), ORDERS)
            self.sync.monitor.record_fetch(ORDERS, True, (time.time() - start_time) * 1000)
            cached = self._order_from_cache(order_id)
            if cached is None:
                return Unavailable(e)
            return Ok(cached, DataSource.CACHE)

        self._cache_orders([order])
        self.sync.monitor.record_fetch(ORDERS, False, (time.time() - start_time) * 1000)
        return Ok(order)

    async def get_customer_orders(self, customer_id: str, phone: Optional[str] = None) -> Fetched:
        """Orders by customer id, then by phone variant, then from the cache"""
        logger.info(f"Fetching orders for customer {customer_id}")
        start_time = time.time()
        try:
            rows = await self.remote.select(ORDERS, [eq("customer_id", customer_id)])
            if not rows and phone:
                for variant in phone_variants(phone):
                    rows = await self.remote.select(ORDERS, [eq("customer_phone", variant)])
                    if rows:
                        logger.info(f"Found orders using phone variant {variant}")
                        break
            orders = [await self._hydrate(row) for row in rows if row.get("id")]
        except (RemoteUnavailable, SchemaError, KeyError) as e:
            self.sync.monitor.record_error(str(e), ORDERS)
            self.sync.monitor.record_fetch(ORDERS, True, (time.time() - start_time) * 1000)
            return Fetched(self._orders_from_cache(customer_id, phone), DataSource.CACHE, e)

        if not orders:
            self.sync.monitor.record_fetch(ORDERS, True, (time.time() - start_time) * 1000)
            return Fetched(self._orders_from_cache(customer_id, phone), DataSource.CACHE)

        orders.sort(key=_sort_key, reverse=True)
        self._cache_orders(orders)
        self.sync.monitor.record_fetch(ORDERS, False, (time.time() - start_time) * 1000)
        return Fetched(orders, DataSource.REMOTE)

    async def cancel_order(self, order_id: str) -> None:
        """Mark an order CANCELLED remotely, then in the cache.

        A remote failure propagates and leaves the cached status untouched.
        """
        logger.info(f"Cancelling order {order_id}")
        patch = {"status": OrderStatus.CANCELLED.value}
        try:
            rows = await self.remote.update(ORDERS, patch, [eq("id", order_id)])
        except RemoteUnavailable as e:
            self.sync.monitor.record_error(str(e), ORDERS, write=True)
            raise
        if not rows:
            raise NotFoundError(f"Order {order_id} not found")
        self.cache.update_where(ORDERS, patch, id=order_id)

    async def _hydrate(self, row: Dict[str, Any], lookup_store_name: bool = False) -> Order:
        order_id = row["id"]
        item_rows = await self.remote.select(ORDER_ITEMS, [eq("order_id", order_id)])

        store_name = row.get("store_name") or ""
        if not store_name and lookup_store_name:
            store_name = await self._store_name(row["store_id"])

        items = [
            OrderItem(
                id=item.get("id") or f"{order_id}-{item['product_id']}",
                order_id=order_id,
                product_id=item["product_id"],
                product_name=item.get("product_name") or item["product_id"],
                quantity=item["quantity"],
                price=item["price"],
            )
            for item in item_rows
        ]
        delivery_fee = row.get("delivery_fee")
        return Order.model_validate({
            **row,
            "store_name": store_name or row["store_id"],
            "delivery_fee": settings.DEFAULT_DELIVERY_FEE if delivery_fee is None else delivery_fee,
            "status": row.get("status") or OrderStatus.PENDING.value,
            "delivery_address": row.get("delivery_address") or "",
            "customer_phone": row.get("customer_phone") or "",
            "customer_name": row.get("customer_name") or "",
            "items": items,
        })

    async def _store_name(self, store_id: str) -> str:
        try:
            rows = await self.remote.select("stores", [eq("id", store_id)], limit=1, columns="name")
        except RemoteUnavailable as e:
            logger.warning(f"Store name lookup failed for {store_id}: {e}")
            return store_id
        return (rows[0].get("name") if rows else None) or store_id

    def _cache_orders(self, orders: List[Order]) -> None:
        headers = []
        items = []
        for order in orders:
            headers.append({
                "id": order.id,
                "customer_id": order.customer_id,
                "store_id": order.store_id,
                "total_amount": order.total_amount,
                "status": order.status,
                "created_at": order.created_at,
                "updated_at": order.updated_at,
            })
            items.extend(
                {
                    "id": item.id,
                    "order_id": order.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price": item.price,
                }
                for item in order.items
            )
        self.cache.upsert_many(ORDERS, headers)
        self.cache.upsert_many(ORDER_ITEMS, items)

    def _order_from_cache(self, order_id: str, phone: str = "") -> Optional[Order]:
        header = self.cache.get(ORDERS, order_id)
        if header is None:
            return None
        return self._from_cached_header(header, phone)

    def _orders_from_cache(self, customer_id: str, phone: Optional[str] = None) -> List[Order]:
        headers = self.cache.get_all_by_index(ORDERS, customer_id=customer_id)
        orders = [self._from_cached_header(header, phone or "") for header in headers]
        return sorted(orders, key=_sort_key, reverse=True)

    def _from_cached_header(self, header: Dict[str, Any], phone: str) -> Order:
        # The cache keeps no display fields: names fall back to raw ids
        item_rows = self.cache.get_all_by_index(ORDER_ITEMS, order_id=header["id"])
        return Order(
            id=header["id"],
            customer_id=header["customer_id"],
            store_id=header["store_id"],
            store_name=header["store_id"],
            total_amount=header["total_amount"],
            delivery_fee=settings.DEFAULT_DELIVERY_FEE,
            status=header["status"],
            items=[
                OrderItem(
                    id=row["id"],
                    order_id=row["order_id"],
                    product_id=row["product_id"],
                    product_name=row["product_id"],
                    quantity=row["quantity"],
                    price=row["price"],
                )
                for row in item_rows
            ],
            delivery_address="",
            customer_phone=phone,
            customer_name="",
            created_at=header["created_at"],
            updated_at=header["updated_at"],
        )
