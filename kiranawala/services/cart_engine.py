# kiranawala/services/cart_engine.py
"""
Single-store cart, kept entirely in the local cache.

All lines of one customer's cart belong to the same store. Adding a product
from another store is refused until the cart is cleared.
"""

import logging
from typing import List, Optional

from kiranawala.core.cache import LocalCache
from kiranawala.core.exceptions import ConflictError, NotFoundError, ValidationError
from kiranawala.schemas.cart import Cart, CartItem, CartLine, line_id
from kiranawala.schemas.product import Product
from kiranawala.schemas.store import Store

logger = logging.getLogger(__name__)

CART_LINES = "cart_lines"


class CartEngine:
    def __init__(self, cache: LocalCache):
        self.cache = cache

    def _lines(self, customer_id: str) -> List[CartLine]:
        rows = self.cache.get_all_by_index(CART_LINES, customer_id=customer_id)
        return [CartLine.model_validate(row) for row in rows]

    async def add_item(self, customer_id: str, store_id: str, product: Product, quantity: int = 1) -> CartLine:
        if quantity < 1:
            raise ValidationError(f"Quantity must be at least 1, got {quantity}")

        logger.info(f"Adding {product.name} (x{quantity}) to cart of {customer_id}")
        lines = self._lines(customer_id)

        pinned = {line.store_id for line in lines}
        if pinned and pinned != {store_id}:
            raise ConflictError(
                "Cannot add items from different stores. Please clear your cart first."
            )

        existing = next((line for line in lines if line.product_id == product.id), None)
        if existing is not None:
            line = existing.model_copy(update={"quantity": existing.quantity + quantity})
        else:
            line = CartLine(
                customer_id=customer_id,
                store_id=store_id,
                product_id=product.id,
                quantity=quantity,
                price=product.price,
            )

        if self.cache.get("products", product.id) is None:
            self.cache.upsert("products", product.model_dump())
        self.cache.upsert(CART_LINES, line.model_dump())
        return line

    async def update_quantity(self, customer_id: str, product_id: str, quantity: int) -> CartLine:
        """Set an exact quantity; removal is remove_item, never quantity 0"""
        if quantity < 1:
            raise ValidationError(f"Quantity must be at least 1, got {quantity}")

        row = self.cache.get(CART_LINES, line_id(customer_id, product_id))
        if row is None:
            raise NotFoundError(f"Product {product_id} is not in the cart of {customer_id}")

        line = CartLine.model_validate(row).model_copy(update={"quantity": quantity})
        self.cache.upsert(CART_LINES, line.model_dump())
        logger.info(f"Updated product {product_id} quantity to {quantity}")
        return line

    async def remove_item(self, customer_id: str, product_id: str) -> bool:
        logger.info(f"Removing product {product_id} from cart of {customer_id}")
        return self.cache.delete(CART_LINES, line_id(customer_id, product_id))

    async def clear(self, customer_id: str) -> int:
        logger.info(f"Clearing cart for customer {customer_id}")
        return self.cache.delete_where(CART_LINES, customer_id=customer_id)

    async def snapshot(self, customer_id: str) -> Optional[Cart]:
        """Join the cart lines with cached store and product rows.

        Returns None for an empty cart, and also when the store or any product
        can no longer be resolved: a partial cart is never returned.
        """
        lines = self._lines(customer_id)
        if not lines:
            return None

        store_id = lines[0].store_id
        store_row = self.cache.get("stores", store_id)
        if store_row is None:
            logger.warning(f"Cart store {store_id} missing from cache")
            return None
        store = Store.model_validate(store_row)

        items = []
        for line in lines:
            product_row = self.cache.get("products", line.product_id)
            if product_row is None:
                logger.warning(f"Cart product {line.product_id} missing from cache")
                return None
            items.append(
                CartItem(
                    product=Product.model_validate(product_row),
                    quantity=line.quantity,
                    price=line.price,
                )
            )

        return Cart(
            customer_id=customer_id,
            store_id=store_id,
            store_name=store.name,
            items=items,
            minimum_order_value=store.minimum_order_value,
            delivery_fee=store.delivery_fee,
        )
