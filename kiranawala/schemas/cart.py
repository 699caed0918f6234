from pydantic import BaseModel, Field, computed_field
from typing import List
from kiranawala.schemas.product import Product

def line_id(customer_id: str, product_id: str) -> str:
    return f"{customer_id}:{product_id}"

class CartLine(BaseModel):
    customer_id: str
    store_id: str
    product_id: str
    quantity: int = Field(ge=1)
    price: float = Field(ge=0)  # snapshot at add time

    @computed_field
    @property
    def id(self) -> str:
        return line_id(self.customer_id, self.product_id)

class CartItem(BaseModel):
    product: Product
    quantity: int
    price: float

    @computed_field
    @property
    def line_total(self) -> float:
        return self.price * self.quantity

class Cart(BaseModel):
    customer_id: str
    store_id: str
    store_name: str
    items: List[CartItem]
    minimum_order_value: float
    delivery_fee: float

    @computed_field
    @property
    def subtotal(self) -> float:
        return sum(item.price * item.quantity for item in self.items)

    @computed_field
    @property
    def total(self) -> float:
        return self.subtotal + self.delivery_fee

    @computed_field
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def meets_minimum_order(self) -> bool:
        return self.subtotal >= self.minimum_order_value

# 👇 What the client sends to add a product
class CartItemAdd(BaseModel):
    store_id: str
    product_id: str
    quantity: int = 1

class CartQuantityUpdate(BaseModel):
    quantity: int
