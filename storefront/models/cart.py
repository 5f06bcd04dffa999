"""Schemas for the session shopping cart."""

from __future__ import annotations

from typing import Literal

from pydantic import AnyHttpUrl, BaseModel, Field, computed_field

MAX_LINE_QUANTITY = 99


class CartItem(BaseModel):
    product_id: str
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    maker: str
    state: str
    in_stock: bool = True
    image: AnyHttpUrl | None = None

    @computed_field
    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


class AppliedCoupon(BaseModel):
    code: str
    type: Literal["percentage", "free_shipping", "fixed"]
    value: float
    description: str
    discount_amount: float


class Cart(BaseModel):
    items: list[CartItem] = Field(default_factory=list)

    @computed_field
    @property
    def count(self) -> int:
        return sum(item.quantity for item in self.items)

    @computed_field
    @property
    def subtotal(self) -> float:
        return round(sum(item.price * item.quantity for item in self.items), 2)


class CartResponse(BaseModel):
    cart: Cart
    coupon: AppliedCoupon | None = None
    shipping_cost: float = 0
    total: float = 0


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(1, ge=1, le=MAX_LINE_QUANTITY)


class UpdateQuantityRequest(BaseModel):
    quantity: int = Field(..., ge=0, le=MAX_LINE_QUANTITY)


class CouponRequest(BaseModel):
    code: str = Field(..., max_length=50)
