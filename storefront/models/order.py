"""Order domain models."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from storefront.models.checkout import PaymentMethod, ShippingAddress

OrderStatus = Literal[
    "pending",
    "confirmed",
    "processing",
    "shipped",
    "delivered",
    "cancelled",
]
PaymentStatus = Literal["pending", "processing", "completed", "failed"]


class OrderItem(BaseModel):
    product_id: str
    name: str
    quantity: int = Field(..., ge=1)
    price: float = Field(..., ge=0)
    maker: str
    state: str


class OrderCoupon(BaseModel):
    code: str
    type: Literal["percentage", "free_shipping", "fixed"]
    value: float
    discount_amount: float


class EstimatedDelivery(BaseModel):
    earliest: date
    latest: date


class Order(BaseModel):
    """A placed order with its pricing breakdown."""

    id: str
    order_number: str
    status: OrderStatus
    items: list[OrderItem]
    subtotal: float
    shipping_cost: float
    discount: float
    gift_wrap_fee: float
    total: float
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    gift_wrap: bool = False
    gift_message: str | None = None
    coupon: OrderCoupon | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    estimated_delivery: EstimatedDelivery
    tracking: str | None = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    tracking: str | None = None
