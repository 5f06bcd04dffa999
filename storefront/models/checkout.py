"""Schemas used by the checkout flow."""

from __future__ import annotations

import re
from enum import Enum
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator, model_validator

from storefront.models.cart import AppliedCoupon, Cart
from storefront.services.catalog.constants import MEXICAN_STATES

_NAME_PATTERN = r"^[a-zA-ZáéíóúüñÁÉÍÓÚÜÑ\s]+$"
_PHONE_PATTERN = re.compile(r"^(\+52)?[\s.-]?(\d{2,3})[\s.-]?(\d{3,4})[\s.-]?(\d{4})$")


class CheckoutStep(str, Enum):
    SHIPPING = "shipping"
    PAYMENT = "payment"
    REVIEW = "review"

    @property
    def position(self) -> int:
        return list(CheckoutStep).index(self)


PaymentMethod = Literal["card", "mercadopago", "oxxo", "spei", "paypal"]
"""Supported payment methods; oxxo and spei settle asynchronously."""


class ShippingAddress(BaseModel):
    """Delivery address within Mexico."""

    first_name: str = Field(..., min_length=2, max_length=50, pattern=_NAME_PATTERN)
    last_name: str = Field(..., min_length=2, max_length=100, pattern=_NAME_PATTERN)
    email: EmailStr = Field(..., max_length=100)
    phone: str = Field(..., min_length=10, max_length=15)
    street: str = Field(..., min_length=3, max_length=200)
    street_number: str = Field(..., min_length=1, max_length=20)
    apartment: str | None = Field(None, max_length=50)
    neighborhood: str = Field(..., min_length=2, max_length=100, description="Colonia")
    city: str = Field(..., min_length=2, max_length=100)
    state: str
    postal_code: str = Field(..., pattern=r"^\d{5}$")
    references: str | None = Field(None, max_length=500)

    @field_validator("phone")
    @classmethod
    def _check_phone(cls, value: str) -> str:
        if not _PHONE_PATTERN.match(value):
            raise ValueError("Ingresa un número de teléfono válido")
        return value

    @field_validator("state")
    @classmethod
    def _check_state(cls, value: str) -> str:
        if value not in MEXICAN_STATES:
            raise ValueError("Selecciona un estado válido")
        return value


class SavedAddress(ShippingAddress):
    id: str
    is_default: bool = False
    label: str | None = None


class PaymentSelection(BaseModel):
    """Payload of the payment step."""

    payment_method: PaymentMethod
    gift_wrap: bool = False
    gift_message: str | None = Field(None, max_length=500)

    @model_validator(mode="after")
    def _require_gift_message(self) -> PaymentSelection:
        if self.gift_wrap and not (self.gift_message or "").strip():
            raise ValueError("Incluye un mensaje para tu regalo")
        return self


class PlaceOrderRequest(BaseModel):
    accept_terms: bool = False
    save_address: bool = True
    notes: str | None = Field(None, max_length=500)


class BackRequest(BaseModel):
    step: CheckoutStep


class CheckoutSession(BaseModel):
    """Checkout progress persisted for one shopper session."""

    current_step: CheckoutStep = CheckoutStep.SHIPPING
    shipping_address: ShippingAddress | None = None
    payment_method: PaymentMethod | None = None
    gift_wrap: bool = False
    gift_message: str | None = None


def field_errors(error: ValidationError) -> dict[str, str]:
    """Flatten a validation error into a ``{field: message}`` mapping.

    Only the first message per field is kept; model-level errors are
    reported under ``__root__``.
    """
    errors: dict[str, str] = {}
    for issue in error.errors():
        path = ".".join(str(part) for part in issue["loc"]) or "__root__"
        message = issue["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        errors.setdefault(path, message)
    return errors


class OrderTotals(BaseModel):
    subtotal: float
    shipping_cost: float
    discount: float = 0
    gift_wrap_fee: float = 0
    total: float
    coupon: AppliedCoupon | None = None
    amount_to_free_shipping: float = 0


class CheckoutOverview(BaseModel):
    """Checkout progress with the cart and live totals."""

    checkout: CheckoutSession
    cart: Cart
    totals: OrderTotals
    default_address: SavedAddress | None = None
