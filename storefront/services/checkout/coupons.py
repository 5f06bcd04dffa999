"""Coupon validation and discount calculation."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Literal

from pydantic import BaseModel

from storefront.models.cart import AppliedCoupon


class Coupon(BaseModel):
    code: str
    type: Literal["percentage", "free_shipping", "fixed"]
    value: float
    description: str
    min_purchase: float | None = None
    max_discount: float | None = None
    expires_at: date | None = None


class CouponError(ValueError):
    """Raised when a coupon cannot be applied to the current purchase."""


AVAILABLE_COUPONS: tuple[Coupon, ...] = (
    Coupon(
        code="PRIMERA10",
        type="percentage",
        value=10,
        description="10% de descuento en tu primera compra",
        min_purchase=500,
        max_discount=500,
    ),
    Coupon(
        code="ENVIOGRATIS",
        type="free_shipping",
        value=0,
        description="Envío gratis en tu pedido",
        min_purchase=300,
    ),
    Coupon(
        code="ARTESANO20",
        type="percentage",
        value=20,
        description="20% de descuento",
        min_purchase=1000,
        max_discount=1000,
    ),
    Coupon(
        code="DESCUENTO50",
        type="fixed",
        value=50,
        description="$50 MXN de descuento",
        min_purchase=400,
    ),
    Coupon(
        code="EXPIRED2023",
        type="percentage",
        value=15,
        description="Cupón expirado",
        expires_at=date(2023, 1, 1),
    ),
)

_COUPONS_BY_CODE = {coupon.code: coupon for coupon in AVAILABLE_COUPONS}


def validate_coupon(code: str, subtotal: float, *, today: date | None = None) -> Coupon:
    """Return the coupon for ``code`` or raise ``CouponError``."""

    normalized = code.strip().upper()
    if not normalized:
        raise CouponError("Ingresa un código de cupón")

    coupon = _COUPONS_BY_CODE.get(normalized)
    if coupon is None:
        raise CouponError("Cupón no válido o expirado")

    today = today or datetime.now(UTC).date()
    if coupon.expires_at is not None and coupon.expires_at < today:
        raise CouponError("Este cupón ha expirado")

    if coupon.min_purchase and subtotal < coupon.min_purchase:
        raise CouponError(
            f"Este cupón requiere una compra mínima de ${coupon.min_purchase:g} MXN"
        )

    return coupon


def calculate_discount(coupon: Coupon, subtotal: float, shipping_cost: float) -> float:
    if coupon.type == "percentage":
        discount = subtotal * coupon.value / 100
        if coupon.max_discount:
            discount = min(discount, coupon.max_discount)
        return round(discount, 2)
    if coupon.type == "free_shipping":
        return shipping_cost
    if coupon.type == "fixed":
        return min(coupon.value, subtotal)
    return 0.0


def apply_coupon(code: str, subtotal: float, shipping_cost: float) -> AppliedCoupon:
    coupon = validate_coupon(code, subtotal)
    return AppliedCoupon(
        code=coupon.code,
        type=coupon.type,
        value=coupon.value,
        description=coupon.description,
        discount_amount=calculate_discount(coupon, subtotal, shipping_cost),
    )
