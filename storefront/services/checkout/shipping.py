"""Shipping cost and delivery estimates."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta

from storefront.models.order import EstimatedDelivery
from storefront.services.catalog.constants import REMOTE_STATES

FREE_SHIPPING_THRESHOLD = 1000
BASE_SHIPPING = 150
REMOTE_SURCHARGE = 50
GIFT_WRAP_COST = 50


def calculate_shipping_cost(subtotal: float, state: str | None = None) -> float:
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return 0
    if state and state in REMOTE_STATES:
        return BASE_SHIPPING + REMOTE_SURCHARGE
    return BASE_SHIPPING


def calculate_estimated_delivery(state: str, *, today: date | None = None) -> EstimatedDelivery:
    """Delivery window: 5-8 days, 7-10 for remote states."""

    base_days = 7 if state in REMOTE_STATES else 5
    today = today or datetime.now(UTC).date()
    return EstimatedDelivery(
        earliest=today + timedelta(days=base_days),
        latest=today + timedelta(days=base_days + 3),
    )


def amount_to_free_shipping(subtotal: float) -> float:
    return max(FREE_SHIPPING_THRESHOLD - subtotal, 0)
