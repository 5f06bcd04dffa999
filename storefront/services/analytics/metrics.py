"""Presentation math for the seller analytics dashboard.

Every ratio goes through :func:`safe_divide` so an empty stage or a product
without views reports 0 instead of failing.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from functools import lru_cache
from pathlib import Path

from storefront.config import settings
from storefront.models.analytics import (
    FunnelStage,
    FunnelStageCounts,
    FunnelSummary,
    Performance,
    ProductConversion,
    ProductConversionSummary,
    ProductCounts,
    SellerAnalyticsRecord,
    SellerDashboard,
    Trend,
)

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 2.0
VIEW_TO_CART_THRESHOLDS = (15.0, 10.0)
CART_TO_PURCHASE_THRESHOLDS = (25.0, 15.0)


class UnknownSellerError(LookupError):
    def __init__(self, seller_id: str):
        super().__init__(f"No hay analíticas para el vendedor {seller_id}")
        self.seller_id = seller_id


def safe_divide(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_percentage(part: float, whole: float, digits: int = 1) -> float:
    return round(safe_divide(part, whole) * 100, digits)


def _count(stages: Sequence[FunnelStageCounts], index: int) -> int:
    return stages[index].count if index < len(stages) else 0


def build_funnel(stages: Sequence[FunnelStageCounts]) -> FunnelSummary:
    """Stage-to-stage conversion for visits, views, cart, checkout, purchase."""

    top = stages[0].count if stages else 0
    computed = [
        FunnelStage(
            **stage.model_dump(),
            conversion_from_previous=(
                safe_percentage(stage.count, stages[index - 1].count) if index else 100.0
            ),
            share_of_top=safe_percentage(stage.count, top),
        )
        for index, stage in enumerate(stages)
    ]

    has_checkout = len(stages) >= 4
    has_purchases = len(stages) >= 5
    return FunnelSummary(
        stages=computed,
        overall_conversion=(
            safe_percentage(stages[-1].count, top, digits=2) if len(stages) > 1 else 0.0
        ),
        cart_abandonment=(
            round(100 - safe_percentage(_count(stages, 3), _count(stages, 2)), 1)
            if has_checkout and _count(stages, 2)
            else 0.0
        ),
        checkout_completion=(
            safe_percentage(_count(stages, 4), _count(stages, 3)) if has_purchases else 0.0
        ),
        view_to_purchase=(
            safe_percentage(_count(stages, 4), _count(stages, 1), digits=2)
            if has_purchases
            else 0.0
        ),
    )


def conversion_trend(rate: float, average: float) -> Trend:
    difference = rate - average
    if difference > TREND_THRESHOLD:
        return "up"
    if difference < -TREND_THRESHOLD:
        return "down"
    return "stable"


def _performance(rate: float, thresholds: tuple[float, float]) -> Performance:
    high, medium = thresholds
    if rate >= high:
        return "high"
    if rate >= medium:
        return "medium"
    return "low"


def build_product_conversions(products: Sequence[ProductCounts]) -> ProductConversionSummary:
    view_to_cart = [safe_percentage(p.add_to_cart, p.views) for p in products]
    cart_to_purchase = [safe_percentage(p.purchases, p.add_to_cart) for p in products]
    average_view_to_cart = safe_divide(sum(view_to_cart), len(products))
    average_cart_to_purchase = safe_divide(sum(cart_to_purchase), len(products))

    conversions = [
        ProductConversion(
            **product.model_dump(),
            view_to_cart_rate=view_rate,
            cart_to_purchase_rate=purchase_rate,
            view_to_cart_performance=_performance(view_rate, VIEW_TO_CART_THRESHOLDS),
            cart_to_purchase_performance=_performance(
                purchase_rate, CART_TO_PURCHASE_THRESHOLDS
            ),
            view_to_cart_trend=conversion_trend(view_rate, average_view_to_cart),
            cart_to_purchase_trend=conversion_trend(purchase_rate, average_cart_to_purchase),
        )
        for product, view_rate, purchase_rate in zip(products, view_to_cart, cart_to_purchase)
    ]
    return ProductConversionSummary(
        products=conversions,
        average_view_to_cart=round(average_view_to_cart, 1),
        average_cart_to_purchase=round(average_cart_to_purchase, 1),
    )


def average_order_value(revenue: float, orders: int) -> float:
    return round(safe_divide(revenue, orders), 2)


def build_dashboard(record: SellerAnalyticsRecord) -> SellerDashboard:
    return SellerDashboard(
        seller_id=record.seller_id,
        shop_name=record.shop_name,
        period_label=record.period_label,
        revenue=record.revenue,
        orders=record.orders,
        average_order_value=average_order_value(record.revenue, record.orders),
        funnel=build_funnel(record.funnel),
        product_conversions=build_product_conversions(record.products),
    )


class AnalyticsRepository:
    def __init__(self, records: Sequence[SellerAnalyticsRecord]):
        self._records = {record.seller_id: record for record in records}

    def dashboard(self, seller_id: str) -> SellerDashboard:
        record = self._records.get(seller_id)
        if record is None:
            raise UnknownSellerError(seller_id)
        return build_dashboard(record)


@lru_cache
def get_analytics_repository() -> AnalyticsRepository:
    with Path(settings.ANALYTICS_PATH).open(encoding="utf-8") as handle:
        data = json.load(handle)
    records = [SellerAnalyticsRecord.model_validate(item) for item in data]
    logger.info("Loaded analytics for %d sellers", len(records))
    return AnalyticsRepository(records)
