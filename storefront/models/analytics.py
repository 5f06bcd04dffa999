"""Seller analytics: raw fixture records and the computed dashboard."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Trend = Literal["up", "down", "stable"]
Performance = Literal["high", "medium", "low"]


class FunnelStageCounts(BaseModel):
    id: str
    label: str
    count: int = Field(..., ge=0)


class ProductCounts(BaseModel):
    product_id: str
    product_name: str
    views: int = Field(..., ge=0)
    add_to_cart: int = Field(..., ge=0)
    purchases: int = Field(..., ge=0)


class SellerAnalyticsRecord(BaseModel):
    """Pre-aggregated counters for one seller and period."""

    seller_id: str
    shop_name: str
    period_label: str
    revenue: float = Field(..., ge=0)
    orders: int = Field(..., ge=0)
    funnel: list[FunnelStageCounts]
    products: list[ProductCounts] = Field(default_factory=list)


class FunnelStage(FunnelStageCounts):
    conversion_from_previous: float
    share_of_top: float


class FunnelSummary(BaseModel):
    stages: list[FunnelStage]
    overall_conversion: float
    cart_abandonment: float
    checkout_completion: float
    view_to_purchase: float


class ProductConversion(ProductCounts):
    view_to_cart_rate: float
    cart_to_purchase_rate: float
    view_to_cart_performance: Performance
    cart_to_purchase_performance: Performance
    view_to_cart_trend: Trend
    cart_to_purchase_trend: Trend


class ProductConversionSummary(BaseModel):
    products: list[ProductConversion]
    average_view_to_cart: float
    average_cart_to_purchase: float


class SellerDashboard(BaseModel):
    seller_id: str
    shop_name: str
    period_label: str
    revenue: float
    orders: int
    average_order_value: float
    funnel: FunnelSummary
    product_conversions: ProductConversionSummary
