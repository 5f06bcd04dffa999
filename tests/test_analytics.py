"""Tests for seller analytics math and the dashboard endpoint."""

import math

import pytest

from storefront.models.analytics import FunnelStageCounts, ProductCounts
from storefront.services.analytics.metrics import (
    average_order_value,
    build_funnel,
    build_product_conversions,
    conversion_trend,
    safe_divide,
    safe_percentage,
)


def _stages(*counts):
    names = ("store_visits", "product_views", "add_to_cart", "checkout_started", "purchases")
    return [
        FunnelStageCounts(id=name, label=name, count=count)
        for name, count in zip(names, counts)
    ]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("numerator", "denominator", "expected"),
    [(1, 0, 0.0), (0, 0, 0.0), (math.inf, 1, 0.0), (1, 4, 0.25)],
)
def test_safe_divide(numerator, denominator, expected):
    assert safe_divide(numerator, denominator) == expected


@pytest.mark.unit
def test_safe_percentage_rounding():
    assert safe_percentage(1, 3) == 33.3
    assert safe_percentage(1, 3, digits=2) == 33.33
    assert safe_percentage(5, 0) == 0.0


@pytest.mark.unit
def test_funnel_conversions():
    funnel = build_funnel(_stages(5000, 3200, 400, 100, 25))
    assert [stage.conversion_from_previous for stage in funnel.stages] == [
        100.0,
        64.0,
        12.5,
        25.0,
        25.0,
    ]
    assert funnel.stages[2].share_of_top == 8.0
    assert funnel.overall_conversion == 0.5
    assert funnel.cart_abandonment == 75.0
    assert funnel.checkout_completion == 25.0
    assert funnel.view_to_purchase == 0.78


@pytest.mark.unit
def test_empty_funnel_reports_zeros():
    funnel = build_funnel(_stages(0, 0, 0, 0, 0))
    assert all(stage.share_of_top == 0 for stage in funnel.stages)
    assert funnel.overall_conversion == 0
    assert funnel.cart_abandonment == 0
    assert funnel.checkout_completion == 0
    assert build_funnel([]).stages == []


@pytest.mark.unit
def test_short_funnel_skips_late_stage_metrics():
    funnel = build_funnel(_stages(100, 50, 10))
    assert funnel.cart_abandonment == 0
    assert funnel.checkout_completion == 0
    assert funnel.overall_conversion == 10.0


@pytest.mark.unit
@pytest.mark.parametrize(
    ("rate", "average", "trend"),
    [(20, 15, "up"), (10, 15, "down"), (16.5, 15, "stable"), (17, 15, "stable")],
)
def test_conversion_trend(rate, average, trend):
    assert conversion_trend(rate, average) == trend


@pytest.mark.unit
def test_product_conversions_against_average():
    summary = build_product_conversions(
        [
            ProductCounts(product_id="a", product_name="A", views=1000, add_to_cart=200, purchases=60),
            ProductCounts(product_id="b", product_name="B", views=1000, add_to_cart=100, purchases=20),
            ProductCounts(product_id="c", product_name="C", views=0, add_to_cart=0, purchases=0),
        ]
    )
    rates = [(p.view_to_cart_rate, p.cart_to_purchase_rate) for p in summary.products]
    assert rates == [(20.0, 30.0), (10.0, 20.0), (0.0, 0.0)]
    assert summary.average_view_to_cart == 10.0
    assert [p.view_to_cart_trend for p in summary.products] == ["up", "stable", "down"]
    assert summary.products[0].view_to_cart_performance == "high"
    assert summary.products[1].view_to_cart_performance == "medium"
    assert summary.products[2].cart_to_purchase_performance == "low"


@pytest.mark.unit
def test_no_products_means_zero_averages():
    summary = build_product_conversions([])
    assert summary.products == []
    assert summary.average_view_to_cart == 0


@pytest.mark.unit
def test_average_order_value():
    assert average_order_value(48750, 25) == 1950.0
    assert average_order_value(1000, 0) == 0.0


@pytest.mark.asyncio
async def test_seller_dashboard_endpoint(client):
    response = await client.get("/analytics/sellers/seller-101")

    assert response.status_code == 200
    data = response.json()
    assert data["average_order_value"] == 1950.0
    assert data["funnel"]["cart_abandonment"] == 75.0
    assert len(data["product_conversions"]["products"]) == 3


@pytest.mark.asyncio
async def test_dashboard_for_seller_without_activity(client):
    response = await client.get("/analytics/sellers/seller-107")

    assert response.status_code == 200
    data = response.json()
    assert data["average_order_value"] == 0
    assert data["funnel"]["overall_conversion"] == 0


@pytest.mark.asyncio
async def test_unknown_seller_returns_404(client):
    response = await client.get("/analytics/sellers/seller-999")

    assert response.status_code == 404
