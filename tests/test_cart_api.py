"""Integration tests for the session cart endpoints."""

import pytest

pytestmark = pytest.mark.asyncio


async def _add(client, headers, product_id, quantity=1):
    return await client.post(
        "/cart/items",
        json={"product_id": product_id, "quantity": quantity},
        headers=headers,
    )


async def test_cart_requires_session_header(client):
    response = await client.get("/cart")

    assert response.status_code == 422


async def test_empty_cart(client, session_headers):
    response = await client.get("/cart", headers=session_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["cart"]["items"] == []
    assert data["shipping_cost"] == 0
    assert data["total"] == 0


async def test_add_item_merges_quantities(client, session_headers):
    await _add(client, session_headers, "prod-011")
    response = await _add(client, session_headers, "prod-011", 2)

    assert response.status_code == 201
    cart = response.json()["cart"]
    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert cart["items"][0]["line_total"] == 960
    assert cart["count"] == 3


async def test_shipping_is_free_above_threshold(client, session_headers):
    response = await _add(client, session_headers, "prod-011")
    assert response.json()["shipping_cost"] == 150
    assert response.json()["total"] == 470

    response = await _add(client, session_headers, "prod-001")
    data = response.json()
    assert data["cart"]["subtotal"] == 2170
    assert data["shipping_cost"] == 0
    assert data["total"] == 2170


async def test_unknown_product_returns_404(client, session_headers):
    response = await _add(client, session_headers, "prod-999")

    assert response.status_code == 404


async def test_duplicate_add_is_rejected_while_pending(client, session_headers, redis_client):
    await redis_client.set("inflight:add-to-cart:test-session", "1")

    response = await _add(client, session_headers, "prod-011")

    assert response.status_code == 409


async def test_update_and_remove_items(client, session_headers):
    await _add(client, session_headers, "prod-011")
    await _add(client, session_headers, "prod-003")

    response = await client.patch(
        "/cart/items/prod-011", json={"quantity": 4}, headers=session_headers
    )
    assert response.status_code == 200
    assert response.json()["cart"]["subtotal"] == 4 * 320 + 650

    response = await client.patch(
        "/cart/items/prod-011", json={"quantity": 0}, headers=session_headers
    )
    assert [item["product_id"] for item in response.json()["cart"]["items"]] == ["prod-003"]

    response = await client.delete("/cart/items/prod-003", headers=session_headers)
    assert response.json()["cart"]["items"] == []


async def test_update_missing_line_returns_404(client, session_headers):
    response = await client.patch(
        "/cart/items/prod-011", json={"quantity": 2}, headers=session_headers
    )

    assert response.status_code == 404


async def test_carts_are_isolated_per_session(client, session_headers):
    await _add(client, session_headers, "prod-011")

    response = await client.get("/cart", headers={"X-Session-Id": "other-session"})

    assert response.json()["cart"]["items"] == []


async def test_percentage_coupon(client, session_headers):
    await _add(client, session_headers, "prod-001")

    response = await client.post(
        "/cart/coupon", json={"code": "primera10"}, headers=session_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["coupon"]["code"] == "PRIMERA10"
    assert data["coupon"]["discount_amount"] == 185
    assert data["total"] == 1665


async def test_free_shipping_coupon_zeroes_shipping(client, session_headers):
    await _add(client, session_headers, "prod-011")

    response = await client.post(
        "/cart/coupon", json={"code": "ENVIOGRATIS"}, headers=session_headers
    )

    data = response.json()
    assert data["shipping_cost"] == 0
    assert data["total"] == 320


async def test_invalid_coupon_reports_field_error(client, session_headers):
    await _add(client, session_headers, "prod-011")

    response = await client.post(
        "/cart/coupon", json={"code": "ARTESANO20"}, headers=session_headers
    )

    assert response.status_code == 422
    assert "compra mínima" in response.json()["detail"]["errors"]["code"]


async def test_coupon_is_dropped_when_cart_no_longer_qualifies(client, session_headers):
    await _add(client, session_headers, "prod-003")
    await client.post("/cart/coupon", json={"code": "PRIMERA10"}, headers=session_headers)

    response = await client.delete("/cart/items/prod-003", headers=session_headers)

    assert response.json()["coupon"] is None


async def test_remove_coupon_and_clear_cart(client, session_headers):
    await _add(client, session_headers, "prod-001")
    await client.post("/cart/coupon", json={"code": "PRIMERA10"}, headers=session_headers)

    response = await client.delete("/cart/coupon", headers=session_headers)
    assert response.json()["coupon"] is None
    assert response.json()["total"] == 1850

    response = await client.delete("/cart", headers=session_headers)
    assert response.status_code == 204
    assert (await client.get("/cart", headers=session_headers)).json()["cart"]["items"] == []


async def test_merged_quantity_is_capped(client, session_headers):
    await _add(client, session_headers, "prod-011", 60)
    response = await _add(client, session_headers, "prod-011", 60)

    assert response.status_code == 201
    assert response.json()["cart"]["items"][0]["quantity"] == 99
