"""Integration tests for catalog browsing, session filters and reviews."""

import pytest

pytestmark = pytest.mark.asyncio


async def test_listing_defaults(client):
    response = await client.get("/products")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 16
    assert data["page"] == 1
    assert data["total_pages"] == 2
    assert len(data["products"]) == 12
    assert data["active_filter_count"] == 0
    assert data["price_bounds"] == {"min": 320, "max": 2890}
    assert data["query_string"] == ""
    assert "Textiles y Ropa" in data["filter_options"]["categories"]


async def test_listing_second_page(client):
    response = await client.get("/products", params={"pagina": 2})

    data = response.json()
    assert data["page"] == 2
    assert [product["id"] for product in data["products"]] == [
        "prod-013",
        "prod-014",
        "prod-015",
        "prod-016",
    ]


async def test_listing_applies_query_string_filters(client):
    response = await client.get(
        "/products", params={"categoria": "Textiles y Ropa", "enstock": "si"}
    )

    data = response.json()
    assert data["total"] == 3
    assert {product["id"] for product in data["products"]} == {
        "prod-001",
        "prod-002",
        "prod-016",
    }
    assert data["active_filter_count"] == 2
    chips = {chip["filter_type"]: chip for chip in data["active_filters"]}
    assert chips["category"]["remove_url"] == "/productos?enstock=si"
    assert chips["in_stock"]["remove_url"] == "/productos?categoria=Textiles+y+Ropa"


async def test_listing_sorted_by_price(client):
    response = await client.get("/products", params={"ordenar": "price-asc"})

    prices = [product["price"] for product in response.json()["products"]]
    assert prices == sorted(prices)
    assert prices[0] == 320


async def test_listing_excluding_out_of_stock(client):
    response = await client.get("/products", params={"enstock": "no"})

    assert {product["id"] for product in response.json()["products"]} == {
        "prod-005",
        "prod-010",
    }


async def test_listing_query_is_recorded_in_history(client, session_headers):
    await client.get("/products", params={"q": "rebozo"}, headers=session_headers)

    response = await client.get("/session/search-history", headers=session_headers)

    assert response.json() == {"history": ["rebozo"]}


async def test_product_detail_records_recently_viewed(client, session_headers):
    await client.get("/products/prod-003", headers=session_headers)
    response = await client.get("/products/prod-001", headers=session_headers)

    assert response.status_code == 200
    assert response.json()["maker"] == "Taller Tejedoras de Mitla"

    viewed = await client.get("/session/recently-viewed", headers=session_headers)
    assert [product["id"] for product in viewed.json()] == ["prod-001", "prod-003"]


async def test_unknown_product_returns_404(client):
    response = await client.get("/products/prod-999")

    assert response.status_code == 404
    assert response.json()["detail"] == "Producto no encontrado"


async def test_session_filters_lifecycle(client, session_headers):
    response = await client.post(
        "/products/filters",
        json={"action": "toggle_category", "value": "Joyería"},
        headers=session_headers,
    )
    assert response.status_code == 200
    assert response.json()["total"] == 2
    assert response.json()["filters"]["categories"] == ["Joyería"]

    response = await client.get("/products/filters", headers=session_headers)
    assert response.json()["total"] == 2

    response = await client.delete("/products/filters", headers=session_headers)
    assert response.json()["total"] == 16
    assert response.json()["active_filter_count"] == 0


async def test_session_filters_reject_bad_values(client, session_headers):
    response = await client.post(
        "/products/filters",
        json={"action": "update_sort_by", "value": "cheapest"},
        headers=session_headers,
    )

    assert response.status_code == 422
    assert "cheapest" in response.json()["detail"]["errors"]["value"]


async def test_reviews_start_empty(client):
    response = await client.get("/products/prod-001/reviews")

    assert response.status_code == 200
    data = response.json()
    assert data["reviews"] == []
    assert data["summary"]["count"] == 0
    assert data["summary"]["average"] == 0
    assert [bucket["stars"] for bucket in data["summary"]["distribution"]] == [5, 4, 3, 2, 1]


async def test_submit_review_and_summary(client, session_headers):
    for rating in (5, 4):
        response = await client.post(
            "/products/prod-001/reviews",
            json={"author": "  Ana Ruiz ", "rating": rating, "comment": "Hermoso trabajo"},
            headers=session_headers,
        )
        assert response.status_code == 201
        assert response.json()["author"] == "Ana Ruiz"
        assert response.json()["id"].startswith("rev-")

    data = (await client.get("/products/prod-001/reviews")).json()
    assert [review["rating"] for review in data["reviews"]] == [4, 5]
    assert data["summary"]["count"] == 2
    assert data["summary"]["average"] == 4.5
    assert data["summary"]["distribution"][0] == {"stars": 5, "count": 1, "percentage": 50.0}


async def test_review_validation(client, session_headers):
    response = await client.post(
        "/products/prod-001/reviews",
        json={"author": "Ana", "rating": 6},
        headers=session_headers,
    )

    assert response.status_code == 422


async def test_review_for_unknown_product(client, session_headers):
    response = await client.post(
        "/products/prod-999/reviews",
        json={"author": "Ana", "rating": 5},
        headers=session_headers,
    )

    assert response.status_code == 404


async def test_unknown_category_in_url_gives_empty_listing(client):
    response = await client.get(
        "/products", params={"categoria": "Inexistente", "estado": "Oaxaca"}
    )

    data = response.json()
    assert data["total"] == 0
    assert data["products"] == []
    assert data["filters"]["categories"] == ["Inexistente"]
    assert data["clear_filters_url"] == "/productos"
    chips = {chip["filter_type"]: chip for chip in data["active_filters"]}
    assert chips["category"]["value"] == "Inexistente"
    assert chips["category"]["remove_url"] == "/productos?estado=Oaxaca"


async def test_minimum_price_above_catalog_gives_empty_listing(client):
    response = await client.get("/products", params={"precio_min": 999999})

    data = response.json()
    assert data["total"] == 0
    assert data["filters"]["price_range"] == {"min": 999999, "max": 999999}
