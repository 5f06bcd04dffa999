"""Integration tests for system routes and per-session shopper state."""

import asyncio

import pytest

from storefront.config import settings
from storefront.services.session.session_store import SessionStore
from storefront.services.session.submission_guard import (
    SubmissionGuard,
    SubmissionInProgressError,
)

pytestmark = pytest.mark.asyncio


async def test_root(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Papalote Storefront"}


async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["redis"] == "connected"
    assert data["products"] == 16


async def test_search_endpoint_records_history(client, session_headers):
    response = await client.get(
        "/search", params={"q": "alebrije"}, headers=session_headers
    )

    assert response.status_code == 200
    assert response.json()["query"] == "alebrije"

    history = await client.get("/session/search-history", headers=session_headers)
    assert history.json()["history"] == ["alebrije"]


async def test_search_requires_query(client):
    response = await client.get("/search")

    assert response.status_code == 422


async def test_short_suggestion_prefix_returns_nothing(client):
    response = await client.get("/search/suggestions", params={"q": "a"})

    assert response.json() == {"suggestions": []}


async def test_search_history_is_deduplicated_and_capped(redis_client):
    store = SessionStore(redis_client)
    for index in range(settings.SEARCH_HISTORY_LIMIT + 2):
        await store.add_search_query("s1", f"consulta {index}")
    history = await store.add_search_query("s1", "CONSULTA 11")

    assert len(history) == settings.SEARCH_HISTORY_LIMIT
    assert history[0] == "CONSULTA 11"
    assert history.count("consulta 11") == 0


async def test_concurrent_searches_are_all_kept(redis_client):
    store = SessionStore(redis_client)

    await asyncio.gather(
        *(store.add_search_query("s1", query) for query in ("barro", "plata", "lana"))
    )

    assert sorted(await store.search_history("s1")) == ["barro", "lana", "plata"]
    key = f"{settings.SESSION_KEY_PREFIX}s1:search-history"
    assert await redis_client.type(key) == "list"


async def test_remove_and_clear_search_history(client, session_headers):
    for query in ("barro", "plata"):
        await client.get("/search", params={"q": query}, headers=session_headers)

    response = await client.delete("/session/search-history/BARRO", headers=session_headers)
    assert response.json()["history"] == ["plata"]

    response = await client.delete("/session/search-history", headers=session_headers)
    assert response.status_code == 204
    history = await client.get("/session/search-history", headers=session_headers)
    assert history.json()["history"] == []


async def test_recently_viewed_moves_repeat_views_to_front(redis_client):
    store = SessionStore(redis_client)
    for product_id in ("prod-001", "prod-002", "prod-001"):
        await store.record_recently_viewed("s1", product_id)

    assert await store.recently_viewed("s1") == ["prod-001", "prod-002"]


async def test_submission_guard_releases_after_completion(redis_client):
    guard = SubmissionGuard(redis_client)

    async with guard.hold("review", "s1"):
        with pytest.raises(SubmissionInProgressError):
            async with guard.hold("review", "s1"):
                pass

    async with guard.hold("review", "s1"):
        pass


async def test_submission_guard_releases_after_failure(redis_client):
    guard = SubmissionGuard(redis_client)

    with pytest.raises(ValueError):
        async with guard.hold("place-order", "s1"):
            raise ValueError("boom")

    assert await redis_client.get("inflight:place-order:s1") is None
