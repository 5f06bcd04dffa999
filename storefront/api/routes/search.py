"""Typo-tolerant search over the catalog."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from redis.exceptions import RedisError

from storefront.models.product import SearchResponse, SuggestionsResponse
from storefront.services.catalog.loader import Catalog, get_catalog
from storefront.services.search import search_products, search_suggestions
from storefront.services.session.session_store import (
    OptionalSessionIdDependency,
    SessionStoreDependency,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])

CatalogDependency = Annotated[Catalog, Depends(get_catalog)]


@router.get("", response_model=SearchResponse, summary="Ranked product search")
async def search(
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    q: Annotated[str, Query(min_length=1, max_length=100)],
    limit: Annotated[int, Query(ge=1, le=50)] = 10,
    session_id: OptionalSessionIdDependency = None,
) -> SearchResponse:
    results = search_products(catalog, q, limit=limit)
    logger.info("Search %r returned %d results", q, len(results))

    if session_id and q.strip():
        try:
            await sessions.add_search_query(session_id, q)
        except RedisError as exc:
            logger.warning("Could not record search history: %s", exc)

    return SearchResponse(results=results, query=q.strip())


@router.get("/suggestions", response_model=SuggestionsResponse)
async def suggestions(
    catalog: CatalogDependency,
    q: Annotated[str, Query(max_length=100)] = "",
    limit: Annotated[int, Query(ge=1, le=20)] = 5,
) -> SuggestionsResponse:
    return SuggestionsResponse(suggestions=search_suggestions(catalog, q, limit))
