"""Per-session shopper state: recently viewed, search history, addresses."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from storefront.models.checkout import SavedAddress
from storefront.models.product import Product
from storefront.services.catalog.loader import Catalog, get_catalog
from storefront.services.session.session_store import (
    SessionIdDependency,
    SessionStoreDependency,
)

router = APIRouter(prefix="/session", tags=["session"])

CatalogDependency = Annotated[Catalog, Depends(get_catalog)]


class SearchHistoryResponse(BaseModel):
    history: list[str]


@router.get("/recently-viewed", response_model=list[Product])
async def recently_viewed(
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> list[Product]:
    """Recently viewed products, most recent first."""

    product_ids = await sessions.recently_viewed(session_id)
    products = (catalog.get(product_id) for product_id in product_ids)
    return [product for product in products if product is not None]


@router.get("/search-history", response_model=SearchHistoryResponse)
async def search_history(
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> SearchHistoryResponse:
    return SearchHistoryResponse(history=await sessions.search_history(session_id))


@router.delete("/search-history", status_code=status.HTTP_204_NO_CONTENT)
async def clear_search_history(
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> None:
    await sessions.clear_search_history(session_id)


@router.delete("/search-history/{query}", response_model=SearchHistoryResponse)
async def remove_search_query(
    query: str,
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> SearchHistoryResponse:
    return SearchHistoryResponse(
        history=await sessions.remove_search_query(session_id, query)
    )


@router.get("/addresses", response_model=list[SavedAddress])
async def saved_addresses(
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> list[SavedAddress]:
    return await sessions.saved_addresses(session_id)
