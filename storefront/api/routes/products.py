"""Routes for browsing the catalog: listing, filters, details and reviews."""

from __future__ import annotations

import logging
import math
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from redis.exceptions import RedisError
from starlette.datastructures import QueryParams

from storefront.config import settings
from storefront.models.filters import FilterAction
from storefront.models.product import Product, ProductListResponse
from storefront.models.review import Review, ReviewListResponse, ReviewPayload
from storefront.services.catalog.loader import Catalog, get_catalog
from storefront.services.filters.store import FilterStore
from storefront.services.filters.url_params import (
    PRODUCTS_BASE_URL,
    build_products_url,
    filters_from_params,
    filters_to_params,
    page_from_params,
    remove_filter_param,
)
from storefront.services.reviews.review_store import (
    ReviewStoreDependency,
    summarize_reviews,
)
from storefront.services.session.session_store import (
    OptionalSessionIdDependency,
    SessionIdDependency,
    SessionStoreDependency,
)
from storefront.services.session.submission_guard import SubmissionInProgressError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

CatalogDependency = Annotated[Catalog, Depends(get_catalog)]

_MULTI_VALUED_CHIPS = {"category", "subcategory", "state", "material"}


def _listing_response(store: FilterStore, page: int = 1) -> ProductListResponse:
    """Paginate the store's results and describe its active filters."""

    results = store.results()
    page_size = settings.PRODUCTS_PAGE_SIZE
    total_pages = max(1, math.ceil(len(results) / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size

    canonical = filters_to_params(store.state, store.price_bounds)
    chips = [
        chip.model_copy(
            update={
                "remove_url": build_products_url(
                    remove_filter_param(
                        canonical,
                        chip.filter_type,
                        chip.value if chip.filter_type in _MULTI_VALUED_CHIPS else None,
                    )
                )
            }
        )
        for chip in store.active_filters()
    ]

    return ProductListResponse(
        products=results[start : start + page_size],
        total=len(results),
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        filters=store.state,
        filter_options=store.filter_options,
        price_bounds=store.price_bounds,
        active_filter_count=store.active_filter_count,
        active_filters=chips,
        query_string=str(canonical),
        clear_filters_url=PRODUCTS_BASE_URL,
    )


def _get_product(catalog: Catalog, product_id: str) -> Product:
    product = catalog.get(product_id)
    if product is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Producto no encontrado",
        )
    return product


@router.get("", response_model=ProductListResponse, summary="Filtered product listing")
async def list_products(
    request: Request,
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    session_id: OptionalSessionIdDependency = None,
) -> ProductListResponse:
    """Apply the filters encoded in the query string and return one page."""

    params: QueryParams = request.query_params
    defaults = FilterStore(catalog).defaults()
    # Unknown values stay selected and match nothing.
    store = FilterStore(catalog, filters_from_params(params, defaults), drop_unknown=False)

    query = store.state.search_query.strip()
    if session_id and query:
        try:
            await sessions.add_search_query(session_id, query)
        except RedisError as exc:
            logger.warning("Could not record search history: %s", exc)

    return _listing_response(store, page_from_params(params))


@router.get("/filters", response_model=ProductListResponse)
async def get_session_filters(
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> ProductListResponse:
    """Listing for the filter state held by this session."""

    return _listing_response(FilterStore(catalog, await sessions.get_filters(session_id)))


@router.post("/filters", response_model=ProductListResponse)
async def update_session_filters(
    payload: FilterAction,
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> ProductListResponse:
    """Apply one mutation to the session's filter store."""

    store = FilterStore(catalog, await sessions.get_filters(session_id))
    try:
        store.apply_action(payload)
    except (TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": {"value": str(exc)}},
        ) from exc

    await sessions.save_filters(session_id, store.state)
    logger.debug("Session %s filters: %s", session_id, store.state.model_dump_json())
    return _listing_response(store)


@router.delete("/filters", response_model=ProductListResponse)
async def reset_session_filters(
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    session_id: SessionIdDependency,
) -> ProductListResponse:
    await sessions.clear_filters(session_id)
    return _listing_response(FilterStore(catalog))


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    catalog: CatalogDependency,
    sessions: SessionStoreDependency,
    session_id: OptionalSessionIdDependency = None,
) -> Product:
    product = _get_product(catalog, product_id)
    if session_id:
        try:
            await sessions.record_recently_viewed(session_id, product.id)
        except RedisError as exc:
            logger.warning("Could not record recently viewed product: %s", exc)
    return product


@router.get("/{product_id}/reviews", response_model=ReviewListResponse)
async def list_product_reviews(
    product_id: str,
    catalog: CatalogDependency,
    reviews: ReviewStoreDependency,
) -> ReviewListResponse:
    product = _get_product(catalog, product_id)
    items = await reviews.list_reviews(product.id)
    return ReviewListResponse(
        product_id=product.id,
        summary=summarize_reviews(items),
        reviews=items,
    )


@router.post(
    "/{product_id}/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a product review",
)
async def submit_product_review(
    product_id: str,
    payload: ReviewPayload,
    catalog: CatalogDependency,
    reviews: ReviewStoreDependency,
    session_id: SessionIdDependency,
) -> Review:
    product = _get_product(catalog, product_id)
    try:
        return await reviews.submit_review(product.id, payload, session_id)
    except SubmissionInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
