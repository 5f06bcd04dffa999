"""Mapping between filter state and storefront query parameters."""

from __future__ import annotations

import logging
import math

from starlette.datastructures import QueryParams

from storefront.models.filters import (
    FilterDimension,
    FilterState,
    PriceRange,
    SortOption,
    TriState,
)
from storefront.services.catalog.constants import DEFAULT_PRICE_BOUNDS

logger = logging.getLogger(__name__)

PARAM_CATEGORY = "categoria"
PARAM_SUBCATEGORY = "subcategoria"
PARAM_STATE = "estado"
PARAM_MATERIAL = "material"
PARAM_PRICE_MIN = "precio_min"
PARAM_PRICE_MAX = "precio"
PARAM_RATING = "calificacion"
PARAM_IN_STOCK = "enstock"
PARAM_VERIFIED = "verificado"
PARAM_FEATURED = "destacado"
PARAM_QUERY = "q"
PARAM_SORT = "ordenar"
PARAM_PAGE = "pagina"

PRODUCTS_BASE_URL = "/productos"

_YES = "si"
_NO = "no"

_FILTER_PARAMS: dict[str, tuple[str, ...]] = {
    "category": (PARAM_CATEGORY,),
    "subcategory": (PARAM_SUBCATEGORY,),
    "state": (PARAM_STATE,),
    "material": (PARAM_MATERIAL,),
    "price": (PARAM_PRICE_MIN, PARAM_PRICE_MAX),
    "rating": (PARAM_RATING,),
    "in_stock": (PARAM_IN_STOCK,),
    "verified": (PARAM_VERIFIED,),
    "featured": (PARAM_FEATURED,),
    "query": (PARAM_QUERY,),
    "sort": (PARAM_SORT,),
}

_MULTI_VALUED = {
    PARAM_CATEGORY: "categories",
    PARAM_SUBCATEGORY: "subcategories",
    PARAM_STATE: "states",
    PARAM_MATERIAL: "materials",
}

_FLAG_PARAMS = {
    PARAM_IN_STOCK: "in_stock",
    PARAM_VERIFIED: "verified",
    PARAM_FEATURED: "featured",
}


def get_filter_param(filter_type: FilterDimension) -> str:
    """Return the primary query parameter name for a filter dimension."""

    return _FILTER_PARAMS[filter_type][-1]


def _format_number(value: float) -> str:
    return f"{value:g}"


def _parse_number(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        logger.debug("Ignoring non-numeric query value %r", raw)
        return None
    if not math.isfinite(value):
        return None
    return value


def _unique(values: list[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return tuple(seen)


def filters_to_params(state: FilterState, price_bounds: PriceRange) -> QueryParams:
    """Serialize the non-default parts of ``state`` as query parameters."""

    items: list[tuple[str, str]] = []
    for param, field in _MULTI_VALUED.items():
        items.extend((param, value) for value in getattr(state, field))

    if state.price_range is not None:
        if state.price_range.min > price_bounds.min:
            items.append((PARAM_PRICE_MIN, _format_number(state.price_range.min)))
        if state.price_range.max < price_bounds.max:
            items.append((PARAM_PRICE_MAX, _format_number(state.price_range.max)))

    if state.min_rating > 0:
        items.append((PARAM_RATING, _format_number(state.min_rating)))

    for param, field in _FLAG_PARAMS.items():
        selection: TriState = getattr(state, field)
        if selection is TriState.INCLUDE:
            items.append((param, _YES))
        elif selection is TriState.EXCLUDE:
            items.append((param, _NO))

    if state.search_query.strip():
        items.append((PARAM_QUERY, state.search_query.strip()))
    if state.sort_by is not SortOption.RELEVANCE:
        items.append((PARAM_SORT, state.sort_by.value))

    return QueryParams(items)


def filters_from_params(params: QueryParams, defaults: FilterState) -> FilterState:
    """Build a filter state from query parameters on top of ``defaults``.

    Malformed values are ignored rather than rejected.
    """
    changes: dict = {}
    for param, field in _MULTI_VALUED.items():
        values = _unique(params.getlist(param))
        if values:
            changes[field] = values

    low = _parse_number(params.get(PARAM_PRICE_MIN))
    high = _parse_number(params.get(PARAM_PRICE_MAX))
    if low is not None or high is not None:
        base = defaults.price_range or PriceRange(
            min=0, max=max(low or 0, high or 0, DEFAULT_PRICE_BOUNDS[1])
        )
        if low is not None and high is not None:
            low, high = sorted((max(low, 0), max(high, 0)))
        elif low is not None:
            # A lone bound outside the defaults narrows to a single point.
            low = max(low, 0)
            high = max(base.max, low)
        else:
            high = max(high, 0)
            low = min(base.min, high)
        changes["price_range"] = PriceRange(min=low, max=high)

    rating = _parse_number(params.get(PARAM_RATING))
    if rating is not None:
        changes["min_rating"] = min(max(rating, 0), 5)

    for param, field in _FLAG_PARAMS.items():
        raw = (params.get(param) or "").strip().lower()
        if raw in (_YES, "sí", "true", "1"):
            changes[field] = TriState.INCLUDE
        elif raw in (_NO, "false", "0"):
            changes[field] = TriState.EXCLUDE

    query = (params.get(PARAM_QUERY) or "").strip()
    if query:
        changes["search_query"] = query

    sort_by = SortOption.parse(params.get(PARAM_SORT))
    if sort_by is not None:
        changes["sort_by"] = sort_by

    return defaults.model_copy(update=changes)


def page_from_params(params: QueryParams) -> int:
    raw = params.get(PARAM_PAGE)
    try:
        page = int(raw) if raw else 1
    except ValueError:
        return 1
    return max(page, 1)


def remove_filter_param(
    params: QueryParams,
    filter_type: FilterDimension,
    value: str | None = None,
) -> QueryParams:
    """Return a copy of ``params`` without one filter.

    With ``value`` set, only that value of a multi-valued filter is
    removed; every other parameter is left untouched.
    """
    names = set(_FILTER_PARAMS[filter_type])
    kept = [
        (key, item)
        for key, item in params.multi_items()
        if key not in names or (value is not None and item != value)
    ]
    return QueryParams(kept)


def build_products_url(
    params: QueryParams | dict[str, str | None],
    base_url: str = PRODUCTS_BASE_URL,
) -> str:
    """Build a listing URL, skipping empty values and the page number."""

    if isinstance(params, QueryParams):
        items = params.multi_items()
    else:
        items = list(params.items())
    cleaned = [
        (key, value)
        for key, value in items
        if key != PARAM_PAGE and value is not None and str(value) != ""
    ]
    if not cleaned:
        return base_url
    return f"{base_url}?{QueryParams(cleaned)}"
