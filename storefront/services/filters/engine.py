"""Pure filtering and sorting of catalog products."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from storefront.models.filters import FilterState, SortOption, TriState
from storefront.models.product import Product

Predicate = Callable[[Product], bool]

_OLDEST = datetime.min


def _flag_matches(selection: TriState, value: bool) -> bool:
    if selection is TriState.INCLUDE:
        return value is True
    if selection is TriState.EXCLUDE:
        return value is False
    return True


def _matches_query(product: Product, query: str) -> bool:
    fields = (
        product.name,
        product.description,
        product.category,
        product.state,
        product.maker,
    )
    return any(query in (field or "").lower() for field in fields)


def build_predicates(filters: FilterState) -> list[Predicate]:
    """Return the active predicates for ``filters`` in evaluation order.

    Dimensions left at their default contribute no predicate, so the list
    is empty for a default state.
    """
    predicates: list[Predicate] = []

    if filters.categories:
        categories = set(filters.categories)
        predicates.append(lambda p: p.category in categories)

    if filters.subcategories:
        subcategories = set(filters.subcategories)
        predicates.append(
            lambda p: p.subcategory is not None and p.subcategory in subcategories
        )

    if filters.states:
        states = set(filters.states)
        predicates.append(lambda p: p.state in states)

    if filters.materials:
        materials = set(filters.materials)
        predicates.append(lambda p: not materials.isdisjoint(p.materials))

    if filters.price_range is not None:
        low, high = filters.price_range.min, filters.price_range.max
        predicates.append(lambda p: low <= p.price <= high)

    if filters.min_rating > 0:
        floor = filters.min_rating
        predicates.append(lambda p: (p.rating or 0) >= floor)

    if filters.in_stock is not TriState.ANY:
        predicates.append(lambda p: _flag_matches(filters.in_stock, p.in_stock))
    if filters.verified is not TriState.ANY:
        predicates.append(lambda p: _flag_matches(filters.verified, p.verified))
    if filters.featured is not TriState.ANY:
        predicates.append(lambda p: _flag_matches(filters.featured, p.featured))

    query = filters.search_query.strip().lower()
    if query:
        predicates.append(lambda p: _matches_query(p, query))

    return predicates


def sort_products(products: list[Product], sort_by: SortOption) -> list[Product]:
    """Stable sort by ``sort_by``; relevance keeps the input order."""

    if sort_by is SortOption.PRICE_ASC:
        return sorted(products, key=lambda p: p.price)
    if sort_by is SortOption.PRICE_DESC:
        return sorted(products, key=lambda p: p.price, reverse=True)
    if sort_by is SortOption.RATING_DESC:
        return sorted(products, key=lambda p: p.rating or 0, reverse=True)
    if sort_by is SortOption.NEWEST:
        return sorted(
            products,
            key=lambda p: _naive(p.created_at) if p.created_at else _OLDEST,
            reverse=True,
        )
    if sort_by is SortOption.POPULAR:
        return sorted(products, key=lambda p: p.review_count or 0, reverse=True)
    return list(products)


def _naive(moment: datetime) -> datetime:
    # Naive timestamps are taken as UTC.
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(UTC).replace(tzinfo=None)


def apply_filters(catalog: Iterable[Product], filters: FilterState) -> list[Product]:
    """Map (catalog, filters) to the ordered matching subset.

    Never raises for unknown option values; they simply match nothing.
    """
    predicates = build_predicates(filters)
    matched = [
        product
        for product in catalog
        if all(predicate(product) for predicate in predicates)
    ]
    return sort_products(matched, filters.sort_by)
