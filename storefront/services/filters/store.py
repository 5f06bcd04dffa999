"""Filter state container bound to an injected catalog."""

from __future__ import annotations

import logging
from typing import Any

from storefront.models.filters import (
    FLAG_DIMENSIONS,
    ActiveFilter,
    FilterAction,
    FilterDimension,
    FilterOptions,
    FilterState,
    PriceRange,
    SortOption,
    TriState,
)
from storefront.models.product import Product
from storefront.services.catalog.loader import Catalog
from storefront.services.filters.engine import apply_filters

logger = logging.getLogger(__name__)

_SET_FIELDS: dict[str, str] = {
    "category": "categories",
    "subcategory": "subcategories",
    "state": "states",
    "material": "materials",
}

_SORT_LABELS: dict[SortOption, str] = {
    SortOption.RELEVANCE: "Relevancia",
    SortOption.PRICE_ASC: "Precio: Menor a Mayor",
    SortOption.PRICE_DESC: "Precio: Mayor a Menor",
    SortOption.RATING_DESC: "Mejor Calificados",
    SortOption.NEWEST: "Más Recientes",
    SortOption.POPULAR: "Más Populares",
}

_FLAG_LABELS: dict[str, str] = {
    "in_stock": "En stock",
    "verified": "Artesano verificado",
    "featured": "Destacado",
}


def _toggle(values: tuple[str, ...], value: str) -> tuple[str, ...]:
    if value in values:
        return tuple(v for v in values if v != value)
    return values + (value,)


def sort_label(sort_by: SortOption) -> str:
    return _SORT_LABELS[sort_by]


class FilterStore:
    """Holds the current ``FilterState`` and exposes its mutations.

    Every mutation replaces the held snapshot with a new one and returns
    it. Option lists and price bounds come from the catalog passed in.
    """

    def __init__(
        self,
        catalog: Catalog,
        state: FilterState | None = None,
        *,
        drop_unknown: bool = True,
    ) -> None:
        self._catalog = catalog
        if state is None:
            self._state = self.defaults()
        elif drop_unknown:
            self._state = self._sanitize(state)
        else:
            self._state = self._with_price_range(state)

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def filter_options(self) -> FilterOptions:
        return self._catalog.filter_options

    @property
    def price_bounds(self) -> PriceRange:
        return self._catalog.price_bounds

    def defaults(self) -> FilterState:
        return FilterState(price_range=self.price_bounds)

    def results(self) -> list[Product]:
        return apply_filters(self._catalog, self._state)

    def _replace(self, **changes: Any) -> FilterState:
        self._state = self._state.model_copy(update=changes)
        return self._state

    def _known(self, dimension: str) -> list[str]:
        return getattr(self.filter_options, _SET_FIELDS[dimension])

    def _sanitize(self, state: FilterState) -> FilterState:
        """Drop set values absent from the catalog's option lists."""

        changes: dict[str, Any] = {}
        for dimension, field in _SET_FIELDS.items():
            selected = getattr(state, field)
            known = set(self._known(dimension))
            kept = tuple(value for value in selected if value in known)
            if kept != selected:
                logger.warning(
                    "Dropping unknown %s filter values: %s",
                    dimension,
                    sorted(set(selected) - known),
                )
                changes[field] = kept
        if state.price_range is None:
            changes["price_range"] = self.price_bounds
        return state.model_copy(update=changes) if changes else state

    def _with_price_range(self, state: FilterState) -> FilterState:
        if state.price_range is None:
            return state.model_copy(update={"price_range": self.price_bounds})
        return state

    def _toggle_value(self, dimension: str, value: str) -> FilterState:
        if value not in self._known(dimension):
            logger.info("Ignoring toggle of unknown %s %r", dimension, value)
            return self._state
        field = _SET_FIELDS[dimension]
        return self._replace(**{field: _toggle(getattr(self._state, field), value)})

    def toggle_category(self, name: str) -> FilterState:
        return self._toggle_value("category", name)

    def toggle_subcategory(self, name: str) -> FilterState:
        return self._toggle_value("subcategory", name)

    def toggle_state(self, name: str) -> FilterState:
        return self._toggle_value("state", name)

    def toggle_material(self, name: str) -> FilterState:
        return self._toggle_value("material", name)

    def update_price_range(self, low: float, high: float) -> FilterState:
        """Replace the price bounds, swapping inverted input and clamping
        into the catalog's observed range."""
        if low > high:
            low, high = high, low
        bounds = self.price_bounds
        low = min(max(low, bounds.min), bounds.max)
        high = max(min(high, bounds.max), bounds.min)
        return self._replace(price_range=PriceRange(min=low, max=high))

    def update_min_rating(self, value: float) -> FilterState:
        """Set the rating floor; selecting the current floor again clears it."""
        value = min(max(float(value), 0.0), 5.0)
        if value == self._state.min_rating:
            return self._replace(min_rating=0)
        return self._replace(min_rating=value)

    def _toggle_flag(self, name: str) -> FilterState:
        current: TriState = getattr(self._state, name)
        next_value = TriState.INCLUDE if current is TriState.ANY else TriState.ANY
        return self._replace(**{name: next_value})

    def toggle_in_stock(self) -> FilterState:
        return self._toggle_flag("in_stock")

    def toggle_verified(self) -> FilterState:
        return self._toggle_flag("verified")

    def toggle_featured(self) -> FilterState:
        return self._toggle_flag("featured")

    def update_flag(self, name: str, value: TriState) -> FilterState:
        if name not in FLAG_DIMENSIONS:
            raise ValueError(f"Unknown boolean filter: {name}")
        return self._replace(**{name: TriState(value)})

    def update_search_query(self, text: str) -> FilterState:
        return self._replace(search_query=text or "")

    def update_sort_by(self, key: SortOption | str) -> FilterState:
        sort_by = key if isinstance(key, SortOption) else SortOption.parse(key)
        if sort_by is None:
            raise ValueError(f"Unknown sort option: {key}")
        return self._replace(sort_by=sort_by)

    def reset_filters(self) -> FilterState:
        self._state = self.defaults()
        return self._state

    def reset_filter(self, dimension: FilterDimension) -> FilterState:
        defaults = self.defaults()
        if dimension in _SET_FIELDS:
            field = _SET_FIELDS[dimension]
            return self._replace(**{field: getattr(defaults, field)})
        if dimension == "price":
            return self._replace(price_range=defaults.price_range)
        if dimension == "rating":
            return self._replace(min_rating=defaults.min_rating)
        if dimension in FLAG_DIMENSIONS:
            return self._replace(**{dimension: TriState.ANY})
        if dimension == "query":
            return self._replace(search_query="")
        if dimension == "sort":
            return self._replace(sort_by=defaults.sort_by)
        raise ValueError(f"Unknown filter dimension: {dimension}")

    def apply_action(self, action: FilterAction) -> FilterState:
        """Dispatch a serialized mutation coming from the HTTP layer."""

        name, value = action.action, action.value
        if name in ("toggle_in_stock", "toggle_verified", "toggle_featured"):
            return getattr(self, name)()
        if name == "reset_filters":
            return self.reset_filters()
        if name == "update_price_range":
            if not isinstance(value, dict):
                raise ValueError("update_price_range expects {'min': ..., 'max': ...}")
            bounds = self.price_bounds
            return self.update_price_range(
                float(value.get("min", bounds.min)),
                float(value.get("max", bounds.max)),
            )
        if name == "update_flag":
            if not isinstance(value, dict) or "name" not in value:
                raise ValueError("update_flag expects {'name': ..., 'value': ...}")
            return self.update_flag(value["name"], TriState(value.get("value", TriState.ANY)))
        if value is None:
            raise ValueError(f"{name} requires a value")
        if name == "update_min_rating":
            return self.update_min_rating(float(value))
        return getattr(self, name)(str(value))

    def _price_narrowed(self) -> bool:
        current = self._state.price_range
        if current is None:
            return False
        bounds = self.price_bounds
        return current.min > bounds.min or current.max < bounds.max

    @property
    def active_filter_count(self) -> int:
        """Number of non-default dimensions shown on the filters button.

        Search text and sort order are not counted here; the search query
        is listed among the chips of ``active_filters`` instead.
        """
        state = self._state
        count = sum(1 for field in _SET_FIELDS.values() if getattr(state, field))
        if self._price_narrowed():
            count += 1
        if state.min_rating > 0:
            count += 1
        count += sum(1 for name in FLAG_DIMENSIONS if getattr(state, name) is not TriState.ANY)
        return count

    def active_filters(self) -> list[ActiveFilter]:
        """Chips for every active value, the search query included."""

        state = self._state
        chips: list[ActiveFilter] = []
        for dimension, field in _SET_FIELDS.items():
            for value in getattr(state, field):
                chips.append(ActiveFilter(filter_type=dimension, value=value, label=value))
        if self._price_narrowed() and state.price_range is not None:
            low, high = state.price_range.min, state.price_range.max
            chips.append(
                ActiveFilter(
                    filter_type="price",
                    value=f"{low:g}-{high:g}",
                    label=f"${low:,.0f} - ${high:,.0f} MXN",
                )
            )
        if state.min_rating > 0:
            chips.append(
                ActiveFilter(
                    filter_type="rating",
                    value=f"{state.min_rating:g}",
                    label=f"{state.min_rating:g}+ estrellas",
                )
            )
        for name in FLAG_DIMENSIONS:
            selection: TriState = getattr(state, name)
            if selection is TriState.ANY:
                continue
            label = _FLAG_LABELS[name]
            if selection is TriState.EXCLUDE:
                label = f"Sin: {label}"
            chips.append(ActiveFilter(filter_type=name, value=selection.value, label=label))
        if state.search_query.strip():
            query = state.search_query.strip()
            chips.append(ActiveFilter(filter_type="query", value=query, label=f'"{query}"'))
        return chips
