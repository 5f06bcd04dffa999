"""Filter state models shared by the discovery pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SortOption(str, Enum):
    """Orderings offered by the product grid."""

    RELEVANCE = "relevance"
    PRICE_ASC = "price-asc"
    PRICE_DESC = "price-desc"
    RATING_DESC = "rating-desc"
    NEWEST = "newest"
    POPULAR = "popular"

    @classmethod
    def parse(cls, raw: str | None) -> SortOption | None:
        """Return the option for ``raw``, accepting ``price_asc`` spellings."""
        if not raw:
            return None
        try:
            return cls(raw.strip().lower().replace("_", "-"))
        except ValueError:
            return None


class TriState(str, Enum):
    """Boolean filter selection: don't care, require true, require false."""

    ANY = "any"
    INCLUDE = "include"
    EXCLUDE = "exclude"


class PriceRange(BaseModel):
    """Inclusive price bounds in MXN."""

    model_config = ConfigDict(frozen=True)

    min: float = Field(0, ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> PriceRange:
        if self.min > self.max:
            raise ValueError("price range minimum cannot exceed the maximum")
        return self


class FilterState(BaseModel):
    """Snapshot of the shopper's narrowing criteria plus sort order.

    Set-valued dimensions are ordered tuples without duplicates so that
    URL parameters come out in selection order.
    """

    model_config = ConfigDict(frozen=True)

    categories: tuple[str, ...] = ()
    subcategories: tuple[str, ...] = ()
    states: tuple[str, ...] = ()
    materials: tuple[str, ...] = ()
    price_range: PriceRange | None = Field(
        None,
        description="Inclusive bounds; None leaves price unrestricted",
    )
    min_rating: float = Field(0, ge=0, le=5)
    in_stock: TriState = TriState.ANY
    verified: TriState = TriState.ANY
    featured: TriState = TriState.ANY
    search_query: str = ""
    sort_by: SortOption = SortOption.RELEVANCE


FilterDimension = Literal[
    "category",
    "subcategory",
    "state",
    "material",
    "price",
    "rating",
    "in_stock",
    "verified",
    "featured",
    "query",
    "sort",
]

FLAG_DIMENSIONS: tuple[str, ...] = ("in_stock", "verified", "featured")


class FilterOptions(BaseModel):
    """Distinct option values present in the catalog."""

    categories: list[str] = Field(default_factory=list)
    subcategories: list[str] = Field(default_factory=list)
    states: list[str] = Field(default_factory=list)
    materials: list[str] = Field(default_factory=list)


class ActiveFilter(BaseModel):
    """A removable chip describing one active filter value."""

    filter_type: FilterDimension
    value: str
    label: str
    remove_url: str | None = None


class FilterAction(BaseModel):
    """Mutation applied to the session-owned filter store."""

    action: Literal[
        "toggle_category",
        "toggle_subcategory",
        "toggle_state",
        "toggle_material",
        "update_price_range",
        "update_min_rating",
        "toggle_in_stock",
        "toggle_verified",
        "toggle_featured",
        "update_flag",
        "update_search_query",
        "update_sort_by",
        "reset_filter",
        "reset_filters",
    ]
    value: Any = None
