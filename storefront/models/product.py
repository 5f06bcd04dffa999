"""Product domain models and API schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field

from storefront.models.filters import (
    ActiveFilter,
    FilterOptions,
    FilterState,
    PriceRange,
)


class Product(BaseModel):
    """A read-only catalog record for an artisan product."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique identifier of the product")
    name: str
    description: str = ""
    category: str
    subcategory: str | None = None
    state: str = Field(..., description="Mexican state of origin")
    price: float = Field(..., ge=0, description="Price in MXN")
    rating: float | None = Field(None, ge=0, le=5)
    review_count: int | None = Field(None, ge=0)
    in_stock: bool = True
    verified: bool = False
    featured: bool = False
    maker: str = Field(..., description="Seller display name")
    images: list[AnyHttpUrl] = Field(..., min_length=1)
    materials: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime | None = Field(
        None,
        description="Publication timestamp used by the 'newest' sort",
    )


class ProductListResponse(BaseModel):
    """Response payload of the product listing endpoints."""

    products: list[Product]
    total: int
    page: int
    page_size: int
    total_pages: int
    filters: FilterState
    filter_options: FilterOptions
    price_bounds: PriceRange
    active_filter_count: int
    active_filters: list[ActiveFilter] = Field(default_factory=list)
    query_string: str = ""
    clear_filters_url: str = "/productos"


class SearchHit(BaseModel):
    """A product scored by the typo-tolerant search."""

    product: Product
    score: float
    matched_fields: list[str]


class SearchResponse(BaseModel):
    results: list[SearchHit] = Field(default_factory=list)
    query: str


class SuggestionsResponse(BaseModel):
    suggestions: list[str] = Field(default_factory=list)

