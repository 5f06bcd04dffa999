"""Loading and indexing of the bundled product catalog."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Sequence
from functools import cached_property, lru_cache
from pathlib import Path

from storefront.config import settings
from storefront.models.filters import FilterOptions, PriceRange
from storefront.models.product import Product
from storefront.services.catalog.constants import DEFAULT_PRICE_BOUNDS

logger = logging.getLogger(__name__)


class Catalog:
    """Immutable, insertion-ordered collection of products."""

    def __init__(self, products: Iterable[Product]) -> None:
        self._products: tuple[Product, ...] = tuple(products)
        self._by_id = {product.id: product for product in self._products}

    def __len__(self) -> int:
        return len(self._products)

    def __iter__(self) -> Iterator[Product]:
        return iter(self._products)

    @property
    def products(self) -> Sequence[Product]:
        return self._products

    def get(self, product_id: str) -> Product | None:
        return self._by_id.get(product_id)

    @cached_property
    def filter_options(self) -> FilterOptions:
        """Sorted distinct values for every set-valued filter dimension."""

        categories: set[str] = set()
        subcategories: set[str] = set()
        states: set[str] = set()
        materials: set[str] = set()
        for product in self._products:
            if product.category:
                categories.add(product.category)
            if product.subcategory:
                subcategories.add(product.subcategory)
            if product.state:
                states.add(product.state)
            materials.update(m for m in product.materials if m)

        return FilterOptions(
            categories=sorted(categories),
            subcategories=sorted(subcategories),
            states=sorted(states),
            materials=sorted(materials),
        )

    @cached_property
    def price_bounds(self) -> PriceRange:
        """Observed min/max price, or the default bounds for an empty catalog."""

        if not self._products:
            low, high = DEFAULT_PRICE_BOUNDS
            return PriceRange(min=low, max=high)
        prices = [product.price for product in self._products]
        return PriceRange(min=min(prices), max=max(prices))


def load_catalog(path: str | Path) -> Catalog:
    """Parse a JSON array of product records.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        pydantic.ValidationError: If a record violates the product invariants.
    """
    catalog_path = Path(path)
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found at: {catalog_path}")

    raw_records = json.loads(catalog_path.read_text(encoding="utf-8"))
    products = [Product.model_validate(record) for record in raw_records]
    logger.debug("Parsed %d catalog records from %s", len(products), catalog_path)
    return Catalog(products)


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """FastAPI dependency returning the process-wide catalog."""

    return load_catalog(settings.CATALOG_PATH)
