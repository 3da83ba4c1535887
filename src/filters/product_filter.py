# src/filters/product_filter.py

"""Catalog listing: filtering, sorting, pagination and facets."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.config.settings import Settings
from src.models.product import NormalizedProduct

logger = logging.getLogger("storefront.filters")

SORT_KEYS: dict[str, Callable[[NormalizedProduct], Any]] = {
    "name": lambda p: p.name.lower(),
    "popularity": lambda p: p.popularity,
    "price": lambda p: p.price,
    "feedback": lambda p: p.net_feedback,
}


@dataclass
class CatalogQuery:
    """Listing parameters, already validated by the caller."""

    category: str = "all"
    min_price: float | None = None
    max_price: float | None = None
    search: str = ""
    page: int = 1
    limit: int = Settings.DEFAULT_PAGE_SIZE
    sort_by: str = "popularity"
    sort_order: str = "desc"


@dataclass
class CatalogPage:
    """One page of a filtered, sorted listing plus catalog facets."""

    products: list[NormalizedProduct]
    current_page: int
    total_pages: int
    total_products: int
    categories: list[str] = field(default_factory=lambda: list[str]())
    price_min: float = 0.0
    price_max: float = 0.0

    @property
    def has_next_page(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.current_page > 1


class ProductFilter:
    """Apply a :class:`CatalogQuery` to a product list."""

    @staticmethod
    def filter_products(
        products: list[NormalizedProduct],
        query: CatalogQuery,
    ) -> list[NormalizedProduct]:
        """Keep products matching category, price bounds and search text."""
        kept = products

        category = query.category.strip().lower()
        if category and category != "all":
            kept = [
                p
                for p in kept
                if any(category in c.lower() for c in p.categories)
            ]

        if query.min_price is not None:
            kept = [p for p in kept if p.price >= query.min_price]
        if query.max_price is not None:
            kept = [p for p in kept if p.price <= query.max_price]

        term = query.search.strip().lower()
        if term:
            kept = [
                p
                for p in kept
                if term in p.name.lower()
                or term in p.description.lower()
                or any(term in c.lower() for c in p.categories)
            ]

        excluded = len(products) - len(kept)
        if excluded:
            logger.debug("Listing filters excluded %d products", excluded)
        return kept

    @staticmethod
    def sort_products(
        products: list[NormalizedProduct],
        sort_by: str,
        sort_order: str,
    ) -> list[NormalizedProduct]:
        """Stable sort; equal keys keep their input order."""
        key = SORT_KEYS.get(sort_by, SORT_KEYS["popularity"])
        return sorted(products, key=key, reverse=sort_order == "desc")

    @staticmethod
    def facets(
        products: list[NormalizedProduct],
    ) -> tuple[list[str], float, float]:
        """Sorted distinct categories and the price range of a catalog."""
        categories = sorted({c for p in products for c in p.categories})
        prices = [p.price for p in products]
        if not prices:
            return categories, 0.0, 0.0
        return categories, min(prices), max(prices)

    @staticmethod
    def apply(
        products: list[NormalizedProduct],
        query: CatalogQuery,
    ) -> CatalogPage:
        """Filter, sort and paginate; facets cover the whole catalog."""
        matched = ProductFilter.sort_products(
            ProductFilter.filter_products(products, query),
            query.sort_by,
            query.sort_order,
        )
        total = len(matched)
        start = (query.page - 1) * query.limit
        categories, price_min, price_max = ProductFilter.facets(products)

        return CatalogPage(
            products=matched[start:start + query.limit],
            current_page=query.page,
            total_pages=math.ceil(total / query.limit),
            total_products=total,
            categories=categories,
            price_min=price_min,
            price_max=price_max,
        )
