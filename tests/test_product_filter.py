# tests/test_product_filter.py

"""Tests for ProductFilter catalog listing."""

import unittest

from src.filters.product_filter import CatalogQuery, ProductFilter
from src.models.product import NormalizedProduct


def _make_product(
    name: str,
    price: float = 10.0,
    categories: list[str] | None = None,
    popularity: int = 0,
    net_feedback: int = 0,
    description: str = "",
    index: int = 0,
) -> NormalizedProduct:
    """Create a minimal product."""
    return NormalizedProduct(
        id=f"p-{index}-{name}",
        name=name,
        description=description,
        categories=categories or ["General"],
        image=None,
        price=price,
        popularity=popularity,
        net_feedback=net_feedback,
        original_index=index,
    )


class TestFilterProducts(unittest.TestCase):
    """ProductFilter.filter_products behaviour."""

    def setUp(self) -> None:
        self.products = [
            _make_product("Cheap", price=10, categories=["Books", "Fiction"]),
            _make_product("Middle", price=20, categories=["Electronics"]),
            _make_product(
                "Pricey",
                price=30,
                categories=["Home"],
                description="Stainless kettle",
            ),
        ]

    def test_price_bounds_inclusive(self) -> None:
        """min 15 / max 25 keeps only the 20 item."""
        kept = ProductFilter.filter_products(
            self.products, CatalogQuery(min_price=15, max_price=25)
        )
        self.assertEqual([p.price for p in kept], [20])

    def test_bounds_are_inclusive_at_edges(self) -> None:
        kept = ProductFilter.filter_products(
            self.products, CatalogQuery(min_price=10, max_price=30)
        )
        self.assertEqual(len(kept), 3)

    def test_category_substring_case_insensitive(self) -> None:
        kept = ProductFilter.filter_products(
            self.products, CatalogQuery(category="fict")
        )
        self.assertEqual([p.name for p in kept], ["Cheap"])

    def test_category_all_keeps_everything(self) -> None:
        kept = ProductFilter.filter_products(
            self.products, CatalogQuery(category="ALL")
        )
        self.assertEqual(len(kept), 3)

    def test_search_matches_description(self) -> None:
        kept = ProductFilter.filter_products(
            self.products, CatalogQuery(search="KETTLE")
        )
        self.assertEqual([p.name for p in kept], ["Pricey"])

    def test_search_matches_category(self) -> None:
        kept = ProductFilter.filter_products(
            self.products, CatalogQuery(search="electro")
        )
        self.assertEqual([p.name for p in kept], ["Middle"])


class TestSortProducts(unittest.TestCase):
    """ProductFilter.sort_products behaviour."""

    def test_popularity_desc_default(self) -> None:
        products = [
            _make_product("A", popularity=1),
            _make_product("B", popularity=3),
            _make_product("C", popularity=2),
        ]
        result = ProductFilter.sort_products(products, "popularity", "desc")
        self.assertEqual([p.name for p in result], ["B", "C", "A"])

    def test_name_ascending_ignores_case(self) -> None:
        products = [_make_product("banana"), _make_product("Apple")]
        result = ProductFilter.sort_products(products, "name", "asc")
        self.assertEqual([p.name for p in result], ["Apple", "banana"])

    def test_feedback_sorts_net_feedback(self) -> None:
        products = [
            _make_product("A", net_feedback=5),
            _make_product("B", net_feedback=-2),
        ]
        result = ProductFilter.sort_products(products, "feedback", "asc")
        self.assertEqual([p.name for p in result], ["B", "A"])

    def test_stable_for_equal_keys(self) -> None:
        products = [
            _make_product("First", price=5, index=0),
            _make_product("Second", price=5, index=1),
        ]
        for order in ("asc", "desc"):
            with self.subTest(order=order):
                result = ProductFilter.sort_products(products, "price", order)
                self.assertEqual(
                    [p.name for p in result], ["First", "Second"]
                )


class TestApply(unittest.TestCase):
    """Pagination and facets."""

    def setUp(self) -> None:
        self.products = [
            _make_product(
                f"Item {i}",
                price=float(i + 1),
                categories=["Books"] if i % 2 else ["Toys"],
                popularity=i,
                index=i,
            )
            for i in range(25)
        ]

    def test_first_page(self) -> None:
        page = ProductFilter.apply(self.products, CatalogQuery(limit=10))
        self.assertEqual(len(page.products), 10)
        self.assertEqual(page.total_pages, 3)
        self.assertEqual(page.total_products, 25)
        self.assertTrue(page.has_next_page)
        self.assertFalse(page.has_prev_page)
        self.assertEqual(page.products[0].name, "Item 24")

    def test_last_partial_page(self) -> None:
        page = ProductFilter.apply(
            self.products, CatalogQuery(page=3, limit=10)
        )
        self.assertEqual(len(page.products), 5)
        self.assertFalse(page.has_next_page)
        self.assertTrue(page.has_prev_page)

    def test_page_beyond_range_is_empty(self) -> None:
        page = ProductFilter.apply(
            self.products, CatalogQuery(page=9, limit=10)
        )
        self.assertEqual(page.products, [])
        self.assertEqual(page.total_pages, 3)

    def test_facets_cover_whole_catalog(self) -> None:
        """Filters narrow the page but not the facets."""
        page = ProductFilter.apply(
            self.products, CatalogQuery(category="books")
        )
        self.assertEqual(page.categories, ["Books", "Toys"])
        self.assertEqual(page.price_min, 1.0)
        self.assertEqual(page.price_max, 25.0)
        self.assertEqual(page.total_products, 12)

    def test_empty_catalog(self) -> None:
        page = ProductFilter.apply([], CatalogQuery())
        self.assertEqual(page.total_pages, 0)
        self.assertEqual((page.price_min, page.price_max), (0.0, 0.0))


if __name__ == "__main__":
    unittest.main()
