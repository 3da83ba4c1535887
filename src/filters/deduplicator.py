# src/filters/deduplicator.py

"""Keep product ids unique within one fetched batch."""

import dataclasses
import logging

from src.models.product import NormalizedProduct

logger = logging.getLogger("storefront.filters")


class CatalogDeduplicator:
    """Resolve id collisions so every product in a batch is addressable."""

    @staticmethod
    def _normalise_id(product_id: str) -> str:
        """Comparable id key: trimmed and lowercased."""
        return product_id.strip().lower()

    @staticmethod
    def ensure_unique_ids(
        products: list[NormalizedProduct],
    ) -> tuple[list[NormalizedProduct], int]:
        """Suffix repeated ids with the product's source index.

        The first product keeps its id; later ones become
        ``{id}-{original_index}`` (bumped further until unique).
        Order is preserved.  Returns the products and the count of
        renamed ones.
        """
        seen: set[str] = set()
        kept: list[NormalizedProduct] = []
        renamed = 0

        for product in products:
            key = CatalogDeduplicator._normalise_id(product.id)
            if key not in seen:
                seen.add(key)
                kept.append(product)
                continue

            candidate = f"{product.id}-{product.original_index}"
            bump = 1
            while CatalogDeduplicator._normalise_id(candidate) in seen:
                candidate = f"{product.id}-{product.original_index}-{bump}"
                bump += 1
            seen.add(CatalogDeduplicator._normalise_id(candidate))
            kept.append(dataclasses.replace(product, id=candidate))
            renamed += 1

        if renamed:
            logger.info(
                "Renamed %d products with duplicate ids", renamed
            )

        return kept, renamed
