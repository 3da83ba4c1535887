# src/models/product.py

"""Catalog data models shared across the ingestion pipeline."""

from dataclasses import dataclass, field
from typing import Any

# One raw row/object as produced by a parser.
ProductRecord = dict[str, Any]


@dataclass(frozen=True)
class NormalizedProduct:
    """A catalog product with every display field resolved."""

    id: str
    name: str
    description: str
    categories: list[str]
    image: str | None
    price: float
    popularity: int
    net_feedback: int
    original_index: int
    data_source: str = ""
    fetched_at: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def category(self) -> str:
        """Primary category (first of ``categories``)."""
        return self.categories[0] if self.categories else "General"

    def to_dict(self) -> dict[str, Any]:
        """Serialise for API output; raw source fields come first."""
        return {
            **self.extra,
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "categories": list(self.categories),
            "image": self.image,
            "price": self.price,
            "popularity": self.popularity,
            "net_feedback": self.net_feedback,
            "originalIndex": self.original_index,
            "dataSource": self.data_source,
            "fetchedAt": self.fetched_at,
        }
