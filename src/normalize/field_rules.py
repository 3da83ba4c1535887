# src/normalize/field_rules.py

"""Ordered field-name rules for each semantic product attribute.

Every rule lists base names in priority order.  Each base name expands
to the spellings seen in real catalog exports, e.g. ``product_name``
yields ``product_name``, ``productName``, ``ProductName``,
``PRODUCT_NAME`` and ``Product Name``.  The first candidate whose value
is accepted wins.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from src.models.product import ProductRecord

T = TypeVar("T")


def name_variants(base: str) -> tuple[str, ...]:
    """Expand a snake_case base name into its common spellings."""
    words = base.split("_")
    spellings = [
        base,
        words[0] + "".join(w.capitalize() for w in words[1:]),
        "".join(w.capitalize() for w in words),
        base.upper(),
        " ".join(w.capitalize() for w in words),
    ]
    return tuple(dict.fromkeys(spellings))


@dataclass(frozen=True)
class FieldRule:
    """Candidate field names for one attribute, highest priority first."""

    attribute: str
    candidates: tuple[str, ...]


def _rule(attribute: str, *bases: str) -> FieldRule:
    candidates: list[str] = []
    for base in bases:
        candidates.extend(name_variants(base))
    return FieldRule(attribute, tuple(dict.fromkeys(candidates)))


ID_RULE = _rule("id", "id")

NAME_RULE = _rule(
    "name",
    "name", "title",
    "product_name", "item_name",
    "product_title", "item_title",
    "display_name", "label",
    "book_title", "movie_title",
    "product", "item",
    # Some exports only carry a description
    "description",
)

DESCRIPTION_RULE = _rule(
    "description",
    "description", "desc", "details", "summary", "info",
    "product_description", "item_description", "about",
)

CATEGORY_RULE = _rule(
    "categories",
    "category", "type", "group", "categories", "genre",
    "classification", "category_name",
    "product_category", "item_category",
)

IMAGE_RULE = _rule(
    "image",
    "image", "img", "image_url", "picture", "photo", "thumbnail",
    "src", "url", "base64", "image_data", "data",
    "product_image", "item_image",
)

PRICE_RULE = _rule(
    "price",
    "price", "cost", "amount", "value",
    "product_price", "item_price", "unit_price",
)

POPULARITY_RULE = _rule(
    "popularity",
    "popularity", "rating", "score", "likes",
    "past_purchase_count", "purchase_count", "views",
    "product_rating", "item_rating",
)

FEEDBACK_RULE = _rule(
    "net_feedback",
    "feedback", "reviews", "votes", "net_feedback",
    "positive_reviews", "review_score", "thumbs_up",
    "product_reviews", "item_reviews",
)

ALL_RULES: tuple[FieldRule, ...] = (
    ID_RULE,
    NAME_RULE,
    DESCRIPTION_RULE,
    CATEGORY_RULE,
    IMAGE_RULE,
    PRICE_RULE,
    POPULARITY_RULE,
    FEEDBACK_RULE,
)


def resolve_field(
    record: ProductRecord,
    rule: FieldRule,
    accept: Callable[[Any], T | None],
) -> T | None:
    """Return the first accepted value among the rule's candidates.

    ``accept`` converts a raw value or returns ``None`` to reject it,
    in which case the next candidate is tried.
    """
    for name in rule.candidates:
        value = record.get(name)
        if value is None:
            continue
        converted = accept(value)
        if converted is not None:
            return converted
    return None
