# src/services/chat_policy.py

"""Keyword-matching shopping assistant.

The assistant is a plain callable so the API can swap in another
policy; :func:`keyword_chat_policy` is the default.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from src.config.settings import Settings
from src.models.product import NormalizedProduct

PLACEHOLDER_IMAGE = "/placeholder.svg?height=300&width=300"

# Phrase in the message → words that count as a match in a product
_TOPIC_HINTS: dict[str, tuple[str, ...]] = {
    "harry potter": ("harry", "potter"),
    "book": ("book",),
    "movie": ("movie", "film"),
    "tech": ("tech", "electronic"),
    "toy": ("toy",),
}


@dataclass
class ChatReply:
    """Assistant text plus the products it suggests."""

    response: str
    recommendations: list[dict[str, Any]] = field(
        default_factory=lambda: list[dict[str, Any]]()
    )


ChatPolicy = Callable[[str, list[NormalizedProduct]], ChatReply]


def _matches(message: str, product: NormalizedProduct) -> bool:
    haystacks = (
        product.name.lower(),
        product.description.lower(),
        " ".join(product.categories).lower(),
    )
    if any(message in h for h in haystacks):
        return True
    for phrase, hints in _TOPIC_HINTS.items():
        if phrase in message and any(
            hint in h for hint in hints for h in haystacks
        ):
            return True
    return False


def _as_recommendation(
    product: NormalizedProduct,
    message: str,
) -> dict[str, Any]:
    return {
        "id": f"search-{product.original_index}",
        "name": product.name,
        "description": product.description,
        "category": product.category,
        "image": product.image or PLACEHOLDER_IMAGE,
        "price": product.price,
        "popularity": product.popularity,
        "net_feedback": product.net_feedback,
        "recommendation_score": 0.95,
        "reason": f'Matches your search: "{message}"',
    }


def keyword_chat_policy(
    message: str,
    products: list[NormalizedProduct],
) -> ChatReply:
    """Suggest products whose text contains the message or its topic."""
    lowered = message.strip().lower()

    if not products:
        return ChatReply(
            response=(
                "I'd love to help you find what you're looking for! "
                f'Could you be more specific about "{message}"? For '
                "example, are you looking for books, movies, technology "
                "items, toys, or something else?"
            )
        )

    matching = [p for p in products if _matches(lowered, p)]
    if not matching:
        return ChatReply(
            response=(
                "I couldn't find any items specifically matching "
                f'"{message}" in our current inventory. Try a broader '
                'category like "books", "movies" or "technology", or '
                "describe what you're looking for in more detail."
            )
        )

    count = len(matching)
    plural = "s" if count > 1 else ""
    lead = "Here are your matches:" if count > 1 else "Here it is:"
    return ChatReply(
        response=(
            f"Perfect! I found {count} item{plural} matching "
            f'"{message}". {lead}'
        ),
        recommendations=[
            _as_recommendation(p, message)
            for p in matching[:Settings.MAX_CHAT_RECOMMENDATIONS]
        ],
    )
