# src/normalize/normalizer.py

"""Map loosely-typed source records onto ``NormalizedProduct``."""

import hashlib
import logging
import math
import re
from typing import Any

from src.config.settings import Settings
from src.models.product import NormalizedProduct, ProductRecord
from src.normalize.field_rules import (
    CATEGORY_RULE,
    DESCRIPTION_RULE,
    FEEDBACK_RULE,
    ID_RULE,
    IMAGE_RULE,
    NAME_RULE,
    POPULARITY_RULE,
    PRICE_RULE,
    resolve_field,
)

logger = logging.getLogger("storefront.normalizer")

DEFAULT_DESCRIPTION = "No description available"
DEFAULT_CATEGORY = "General"

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]*={0,2}$")
_FLOAT_PREFIX_RE = re.compile(
    r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"
)
_INT_PREFIX_RE = re.compile(r"^\s*[+-]?\d+")
_CATEGORY_SPLIT_RE = re.compile(r"[|>/\\,;]")
_NAME_KEY_BLOCKLIST = ("image", "url", "id")


# ── Value acceptors ──────────────────────────────────────


def _text(value: Any) -> str | None:
    """Accept a non-blank string, trimmed."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _identifier(value: Any) -> str | None:
    """Accept a non-blank string or an integer id."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    return _text(value)


def _categories(value: Any) -> list[str] | None:
    text = _text(value)
    if text is None:
        return None
    parts = [
        part.strip()
        for part in _CATEGORY_SPLIT_RE.split(text)
        if part.strip()
    ]
    return parts or None


def looks_like_base64(text: str) -> bool:
    """True for strings drawn purely from the base64 alphabet."""
    return bool(_BASE64_RE.match(text))


def _image(value: Any) -> str | None:
    """Classify an image value as URL, data URI, bare base64 or nothing."""
    text = _text(value)
    if text is None:
        return None
    if text.startswith(("data:image/", "http")):
        return text
    if len(text) > 100 and looks_like_base64(text):
        return f"data:image/jpeg;base64,{text}"
    return None


def parse_float_prefix(value: Any) -> float | None:
    """Read the leading number of a value, or ``None`` when absent."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _FLOAT_PREFIX_RE.match(value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int_prefix(value: Any) -> int | None:
    """Read the leading integer of a value (``"12.7"`` → 12)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        match = _INT_PREFIX_RE.match(value)
        return int(match.group(0)) if match else None
    return None


def _positive_price(value: Any) -> float | None:
    number = parse_float_prefix(value)
    if number is not None and number > 0:
        return number
    return None


def _rounded(value: Any) -> int | None:
    number = parse_float_prefix(value)
    if number is None:
        return None
    # Half-up rounding
    return math.floor(number + 0.5)


# ── Fallbacks ────────────────────────────────────────────


def stable_default(seed: str, bounds: tuple[int, int]) -> int:
    """Derive a repeatable integer in ``[low, high)`` from ``seed``."""
    low, high = bounds
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return low + int.from_bytes(digest[:8], "big") % (high - low)


def _guess_name(record: ProductRecord) -> str | None:
    """Pick the first string field that reads like a display name."""
    for key, value in record.items():
        if not isinstance(value, str):
            continue
        text = value.strip()
        lowered_key = key.lower()
        if (
            2 < len(text) < 200
            and not text.startswith(("http", "data:"))
            and not looks_like_base64(text)
            and "base64" not in text
            and not any(m in lowered_key for m in _NAME_KEY_BLOCKLIST)
        ):
            logger.debug(
                "Using field '%s' as product name", key
            )
            return text
    return None


# ── Public API ───────────────────────────────────────────


def normalize(
    record: ProductRecord,
    index: int,
    *,
    data_source: str = "",
    fetched_at: str = "",
) -> NormalizedProduct:
    """Build a fully populated product from one raw record.

    Never raises.  Missing numeric fields receive deterministic
    defaults derived from the product id and name, inside the ranges
    configured on :class:`Settings`.
    """
    product_id = (
        resolve_field(record, ID_RULE, _identifier) or f"product-{index}"
    )
    name = resolve_field(record, NAME_RULE, _text) or _guess_name(record)
    if name is None:
        logger.debug("No name found for record %d, using fallback", index)
        name = f"Product {index + 1}"

    seed = f"{product_id}:{name}"

    price = resolve_field(record, PRICE_RULE, _positive_price)
    if price is None:
        price = float(
            stable_default(f"price:{seed}", Settings.PRICE_DEFAULT_RANGE)
        )

    popularity = resolve_field(record, POPULARITY_RULE, _rounded)
    if popularity is None:
        popularity = stable_default(
            f"popularity:{seed}", Settings.POPULARITY_DEFAULT_RANGE
        )

    net_feedback = resolve_field(record, FEEDBACK_RULE, parse_int_prefix)
    if net_feedback is None:
        net_feedback = stable_default(
            f"feedback:{seed}", Settings.FEEDBACK_DEFAULT_RANGE
        )

    original_index = record.get("originalIndex")
    if not isinstance(original_index, int) or isinstance(original_index, bool):
        original_index = index

    return NormalizedProduct(
        id=product_id,
        name=name,
        description=(
            resolve_field(record, DESCRIPTION_RULE, _text)
            or DEFAULT_DESCRIPTION
        ),
        categories=(
            resolve_field(record, CATEGORY_RULE, _categories)
            or [DEFAULT_CATEGORY]
        ),
        image=resolve_field(record, IMAGE_RULE, _image),
        price=price,
        popularity=popularity,
        net_feedback=net_feedback,
        original_index=original_index,
        data_source=data_source,
        fetched_at=fetched_at,
        extra={k: v for k, v in record.items() if k != "originalIndex"},
    )


def normalize_all(
    records: list[ProductRecord],
    *,
    data_source: str = "",
    fetched_at: str = "",
) -> list[NormalizedProduct]:
    """Normalize a batch, preserving source order."""
    products = [
        normalize(
            record,
            idx,
            data_source=data_source,
            fetched_at=fetched_at,
        )
        for idx, record in enumerate(records)
    ]
    logger.info(
        "Normalized %d products from %s", len(products), data_source or "?"
    )
    return products
