# src/parsers/json_parser.py

"""JSON array parsing for the fallback catalog sources."""

import json
import logging
from typing import Any

from src.config.settings import Settings
from src.models.errors import ParseError, RowSkipped
from src.parsers.csv_parser import ParseResult

logger = logging.getLogger("storefront.parser")


def _unwrap(data: Any) -> list[Any]:
    """Return the list of product entries inside a decoded payload."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("products"), list):
        return data["products"]
    return [data]


def parse_json(
    payload: str | bytes,
    max_records: int = Settings.MAX_RECORDS,
) -> ParseResult:
    """Parse a JSON array (or single object) of product objects.

    Non-object entries are skipped.  Raises ``ParseError`` on invalid
    JSON or when no object survives.
    """
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        # Covers decode errors, oversized integers and runaway nesting
        raise ParseError(
            f"Invalid JSON: {type(exc).__name__}: {exc}"
        ) from exc

    result = ParseResult()
    for position, item in enumerate(_unwrap(data)):
        if len(result.records) >= max_records:
            result.truncated = True
            logger.info(
                "Record cap of %d reached, ignoring remaining JSON entries",
                max_records,
            )
            break
        if not isinstance(item, dict):
            result.skipped += 1
            logger.warning(
                "Skipping JSON %s",
                RowSkipped(position, f"expected object, got {type(item).__name__}"),
            )
            continue
        record = dict(item)
        record["originalIndex"] = len(result.records)
        result.records.append(record)

    if not result.records:
        raise ParseError("Empty products array")

    logger.info(
        "Parsed %d JSON records (%d skipped)",
        len(result.records),
        result.skipped,
    )
    return result
