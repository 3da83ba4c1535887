# src/parsers/csv_parser.py

"""Quote-aware CSV parsing with a streaming, record-capped variant.

Tokenizing rules:

* a double quote toggles "inside quotes", where commas do not split;
* each field is trimmed, then one wrapping pair of quotes is removed;
* an escaped ``""`` inside a field is left as-is (no RFC 4180 unescaping);
* the first non-blank line is the header, blank lines are ignored;
* short rows are padded with ``""``, surplus values are dropped.
"""

import codecs
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from src.config.settings import Settings
from src.models.errors import ParseError, RowSkipped
from src.models.product import ProductRecord

logger = logging.getLogger("storefront.parser")


@dataclass
class ParseResult:
    """Records produced from one payload."""

    records: list[ProductRecord] = field(default_factory=list)
    truncated: bool = False
    skipped: int = 0


def split_csv_line(line: str) -> list[str]:
    """Split a single CSV line into cleaned field values.

    Raises ``ValueError`` when the line ends inside a quoted field.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char == "," and not in_quotes:
            fields.append(_clean_field("".join(current)))
            current = []
        else:
            current.append(char)

    if in_quotes:
        raise ValueError("unterminated quoted field")

    fields.append(_clean_field("".join(current)))
    return fields


def _clean_field(raw: str) -> str:
    """Trim whitespace and drop one wrapping pair of quotes."""
    value = raw.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


class _CsvAccumulator:
    """Turns lines into records until the optional cap is hit."""

    def __init__(self, max_records: int | None) -> None:
        self.headers: list[str] | None = None
        self.result = ParseResult()
        self._max_records = max_records
        self._line_number = 0

    @property
    def full(self) -> bool:
        return (
            self._max_records is not None
            and len(self.result.records) >= self._max_records
        )

    def feed_line(self, line: str) -> None:
        self._line_number += 1
        stripped = line.strip()
        if not stripped:
            return

        if self.headers is None:
            self.headers = self._parse_header(stripped)
            logger.debug(
                "CSV headers (%d): %s", len(self.headers), self.headers
            )
            return

        try:
            record = self._build_record(self.headers, stripped)
        except RowSkipped as exc:
            self.result.skipped += 1
            logger.warning("Skipping malformed CSV %s", exc)
            return

        record["originalIndex"] = len(self.result.records)
        self.result.records.append(record)

    def finish(self) -> ParseResult:
        if self.headers is None:
            raise ParseError("CSV payload has no header row")
        if not self.result.records:
            raise ParseError(
                "CSV payload must have a header and at least one data row"
            )
        logger.info(
            "Parsed %d CSV records (%d skipped%s)",
            len(self.result.records),
            self.result.skipped,
            ", truncated" if self.result.truncated else "",
        )
        return self.result

    def _parse_header(self, line: str) -> list[str]:
        try:
            names = split_csv_line(line)
        except ValueError as exc:
            raise ParseError(f"Malformed CSV header: {exc}") from exc
        return [name.replace('"', "") for name in names]

    def _build_record(self, headers: list[str], line: str) -> ProductRecord:
        try:
            values = split_csv_line(line)
        except ValueError as exc:
            raise RowSkipped(self._line_number, str(exc)) from exc
        return {
            header: values[idx] if idx < len(values) else ""
            for idx, header in enumerate(headers)
        }


def parse_csv_text(
    text: str,
    max_records: int | None = None,
) -> ParseResult:
    """Parse a fully buffered CSV document."""
    acc = _CsvAccumulator(max_records)
    for line in text.lstrip("\ufeff").split("\n"):
        if acc.full:
            acc.result.truncated = True
            logger.info(
                "Record cap of %d reached, ignoring the rest of the document",
                max_records,
            )
            break
        acc.feed_line(line)
    return acc.finish()


def parse_csv_stream(
    chunks: Iterable[bytes],
    max_records: int = Settings.MAX_RECORDS,
) -> ParseResult:
    """Parse CSV from a byte-chunk stream, stopping at ``max_records``.

    Lines may span chunk boundaries; the partial tail is buffered until
    its newline arrives.  Once the cap is reached no further chunks are
    pulled and the iterator is closed when it supports ``close()``.
    """
    decoder = codecs.getincrementaldecoder("utf-8-sig")(errors="replace")
    acc = _CsvAccumulator(max_records)
    iterator: Iterator[bytes] = iter(chunks)
    pending = ""

    for chunk in iterator:
        pending += decoder.decode(chunk)
        *lines, pending = pending.split("\n")
        for line in lines:
            acc.feed_line(line)
            if acc.full:
                acc.result.truncated = True
                logger.info(
                    "Record cap of %d reached, abandoning remaining stream",
                    max_records,
                )
                _close_iterator(iterator)
                return acc.finish()

    pending += decoder.decode(b"", final=True)
    for line in pending.split("\n"):
        if acc.full:
            acc.result.truncated = True
            break
        acc.feed_line(line)
    return acc.finish()


def _close_iterator(iterator: Iterator[bytes]) -> None:
    """Close a generator-like iterator if it exposes ``close()``."""
    close = getattr(iterator, "close", None)
    if callable(close):
        close()
