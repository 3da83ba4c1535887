# src/sources/http_source.py

"""Fetch and parse one remote catalog source over HTTP."""

import itertools
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.models.errors import InvalidPayload, TransportFailure
from src.parsers.csv_parser import ParseResult, parse_csv_stream
from src.parsers.json_parser import parse_json

_UTF8_BOM = b"\xef\xbb\xbf"
_HTML_MARKERS = (b"<!doctype", b"<html")
_MARKER_LEN = max(len(m) for m in _HTML_MARKERS)


@dataclass(frozen=True)
class CatalogSource:
    """One candidate location of the product catalog."""

    id: str
    label: str
    url: str
    format: str = "json"  # "csv" or "json"

    @classmethod
    def from_config(cls, config: dict[str, str]) -> "CatalogSource":
        """Build a source from a ``Settings.CATALOG_SOURCES`` entry."""
        return cls(
            id=config["id"],
            label=config["label"],
            url=config["url"],
            format=config.get("format", "json"),
        )


def configured_sources() -> list[CatalogSource]:
    """All sources from settings, in fallback order."""
    return [CatalogSource.from_config(c) for c in Settings.CATALOG_SOURCES]


def is_html(head: bytes) -> bool:
    """True when a payload begins like an HTML document."""
    stripped = head.lstrip().removeprefix(_UTF8_BOM).lstrip()
    return stripped[:_MARKER_LEN].lower().startswith(_HTML_MARKERS)


def _html_title(markup: bytes) -> str:
    """Extract ``<title>`` text from an HTML error page, if any."""
    soup = BeautifulSoup(markup, "lxml")
    if soup.title is None:
        return ""
    return soup.title.get_text(strip=True)


class HttpSourceFetcher:
    """Streams a source over curl_cffi and hands it to the right parser.

    Raises ``TransportFailure`` for network errors and non-2xx statuses,
    ``InvalidPayload`` for HTML or empty bodies and ``ParseError`` when
    the body yields no rows.
    """

    def __init__(self, session: Any | None = None) -> None:
        self.logger = logging.getLogger("storefront.sources")
        self.settings = Settings()
        self.session = session or curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )

    def _headers(self, source: CatalogSource) -> dict[str, str]:
        if source.format == "csv":
            return dict(self.settings.CSV_HEADERS)
        return dict(self.settings.JSON_HEADERS)

    def fetch(
        self,
        source: CatalogSource,
        timeout: float,
        max_records: int = Settings.MAX_RECORDS,
    ) -> ParseResult:
        """Download ``source`` and parse it, bounded by ``max_records``."""
        self.logger.info(
            "[%s] Requesting %s (timeout %.1fs)",
            source.label,
            source.url,
            timeout,
        )
        try:
            resp = self.session.get(
                source.url,
                headers=self._headers(source),
                timeout=timeout,
                stream=True,
                allow_redirects=True,
            )
        except Exception as exc:
            raise TransportFailure(
                f"{type(exc).__name__}: {exc}"
            ) from exc

        try:
            self.logger.info(
                "[%s] HTTP %d, content-type=%s",
                source.label,
                resp.status_code,
                resp.headers.get("content-type", "unknown"),
            )
            if not 200 <= resp.status_code < 300:
                raise TransportFailure(f"HTTP {resp.status_code}")

            body = self._checked_body(source, self._chunks(resp))
            if source.format == "csv":
                return parse_csv_stream(body, max_records)
            return parse_json(b"".join(body), max_records)
        finally:
            resp.close()

    def _chunks(self, resp: Any) -> Iterator[bytes]:
        """Yield body chunks, mapping mid-stream errors to transport failures."""
        try:
            yield from resp.iter_content(
                chunk_size=self.settings.STREAM_CHUNK_SIZE
            )
        except Exception as exc:
            raise TransportFailure(
                f"Stream interrupted: {type(exc).__name__}: {exc}"
            ) from exc

    def _checked_body(
        self,
        source: CatalogSource,
        chunks: Iterator[bytes],
    ) -> Iterator[bytes]:
        """Reject empty and HTML bodies before any parsing happens.

        Reads just enough of the stream to decide, then returns an
        iterator that replays the inspected head followed by the rest.
        """
        head = b""
        for chunk in chunks:
            head += chunk
            if len(head.lstrip().removeprefix(_UTF8_BOM).lstrip()) >= _MARKER_LEN:
                break

        if not head.strip().removeprefix(_UTF8_BOM).strip():
            raise InvalidPayload("Empty response received")

        if is_html(head):
            for chunk in chunks:
                if len(head) >= self.settings.HTML_PEEK_LIMIT:
                    break
                head += chunk
            title = _html_title(head)
            self.logger.warning(
                "[%s] Received HTML instead of %s (title: %r)",
                source.label,
                source.format.upper(),
                title,
            )
            detail = f"Received HTML instead of {source.format.upper()}"
            if title:
                detail += f" ({title})"
            raise InvalidPayload(detail)

        return itertools.chain([head], chunks)
