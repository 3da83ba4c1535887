# src/services/health_checker.py

"""Catalog source connectivity health checker."""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

from curl_cffi import requests as curl_requests

from src.config.settings import Settings
from src.sources.http_source import (
    CatalogSource,
    configured_sources,
    is_html,
)

logger = logging.getLogger("storefront.health")

_HEALTH_TIMEOUT = 10  # seconds per source
_PREVIEW_CHARS = 200


@dataclass
class HealthResult:
    """Result of a single source health check."""

    source_id: str
    label: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str
    status_code: int | None = None
    content_type: str = ""
    content_length: int = 0
    preview: str = ""
    is_html: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.source_id,
            "label": self.label,
            "status": self.status,
            "latencyMs": round(self.latency_ms, 1),
            "message": self.message,
            "statusCode": self.status_code,
            "contentType": self.content_type,
            "contentLength": self.content_length,
            "contentPreview": self.preview,
            "isHTML": self.is_html,
        }


def check_source(
    source: CatalogSource,
    session: Any | None = None,
) -> HealthResult:
    """Fetch a source once and classify what came back."""
    session = session or curl_requests.Session(
        impersonate=Settings.IMPERSONATE_BROWSER
    )
    headers = (
        Settings.CSV_HEADERS if source.format == "csv"
        else Settings.JSON_HEADERS
    )

    start = time.monotonic()
    try:
        resp = session.get(
            source.url,
            headers=headers,
            timeout=_HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        return HealthResult(
            source_id=source.id,
            label=source.label,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )

    body: bytes = resp.content or b""
    result = HealthResult(
        source_id=source.id,
        label=source.label,
        status="ok",
        latency_ms=elapsed_ms,
        message="",
        status_code=resp.status_code,
        content_type=resp.headers.get("content-type", ""),
        content_length=len(body),
        preview=body[:_PREVIEW_CHARS * 4].decode("utf-8", "replace")[
            :_PREVIEW_CHARS
        ],
        is_html=is_html(body),
    )

    if not 200 <= resp.status_code < 300:
        result.status = "down"
        result.message = f"HTTP {resp.status_code}"
    elif result.is_html:
        result.status = "down"
        result.message = "HTML instead of data"
    elif not body.strip():
        result.status = "down"
        result.message = "Empty body"
    elif elapsed_ms > 5000:
        result.status = "slow"
        result.message = "High latency"

    return result


class HealthChecker:
    """Runs concurrent health checks against all sources."""

    def __init__(self, sources: list[CatalogSource] | None = None) -> None:
        self.sources = (
            sources if sources is not None else configured_sources()
        )

    async def check_all(self) -> list[HealthResult]:
        """Check every configured source concurrently."""
        tasks = [
            asyncio.to_thread(check_source, src)
            for src in self.sources
        ]
        results: list[HealthResult] = list(
            await asyncio.gather(*tasks)
        )
        for r in results:
            logger.info(
                "Health check %s: %s (%.0fms) %s",
                r.source_id,
                r.status,
                r.latency_ms,
                r.message,
            )
        return results
