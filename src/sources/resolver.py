# src/sources/resolver.py

"""Ordered fallback chain over the configured catalog sources."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Protocol

from src.config.settings import Settings
from src.models.errors import CatalogError
from src.models.product import ProductRecord
from src.parsers.csv_parser import ParseResult
from src.sources.http_source import (
    CatalogSource,
    HttpSourceFetcher,
    configured_sources,
)
from src.sources.sample_data import sample_records

logger = logging.getLogger("storefront.sources")


class ResolverState(Enum):
    """Where the resolver is in the fallback chain."""

    IDLE = auto()
    TRYING_SOURCE = auto()
    SUCCEEDED = auto()
    EXHAUSTED_FALLBACK = auto()


class SourceFetcher(Protocol):
    def fetch(
        self,
        source: CatalogSource,
        timeout: float,
        max_records: int = ...,
    ) -> ParseResult: ...


@dataclass
class SourceAttempt:
    """Outcome of trying a single source."""

    source_id: str
    label: str
    ok: bool
    error: str | None = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.source_id,
            "label": self.label,
            "ok": self.ok,
            "error": self.error,
            "elapsedMs": round(self.elapsed_ms, 1),
        }


@dataclass
class ResolvedPayload:
    """Records from the first source that worked (or the sample data)."""

    records: list[ProductRecord]
    source_label: str
    last_error_detail: str | None = None
    truncated: bool = False
    attempts: list[SourceAttempt] = field(default_factory=list)


class SourceResolver:
    """Try each source once, in order, until one yields records.

    State moves ``IDLE`` → ``TRYING_SOURCE`` (once per candidate) →
    ``SUCCEEDED`` or ``EXHAUSTED_FALLBACK``.  Every attempt is bounded
    by the per-attempt timeout and by what remains of the total
    budget; once the budget is spent the remaining candidates are
    skipped.  Exhaustion yields the embedded sample catalog, so
    ``resolve()`` only raises for programming errors.
    """

    def __init__(
        self,
        sources: list[CatalogSource] | None = None,
        fetcher: SourceFetcher | None = None,
        attempt_timeout: float = Settings.SOURCE_ATTEMPT_TIMEOUT,
        total_budget: float = Settings.SOURCE_TOTAL_BUDGET,
        max_records: int = Settings.MAX_RECORDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sources = (
            sources if sources is not None else configured_sources()
        )
        self.fetcher: SourceFetcher = fetcher or HttpSourceFetcher()
        self.attempt_timeout = attempt_timeout
        self.total_budget = total_budget
        self.max_records = max_records
        self._clock = clock
        self.state = ResolverState.IDLE
        self.current_index: int | None = None

    @property
    def current_source(self) -> CatalogSource | None:
        """The candidate being tried, or the one that last succeeded."""
        if self.current_index is None:
            return None
        return self.sources[self.current_index]

    def resolve(self) -> ResolvedPayload:
        """Walk the chain and return the first successful payload."""
        self.state = ResolverState.IDLE
        self.current_index = None
        started = self._clock()
        attempts: list[SourceAttempt] = []
        failures: list[str] = []

        for idx, source in enumerate(self.sources):
            remaining = self.total_budget - (self._clock() - started)
            if remaining <= 0:
                logger.warning(
                    "Fetch budget of %.1fs exhausted before %s",
                    self.total_budget,
                    source.label,
                )
                failures.append(
                    f"{source.label}: skipped, fetch budget exhausted"
                )
                break

            self.state = ResolverState.TRYING_SOURCE
            self.current_index = idx
            attempt_started = self._clock()
            try:
                result = self.fetcher.fetch(
                    source,
                    timeout=min(self.attempt_timeout, remaining),
                    max_records=self.max_records,
                )
            except CatalogError as exc:
                elapsed = (self._clock() - attempt_started) * 1000
                logger.warning(
                    "[%s] Source failed (%s): %s",
                    source.label,
                    type(exc).__name__,
                    exc,
                )
                failures.append(f"{source.label}: {exc}")
                attempts.append(
                    SourceAttempt(
                        source.id, source.label, False, str(exc), elapsed
                    )
                )
                continue

            elapsed = (self._clock() - attempt_started) * 1000
            attempts.append(
                SourceAttempt(source.id, source.label, True, None, elapsed)
            )
            self.state = ResolverState.SUCCEEDED
            logger.info(
                "Loaded %d records from %s%s",
                len(result.records),
                source.label,
                " (record cap reached)" if result.truncated else "",
            )
            return ResolvedPayload(
                records=result.records,
                source_label=source.label,
                last_error_detail=(
                    "Earlier sources failed: " + "; ".join(failures)
                    if failures
                    else None
                ),
                truncated=result.truncated,
                attempts=attempts,
            )

        self.state = ResolverState.EXHAUSTED_FALLBACK
        primary = failures[0] if failures else "no sources configured"
        logger.error(
            "All %d sources failed, serving sample data", len(self.sources)
        )
        return ResolvedPayload(
            records=sample_records(),
            source_label=Settings.SAMPLE_DATA_LABEL,
            last_error_detail=(
                f"All sources failed. Primary error: {primary}. "
                "Using sample data."
            ),
            attempts=attempts,
        )
