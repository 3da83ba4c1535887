# src/storage/catalog_cache.py

"""Single-slot, time-boxed in-memory cache for the catalog snapshot."""

import logging
import time
from dataclasses import dataclass

from src.config.settings import Settings
from src.models.product import NormalizedProduct
from src.sources.resolver import SourceAttempt

logger = logging.getLogger("storefront.cache")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class CacheEntry:
    """One published catalog snapshot and how it was obtained."""

    products: tuple[NormalizedProduct, ...]
    fetched_at_ms: int
    source_label: str
    last_error_detail: str | None = None
    truncated: bool = False
    attempts: tuple[SourceAttempt, ...] = ()


class CatalogCache:
    """Holds at most one :class:`CacheEntry`.

    Entries are replaced wholesale and never mutated, so a reader
    always sees one complete snapshot.  Expiry is lazy: a stale entry
    is dropped by the first ``get()`` after its TTL elapses.
    """

    def __init__(self, ttl: float | None = None) -> None:
        self._entry: CacheEntry | None = None
        self._ttl: float = (
            Settings.CATALOG_CACHE_TTL if ttl is None else ttl
        )

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self) -> CacheEntry | None:
        """Return the fresh entry, or ``None`` when empty or expired."""
        entry = self._entry
        if entry is None:
            return None
        if self.is_expired(entry):
            logger.debug(
                "Catalog cache expired (age %dms)", self.age_ms(entry)
            )
            # Another caller may already have published a newer entry
            if self._entry is entry:
                self._entry = None
            return None
        return entry

    def peek(self) -> CacheEntry | None:
        """Return the current entry without checking expiry."""
        return self._entry

    def set(self, entry: CacheEntry) -> None:
        """Publish a new snapshot, replacing any previous one."""
        self._entry = entry
        logger.info(
            "Cached %d products from %s",
            len(entry.products),
            entry.source_label,
        )

    def is_expired(
        self,
        entry: CacheEntry,
        now: int | None = None,
    ) -> bool:
        """True once ``entry`` is at least TTL old."""
        return self.age_ms(entry, now) >= self._ttl * 1000

    def age_ms(self, entry: CacheEntry, now: int | None = None) -> int:
        """Milliseconds since ``entry`` was fetched."""
        return (now_ms() if now is None else now) - entry.fetched_at_ms

    def clear(self) -> int:
        """Drop the cached entry; returns the number removed (0 or 1)."""
        count = 0 if self._entry is None else 1
        self._entry = None
        logger.info("Catalog cache purged (%d entries removed)", count)
        return count
