# src/services/catalog_service.py

"""Runs the resolve → normalize → publish pipeline behind the cache."""

import asyncio
import logging
from datetime import datetime, timezone

from src.filters.deduplicator import CatalogDeduplicator
from src.models.product import NormalizedProduct
from src.normalize.normalizer import normalize_all
from src.sources.resolver import SourceResolver
from src.storage.catalog_cache import CacheEntry, CatalogCache, now_ms

logger = logging.getLogger("storefront.catalog")


class CatalogService:
    """Owns a cache and a resolver and serves catalog snapshots.

    There is no lock around cache population: concurrent misses each
    run the pipeline and the last one to finish wins the slot.
    """

    def __init__(
        self,
        cache: CatalogCache | None = None,
        resolver: SourceResolver | None = None,
    ) -> None:
        self.cache = cache or CatalogCache()
        self.resolver = resolver or SourceResolver()

    def snapshot(self) -> CacheEntry:
        """Return the cached snapshot, fetching a new one on a miss."""
        cached = self.cache.get()
        if cached is not None:
            logger.info(
                "Using cached catalog: %d products from %s",
                len(cached.products),
                cached.source_label,
            )
            return cached

        entry = self._run_pipeline()
        self.cache.set(entry)
        return entry

    def get_or_fetch(self) -> list[NormalizedProduct]:
        """Products of the current snapshot, in source order."""
        return list(self.snapshot().products)

    async def snapshot_async(self) -> CacheEntry:
        """``snapshot()`` on a worker thread, for the event loop."""
        return await asyncio.to_thread(self.snapshot)

    def refresh(self) -> CacheEntry:
        """Drop the cached snapshot and fetch a new one."""
        self.cache.clear()
        return self.snapshot()

    def _run_pipeline(self) -> CacheEntry:
        resolved = self.resolver.resolve()
        fetched_at = datetime.now(timezone.utc).isoformat()

        products = normalize_all(
            resolved.records,
            data_source=resolved.source_label,
            fetched_at=fetched_at,
        )
        products, renamed = CatalogDeduplicator.ensure_unique_ids(products)

        logger.info(
            "Catalog pipeline finished: %d products from %s "
            "(%d ids renamed%s)",
            len(products),
            resolved.source_label,
            renamed,
            ", truncated" if resolved.truncated else "",
        )
        if resolved.last_error_detail:
            logger.warning("Source errors: %s", resolved.last_error_detail)

        return CacheEntry(
            products=tuple(products),
            fetched_at_ms=now_ms(),
            source_label=resolved.source_label,
            last_error_detail=resolved.last_error_detail,
            truncated=resolved.truncated,
            attempts=tuple(resolved.attempts),
        )
