"""Process wide cache of fetched and condensed documents."""

import asyncio
import time
from datetime import UTC, datetime
from typing import Optional

import constants
import metrics
from documents.extractor import ContentExtractor
from documents.fetcher import DocumentFetcher
from log import get_logger
from models.cache_entry import CacheEntry, CacheSnapshot
from models.config import DocumentCacheConfiguration, DocumentSource
from utils.types import Clock

logger = get_logger("cache.document_cache")


class DocumentCache:
    """Cache mapping every category to its raw and condensed text.

    The whole mapping is held in one immutable `CacheSnapshot` that is
    swapped on refresh, so readers see either the old or the new content,
    never a mix. At most one refresh runs at a time; other callers that find
    the cache stale either wait for it (`wait` refresh mode) or get the
    current snapshot (`serve_stale` refresh mode, only if not empty).

    Forced invalidation does not cancel a refresh in progress. Its result is
    published, but the cache stays stale and the next `ensure_fresh()` runs a
    new refresh cycle.
    """

    def __init__(  # pylint: disable=too-many-arguments
        self,
        config: DocumentCacheConfiguration,
        sources: dict[str, list[DocumentSource]],
        fetcher: DocumentFetcher,
        extractor: ContentExtractor,
        clock: Clock = time.monotonic,
    ) -> None:
        """Create a new, empty document cache."""
        self.config = config
        self.sources = {
            category: [source for source in sources.get(category, []) if source.configured]
            for category in constants.CATEGORIES
        }
        self.fetcher = fetcher
        self.extractor = extractor
        self._clock = clock
        self._snapshot = CacheSnapshot()
        self._refreshed_at: Optional[float] = None
        self._generation = 0
        self._refresh_lock = asyncio.Lock()

    def get(self) -> CacheSnapshot:
        """Return current snapshot without triggering refresh."""
        return self._snapshot

    def is_stale(self) -> bool:
        """Check if the cache is empty, invalidated or older than TTL."""
        if self._refreshed_at is None:
            return True
        return self._clock() - self._refreshed_at > self.config.ttl_seconds

    @property
    def refreshing(self) -> bool:
        """Check if a refresh cycle is in progress."""
        return self._refresh_lock.locked()

    def force_invalidate(self) -> None:
        """Make the next `ensure_fresh()` call refetch all documents."""
        self._generation += 1
        self._refreshed_at = None
        logger.info("Document cache invalidated")

    async def ensure_fresh(self) -> CacheSnapshot:
        """Refresh the cache when stale and return the current snapshot."""
        if not self.is_stale():
            return self._snapshot

        if (
            self.config.refresh_mode == constants.REFRESH_MODE_SERVE_STALE
            and self._refresh_lock.locked()
            and not self._snapshot.empty
        ):
            logger.debug("Refresh in progress, serving current snapshot")
            return self._snapshot

        async with self._refresh_lock:
            # the refresh could be done while waiting for the lock
            if self.is_stale():
                await self._refresh()
        return self._snapshot

    async def refresh(self) -> CacheSnapshot:
        """Invalidate the cache and return snapshot fetched after the call.

        Unlike `ensure_fresh()` this always waits for the refresh lock, also
        in `serve_stale` mode. A refresh already in progress is not cancelled;
        because it started before the invalidation, a new cycle follows it.
        """
        self.force_invalidate()
        async with self._refresh_lock:
            if self.is_stale():
                await self._refresh()
        return self._snapshot

    async def _refresh(self) -> None:
        generation = self._generation
        logger.info("Refreshing document cache")
        started = time.perf_counter()

        with metrics.document_cache_refresh_duration_seconds.time():
            entries = await asyncio.gather(
                *(self._load_category(category) for category in constants.CATEGORIES)
            )

        self._snapshot = CacheSnapshot(
            entries={entry.category: entry for entry in entries},
            refreshed_at=datetime.now(UTC),
        )
        metrics.document_cache_refreshes_total.inc()

        if generation == self._generation:
            self._refreshed_at = self._clock()
        else:
            logger.info("Document cache invalidated during refresh, keeping it stale")

        logger.info(
            "Document cache refreshed in %.2f s, categories with content: %s",
            time.perf_counter() - started,
            ", ".join(entry.category for entry in entries if entry.loaded) or "none",
        )

    async def _load_category(self, category: str) -> CacheEntry:
        sources = self.sources[category]
        texts = await asyncio.gather(*(self.fetcher.fetch(source) for source in sources))

        fetched = [(source, text) for source, text in zip(sources, texts) if text]
        condensed = await asyncio.gather(
            *(self.extractor.extract(text, category) for _, text in fetched)
        )

        raw_parts: list[str] = []
        for source, text in fetched:
            if raw_parts:
                raw_parts.append(
                    constants.SOURCE_DELIMITER.format(document_id=source.document_id)
                )
            raw_parts.append(text)

        return CacheEntry(
            category=category,
            raw_text="".join(raw_parts),
            condensed_text="\n\n".join(part for part in condensed if part),
            document_count=len(fetched),
        )

    def configured_document_count(self, category: str) -> int:
        """Return number of configured sources for the category."""
        return len(self.sources.get(category, []))
