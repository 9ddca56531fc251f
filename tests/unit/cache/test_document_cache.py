"""Unit tests for DocumentCache class."""

import asyncio
from typing import Any, Optional

import pytest
from pytest_mock import MockerFixture

import constants
from cache.document_cache import DocumentCache
from documents.extractor import ContentExtractor, HeuristicExtractor
from documents.fetcher import DocumentFetcher
from documents.search import search_documents
from models.config import (
    DocumentCacheConfiguration,
    DocumentsConfiguration,
    DocumentSource,
    ExtractionConfiguration,
)

GUIDE = "1. Find a niche\nPick products with 65% margins.\n2. Validate demand"


class FakeClock:  # pylint: disable=too-few-public-methods
    """Monotonic clock controlled by test."""

    def __init__(self) -> None:
        """Start at arbitrary point in time."""
        self.now = 1000.0

    def __call__(self) -> float:
        """Return current time."""
        return self.now


class FakeFetcher(DocumentFetcher):
    """Document store returning texts from dictionary."""

    def __init__(self, texts: dict[str, str]) -> None:
        """Initialize the fake store, fetches are not blocked."""
        super().__init__(DocumentsConfiguration())
        self.texts = texts
        self.calls: list[str] = []
        self.gate: Optional[asyncio.Event] = None

    async def fetch(self, source: DocumentSource) -> str:
        """Return text the store had when called, wait for the gate when set."""
        assert source.document_id is not None
        self.calls.append(source.document_id)
        text = self.texts.get(source.document_id, "")
        if self.gate is not None:
            await self.gate.wait()
        return text


class TaggingExtractor(ContentExtractor):  # pylint: disable=too-few-public-methods
    """Extractor producing condensed text derived from the raw text."""

    async def extract(self, text: str, category: str) -> str:
        """Return tagged text."""
        return f"condensed({category}): {text}"


SOURCES = DocumentsConfiguration(
    sources={
        "financial": ["fin-1", "fin-2"],
        "health": "health-1",
        "purpose": [{"document_id": "purpose-1", "enabled": False}],
    }
).configured_sources()


@pytest.fixture(name="clock")
def clock_fixture() -> FakeClock:
    """Clock controlled by test."""
    return FakeClock()


@pytest.fixture(name="fetcher")
def fetcher_fixture() -> FakeFetcher:
    """Fetcher with one text per configured source."""
    return FakeFetcher(
        {
            "fin-1": "financial one",
            "fin-2": "financial two",
            "health-1": "health one",
            "purpose-1": "never fetched",
        }
    )


def make_cache(
    fetcher: FakeFetcher,
    clock: FakeClock,
    refresh_mode: str = constants.REFRESH_MODE_WAIT,
    extractor: Optional[ContentExtractor] = None,
) -> DocumentCache:
    """Create cache with TTL of 600 seconds."""
    return DocumentCache(
        DocumentCacheConfiguration(ttl_seconds=600, refresh_mode=refresh_mode),
        SOURCES,
        fetcher,
        extractor or TaggingExtractor(),
        clock=clock,
    )


async def let_tasks_run() -> None:
    """Give other tasks chance to reach their next await."""
    for _ in range(5):
        await asyncio.sleep(0)


def test_new_cache_is_empty(fetcher: FakeFetcher, clock: FakeClock) -> None:
    """Test that new cache has empty snapshot and is stale."""
    cache = make_cache(fetcher, clock)
    assert cache.get().empty
    assert cache.is_stale()
    assert not cache.refreshing
    assert not fetcher.calls
    # disabled sources are dropped, all categories are known
    assert set(cache.sources) == set(constants.CATEGORIES)
    assert cache.configured_document_count("financial") == 2
    assert cache.configured_document_count("purpose") == 0


@pytest.mark.asyncio
async def test_ensure_fresh_fetches_all_sources(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test the first refresh cycle."""
    cache = make_cache(fetcher, clock)

    snapshot = await cache.ensure_fresh()

    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]
    assert snapshot is cache.get()
    assert not snapshot.empty
    assert set(snapshot.entries) == set(constants.CATEGORIES)
    assert snapshot.entries["financial"].raw_text == (
        "financial one"
        + constants.SOURCE_DELIMITER.format(document_id="fin-2")
        + "financial two"
    )
    assert snapshot.entries["financial"].document_count == 2
    assert snapshot.entries["health"].condensed_text == (
        "condensed(health): health one"
    )
    assert snapshot.entries["purpose"].loaded is False
    assert not cache.is_stale()


@pytest.mark.asyncio
async def test_no_fetch_within_ttl(fetcher: FakeFetcher, clock: FakeClock) -> None:
    """Test that requests within TTL never touch the document store."""
    cache = make_cache(fetcher, clock)
    first = await cache.ensure_fresh()
    fetcher.calls.clear()

    for elapsed in (1, 300, 600):
        clock.now = 1000.0 + elapsed
        assert await cache.ensure_fresh() is first
    assert not fetcher.calls


@pytest.mark.asyncio
async def test_refresh_after_ttl(fetcher: FakeFetcher, clock: FakeClock) -> None:
    """Test that request after TTL elapsed refetches everything."""
    cache = make_cache(fetcher, clock)
    first = await cache.ensure_fresh()
    fetcher.calls.clear()

    clock.now += 601
    assert cache.is_stale()
    second = await cache.ensure_fresh()

    assert second is not first
    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]


@pytest.mark.asyncio
async def test_single_refresh_for_concurrent_requests(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test that concurrent stale requests share one refresh cycle."""
    cache = make_cache(fetcher, clock)
    fetcher.gate = asyncio.Event()

    tasks = [asyncio.create_task(cache.ensure_fresh()) for _ in range(10)]
    await let_tasks_run()
    assert cache.refreshing
    fetcher.gate.set()
    snapshots = await asyncio.gather(*tasks)

    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]
    assert all(snapshot is snapshots[0] for snapshot in snapshots)
    assert not cache.refreshing


@pytest.mark.asyncio
async def test_readers_never_see_partial_refresh(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test that snapshot is replaced as a whole."""
    cache = make_cache(fetcher, clock)
    old = await cache.ensure_fresh()

    fetcher.texts = {"fin-1": "new one", "fin-2": "new two", "health-1": "new health"}
    fetcher.gate = asyncio.Event()
    clock.now += 601
    task = asyncio.create_task(cache.ensure_fresh())
    await let_tasks_run()

    # refresh is in progress, old content is still fully visible
    assert cache.get() is old
    assert cache.get().entries["health"].raw_text == "health one"

    fetcher.gate.set()
    new = await task
    assert cache.get() is new
    assert new.entries["health"].raw_text == "new health"
    assert new.entries["health"].condensed_text == "condensed(health): new health"
    # old snapshot is not modified
    assert old.entries["health"].raw_text == "health one"


@pytest.mark.asyncio
async def test_failed_source_does_not_corrupt_category(clock: FakeClock) -> None:
    """Test that failed fetch contributes nothing to the category."""
    fetcher = FakeFetcher({"fin-1": "financial one", "health-1": "health one"})
    cache = make_cache(fetcher, clock)

    snapshot = await cache.ensure_fresh()

    entry = snapshot.entries["financial"]
    assert entry.raw_text == "financial one"
    assert entry.document_count == 1
    assert entry.condensed_text == "condensed(financial): financial one"
    assert snapshot.entries["health"].raw_text == "health one"


@pytest.mark.asyncio
async def test_all_sources_failing(clock: FakeClock) -> None:
    """Test that refresh with no reachable document still completes."""
    cache = make_cache(FakeFetcher({}), clock)

    snapshot = await cache.ensure_fresh()

    assert not snapshot.empty
    assert not any(entry.loaded for entry in snapshot.entries.values())
    assert not cache.is_stale()


@pytest.mark.asyncio
async def test_force_invalidate(fetcher: FakeFetcher, clock: FakeClock) -> None:
    """Test that invalidated cache refetches on next request."""
    cache = make_cache(fetcher, clock)
    await cache.ensure_fresh()
    fetcher.calls.clear()

    cache.force_invalidate()
    assert cache.is_stale()
    await cache.ensure_fresh()

    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]
    assert not cache.is_stale()


@pytest.mark.asyncio
async def test_force_invalidate_during_refresh(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test that invalidation does not cancel refresh in progress."""
    cache = make_cache(fetcher, clock)
    fetcher.gate = asyncio.Event()

    task = asyncio.create_task(cache.ensure_fresh())
    await let_tasks_run()
    cache.force_invalidate()
    fetcher.gate.set()
    snapshot = await task

    # result of the refresh is published, but the cache remains stale
    assert snapshot.entries["health"].raw_text == "health one"
    assert cache.get() is snapshot
    assert cache.is_stale()

    fetcher.calls.clear()
    fetcher.gate = None
    await cache.ensure_fresh()
    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]
    assert not cache.is_stale()


@pytest.mark.asyncio
async def test_serve_stale_mode(fetcher: FakeFetcher, clock: FakeClock) -> None:
    """Test that stale snapshot is served while refresh is in progress."""
    cache = make_cache(fetcher, clock, constants.REFRESH_MODE_SERVE_STALE)
    old = await cache.ensure_fresh()

    fetcher.gate = asyncio.Event()
    clock.now += 601
    refresh = asyncio.create_task(cache.ensure_fresh())
    await let_tasks_run()

    assert await cache.ensure_fresh() is old

    fetcher.gate.set()
    new = await refresh
    assert new is not old
    assert await cache.ensure_fresh() is new


@pytest.mark.asyncio
async def test_serve_stale_mode_waits_for_first_refresh(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test that empty cache is never served, even in serve_stale mode."""
    cache = make_cache(fetcher, clock, constants.REFRESH_MODE_SERVE_STALE)
    fetcher.gate = asyncio.Event()

    first = asyncio.create_task(cache.ensure_fresh())
    await let_tasks_run()
    second = asyncio.create_task(cache.ensure_fresh())
    await let_tasks_run()
    assert not second.done()

    fetcher.gate.set()
    snapshots = await asyncio.gather(first, second)
    assert not snapshots[1].empty
    assert snapshots[0] is snapshots[1]


@pytest.mark.asyncio
async def test_financial_guide_scenario(clock: FakeClock) -> None:
    """Test refresh with heuristic extraction and search over the result."""
    text = (
        "1. Find a niche\nPick products with 65% margins.\n\n"
        "Launch plan, step by step:\nStep 1: Find a supplier\nStep 2: Build the store"
    )
    fetcher = FakeFetcher({"fin-1": text, "fin-2": ""})
    cache = make_cache(
        fetcher, clock, extractor=HeuristicExtractor(ExtractionConfiguration())
    )

    snapshot = await cache.ensure_fresh()

    financial = snapshot.entries["financial"]
    assert financial.raw_text == text
    assert financial.condensed_text.startswith("1. Find a niche")

    hits = search_documents(snapshot, "step by step")
    assert len(hits) == 1
    assert hits[0].category == "financial"
    assert "Step 1: Find a supplier\nStep 2: Build the store" in hits[0].matches[0]


@pytest.mark.asyncio
async def test_single_refresh_for_concurrent_requests_after_ttl(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test that concurrent requests after TTL elapsed share one refresh cycle."""
    cache = make_cache(fetcher, clock)
    old = await cache.ensure_fresh()
    fetcher.calls.clear()

    fetcher.texts = {"fin-1": "new one", "fin-2": "new two", "health-1": "new health"}
    fetcher.gate = asyncio.Event()
    clock.now += 601
    tasks = [asyncio.create_task(cache.ensure_fresh()) for _ in range(10)]
    await let_tasks_run()
    assert cache.refreshing
    fetcher.gate.set()
    snapshots = await asyncio.gather(*tasks)

    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]
    assert all(snapshot is snapshots[0] for snapshot in snapshots)
    assert snapshots[0] is not old
    assert snapshots[0].entries["health"].raw_text == "new health"
    assert not cache.is_stale()


@pytest.mark.asyncio
async def test_refresh_waits_in_serve_stale_mode(
    fetcher: FakeFetcher, clock: FakeClock
) -> None:
    """Test that forced refresh never returns snapshot fetched before the call."""
    cache = make_cache(fetcher, clock, constants.REFRESH_MODE_SERVE_STALE)
    await cache.ensure_fresh()

    # refresh started by TTL expiry is in progress
    fetcher.texts = {"health-1": "version 1"}
    fetcher.gate = asyncio.Event()
    clock.now += 601
    in_flight = asyncio.create_task(cache.ensure_fresh())
    await let_tasks_run()

    fetcher.texts = {"health-1": "version 2"}
    forced = asyncio.create_task(cache.refresh())
    await let_tasks_run()
    assert not forced.done()

    fetcher.calls.clear()
    fetcher.gate.set()
    previous = await in_flight
    snapshot = await forced

    assert previous.entries["health"].raw_text == "version 1"

    assert snapshot.entries["health"].raw_text == "version 2"
    assert cache.get() is snapshot
    assert not cache.is_stale()
    # the in-flight cycle was followed by new one
    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]


@pytest.mark.asyncio
async def test_refresh_of_fresh_cache(fetcher: FakeFetcher, clock: FakeClock) -> None:
    """Test that forced refresh refetches documents within TTL."""
    cache = make_cache(fetcher, clock)
    old = await cache.ensure_fresh()
    fetcher.calls.clear()

    new = await cache.refresh()

    assert new is not old
    assert sorted(fetcher.calls) == ["fin-1", "fin-2", "health-1"]
    assert not cache.is_stale()


@pytest.mark.asyncio
async def test_undecodable_source_does_not_abort_refresh(
    mocker: MockerFixture, clock: FakeClock
) -> None:
    """Test that source with invalid bytes contributes nothing to its category."""
    bodies: dict[str, Any] = {
        "https://docs.example.com/fin-1": "1. Find a niche\nbody",
        "https://docs.example.com/fin-2": UnicodeDecodeError(
            "utf-8", b"\xff\xfe\xfa broken", 0, 1, "invalid start byte"
        ),
        "https://docs.example.com/health-1": "health one",
    }

    def get(url: str) -> Any:
        response = mocker.AsyncMock()
        response.raise_for_status = mocker.Mock(return_value=None)
        body = bodies[url]
        if isinstance(body, Exception):
            response.text.side_effect = body
        else:
            response.text.return_value = body
        context = mocker.AsyncMock()
        context.__aenter__.return_value = response
        return context

    session = mocker.AsyncMock()
    session.__aenter__.return_value = session
    session.get = mocker.Mock(side_effect=get)
    mocker.patch("aiohttp.ClientSession", return_value=session)

    fetcher = DocumentFetcher(
        DocumentsConfiguration(url_template="https://docs.example.com/{document_id}")
    )
    cache = DocumentCache(
        DocumentCacheConfiguration(ttl_seconds=600),
        SOURCES,
        fetcher,
        TaggingExtractor(),
        clock=clock,
    )

    snapshot = await cache.ensure_fresh()

    financial = snapshot.entries["financial"]
    assert financial.raw_text == "1. Find a niche\nbody"
    assert financial.document_count == 1
    assert snapshot.entries["health"].raw_text == "health one"
    assert not cache.is_stale()
