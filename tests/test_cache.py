"""Tests for the TTL discount cache and its loaders."""
import asyncio

import pytest

from filmwaiver.jobs.loaders import ScrapeLoader, StaticLoader, build_loader
from filmwaiver.parse.models import DiscountRecord, ExtractionError
from filmwaiver.store.cache import DiscountCache

FIRST = [DiscountRecord(festival_name="Sundance Film Festival", code="SUNDANCE25")]
SECOND = [DiscountRecord(festival_name="Tribeca Festival", code="TRIBECA20")]


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeLoader:
    """Returns (or raises) queued results; the last one repeats."""

    source_tag = "live_scrape"

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


class GatedLoader:
    """Blocks until the gate opens, to hold several reads in flight."""

    source_tag = "live_scrape"

    def __init__(self, gate):
        self.gate = gate
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        await self.gate.wait()
        return FIRST


class FakeClient:
    def __init__(self, html):
        self.html = html

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def fetch_text(self, url):
        return self.html


def test_first_read_refreshes_then_serves_cache():
    """Test freshness: a read inside the window returns the same data."""
    clock = FakeClock()
    loader = FakeLoader(FIRST)
    cache = DiscountCache(loader, ttl_seconds=300, clock=clock)

    first = asyncio.run(cache.get())
    clock.now += 299
    second = asyncio.run(cache.get())

    assert first.source == "live_scrape"
    assert second.source == "cache"
    assert second.records == first.records == FIRST
    assert [r.model_dump_json() for r in second.records] == [r.model_dump_json() for r in first.records]
    assert loader.calls == 1
    assert second.age_seconds == pytest.approx(299)


def test_expired_read_triggers_new_extraction():
    """Test that reads at or past the TTL refresh."""
    clock = FakeClock()
    loader = FakeLoader(FIRST, SECOND)
    cache = DiscountCache(loader, ttl_seconds=300, clock=clock)

    asyncio.run(cache.get())
    clock.now += 300
    read = asyncio.run(cache.get())

    assert loader.calls == 2
    assert read.records == SECOND
    assert read.source == "live_scrape"


def test_stale_on_error():
    """Test that a failed refresh serves the previous set with the error."""
    clock = FakeClock()
    loader = FakeLoader(FIRST, RuntimeError("connection reset"))
    cache = DiscountCache(loader, ttl_seconds=300, clock=clock)

    asyncio.run(cache.get())
    clock.now += 301
    read = asyncio.run(cache.get())

    assert read.source == "stale"
    assert read.records == FIRST
    assert read.error == "connection reset"
    assert read.failed is False

    # The timestamp was not touched, so the next read tries again
    asyncio.run(cache.get())
    assert loader.calls == 3


def test_error_with_nothing_cached():
    """Test a failed first refresh."""
    cache = DiscountCache(FakeLoader(ExtractionError("no records")), ttl_seconds=300)
    read = asyncio.run(cache.get())

    assert read.failed is True
    assert read.records == []
    assert read.error == "no records"
    assert cache.size() == 0
    assert cache.age_seconds() is None


def _concurrent_reads(single_flight):
    async def scenario():
        gate = asyncio.Event()
        loader = GatedLoader(gate)
        cache = DiscountCache(loader, ttl_seconds=300, single_flight=single_flight)
        reads = [asyncio.ensure_future(cache.get()) for _ in range(2)]
        for _ in range(3):
            await asyncio.sleep(0)
        gate.set()
        return await asyncio.gather(*reads), loader.calls

    return asyncio.run(scenario())


def test_concurrent_misses_each_fetch():
    """Test the documented race: every missing read calls the loader."""
    reads, calls = _concurrent_reads(single_flight=False)
    assert calls == 2
    assert all(read.records == FIRST for read in reads)


def test_single_flight_shares_one_fetch():
    """Test that single-flight mode collapses concurrent misses."""
    reads, calls = _concurrent_reads(single_flight=True)
    assert calls == 1
    assert all(read.records == FIRST for read in reads)


def test_invalidate_and_metrics():
    """Test invalidation and hit/miss counters."""
    loader = FakeLoader(FIRST)
    cache = DiscountCache(loader, ttl_seconds=300)

    asyncio.run(cache.get())
    asyncio.run(cache.get())
    cache.invalidate()
    asyncio.run(cache.get())

    summary = cache.metrics.get_summary()
    assert loader.calls == 2
    assert summary["hits"] == 1
    assert summary["misses"] == 2
    assert summary["refresh_ok"] == 2


def test_static_loader_through_cache():
    """Test fixture provenance."""
    cache = DiscountCache(StaticLoader(), ttl_seconds=300)
    read = asyncio.run(cache.get())

    assert read.source == "fixture"
    assert len(read.records) == 10
    assert all(r.source == "fixture" for r in read.records)


def test_scrape_loader_parses_fetched_page():
    """Test fetch + extraction with a fake HTTP client."""
    html = """
    <div class="festival-card"><h3>Sundance Film Festival</h3>
    <span class="code">SUNDANCE25</span><p class="offer">25% OFF submission fees</p></div>
    """
    loader = ScrapeLoader(
        url="https://filmfreeway.com/festivals/discounts",
        base_url="https://filmfreeway.com",
        client_factory=lambda: FakeClient(html),
    )
    records = asyncio.run(loader())
    assert [r.code for r in records] == ["SUNDANCE25"]


def test_scrape_loader_raises_on_empty_page():
    """Test that a page without records is an extraction failure."""
    loader = ScrapeLoader(client_factory=lambda: FakeClient("<html><body></body></html>"))
    with pytest.raises(ExtractionError):
        asyncio.run(loader())


def test_build_loader():
    """Test loader selection from the data source name."""
    assert isinstance(build_loader("static"), StaticLoader)
    assert isinstance(build_loader("scrape"), ScrapeLoader)
    with pytest.raises(ValueError):
        build_loader("ftp")
