"""Single-slot TTL cache for the current discount set."""
import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Protocol, Sequence

from filmwaiver.config import config
from filmwaiver.jobs.metrics import CacheMetrics
from filmwaiver.parse.models import DiscountRecord

logger = logging.getLogger(__name__)


class Loader(Protocol):
    """Produces a fresh record set; raises on failure."""

    source_tag: str

    def __call__(self) -> Awaitable[Sequence[DiscountRecord]]: ...


@dataclass(frozen=True)
class Snapshot:
    records: tuple[DiscountRecord, ...]
    created_at: float


@dataclass
class CacheRead:
    """What one cache read served.

    source is "cache" for a fresh hit, the loader's tag after a successful
    refresh, "stale" when a refresh failed but older data exists, and "none"
    when a refresh failed with nothing cached.
    """

    records: list[DiscountRecord]
    source: str
    age_seconds: Optional[float] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.source == "none"


class DiscountCache:
    """
    Holds at most one record set and its creation time.

    Reads within ttl_seconds return the cached set; older reads call the
    loader and replace the set on success. Loader failures are absorbed:
    the previous set (possibly none) is served with the error attached.

    There is no lock. Two requests missing at the same time each call the
    loader, unless single_flight is enabled, in which case they share one
    in-flight load.
    """

    def __init__(
        self,
        loader: Loader,
        ttl_seconds: Optional[float] = None,
        single_flight: Optional[bool] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.loader = loader
        self.ttl_seconds = config.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self.single_flight = config.SINGLE_FLIGHT if single_flight is None else single_flight
        self.clock = clock
        self.metrics = CacheMetrics()
        self._snapshot: Optional[Snapshot] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def source_tag(self) -> str:
        return getattr(self.loader, "source_tag", "live_scrape")

    def age_seconds(self) -> Optional[float]:
        if self._snapshot is None:
            return None
        return self.clock() - self._snapshot.created_at

    def size(self) -> int:
        return len(self._snapshot.records) if self._snapshot else 0

    def is_fresh(self) -> bool:
        age = self.age_seconds()
        return age is not None and age < self.ttl_seconds

    def invalidate(self) -> None:
        """Forget the cached set; the next read refreshes."""
        self._snapshot = None

    async def get(self) -> CacheRead:
        """Return the cached set if fresh, otherwise refresh it."""
        if self.is_fresh():
            self.metrics.increment("hits")
            return CacheRead(list(self._snapshot.records), "cache", self.age_seconds())

        self.metrics.increment("misses")
        try:
            records = await self._load()
        except Exception as e:
            error = str(e) or e.__class__.__name__
            self.metrics.record_failure(error)
            if self._snapshot is None:
                logger.error(f"Refresh failed with nothing cached: {error}")
                return CacheRead([], "none", None, error)
            logger.warning(f"Refresh failed, serving {self.size()} stale records: {error}")
            return CacheRead(list(self._snapshot.records), "stale", self.age_seconds(), error)

        self._snapshot = Snapshot(tuple(records), self.clock())
        self.metrics.increment("refresh_ok")
        logger.info(f"Cache refreshed with {len(records)} records from {self.source_tag}")
        return CacheRead(list(records), self.source_tag, 0.0)

    async def _load(self) -> Sequence[DiscountRecord]:
        if not self.single_flight:
            return await self.loader()

        task = self._inflight
        if task is None:
            task = self._inflight = asyncio.ensure_future(self.loader())
            task.add_done_callback(self._clear_inflight)
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
