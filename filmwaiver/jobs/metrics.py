"""Counters for cache reads and refreshes."""
import time
import logging
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class CacheMetrics:
    """Track cache hits, misses and refresh outcomes."""

    def __init__(self):
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)
        self.last_error: str | None = None

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    def record_failure(self, error: str) -> None:
        self.increment("refresh_failed")
        self.last_error = error

    def hit_ratio(self) -> float:
        hits = self.counters.get("hits", 0)
        reads = hits + self.counters.get("misses", 0)
        return hits / reads if reads else 0.0

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "hits": self.counters.get("hits", 0),
            "misses": self.counters.get("misses", 0),
            "refresh_ok": self.counters.get("refresh_ok", 0),
            "refresh_failed": self.counters.get("refresh_failed", 0),
            "hit_ratio": round(self.hit_ratio(), 3),
            "last_error": self.last_error,
            "uptime_seconds": round(time.time() - self.start_time, 1),
        }
