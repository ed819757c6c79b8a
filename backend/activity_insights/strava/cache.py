"""
TTL cache in front of the Strava client.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import settings
from .client import TelemetryClient
from .schemas import ActivityCollection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    activities: ActivityCollection
    fetched_at: float

    def is_valid(self, now: float, ttl: float) -> bool:
        return now - self.fetched_at < ttl


class ActivityCache:
    """
    Single-entry cache of the full activity history.

    Every call inside the TTL window returns the same tuple object, so all
    tools in one conversation see one snapshot. Refill happens under a lock;
    concurrent misses wait for the first fetch instead of repeating it.
    """

    def __init__(
        self,
        client: TelemetryClient,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.ttl_seconds = settings.activity_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def get_activities(self) -> ActivityCollection:
        with self._lock:
            entry = self._entry
            if entry is not None and entry.is_valid(self._clock(), self.ttl_seconds):
                return entry.activities

            logger.info("Activity cache miss, fetching from Strava")
            activities = self.client.fetch_all_activities()
            self._entry = CacheEntry(activities=activities, fetched_at=self._clock())
            return activities

    def invalidate(self) -> None:
        with self._lock:
            self._entry = None
