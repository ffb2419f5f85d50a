"""
Time-bounded cache of night sky results.

Requests are reduced to a quantized CacheKey so that overlapping snapshot
requests from an interactive client share results. Expiry and capacity
eviction are decided by ExpiryPolicy; NightSkyCacheService owns the map and
the lock that makes each operation atomic.
"""

from dataclasses import dataclass
import datetime
import logging
import threading
from typing import Callable, Iterable

from .types import AtmosphereModel, LevelOfDetail, NightSkyRequest, NightSkyResult

logger = logging.getLogger(__name__)

DEFAULT_TTL = datetime.timedelta(minutes=5)
DEFAULT_CAPACITY = 100


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class CacheKey:
    planet_id: str
    instant_minute: datetime.datetime
    lat: float
    lon: float
    radius_ly: int
    lod: LevelOfDetail
    host_star_id: str
    dataset: str | None
    max_magnitude: float
    max_stars: int
    atmosphere: AtmosphereModel

    @classmethod
    def from_request(cls, request: NightSkyRequest) -> "CacheKey":
        return cls(
            planet_id=request.planet_id,
            instant_minute=request.instant_utc.replace(second=0, microsecond=0),
            lat=round(request.observer_lat_rad, 2),
            lon=round(request.observer_lon_rad, 2),
            radius_ly=int(round(request.radius_ly)),
            lod=request.lod,
            host_star_id=request.host_star_id,
            dataset=request.dataset,
            max_magnitude=request.max_magnitude,
            max_stars=request.max_stars,
            atmosphere=request.atmosphere,
        )


@dataclass(frozen=True)
class CacheEntry:
    result: NightSkyResult
    created_at: datetime.datetime
    expires_at: datetime.datetime

    def is_expired(self, now: datetime.datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    entries: int
    valid_entries: int
    hits: int
    misses: int


class ExpiryPolicy:
    """TTL expiry plus FIFO eviction under capacity pressure."""

    def __init__(self, ttl: datetime.timedelta = DEFAULT_TTL, capacity: int = DEFAULT_CAPACITY):
        if ttl <= datetime.timedelta(0):
            raise ValueError("Cache TTL must be positive")
        if capacity <= 0:
            raise ValueError("Cache capacity must be positive")
        self.ttl = ttl
        self.capacity = capacity

    def new_entry(self, result: NightSkyResult, now: datetime.datetime) -> CacheEntry:
        return CacheEntry(result=result, created_at=now, expires_at=now + self.ttl)

    def expired_keys(self, entries: dict, now: datetime.datetime) -> list:
        return [key for key, entry in entries.items() if entry.is_expired(now)]

    def victims(self, entries: dict, now: datetime.datetime, incoming) -> list:
        """Keys to drop so that ``incoming`` fits."""
        if incoming in entries or len(entries) < self.capacity:
            return []
        doomed = self.expired_keys(entries, now)
        if len(entries) - len(doomed) >= self.capacity:
            remaining = (
                (entry.created_at, i, key)
                for i, (key, entry) in enumerate(entries.items())
                if key not in doomed
            )
            doomed.append(min(remaining)[2])
        return doomed


class NightSkyCacheService:
    def __init__(
        self,
        policy: ExpiryPolicy | None = None,
        clock: Callable[[], datetime.datetime] = _utc_now,
    ):
        self._policy = policy or ExpiryPolicy()
        self._clock = clock
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    @property
    def policy(self) -> ExpiryPolicy:
        return self._policy

    def get(self, request: NightSkyRequest) -> NightSkyResult | None:
        key = CacheKey.from_request(request)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(now):
                del self._entries[key]
                self._misses += 1
                logger.debug("Cache entry expired for planet %s", key.planet_id)
                return None
            self._hits += 1
        logger.debug("Cache hit for planet %s", key.planet_id)
        return entry.result

    def put(self, request: NightSkyRequest, result: NightSkyResult) -> None:
        key = CacheKey.from_request(request)
        now = self._clock()
        with self._lock:
            victims = self._policy.victims(self._entries, now, key)
            self._remove(victims)
            if victims:
                logger.debug("Evicted %d cache entries", len(victims))
            self._entries[key] = self._policy.new_entry(result, now)

    def invalidate(self, planet_id: str) -> int:
        with self._lock:
            keys = [key for key in self._entries if key.planet_id == planet_id]
            self._remove(keys)
        logger.debug("Invalidated %d cache entries for planet %s", len(keys), planet_id)
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            valid = sum(1 for entry in self._entries.values() if not entry.is_expired(now))
            return CacheStats(
                entries=len(self._entries),
                valid_entries=valid,
                hits=self._hits,
                misses=self._misses,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _remove(self, keys: Iterable[CacheKey]) -> None:
        for key in keys:
            self._entries.pop(key, None)
