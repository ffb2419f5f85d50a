import datetime
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from nightsky.engine import (
    CacheKey,
    ExpiryPolicy,
    LevelOfDetail,
    NightSkyCacheService,
    NightSkyRequest,
    NightSkyResult,
)

UTC = datetime.timezone.utc
T0 = datetime.datetime(2030, 5, 1, 22, 15, 10, tzinfo=UTC)


def _request(planet="p1", instant=T0, **kwargs):
    params = dict(
        planet_id=planet,
        host_star_id="sol",
        instant_utc=instant,
        observer_lat_rad=0.5,
        observer_lon_rad=1.0,
    )
    params.update(kwargs)
    return NightSkyRequest(**params)


def _result(request, count=0):
    return NightSkyResult(
        stars=(),
        host_star=None,
        total_stars_queried=count,
        visible_count=0,
        compute_time=datetime.timedelta(milliseconds=3),
        computed_at=T0,
        request=request,
    )


def test_put_then_get(cache):
    request = _request()
    result = _result(request, count=7)
    cache.put(request, result)
    assert cache.get(request) is result


def test_get_missing_is_none(cache):
    assert cache.get(_request()) is None


def test_entry_expires_after_ttl(cache, clock):
    request = _request()
    cache.put(request, _result(request))
    clock.advance(minutes=4, seconds=59)
    assert cache.get(request) is not None
    clock.advance(seconds=1)
    assert cache.get(request) is None
    assert len(cache) == 0


def test_key_quantization():
    base = CacheKey.from_request(_request())
    assert CacheKey.from_request(_request(instant=T0 + datetime.timedelta(seconds=10))) == base
    assert CacheKey.from_request(_request(observer_lat_rad=0.501)) == base
    assert CacheKey.from_request(_request(radius_ly=100.3)) == base
    assert CacheKey.from_request(_request(instant=T0 + datetime.timedelta(seconds=90))) != base
    assert CacheKey.from_request(_request(observer_lon_rad=1.01)) != base
    assert CacheKey.from_request(_request(radius_ly=101.0)) != base
    assert CacheKey.from_request(_request(max_magnitude=3.0)) != base


def test_key_distinguishes_lod_cutoffs():
    coarse = CacheKey.from_request(_request(lod=LevelOfDetail("custom", 1.0, 5)))
    fine = CacheKey.from_request(_request(lod=LevelOfDetail("custom", 20.0, 50000)))
    assert coarse != fine
    assert CacheKey.from_request(_request(lod=LevelOfDetail("custom", 1.0, 5))) == coarse


def test_capacity_is_never_exceeded(clock):
    cache = NightSkyCacheService(ExpiryPolicy(capacity=5), clock=clock)
    for i in range(6):
        request = _request(planet=f"p{i}")
        cache.put(request, _result(request))
        clock.advance(seconds=1)
        assert len(cache) <= 5
    assert len(cache) == 5


def test_oldest_entry_evicted_under_pressure(clock):
    cache = NightSkyCacheService(ExpiryPolicy(capacity=3), clock=clock)
    requests = [_request(planet=f"p{i}") for i in range(4)]
    for request in requests:
        cache.put(request, _result(request))
        clock.advance(seconds=1)
    assert cache.get(requests[0]) is None
    assert all(cache.get(r) is not None for r in requests[1:])


def test_eviction_is_fifo_not_lru(clock):
    cache = NightSkyCacheService(ExpiryPolicy(capacity=2), clock=clock)
    first, second, third = (_request(planet=f"p{i}") for i in range(3))
    cache.put(first, _result(first))
    clock.advance(seconds=1)
    cache.put(second, _result(second))
    clock.advance(seconds=1)
    # Reading does not refresh the entry.
    assert cache.get(first) is not None
    cache.put(third, _result(third))
    assert cache.get(first) is None
    assert cache.get(second) is not None


def test_expired_entries_purged_before_eviction(clock):
    cache = NightSkyCacheService(
        ExpiryPolicy(ttl=datetime.timedelta(seconds=60), capacity=3), clock=clock
    )
    stale = _request(planet="stale")
    cache.put(stale, _result(stale))
    clock.advance(seconds=50)
    fresh = [_request(planet=f"fresh{i}") for i in range(2)]
    for request in fresh:
        cache.put(request, _result(request))
    clock.advance(seconds=20)
    newcomer = _request(planet="new")
    cache.put(newcomer, _result(newcomer))
    assert len(cache) == 3
    assert all(cache.get(r) is not None for r in fresh + [newcomer])


def test_overwrite_same_key_does_not_evict(clock):
    cache = NightSkyCacheService(ExpiryPolicy(capacity=2), clock=clock)
    a, b = _request(planet="a"), _request(planet="b")
    cache.put(a, _result(a))
    cache.put(b, _result(b))
    replacement = _result(a, count=99)
    cache.put(a, replacement)
    assert cache.get(a) is replacement
    assert cache.get(b) is not None


def test_invalidate_only_matching_planet(cache):
    requests = [_request(planet="p1"), _request(planet="p1", observer_lat_rad=-0.3), _request(planet="p2")]
    for request in requests:
        cache.put(request, _result(request))
    assert cache.invalidate("p1") == 2
    assert cache.get(requests[0]) is None
    assert cache.get(requests[1]) is None
    assert cache.get(requests[2]) is not None


def test_clear_and_stats(cache, clock):
    request = _request()
    cache.get(request)
    cache.put(request, _result(request))
    cache.get(request)
    other = _request(planet="p9")
    cache.put(other, _result(other))
    stats = cache.stats()
    assert (stats.entries, stats.valid_entries, stats.hits, stats.misses) == (2, 2, 1, 1)

    clock.advance(minutes=6)
    assert cache.stats().valid_entries == 0
    cache.clear()
    stats = cache.stats()
    assert (stats.entries, stats.hits, stats.misses) == (0, 0, 0)


def test_policy_validation():
    with pytest.raises(ValueError):
        ExpiryPolicy(ttl=datetime.timedelta(0))
    with pytest.raises(ValueError):
        ExpiryPolicy(capacity=0)


def test_concurrent_access_stays_consistent(clock):
    cache = NightSkyCacheService(ExpiryPolicy(capacity=10), clock=clock)
    errors = []
    lock = threading.Lock()

    def worker(n):
        try:
            for i in range(200):
                request = _request(planet=f"p{(n + i) % 25}")
                cache.put(request, _result(request))
                cache.get(request)
                if i % 50 == 0:
                    cache.invalidate(f"p{n}")
                assert len(cache) <= 10
        except Exception as e:  # collected for the main thread
            with lock:
                errors.append(e)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(worker, range(8)))
    assert errors == []
    assert len(cache) <= 10
    assert cache.stats().entries == len(cache)
