import dataclasses
import datetime
import logging
import time
from typing import Callable

from .cache import CacheStats, ExpiryPolicy, NightSkyCacheService
from .ephemeris import EphemerisService
from .photometry import PhotometryService
from .query import StarQueryService
from .timescale import TimeContext, TimeService
from .transform import SkyTransformService
from .types import (
    EnuFrame,
    NightSkyRequest,
    NightSkyResult,
    SkyStarPoint,
    StarRenderRow,
    Vector3,
)

logger = logging.getLogger(__name__)


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class NightSkyService:
    def __init__(
        self,
        ephemeris: EphemerisService,
        star_query: StarQueryService,
        cache: NightSkyCacheService | None = None,
        transform: SkyTransformService | None = None,
        photometry: PhotometryService | None = None,
        clock: Callable[[], datetime.datetime] = _utc_now,
    ):
        self._ephemeris = ephemeris
        self._stars = star_query
        self._cache = cache if cache is not None else NightSkyCacheService()
        self._transform = transform if transform is not None else SkyTransformService()
        self._photometry = photometry if photometry is not None else PhotometryService()
        self._clock = clock

    def compute_night_sky(self, request: NightSkyRequest) -> NightSkyResult:
        cached = self._cache.get(request)
        if cached is not None:
            logger.info("Returning cached sky for planet %s", request.planet_id)
            return dataclasses.replace(cached, from_cache=True)

        started = time.perf_counter()
        logger.info(
            "Computing night sky for planet %s at %s",
            request.planet_id,
            request.instant_utc.isoformat(),
        )

        attitude = self._ephemeris.attitude_at(
            request.planet_id, request.host_star_id, request.instant_utc
        )
        observer_pos = attitude.position_ly
        enu = self._ephemeris.enu_frame(
            attitude, request.observer_lat_rad, request.observer_lon_rad
        )

        candidates = [
            star
            for star in self._stars.query_candidates(
                observer_pos, request.radius_ly, request.dataset, request.lod
            )
            if star.star_id != request.host_star_id
        ]
        logger.debug("Queried %d candidate stars", len(candidates))

        visible: list[SkyStarPoint] = []
        for star in candidates:
            point = self._sky_point(star, observer_pos, enu, request)
            if point is None:
                continue
            if point.apparent_mag > request.max_magnitude:
                continue
            visible.append(point)

        visible.sort(key=lambda p: (p.apparent_mag, p.star_id))
        visible = visible[: request.max_stars]

        host = self._stars.get_host_star(request.host_star_id)
        host_point = None
        if host is not None:
            host_point = self._sky_point(host, observer_pos, enu, request, require_visible=False)

        compute_time = datetime.timedelta(seconds=time.perf_counter() - started)
        result = NightSkyResult(
            stars=visible,
            host_star=host_point,
            total_stars_queried=len(candidates),
            visible_count=len(visible),
            compute_time=compute_time,
            computed_at=self._clock(),
            from_cache=False,
            request=request,
            ephemeris_converged=attitude.kepler_converged,
        )
        self._cache.put(request, result)

        logger.info(
            "Computed night sky: %d visible stars in %.1fms",
            len(visible),
            compute_time.total_seconds() * 1000.0,
        )
        return result

    def is_night_time(self, request: NightSkyRequest) -> bool:
        attitude = self._ephemeris.attitude_at(
            request.planet_id, request.host_star_id, request.instant_utc
        )
        host = self._stars.get_host_star(request.host_star_id)
        if host is None:
            return True
        enu = self._ephemeris.enu_frame(
            attitude, request.observer_lat_rad, request.observer_lon_rad
        )
        _, alt, _ = self._transform.world_to_horizontal(host, attitude.position_ly, enu)
        return not self._transform.is_above_horizon(alt)

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def clear_cache(self) -> None:
        self._cache.clear()

    def invalidate_planet(self, planet_id: str) -> int:
        return self._cache.invalidate(planet_id)

    def _sky_point(
        self,
        star: StarRenderRow,
        observer_pos: Vector3,
        enu: EnuFrame,
        request: NightSkyRequest,
        require_visible: bool = True,
    ) -> SkyStarPoint | None:
        az, alt, distance = self._transform.world_to_horizontal(star, observer_pos, enu)
        if require_visible and not self._transform.is_above_horizon(alt):
            return None
        mag = self._photometry.apparent_magnitude(star.abs_mag, distance)
        mag = self._photometry.apply_extinction(mag, alt, request.atmosphere)
        return SkyStarPoint(
            az_rad=az,
            alt_rad=alt,
            apparent_mag=mag,
            color=self._photometry.star_to_color(star),
            star_id=star.star_id,
            name=star.name,
            distance_ly=distance,
            size=self._photometry.magnitude_to_size(mag),
        )


def build_service(config, time_context: TimeContext | None = None) -> NightSkyService:
    from nightsky.stores import get_stores

    star_store, orbit_store = get_stores(config)
    if time_context is None:
        time_context = TimeContext().initialize()
    ephemeris = EphemerisService(star_store, orbit_store, TimeService(time_context))
    cache = NightSkyCacheService(
        ExpiryPolicy(
            ttl=datetime.timedelta(seconds=config.cache_ttl_s),
            capacity=config.cache_capacity,
        )
    )
    return NightSkyService(ephemeris, StarQueryService(star_store), cache=cache)
