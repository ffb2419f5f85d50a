from .cache import CacheKey, CacheStats, ExpiryPolicy, NightSkyCacheService
from .ephemeris import EphemerisService, solve_kepler
from .photometry import PhotometryService
from .query import StarQueryService
from .service import NightSkyService, build_service
from .timescale import TimeContext, TimeService
from .transform import SkyTransformService
from .types import (
    AtmosphereModel,
    EnuFrame,
    LevelOfDetail,
    NightSkyRequest,
    NightSkyResult,
    OrbitalElements,
    PlanetAttitude,
    SkyStarPoint,
    StarRenderRow,
)

__all__ = [
    "AtmosphereModel",
    "CacheKey",
    "CacheStats",
    "EnuFrame",
    "EphemerisService",
    "ExpiryPolicy",
    "LevelOfDetail",
    "NightSkyCacheService",
    "NightSkyRequest",
    "NightSkyResult",
    "NightSkyService",
    "OrbitalElements",
    "PhotometryService",
    "PlanetAttitude",
    "SkyStarPoint",
    "SkyTransformService",
    "StarQueryService",
    "StarRenderRow",
    "TimeContext",
    "TimeService",
    "build_service",
    "solve_kepler",
]
