from dataclasses import dataclass, field
import datetime
import math
from typing import Optional, Sequence

Vector3 = tuple[float, float, float]
RGB = tuple[int, int, int]


def _as_utc(dt: datetime.datetime) -> datetime.datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


@dataclass(frozen=True)
class OrbitalElements:
    semi_major_axis_au: float
    eccentricity: float
    inclination_rad: float
    argument_of_periapsis_rad: float
    longitude_of_ascending_node_rad: float
    orbital_period_days: float
    rotation_period_hours: float = 24.0

    def __post_init__(self):
        if self.semi_major_axis_au <= 0:
            raise ValueError("Semi-major axis must be positive")
        if not 0.0 <= self.eccentricity < 1.0:
            raise ValueError("Eccentricity must be in [0, 1)")
        if self.orbital_period_days <= 0:
            raise ValueError("Orbital period must be positive")
        if self.rotation_period_hours <= 0:
            raise ValueError("Rotation period must be positive")

    @classmethod
    def from_degrees(
        cls,
        *,
        semi_major_axis_au: float,
        eccentricity: float,
        inclination_deg: float,
        argument_of_periapsis_deg: float,
        longitude_of_ascending_node_deg: float,
        orbital_period_days: float,
        rotation_period_hours: float | None = None,
    ) -> "OrbitalElements":
        return cls(
            semi_major_axis_au=semi_major_axis_au,
            eccentricity=eccentricity,
            inclination_rad=math.radians(inclination_deg),
            argument_of_periapsis_rad=math.radians(argument_of_periapsis_deg),
            longitude_of_ascending_node_rad=math.radians(longitude_of_ascending_node_deg),
            orbital_period_days=orbital_period_days,
            rotation_period_hours=24.0 if rotation_period_hours is None else rotation_period_hours,
        )


@dataclass(frozen=True)
class PlanetAttitude:
    position_ly: Vector3
    spin_axis: Vector3
    prime_meridian: Vector3
    rotation_rate_rad_per_s: float
    kepler_converged: bool = True


@dataclass(frozen=True)
class EnuFrame:
    east: Vector3
    north: Vector3
    up: Vector3
    lat_rad: float
    lon_rad: float


@dataclass(frozen=True)
class StarRenderRow:
    star_id: str
    x: float
    y: float
    z: float
    abs_mag: float
    temperature_k: float | None = None
    spectral_class: str | None = None
    name: str | None = None
    dataset: str | None = None

    @property
    def position(self) -> Vector3:
        return (self.x, self.y, self.z)


@dataclass(frozen=True)
class SkyStarPoint:
    az_rad: float
    alt_rad: float
    apparent_mag: float
    color: RGB
    star_id: str
    name: str | None
    distance_ly: float
    size: float = 1.0


@dataclass(frozen=True)
class LevelOfDetail:
    name: str
    magnitude_limit: float
    max_stars: int

    def __post_init__(self):
        if self.max_stars <= 0:
            raise ValueError("LOD max_stars must be positive")

    @classmethod
    def from_name(cls, name: str) -> "LevelOfDetail":
        try:
            return LOD_PRESETS[name.lower()]
        except KeyError:
            choices = ", ".join(sorted(LOD_PRESETS))
            raise ValueError(f"Unknown level of detail: {name} (expected one of: {choices})")


# Cutoffs are on absolute magnitude; the stores yield brightest first.
LOD_PRESETS = {
    "low": LevelOfDetail("low", magnitude_limit=2.0, max_stars=500),
    "medium": LevelOfDetail("medium", magnitude_limit=6.0, max_stars=5000),
    "high": LevelOfDetail("high", magnitude_limit=10.0, max_stars=20000),
    "ultra": LevelOfDetail("ultra", magnitude_limit=20.0, max_stars=100000),
}


@dataclass(frozen=True)
class AtmosphereModel:
    enabled: bool = True
    extinction_coefficient: float = 0.2
    name: str = "earth"

    def __post_init__(self):
        if self.extinction_coefficient < 0:
            raise ValueError("Extinction coefficient must not be negative")


NO_ATMOSPHERE = AtmosphereModel(enabled=False, extinction_coefficient=0.0, name="none")
EARTH_ATMOSPHERE = AtmosphereModel()


@dataclass(frozen=True)
class NightSkyRequest:
    planet_id: str
    host_star_id: str
    instant_utc: datetime.datetime
    observer_lat_rad: float
    observer_lon_rad: float
    radius_ly: float = 100.0
    max_magnitude: float = 6.5
    max_stars: int = 2000
    lod: LevelOfDetail = field(default_factory=lambda: LOD_PRESETS["medium"])
    dataset: str | None = None
    atmosphere: AtmosphereModel = EARTH_ATMOSPHERE

    def __post_init__(self):
        object.__setattr__(self, "instant_utc", _as_utc(self.instant_utc))
        if not -math.pi / 2 <= self.observer_lat_rad <= math.pi / 2:
            raise ValueError("Observer latitude must be within [-pi/2, pi/2]")
        if self.radius_ly <= 0:
            raise ValueError("Radius must be positive")
        if self.max_stars <= 0:
            raise ValueError("max_stars must be positive")


@dataclass(frozen=True)
class NightSkyResult:
    stars: Sequence[SkyStarPoint]
    host_star: Optional[SkyStarPoint]
    total_stars_queried: int
    visible_count: int
    compute_time: datetime.timedelta
    computed_at: datetime.datetime
    from_cache: bool = False
    request: Optional[NightSkyRequest] = None
    ephemeris_converged: bool = True

    def __post_init__(self):
        object.__setattr__(self, "stars", tuple(self.stars))
        if self.visible_count != len(self.stars):
            raise ValueError("visible_count must match the number of stars")
        if self.total_stars_queried < 0:
            raise ValueError("total_stars_queried must not be negative")
