"""
Planet position and body-fixed orientation from Keplerian elements.

World coordinates are light years with +Z along the normal of a zero-inclination
orbit. The planet's spin axis is taken to be the orbit normal, i.e. obliquity is
assumed equal to the orbital inclination.
"""

from dataclasses import dataclass
import datetime
import logging
import math

import numpy as np

from .timescale import TimeService
from .types import EnuFrame, OrbitalElements, PlanetAttitude, Vector3

logger = logging.getLogger(__name__)

AU_TO_LY = 1.0 / 63241.077
SECONDS_PER_HOUR = 3600.0
DEFAULT_ROTATION_PERIOD_HOURS = 24.0

KEPLER_TOLERANCE = 1e-10
KEPLER_MAX_ITERATIONS = 10

# Shorter periods would make the mean motion blow up.
MIN_ORBITAL_PERIOD_DAYS = 1e-3

_PLUS_X = np.array([1.0, 0.0, 0.0])
_PLUS_Y = np.array([0.0, 1.0, 0.0])
_PLUS_Z = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True)
class KeplerSolution:
    eccentric_anomaly: float
    iterations: int
    converged: bool


def solve_kepler(
    mean_anomaly: float,
    eccentricity: float,
    tolerance: float = KEPLER_TOLERANCE,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> KeplerSolution:
    """Solve M = E - e sin(E) for E by Newton-Raphson starting at E = M.

    The iteration is capped; when the cap is reached the last iterate is
    returned with ``converged=False``.
    """
    e_anom = mean_anomaly
    for iteration in range(1, max_iterations + 1):
        delta = (mean_anomaly - e_anom + eccentricity * math.sin(e_anom)) / (
            1.0 - eccentricity * math.cos(e_anom)
        )
        e_anom += delta
        if abs(delta) < tolerance:
            return KeplerSolution(e_anom, iteration, True)
    return KeplerSolution(e_anom, max_iterations, False)


def mean_anomaly(elements: OrbitalElements, days_since_epoch: float) -> float:
    period = elements.orbital_period_days
    if period < MIN_ORBITAL_PERIOD_DAYS:
        logger.warning(
            "Orbital period %.3g d below minimum, clamping to %.3g d",
            period,
            MIN_ORBITAL_PERIOD_DAYS,
        )
        period = MIN_ORBITAL_PERIOD_DAYS
    mean_motion = 2.0 * math.pi / period
    return (mean_motion * days_since_epoch) % (2.0 * math.pi)


def orbital_offset_au(elements: OrbitalElements, days_since_epoch: float) -> tuple[np.ndarray, bool]:
    e = elements.eccentricity
    solution = solve_kepler(mean_anomaly(elements, days_since_epoch), e)
    if not solution.converged:
        logger.debug(
            "Kepler solver hit iteration cap (e=%.4f), using last iterate", e
        )
    ecc_anom = solution.eccentric_anomaly

    nu = 2.0 * math.atan2(
        math.sqrt(1.0 + e) * math.sin(ecc_anom / 2.0),
        math.sqrt(1.0 - e) * math.cos(ecc_anom / 2.0),
    )
    r = elements.semi_major_axis_au * (1.0 - e * math.cos(ecc_anom))
    x_orb = r * math.cos(nu)
    y_orb = r * math.sin(nu)

    cos_node = math.cos(elements.longitude_of_ascending_node_rad)
    sin_node = math.sin(elements.longitude_of_ascending_node_rad)
    cos_i = math.cos(elements.inclination_rad)
    sin_i = math.sin(elements.inclination_rad)
    cos_peri = math.cos(elements.argument_of_periapsis_rad)
    sin_peri = math.sin(elements.argument_of_periapsis_rad)

    x = (cos_node * cos_peri - sin_node * sin_peri * cos_i) * x_orb + (
        -cos_node * sin_peri - sin_node * cos_peri * cos_i
    ) * y_orb
    y = (sin_node * cos_peri + cos_node * sin_peri * cos_i) * x_orb + (
        -sin_node * sin_peri + cos_node * cos_peri * cos_i
    ) * y_orb
    z = (sin_peri * sin_i) * x_orb + (cos_peri * sin_i) * y_orb
    return np.array([x, y, z]), solution.converged


def spin_axis(inclination_rad: float, ascending_node_rad: float) -> np.ndarray:
    axis = np.array(
        [
            math.sin(inclination_rad) * math.sin(ascending_node_rad),
            -math.sin(inclination_rad) * math.cos(ascending_node_rad),
            math.cos(inclination_rad),
        ]
    )
    return _unit(axis)


def rotate_about_axis(v: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    c = math.cos(angle)
    s = math.sin(angle)
    return v * c + np.cross(axis, v) * s + axis * (np.dot(axis, v) * (1.0 - c))


def prime_meridian(axis: np.ndarray, days_since_epoch: float, rotation_period_hours: float) -> np.ndarray:
    reference = _PLUS_Y if abs(axis[1]) < 0.9 else _PLUS_Z
    meridian = _unit(np.cross(axis, reference))
    angle = (days_since_epoch * 24.0 / rotation_period_hours) * 2.0 * math.pi
    return _unit(rotate_about_axis(meridian, axis, angle % (2.0 * math.pi)))


def neutral_attitude() -> PlanetAttitude:
    return PlanetAttitude(
        position_ly=(0.0, 0.0, 0.0),
        spin_axis=_vec(_PLUS_Z),
        prime_meridian=_vec(_PLUS_X),
        rotation_rate_rad_per_s=2.0 * math.pi / (DEFAULT_ROTATION_PERIOD_HOURS * SECONDS_PER_HOUR),
    )


class EphemerisService:
    def __init__(self, star_store, orbit_store, time_service: TimeService):
        self._stars = star_store
        self._orbits = orbit_store
        self._time = time_service

    def attitude_at(
        self,
        planet_id: str,
        host_star_id: str,
        instant: datetime.datetime,
    ) -> PlanetAttitude:
        # Fails before any lookup if the time backend is not ready.
        days = self._time.days_since_j2000(instant)

        host = self._stars.get_star(host_star_id)
        if host is None:
            logger.warning("Host star not found: %s, using neutral attitude", host_star_id)
            return neutral_attitude()
        elements = self._orbits.get_orbital_elements(planet_id)
        if elements is None:
            logger.warning("Planet not found: %s, using neutral attitude", planet_id)
            return neutral_attitude()

        offset_au, converged = orbital_offset_au(elements, days)
        position = np.array(host.position) + offset_au * AU_TO_LY

        axis = spin_axis(elements.inclination_rad, elements.longitude_of_ascending_node_rad)
        meridian = prime_meridian(axis, days, elements.rotation_period_hours)

        return PlanetAttitude(
            position_ly=_vec(position),
            spin_axis=_vec(axis),
            prime_meridian=_vec(meridian),
            rotation_rate_rad_per_s=2.0 * math.pi / (elements.rotation_period_hours * SECONDS_PER_HOUR),
            kepler_converged=converged,
        )

    def enu_frame(self, attitude: PlanetAttitude, lat_rad: float, lon_rad: float) -> EnuFrame:
        return enu_frame(attitude, lat_rad, lon_rad)


def enu_frame(attitude: PlanetAttitude, lat_rad: float, lon_rad: float) -> EnuFrame:
    axis = np.array(attitude.spin_axis)
    meridian = np.array(attitude.prime_meridian)
    east90 = _unit(np.cross(axis, meridian))

    cos_lat = math.cos(lat_rad)
    sin_lat = math.sin(lat_rad)
    cos_lon = math.cos(lon_rad)
    sin_lon = math.sin(lon_rad)

    up = _unit(meridian * (cos_lat * cos_lon) + east90 * (cos_lat * sin_lon) + axis * sin_lat)

    east = np.cross(axis, up)
    if np.linalg.norm(east) < 1e-9:
        # At a pole the axis and zenith coincide; use the longitude tangent.
        east = meridian * -sin_lon + east90 * cos_lon
    east = _unit(east)
    north = _unit(np.cross(up, east))

    return EnuFrame(
        east=_vec(east),
        north=_vec(north),
        up=_vec(up),
        lat_rad=lat_rad,
        lon_rad=lon_rad,
    )


def _unit(v: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(v)
    if norm == 0.0:
        raise ValueError("Cannot normalize a zero vector")
    return v / norm


def _vec(v) -> Vector3:
    return (float(v[0]), float(v[1]), float(v[2]))
