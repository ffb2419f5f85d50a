import math

import numpy as np

from .types import EnuFrame, StarRenderRow, Vector3

# Below this separation (ly) the star and the observer coincide.
DEGENERATE_DISTANCE_LY = 1e-12


def world_to_horizontal(
    star: StarRenderRow,
    observer_pos: Vector3,
    enu: EnuFrame,
) -> tuple[float, float, float]:
    delta = np.array(star.position) - np.array(observer_pos)
    distance = float(np.linalg.norm(delta))
    if distance < DEGENERATE_DISTANCE_LY:
        return 0.0, math.pi / 2.0, 0.0
    direction = delta / distance

    e = float(np.dot(direction, enu.east))
    n = float(np.dot(direction, enu.north))
    u = float(np.dot(direction, enu.up))

    az = math.atan2(e, n) % (2.0 * math.pi)
    if az >= 2.0 * math.pi:
        az = 0.0
    alt = math.atan2(u, math.hypot(e, n))
    return az, alt, distance


def is_above_horizon(alt_rad: float) -> bool:
    # Altitude exactly zero counts as set.
    return alt_rad > 0.0


def horizontal_to_screen(az_rad: float, alt_rad: float, dome_radius: float) -> tuple[float, float, float]:
    """Place a horizontal direction on a dome: x east, y up, z north."""
    cos_alt = math.cos(alt_rad)
    return (
        dome_radius * cos_alt * math.sin(az_rad),
        dome_radius * math.sin(alt_rad),
        dome_radius * cos_alt * math.cos(az_rad),
    )


def angular_separation(az1: float, alt1: float, az2: float, alt2: float) -> float:
    sin_dalt = math.sin((alt2 - alt1) / 2.0)
    sin_daz = math.sin((az2 - az1) / 2.0)
    hav = sin_dalt * sin_dalt + math.cos(alt1) * math.cos(alt2) * sin_daz * sin_daz
    return 2.0 * math.asin(math.sqrt(min(1.0, max(0.0, hav))))


class SkyTransformService:
    """Stateless wrapper so the orchestrator can take the transform as a collaborator."""

    world_to_horizontal = staticmethod(world_to_horizontal)
    is_above_horizon = staticmethod(is_above_horizon)
    horizontal_to_screen = staticmethod(horizontal_to_screen)
    angular_separation = staticmethod(angular_separation)
