import math
from typing import Tuple

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


def rad_to_deg(rad: float) -> float:
    return math.degrees(rad)


def _split_sexagesimal(value: float, precision: int, wrap: float | None = None) -> Tuple[int, int, int, float]:
    sign = -1 if value < 0 else 1
    total_seconds = round(abs(value) * 3600.0, precision)
    if wrap is not None:
        total_seconds %= wrap * 3600.0
    whole = int(total_seconds // 3600)
    rem = total_seconds - whole * 3600
    minutes = int(rem // 60)
    seconds = rem - minutes * 60
    return sign, whole, minutes, seconds


def _seconds_field(seconds: float, precision: int) -> str:
    width = 2 if precision <= 0 else 3 + precision
    return f"{seconds:0{width}.{max(precision, 0)}f}"


def rad_to_hms(rad: float, precision: int = 2) -> str:
    hours = (math.degrees(rad) / 15.0) % 24.0
    _, h, m, s = _split_sexagesimal(hours, precision, wrap=24.0)
    s_fmt = _seconds_field(s, precision)
    return f"{h:02d}:{m:02d}:{s_fmt}"


def rad_to_dms(rad: float, precision: int = 2) -> str:
    sign_val, d, m, s = _split_sexagesimal(math.degrees(rad), precision)
    sign = "-" if sign_val < 0 else "+"
    s_fmt = _seconds_field(s, precision)
    return f"{sign}{d:02d}:{m:02d}:{s_fmt}"


def azimuth_to_compass(az_rad: float) -> str:
    deg = math.degrees(az_rad) % 360.0
    return COMPASS_POINTS[int((deg + 11.25) // 22.5) % 16]


def format_angle(rad: float, style: str = "deg", precision: int = 2) -> str:
    if style == "deg":
        return f"{rad_to_deg(rad):.{precision}f}°"
    if style == "hms":
        return rad_to_hms(rad, precision=precision)
    if style == "dms":
        return rad_to_dms(rad, precision=precision)
    if style == "compass":
        return azimuth_to_compass(rad)
    raise ValueError(f"Unknown angle style: {style}")
