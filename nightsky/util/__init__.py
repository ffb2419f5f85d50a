from .format import (
    azimuth_to_compass,
    format_angle,
    rad_to_deg,
    rad_to_dms,
    rad_to_hms,
)

__all__ = [
    "azimuth_to_compass",
    "format_angle",
    "rad_to_deg",
    "rad_to_dms",
    "rad_to_hms",
]
