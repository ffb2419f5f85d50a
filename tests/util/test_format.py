import math

import pytest

from nightsky.util.format import (
    azimuth_to_compass,
    format_angle,
    rad_to_deg,
    rad_to_dms,
    rad_to_hms,
)


def test_rad_to_deg():
    assert rad_to_deg(math.pi) == 180.0


def test_rad_to_hms_zero():
    assert rad_to_hms(0.0) == "00:00:00.00"


def test_rad_to_hms_wrap():
    # 360 degrees -> 24h -> wrapped to 00
    assert rad_to_hms(math.radians(360.0)) == "00:00:00.00"


def test_rad_to_hms_precision():
    # 15 degrees = 1 hour
    assert rad_to_hms(math.radians(15.0), precision=1) == "01:00:00.0"


def test_rad_to_hms_rounding_carry():
    seconds = (24 * 3600) - 0.04
    rad = math.radians(seconds / 240.0)
    assert rad_to_hms(rad, precision=1) == "00:00:00.0"


def test_rad_to_dms_signs():
    assert rad_to_dms(math.radians(10.0)) == "+10:00:00.00"
    assert rad_to_dms(math.radians(-10.0)) == "-10:00:00.00"
    assert rad_to_dms(math.radians(-0.0001), precision=2).startswith("-00:00:")


@pytest.mark.parametrize(
    "deg, expected",
    [(0.0, "N"), (90.0, "E"), (180.0, "S"), (270.0, "W"), (350.0, "N"), (33.0, "NNE"), (-45.0, "NW")],
)
def test_azimuth_to_compass(deg, expected):
    assert azimuth_to_compass(math.radians(deg)) == expected


def test_format_angle_styles():
    assert format_angle(math.pi, style="deg", precision=1) == "180.0°"
    assert format_angle(math.radians(15.0), style="hms", precision=0) == "01:00:00"
    assert format_angle(math.radians(90.0), style="compass") == "E"


def test_format_angle_unknown_style():
    with pytest.raises(ValueError, match="Unknown angle style"):
        format_angle(0.0, style="unknown")
