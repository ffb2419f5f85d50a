import math

from .types import AtmosphereModel, RGB, StarRenderRow

LY_PER_PARSEC = 3.26156

# Display size mapping: BRIGHT_MAG and brighter draw at MAX_SIZE, FAINT_MAG and
# fainter at MIN_SIZE.
MIN_SIZE = 0.5
MAX_SIZE = 5.0
BRIGHT_MAG = -1.5
FAINT_MAG = 6.5

DEFAULT_COLOR: RGB = (255, 255, 255)

# Representative colors per spectral class (O-M after Mitchell Charity's
# blackbody table, L/T brown dwarfs approximated).
SPECTRAL_COLORS: dict[str, RGB] = {
    "O": (155, 176, 255),
    "B": (170, 191, 255),
    "A": (202, 215, 255),
    "F": (248, 247, 255),
    "G": (255, 244, 234),
    "K": (255, 210, 161),
    "M": (255, 204, 111),
    "L": (255, 130, 60),
    "T": (190, 70, 110),
}


def apparent_magnitude(abs_mag: float, distance_ly: float) -> float:
    if distance_ly <= 0:
        return abs_mag
    d_parsecs = distance_ly / LY_PER_PARSEC
    return abs_mag + 5.0 * math.log10(d_parsecs) - 5.0


def airmass(alt_rad: float) -> float:
    """Kasten & Young (1989) relative air mass; 1 at the zenith."""
    zenith_rad = math.pi / 2.0 - alt_rad
    zenith_deg = math.degrees(zenith_rad)
    return 1.0 / (math.cos(zenith_rad) + 0.50572 * (96.07995 - zenith_deg) ** -1.6364)


def apply_extinction(mag: float, alt_rad: float, atmosphere: AtmosphereModel | None) -> float:
    if atmosphere is None or not atmosphere.enabled or alt_rad <= 0:
        return mag
    return mag + atmosphere.extinction_coefficient * airmass(min(alt_rad, math.pi / 2.0))


def star_to_color(star: StarRenderRow) -> RGB:
    spectral = (star.spectral_class or "").strip().upper()
    if spectral and spectral[0] in SPECTRAL_COLORS:
        return SPECTRAL_COLORS[spectral[0]]
    if star.temperature_k is not None and star.temperature_k > 0:
        return temperature_to_color(star.temperature_k)
    return DEFAULT_COLOR


def temperature_to_color(temperature_k: float) -> RGB:
    # Tanner Helland's fit to the CIE 1964 blackbody locus.
    t = temperature_k / 100.0

    if t <= 66:
        red = 255.0
    else:
        red = 329.698727446 * (t - 60.0) ** -0.1332047592

    if t <= 66:
        green = 99.4708025861 * math.log(t) - 161.1195681661
    else:
        green = 288.1221695283 * (t - 60.0) ** -0.0755148492

    if t >= 66:
        blue = 255.0
    elif t <= 19:
        blue = 0.0
    else:
        blue = 138.5177312231 * math.log(t - 10.0) - 305.0447927307

    return (_clamp_channel(red), _clamp_channel(green), _clamp_channel(blue))


def magnitude_to_size(mag: float) -> float:
    fraction = (FAINT_MAG - mag) / (FAINT_MAG - BRIGHT_MAG)
    size = MIN_SIZE + fraction * (MAX_SIZE - MIN_SIZE)
    return max(MIN_SIZE, min(MAX_SIZE, size))


def _clamp_channel(value: float) -> int:
    return int(round(max(0.0, min(255.0, value))))


class PhotometryService:
    apparent_magnitude = staticmethod(apparent_magnitude)
    apply_extinction = staticmethod(apply_extinction)
    airmass = staticmethod(airmass)
    star_to_color = staticmethod(star_to_color)
    magnitude_to_size = staticmethod(magnitude_to_size)
