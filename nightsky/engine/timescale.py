import datetime
import logging
import math

from astropy.time import Time

from nightsky.errors import InitializationError

logger = logging.getLogger(__name__)

J2000_JD = 2451545.0
DAYS_PER_JULIAN_CENTURY = 36525.0


def _normalize_angle_rad(angle: float) -> float:
    wrapped = angle % (2.0 * math.pi)
    # Tiny negative inputs wrap to exactly 2*pi in floating point.
    return 0.0 if wrapped >= 2.0 * math.pi else wrapped


def _naive_utc(dt: datetime.datetime) -> datetime.datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)


class TimeContext:
    """Handle on the astropy time backend.

    Created once per process and passed to the services that need it.
    Conversions fail with InitializationError until initialize() is called.
    """

    def __init__(self):
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def initialize(self) -> "TimeContext":
        self._ready = True
        logger.debug("Time backend initialized")
        return self

    def teardown(self) -> None:
        self._ready = False

    def require_ready(self) -> None:
        if not self._ready:
            raise InitializationError("Astronomical time backend is not initialized")


class TimeService:
    def __init__(self, context: TimeContext):
        self._context = context

    def to_astronomical_time(self, instant: datetime.datetime) -> Time:
        self._context.require_ready()
        return Time(_naive_utc(instant), scale="utc")

    def to_julian_date(self, instant: datetime.datetime) -> float:
        return self.to_astronomical_time(instant).jd

    def days_since_j2000(self, instant: datetime.datetime) -> float:
        t = self.to_astronomical_time(instant)
        # Subtract from the large part first so sub-second precision survives.
        return (t.jd1 - J2000_JD) + t.jd2

    def greenwich_mean_sidereal_time(self, instant: datetime.datetime) -> float:
        d = self.days_since_j2000(instant)
        t = d / DAYS_PER_JULIAN_CENTURY
        gmst_deg = (
            280.46061837
            + 360.98564736629 * d
            + 0.000387933 * t * t
            - (t * t * t) / 38710000.0
        )
        return _normalize_angle_rad(math.radians(gmst_deg % 360.0))

    def local_sidereal_time(self, instant: datetime.datetime, lon_rad: float) -> float:
        return _normalize_angle_rad(self.greenwich_mean_sidereal_time(instant) + lon_rad)
