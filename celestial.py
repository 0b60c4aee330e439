import math
from dataclasses import dataclass

import pytz
from astral import Observer
from astral.sun import sunrise, sunset

# Below this angular separation (radians) two points are treated as identical
DEGENERATE_SEPARATION = 1e-10


@dataclass(frozen=True)
class GeoPoint:
    """A position on the earth in decimal degrees."""
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"Latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"Longitude out of range: {self.longitude}")


def clamp(value, low, high):
    return max(low, min(high, value))


def _to_unit_vector(point):
    lat = math.radians(point.latitude)
    lon = math.radians(point.longitude)
    return (
        math.cos(lat) * math.cos(lon),
        math.cos(lat) * math.sin(lon),
        math.sin(lat),
    )


def interpolate_great_circle(start, end, fraction):
    """
    Position at `fraction` of the way from `start` to `end` along the great circle.

    Uses spherical linear interpolation between the two points expressed as
    unit vectors.

    Args:
        start: GeoPoint at fraction 0
        end: GeoPoint at fraction 1
        fraction: Value in [0, 1]

    Returns:
        GeoPoint on the great-circle path. When the two points coincide the
        start point is returned unchanged.
    """
    x1, y1, z1 = _to_unit_vector(start)
    x2, y2, z2 = _to_unit_vector(end)

    omega = math.acos(clamp(x1 * x2 + y1 * y2 + z1 * z2, -1.0, 1.0))
    if omega < DEGENERATE_SEPARATION:
        return start

    sin_omega = math.sin(omega)
    a = math.sin((1 - fraction) * omega) / sin_omega
    b = math.sin(fraction * omega) / sin_omega

    x = a * x1 + b * x2
    y = a * y1 + b * y2
    z = a * z1 + b * z2

    lat = math.degrees(math.atan2(z, math.sqrt(x * x + y * y)))
    lon = math.degrees(math.atan2(y, x))
    return GeoPoint(clamp(lat, -90.0, 90.0), clamp(lon, -180.0, 180.0))


def _as_utc(instant):
    if instant.tzinfo is None:
        return pytz.utc.localize(instant)
    return instant.astimezone(pytz.utc)


def julian_day(instant):
    """Julian day number (with fraction) for a datetime, naive values taken as UTC."""
    return _as_utc(instant).timestamp() / 86400.0 + 2440587.5


def solar_altitude(instant, point):
    """
    Altitude of the sun above the horizon in degrees.

    NOAA low-precision solar position algorithm, without atmospheric
    refraction. Negative values mean the sun is below the horizon.

    Args:
        instant: datetime of the observation (naive values are taken as UTC)
        point: GeoPoint of the observer

    Returns:
        Signed solar altitude in degrees
    """
    instant = _as_utc(instant)
    t = (julian_day(instant) - 2451545.0) / 36525.0

    # Geometric mean longitude and mean anomaly of the sun (degrees)
    mean_long = (280.46646 + t * (36000.76983 + 0.0003032 * t)) % 360
    mean_anom = 357.52911 + t * (35999.05029 - 0.0001537 * t)
    eccentricity = 0.016708634 - t * (0.000042037 + 0.0000001267 * t)

    mean_anom_rad = math.radians(mean_anom)
    center = (
        math.sin(mean_anom_rad) * (1.914602 - t * (0.004817 + 0.000014 * t))
        + math.sin(2 * mean_anom_rad) * (0.019993 - 0.000101 * t)
        + math.sin(3 * mean_anom_rad) * 0.000289
    )
    true_long = mean_long + center

    omega = 125.04 - 1934.136 * t
    apparent_long = true_long - 0.00569 - 0.00478 * math.sin(math.radians(omega))

    mean_obliquity = 23 + (26 + (21.448 - t * (46.815 + t * (0.00059 - t * 0.001813))) / 60) / 60
    obliquity = mean_obliquity + 0.00256 * math.cos(math.radians(omega))

    declination = math.degrees(
        math.asin(math.sin(math.radians(obliquity)) * math.sin(math.radians(apparent_long)))
    )

    # Equation of time (minutes)
    y = math.tan(math.radians(obliquity) / 2)
    y2 = y * y
    mean_long_rad = math.radians(mean_long)
    eq_of_time = 4 * math.degrees(
        y2 * math.sin(2 * mean_long_rad)
        - 2 * eccentricity * math.sin(mean_anom_rad)
        + 4 * eccentricity * y2 * math.sin(mean_anom_rad) * math.cos(2 * mean_long_rad)
        - 0.5 * y2 * y2 * math.sin(4 * mean_long_rad)
        - 1.25 * eccentricity * eccentricity * math.sin(2 * mean_anom_rad)
    )

    utc_minutes = instant.hour * 60 + instant.minute + instant.second / 60.0
    true_solar_time = (utc_minutes + eq_of_time + 4 * point.longitude) % 1440

    # true_solar_time is never negative after the modulo, so the hour angle is
    # always shifted by -180
    hour_angle = true_solar_time / 4 - 180

    lat_rad = math.radians(point.latitude)
    dec_rad = math.radians(declination)
    cos_zenith = (
        math.sin(lat_rad) * math.sin(dec_rad)
        + math.cos(lat_rad) * math.cos(dec_rad) * math.cos(math.radians(hour_angle))
    )
    zenith = math.degrees(math.acos(clamp(cos_zenith, -1.0, 1.0)))
    return 90.0 - zenith


def sun_times(point, day):
    """
    Get sunrise and sunset for a position on a given UTC date.

    Both events are the ones falling on `day` in UTC, not on the local civil
    day. Far west of Greenwich (Hawaii) the UTC day holds the end of one local
    day and the start of the next, so the sunset returned is earlier than the
    sunrise.

    Returns:
        Tuple of (sunrise, sunset) UTC datetimes. Either is None when the sun
        does not rise or set that day (polar day or night).
    """
    observer = Observer(latitude=point.latitude, longitude=point.longitude)
    return _sun_event(sunrise, observer, day), _sun_event(sunset, observer, day)


def _sun_event(event, observer, day):
    try:
        return event(observer, day, tzinfo=pytz.utc)
    except ValueError as e:
        print(f"Warning: No {event.__name__} at lat={observer.latitude}, lon={observer.longitude} on {day}: {e}")
        return None
