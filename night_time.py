import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

import pytz

from celestial import interpolate_great_circle, solar_altitude

# Civil twilight: sun more than 6 degrees below the horizon counts as night
DEFAULT_TWILIGHT_ALTITUDE = -6.0

MINUTES_PER_DAY = 1440


@dataclass(frozen=True)
class NightComputationResult:
    """
    Night minutes over the block interval.

    night_minutes is None when the computation could not run at all, which is
    different from a flight with zero night minutes.
    """
    night_minutes: Optional[int]
    reason: str
    block_minutes: Optional[int] = None

    @property
    def night_hours(self):
        if self.night_minutes is None:
            return None
        # tenths of an hour, halves rounded up, in integer arithmetic
        return ((self.night_minutes * 10 + 30) // 60) / 10


@dataclass(frozen=True)
class LandingClassification:
    is_night_landing: Optional[bool]
    reason: str
    sun_altitude: Optional[float] = None
    landing_time_utc: Optional[datetime] = None


def round_half_up(value, digits=1):
    """Round to `digits` decimals with halves going up (0.05 -> 0.1)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def utc_instant(day, clock):
    """Combine a calendar date and a ClockTime into an aware UTC datetime."""
    return pytz.utc.localize(datetime(day.year, day.month, day.day, clock.hour, clock.minute))


def block_minutes(out, in_):
    """Minutes from OUT to IN, wrapping past midnight (2350 -> 0010 is 20)."""
    return (in_.minutes_of_day - out.minutes_of_day) % MINUTES_PER_DAY


def compute_night_minutes(fact, lookup, twilight_altitude=DEFAULT_TWILIGHT_ALTITUDE):
    """
    Count the block minutes flown with the sun below the twilight altitude.

    The block interval (OUT to IN) is walked one minute at a time. Each
    minute's position is interpolated along the great circle from origin to
    destination and the solar altitude is evaluated there.

    Args:
        fact: FlightFact with date, origin, destination, OUT and IN times
        lookup: Callable mapping an ICAO code to a GeoPoint or None
        twilight_altitude: Solar altitude in degrees below which a minute is night

    Returns:
        NightComputationResult
    """
    times = fact.times
    if not fact.date or not fact.origin or not fact.destination or not times.out or not times.in_:
        return NightComputationResult(None, "Missing OUT/IN or route/date")

    origin = lookup(fact.origin)
    destination = lookup(fact.destination)
    if not origin or not destination:
        missing = fact.origin if not origin else fact.destination
        return NightComputationResult(None, f"Missing airport coords for {missing}")

    total = block_minutes(times.out, times.in_)
    if total <= 0:
        return NightComputationResult(0, "Non-positive block minutes", total)

    start = utc_instant(fact.date, times.out)
    night = 0
    for i in range(total):
        fraction = 0.0 if total == 1 else i / (total - 1)
        position = interpolate_great_circle(origin, destination, fraction)
        if solar_altitude(start + timedelta(minutes=i), position) < twilight_altitude:
            night += 1

    return NightComputationResult(night, "ok", total)


def classify_landing(fact, lookup, twilight_altitude=DEFAULT_TWILIGHT_ALTITUDE):
    """
    Decide whether the landing at the destination happened by day or by night.

    The ON time is used, falling back to IN. When the landing clock reads
    earlier than OUT the flight crossed midnight and the landing is moved to
    the next day.
    """
    if not fact.date or not fact.destination:
        return LandingClassification(None, "Missing date/dest")

    dest_point = lookup(fact.destination)
    if not dest_point:
        return LandingClassification(None, f"Missing airport coords for {fact.destination}")

    landing_clock = fact.times.on or fact.times.in_
    if not landing_clock:
        return LandingClassification(None, "Missing ON/IN time")

    landing_time = utc_instant(fact.date, landing_clock)
    out = fact.times.out
    if out and landing_clock.minutes_of_day < out.minutes_of_day:
        landing_time += timedelta(days=1)

    altitude = solar_altitude(landing_time, dest_point)
    return LandingClassification(altitude < twilight_altitude, "ok", altitude, landing_time)
