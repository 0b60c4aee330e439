from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Tuple

from airports import load_airport_lookup
from celestial import sun_times
from night_time import (
    DEFAULT_TWILIGHT_ALTITUDE,
    LandingClassification,
    NightComputationResult,
    classify_landing,
    compute_night_minutes,
    round_half_up,
)
from ofp_parser import DEFAULT_CARRIER_CODE, FlightFact, parse_ofp

PILOT_ROLES = ('PF', 'PM')

# Logbook field mapping - maps derived values to the logbook service's entry fields
LOGBOOK_FIELD_MAPPING = {
    'date': 'Date',
    'tail': 'TailNumDisplay',
    'route': 'Route',
    'total_time': 'TotalTime',
    'sic': 'SIC',
    'pic': 'PIC',
    'comments': 'Comments',
    'cross_country': 'CrossCountry',
    'night': 'Night',
    'imc': 'IMC',
    'landings': 'Landings',
    'full_stop_day_landings': 'FullStopLandings',
    'full_stop_night_landings': 'FullStopNightLandings',
    'approaches': 'Approaches',
}

# Flight property type IDs for the values that have no dedicated field
FLIGHT_PROPERTY_IDS = {
    'pic_name': 183,
    'sic_name': 184,
    'pilot_flying_time': 529,
    'pilot_monitoring_time': 530,
}


class LogbookValidationError(ValueError):
    """The flight facts are not complete enough to build a logbook entry."""


class MissingFieldsError(LogbookValidationError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required field(s): {', '.join(self.missing)}")


class MissingAirportCoordsError(LogbookValidationError):
    def __init__(self, codes):
        self.codes = list(codes)
        super().__init__(f"Missing airport coords for {', '.join(self.codes)}")


@dataclass(frozen=True)
class FlightProperty:
    name: str
    prop_type_id: int
    value: object


@dataclass(frozen=True)
class DerivedLogbookValues:
    date: str
    tail: str
    route: str
    comments: str
    total_time: float
    pic: float
    sic: float
    cross_country: float
    night: float
    imc: float
    approaches: int
    landings: int
    full_stop_day_landings: int
    full_stop_night_landings: int
    pilot_role: str
    pilot_flying_time: float
    pilot_monitoring_time: float
    pic_name: str
    sic_name: str
    properties: Tuple[FlightProperty, ...] = ()


@dataclass(frozen=True)
class FlightRecord:
    """Everything computed for one OFP: the facts, both classifications and the logbook values."""
    fact: FlightFact
    night: NightComputationResult
    landing: LandingClassification
    values: DerivedLogbookValues
    # Destination sunrise and sunset on the landing's UTC date, see celestial.sun_times
    sunrise_utc: Optional[datetime] = None
    sunset_utc: Optional[datetime] = None


def normalize_pilot_role(pilot_role):
    """PM when asked for PM, PF for anything else."""
    if isinstance(pilot_role, str) and pilot_role.strip().upper() == 'PM':
        return 'PM'
    return 'PF'


def instrument_time(block):
    """Actual instrument time: block less a tenth, never negative."""
    return max(round_half_up(block - 0.1), 0)


def missing_required_fields(fact, full=False):
    """
    Names of the required fields the fact lacks, in reporting order.

    The short check covers what the logbook entry itself needs; `full` also
    covers the inputs of the night and landing computations.
    """
    checks = [
        ('date', fact.date),
        ('tail', fact.tail_number),
        ('route', fact.route),
        ('block', fact.block_hours),
    ]
    if full:
        checks += [
            ('orig', fact.origin),
            ('dest', fact.destination),
            ('OUT', fact.times.out),
            ('IN', fact.times.in_),
        ]
    return [name for name, value in checks if value is None]


def derive_logbook_values(fact, night, landing, pilot_role='PF'):
    """
    Turn flight facts and the night/landing results into logbook values.

    The recording pilot is always logged as SIC, with block time used for
    total, SIC and cross-country time, one approach and one landing per flight.

    Args:
        fact: FlightFact
        night: NightComputationResult
        landing: LandingClassification
        pilot_role: 'PF' or 'PM'; anything else is treated as 'PF'

    Returns:
        DerivedLogbookValues

    Raises:
        MissingFieldsError: date, tail, route or block time is missing
    """
    missing = missing_required_fields(fact)
    if missing:
        raise MissingFieldsError(missing)

    block = fact.block_hours
    role = normalize_pilot_role(pilot_role)

    night_hours = night.night_hours if night.night_hours is not None else 0
    pf_time = block if role == 'PF' else 0.0
    pm_time = block if role == 'PM' else 0.0
    pic_name = fact.captain or ""
    sic_name = fact.first_officer or ""

    properties = (
        FlightProperty('pic_name', FLIGHT_PROPERTY_IDS['pic_name'], pic_name),
        FlightProperty('sic_name', FLIGHT_PROPERTY_IDS['sic_name'], sic_name),
        FlightProperty('pilot_flying_time', FLIGHT_PROPERTY_IDS['pilot_flying_time'], pf_time),
        FlightProperty('pilot_monitoring_time', FLIGHT_PROPERTY_IDS['pilot_monitoring_time'], pm_time),
    )

    return DerivedLogbookValues(
        date=fact.iso_date,
        tail=fact.tail_number,
        route=fact.route,
        comments=fact.comments,
        total_time=block,
        pic=0,
        sic=block,
        cross_country=block,
        night=night_hours,
        imc=instrument_time(block),
        approaches=1,
        landings=1,
        full_stop_day_landings=1 if landing.is_night_landing is False else 0,
        full_stop_night_landings=1 if landing.is_night_landing is True else 0,
        pilot_role=role,
        pilot_flying_time=pf_time,
        pilot_monitoring_time=pm_time,
        pic_name=pic_name,
        sic_name=sic_name,
        properties=properties,
    )


def compute_flight_record(raw_text, pilot_role='PF', lookup=None,
                          twilight_altitude=DEFAULT_TWILIGHT_ALTITUDE,
                          carrier_code=DEFAULT_CARRIER_CODE):
    """
    Parse an OFP and compute the full logbook record for it.

    Args:
        raw_text: OFP text
        pilot_role: 'PF' or 'PM'
        lookup: ICAO -> GeoPoint callable; defaults to the airportsdata table
        twilight_altitude: Solar altitude threshold for night, in degrees
        carrier_code: Flight number prefix

    Returns:
        FlightRecord

    Raises:
        MissingFieldsError: required facts are missing from the text
        MissingAirportCoordsError: origin or destination has no coordinates
    """
    fact = parse_ofp(raw_text, carrier_code=carrier_code)

    missing = missing_required_fields(fact, full=True)
    if missing:
        raise MissingFieldsError(missing)

    if lookup is None:
        lookup = load_airport_lookup()

    unknown = [code for code in (fact.origin, fact.destination) if lookup(code) is None]
    if unknown:
        raise MissingAirportCoordsError(unknown)

    night = compute_night_minutes(fact, lookup, twilight_altitude)
    landing = classify_landing(fact, lookup, twilight_altitude)
    values = derive_logbook_values(fact, night, landing, pilot_role)

    landing_day = landing.landing_time_utc.date() if landing.landing_time_utc else fact.date
    sunrise, sunset = sun_times(lookup(fact.destination), landing_day)

    return FlightRecord(fact, night, landing, values, sunrise, sunset)


def logbook_entry(values):
    """
    Map derived values onto the logbook service's entry fields.

    The result is a plain dictionary; encoding it for the wire is up to the
    caller.
    """
    data = asdict(values)
    entry = {target: data[source] for source, target in LOGBOOK_FIELD_MAPPING.items()}
    entry['Properties'] = [
        {'PropTypeID': prop.prop_type_id,
         'TextValue' if isinstance(prop.value, str) else 'DecValue': prop.value}
        for prop in values.properties
    ]
    return entry


def computed_summary(record):
    """Diagnostic view of how the night and landing values were reached."""
    values = record.values
    return {
        'approaches': values.approaches,
        'landings': values.landings,
        'fullStopDay': values.full_stop_day_landings,
        'fullStopNight': values.full_stop_night_landings,
        'xc': values.cross_country,
        'night': values.night,
        'nightMinutes': record.night.night_minutes,
        'imc': values.imc,
        'nightReason': record.night.reason,
        'landingReason': record.landing.reason,
        'landingSunAltDeg': record.landing.sun_altitude,
        'sunriseUtc': record.sunrise_utc.isoformat() if record.sunrise_utc else None,
        'sunsetUtc': record.sunset_utc.isoformat() if record.sunset_utc else None,
    }
