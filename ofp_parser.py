import re
from dataclasses import dataclass, field
import datetime
from typing import Optional

DEFAULT_CARRIER_CODE = "CJT"

MONTHS = {
    'JAN': 1, 'FEB': 2, 'MAR': 3, 'APR': 4, 'MAY': 5, 'JUN': 6,
    'JUL': 7, 'AUG': 8, 'SEP': 9, 'OCT': 10, 'NOV': 11, 'DEC': 12,
}

# Date token patterns, tried in order. The last one only accepts real month
# abbreviations so a stray token cannot shadow it.
DATE_PATTERNS = [
    re.compile(r"\bDATE[:\s]*([0-3]\d[A-Z]{3}\d{2})\b"),
    re.compile(r"\b(\d{2}[A-Z]{3}\d{2})/\d{2}\.\d{2}Z\b"),
    re.compile(r"\b([0-3]\d(?:" + "|".join(MONTHS) + r")\d{2})\b"),
]

BLOCK_PATTERNS = [
    re.compile(r"\bBLOCK[:\s]+(\d{1,2}(?:\.\d)?)\b", re.IGNORECASE),
    re.compile(r"\bBLOCK\s+(\d{1,2}\.\d)\b", re.IGNORECASE),
]

ORIGIN_PATTERN = re.compile(r"\bORIG\s+([A-Z]{4})\b")
DESTINATION_PATTERN = re.compile(r"\bDEST\s+([A-Z]{4})\b")
TAIL_PATTERN = re.compile(r"\bC-[A-Z]{4}\b")

# Names stay on the marker's line
CAPTAIN_PATTERN = re.compile(r"\bCAPTAIN[: \t]+([A-Z][A-Z \t'-]{2,})\b")
FIRST_OFFICER_PATTERN = re.compile(r"\bFO[: \t]+([A-Z][A-Z \t'-]{2,})\b")

CLOCK_LABELS = ('OUT', 'OFF', 'ON', 'IN')


@dataclass(frozen=True)
class ClockTime:
    """A UTC time of day with no date attached."""
    hour: int
    minute: int

    @property
    def minutes_of_day(self):
        return self.hour * 60 + self.minute

    def __str__(self):
        return f"{self.hour:02d}{self.minute:02d}Z"


@dataclass(frozen=True)
class ClockTimes:
    out: Optional[ClockTime] = None
    off: Optional[ClockTime] = None
    on: Optional[ClockTime] = None
    in_: Optional[ClockTime] = None


@dataclass(frozen=True)
class FlightFact:
    """
    Flight facts pulled out of an OFP.

    Every field is optional. A field the text did not provide is None, never a
    zero or empty placeholder, so validation can tell "missing" from "zero".
    """
    flight_number: Optional[str] = None
    date: Optional[datetime.date] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    tail_number: Optional[str] = None
    block_hours: Optional[float] = None
    captain: Optional[str] = None
    first_officer: Optional[str] = None
    times: ClockTimes = field(default_factory=ClockTimes)

    @property
    def iso_date(self):
        return self.date.isoformat() if self.date else None

    @property
    def route(self):
        if self.origin and self.destination:
            return f"{self.origin} {self.destination}"
        return None

    @property
    def comments(self):
        parts = []
        if self.flight_number:
            parts.append(self.flight_number)
        if self.origin and self.destination:
            parts.append(f"{self.origin}-{self.destination}")
        return " ".join(parts)

    def as_dict(self):
        """Plain dictionary form, clock times rendered as HHMMZ strings."""
        times = {
            'out': self.times.out,
            'off': self.times.off,
            'on': self.times.on,
            'in': self.times.in_,
        }
        return {
            'flightNumber': self.flight_number,
            'isoDate': self.iso_date,
            'orig': self.origin,
            'dest': self.destination,
            'route': self.route,
            'tail': self.tail_number,
            'block': self.block_hours,
            'captain': self.captain,
            'fo': self.first_officer,
            'times': {k: str(v) if v else None for k, v in times.items()},
            'comments': self.comments,
        }


def to_title_case(name):
    """Capitalize the first letter of each word: "O'BRIEN-SMITH" -> "O'Brien-Smith"."""
    return re.sub(r"\b([a-z])", lambda m: m.group(1).upper(), name.strip().lower())


def _first_group(patterns, text):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def parse_ofp_date(token):
    """
    Convert a DDMMMYY token (e.g. 01JAN24) to a date.

    Returns None for an unknown month abbreviation or an impossible day.
    """
    if not token or len(token) != 7:
        return None
    month = MONTHS.get(token[2:5])
    if not month:
        return None
    try:
        return datetime.date(2000 + int(token[5:7]), month, int(token[0:2]))
    except ValueError:
        return None


def parse_clock_time(text, label):
    """Find `LABEL HHMM[Z]` in the text, case-insensitively."""
    pattern = re.compile(rf"\b{label}\s+([0-2]\d)([0-5]\d)Z?\b", re.IGNORECASE)
    match = pattern.search(text)
    if not match:
        return None
    return ClockTime(int(match.group(1)), int(match.group(2)))


def _flight_number(text, carrier_code):
    match = re.search(rf"\b{re.escape(carrier_code)}\d{{3,4}}\b", text)
    return match.group(0) if match else None


def _date(text, carrier_code):
    return parse_ofp_date(_first_group(DATE_PATTERNS, text))


def _origin(text, carrier_code):
    return _first_group([ORIGIN_PATTERN], text)


def _destination(text, carrier_code):
    return _first_group([DESTINATION_PATTERN], text)


def _tail_number(text, carrier_code):
    match = TAIL_PATTERN.search(text)
    return match.group(0) if match else None


def _block_hours(text, carrier_code):
    value = _first_group(BLOCK_PATTERNS, text)
    return float(value) if value is not None else None


def _captain(text, carrier_code):
    name = _first_group([CAPTAIN_PATTERN], text)
    return to_title_case(name) if name else None


def _first_officer(text, carrier_code):
    name = _first_group([FIRST_OFFICER_PATTERN], text)
    return to_title_case(name) if name else None


def _times(text, carrier_code):
    out, off, on, in_ = (parse_clock_time(text, label) for label in CLOCK_LABELS)
    return ClockTimes(out=out, off=off, on=on, in_=in_)


# Each rule fills one FlightFact field and fails independently of the others
EXTRACTION_RULES = [
    ('flight_number', _flight_number),
    ('date', _date),
    ('origin', _origin),
    ('destination', _destination),
    ('tail_number', _tail_number),
    ('block_hours', _block_hours),
    ('captain', _captain),
    ('first_officer', _first_officer),
    ('times', _times),
]


def parse_ofp(raw_text, carrier_code=DEFAULT_CARRIER_CODE):
    """
    Extract flight facts from the free text of an operational flight plan.

    Extraction never fails: fields whose pattern does not match are left as None.

    Args:
        raw_text: OFP text as pasted by the crew member
        carrier_code: Airline prefix of the flight number (e.g. CJT for CJT123)

    Returns:
        FlightFact
    """
    text = str(raw_text or "").replace("\r", "\n")
    values = {name: rule(text, carrier_code) for name, rule in EXTRACTION_RULES}
    return FlightFact(**values)
