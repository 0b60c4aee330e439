import json
import os
from functools import lru_cache

import airportsdata

from celestial import GeoPoint


@lru_cache(maxsize=1)
def icao_database():
    """The airportsdata ICAO table, loaded once."""
    return airportsdata.load('ICAO')


def load_airport_overrides(path):
    """
    Load ICAO -> coordinates overrides from a JSON file.

    The file maps each ICAO code to an object with `lat` and `lon` keys:
    {"CYYZ": {"lat": 43.6772, "lon": -79.6306}}

    Returns a dictionary of ICAO code -> GeoPoint. Entries that cannot be read
    are skipped with a warning.
    """
    if not os.path.exists(path):
        print(f"Warning: Airport file {path} not found.")
        return {}

    with open(path, encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            print(f"Error: Cannot read {path}: {e}")
            return {}

    overrides = {}
    for code, coords in raw.items():
        try:
            overrides[code.strip().upper()] = GeoPoint(float(coords['lat']), float(coords['lon']))
        except (KeyError, TypeError, ValueError) as e:
            print(f"Warning: Skipping airport {code} in {path}: {e}")
    return overrides


def get_airport_coords(code, overrides=None):
    """
    Get the coordinates of an airport by ICAO code.

    Override entries win over the airportsdata table. Returns None when the
    code is unknown to both.
    """
    if not code:
        return None
    code = code.strip().upper()

    if overrides and code in overrides:
        return overrides[code]

    airport = icao_database().get(code)
    if airport and 'lat' in airport and 'lon' in airport:
        try:
            return GeoPoint(float(airport['lat']), float(airport['lon']))
        except (TypeError, ValueError):
            return None
    return None


def load_airport_lookup(path=None):
    """
    Build the ICAO -> GeoPoint lookup callable used by the night computations.

    Args:
        path: Optional JSON file of coordinate overrides

    Returns:
        Function taking an ICAO code and returning a GeoPoint or None
    """
    overrides = load_airport_overrides(path) if path else {}

    def lookup(code):
        return get_airport_coords(code, overrides)

    return lookup


def lookup_from_mapping(mapping):
    """Lookup callable over a plain {ICAO: GeoPoint} dictionary."""
    def lookup(code):
        return mapping.get(code) if code else None

    return lookup
