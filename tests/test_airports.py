"""Tests for the airport coordinate lookup in :mod:`airports`."""

from __future__ import annotations

import json
import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from airports import get_airport_coords, load_airport_lookup, load_airport_overrides, lookup_from_mapping
from celestial import GeoPoint


def test_airportsdata_provides_icao_coordinates():
    point = get_airport_coords("CYYZ")

    assert point is not None
    assert point.latitude == pytest.approx(43.68, abs=0.05)
    assert point.longitude == pytest.approx(-79.63, abs=0.05)


def test_codes_are_normalised():
    assert get_airport_coords(" cyow ") == get_airport_coords("CYOW")


def test_unknown_code_is_none():
    assert get_airport_coords("QQQQ") is None
    assert get_airport_coords(None) is None


def test_overrides_win_and_add_airports(tmp_path):
    path = tmp_path / "airports.json"
    path.write_text(json.dumps({"cyyz": {"lat": 10.0, "lon": 20.0}, "QQQQ": {"lat": -1.5, "lon": 2.5}}))

    lookup = load_airport_lookup(str(path))

    assert lookup("CYYZ") == GeoPoint(10.0, 20.0)
    assert lookup("QQQQ") == GeoPoint(-1.5, 2.5)
    assert lookup("CYOW") == get_airport_coords("CYOW")


def test_bad_override_entries_are_skipped(tmp_path, capsys):
    path = tmp_path / "airports.json"
    path.write_text(json.dumps({"AAAA": {"lat": 95.0, "lon": 0.0}, "BBBB": {"lat": 1.0}, "CCCC": {"lat": 1.0, "lon": 2.0}}))

    overrides = load_airport_overrides(str(path))

    assert overrides == {"CCCC": GeoPoint(1.0, 2.0)}
    assert capsys.readouterr().out.count("Warning") == 2


def test_missing_override_file_warns(tmp_path, capsys):
    assert load_airport_overrides(str(tmp_path / "missing.json")) == {}
    assert "not found" in capsys.readouterr().out


def test_malformed_override_file(tmp_path, capsys):
    path = tmp_path / "airports.json"
    path.write_text("{not json")

    assert load_airport_overrides(str(path)) == {}
    assert "Error" in capsys.readouterr().out


def test_lookup_from_mapping():
    lookup = lookup_from_mapping({"CYYZ": GeoPoint(1.0, 2.0)})

    assert lookup("CYYZ") == GeoPoint(1.0, 2.0)
    assert lookup("CYOW") is None
    assert lookup(None) is None
