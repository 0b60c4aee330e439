"""Tests for OFP text extraction in :mod:`ofp_parser`."""

from __future__ import annotations

import pathlib
import sys
from datetime import date

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from ofp_parser import ClockTime, parse_ofp, parse_ofp_date, to_title_case

SAMPLE_OFP = """CJT123  DATE 01JAN24
ORIG CYYZ DEST CYOW
ACFT C-ABCD
CAPTAIN JOHN O'BRIEN
FO MARY-ANNE SMITH
BLOCK 1.5
OUT 1400Z OFF 1410Z ON 1520Z IN 1530Z
"""


def test_parse_ofp_extracts_every_field():
    fact = parse_ofp(SAMPLE_OFP)

    assert fact.flight_number == "CJT123"
    assert fact.date == date(2024, 1, 1)
    assert fact.iso_date == "2024-01-01"
    assert fact.origin == "CYYZ"
    assert fact.destination == "CYOW"
    assert fact.route == "CYYZ CYOW"
    assert fact.tail_number == "C-ABCD"
    assert fact.block_hours == 1.5
    assert fact.captain == "John O'Brien"
    assert fact.first_officer == "Mary-Anne Smith"
    assert fact.times.out == ClockTime(14, 0)
    assert fact.times.off == ClockTime(14, 10)
    assert fact.times.on == ClockTime(15, 20)
    assert fact.times.in_ == ClockTime(15, 30)
    assert fact.comments == "CJT123 CYYZ-CYOW"


def test_parse_ofp_leaves_unmatched_fields_absent():
    fact = parse_ofp("nothing useful here")

    assert fact.flight_number is None
    assert fact.date is None
    assert fact.origin is None
    assert fact.destination is None
    assert fact.route is None
    assert fact.tail_number is None
    assert fact.block_hours is None
    assert fact.captain is None
    assert fact.first_officer is None
    assert fact.times.out is None
    assert fact.times.in_ is None
    assert fact.comments == ""


def test_parse_ofp_handles_none_and_carriage_returns():
    assert parse_ofp(None).route is None

    fact = parse_ofp("ORIG CYYZ\rDEST CYOW\r\nOUT 0100\r")
    assert fact.route == "CYYZ CYOW"
    assert fact.times.out == ClockTime(1, 0)


def test_block_zero_is_present_not_missing():
    fact = parse_ofp("BLOCK 0.0")
    assert fact.block_hours == 0.0


def test_block_alternative_forms():
    assert parse_ofp("BLOCK: 2.3").block_hours == 2.3
    assert parse_ofp("block 11").block_hours == 11.0
    assert parse_ofp("BLOCK TIME 1.2").block_hours is None


def test_clock_times_are_case_insensitive_and_z_optional():
    fact = parse_ofp("out 2350 in 0010z")
    assert fact.times.out == ClockTime(23, 50)
    assert fact.times.in_ == ClockTime(0, 10)


def test_clock_time_rejects_invalid_minutes():
    assert parse_ofp("OUT 1275Z").times.out is None


def test_date_from_zulu_composite_token():
    fact = parse_ofp("RELEASE 15MAR24/13.45Z")
    assert fact.date == date(2024, 3, 15)


def test_date_from_bare_token():
    fact = parse_ofp("CJT456 01JAN24 CYYZ")
    assert fact.date == date(2024, 1, 1)


def test_unknown_month_leaves_date_absent():
    assert parse_ofp("DATE 01XYZ24").date is None


def test_parse_ofp_date_rejects_impossible_days():
    assert parse_ofp_date("31FEB24") is None
    assert parse_ofp_date("29FEB24") == date(2024, 2, 29)
    assert parse_ofp_date(None) is None


def test_flight_number_uses_configured_carrier():
    text = "CJT123 WJA4567"
    assert parse_ofp(text).flight_number == "CJT123"
    assert parse_ofp(text, carrier_code="WJA").flight_number == "WJA4567"
    assert parse_ofp("CJT12").flight_number is None


def test_crew_names_need_three_characters():
    assert parse_ofp("CAPTAIN AB").captain is None
    assert parse_ofp("CAPTAIN: ABE LINCOLN").captain == "Abe Lincoln"


def test_crew_names_stay_on_their_line():
    fact = parse_ofp("CAPTAIN JANE DOE\nFO RICK ROE\n")
    assert fact.captain == "Jane Doe"
    assert fact.first_officer == "Rick Roe"


def test_to_title_case():
    assert to_title_case("  MCDONALD-SMITH ") == "Mcdonald-Smith"
    assert to_title_case("d'arcy") == "D'Arcy"


def test_as_dict_renders_clock_times():
    parsed = parse_ofp(SAMPLE_OFP).as_dict()

    assert parsed["isoDate"] == "2024-01-01"
    assert parsed["route"] == "CYYZ CYOW"
    assert parsed["times"] == {"out": "1400Z", "off": "1410Z", "on": "1520Z", "in": "1530Z"}
