"""Tests for the Flask endpoints in :mod:`app`."""

from __future__ import annotations

import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from airports import lookup_from_mapping
from app import app
from celestial import GeoPoint

OFP = """CJT123 DATE 01JAN24
ORIG CYYZ DEST CYOW
C-ABCD
CAPTAIN JOHN SMITH
FO JANE DOE
BLOCK 1.5
OUT 1400Z IN 1530Z
"""


@pytest.fixture
def client():
    app.config['TESTING'] = True
    app.config['AIRPORT_LOOKUP'] = lookup_from_mapping(
        {"CYYZ": GeoPoint(43.6772, -79.6306), "CYOW": GeoPoint(45.3225, -75.6692)}
    )
    app.config['LOGBOOK_SUBMITTER'] = None
    with app.test_client() as client:
        yield client
    app.config.pop('AIRPORT_LOOKUP', None)
    app.config['LOGBOOK_SUBMITTER'] = None


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json() == {"ok": True}


def test_ingest_requires_raw_text(client):
    response = client.post('/ingest', json={"pf_mode": "PF"})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Missing raw_text"


@pytest.mark.parametrize("body", [["x"], "raw text", 42])
def test_ingest_rejects_non_object_json(client, body):
    response = client.post('/ingest', json=body)

    assert response.status_code == 400
    assert response.get_json() == {"ok": False, "error": "Missing raw_text"}


def test_ingest_computes_entry(client):
    response = client.post('/ingest', json={"raw_text": OFP, "pf_mode": "PM"})
    body = response.get_json()

    assert response.status_code == 200
    assert body["ok"] is True
    assert body["pf_mode"] == "PM"
    assert body["result"] == "Computed"
    assert body["parsed"]["route"] == "CYYZ CYOW"
    assert body["computed"]["night"] == 0.0
    assert body["computed"]["fullStopDay"] == 1
    assert body["entry"]["TotalTime"] == 1.5
    assert body["entry"]["IMC"] == 1.4


def test_ingest_reports_missing_fields(client):
    response = client.post('/ingest', json={"raw_text": OFP.replace("BLOCK 1.5\n", "")})
    body = response.get_json()

    assert response.status_code == 422
    assert body["error"] == "ParserMissingFields"
    assert body["missing"] == ["block"]
    assert body["parsed"]["block"] is None


def test_ingest_reports_missing_airports(client):
    response = client.post('/ingest', json={"raw_text": OFP.replace("DEST CYOW", "DEST ZZZZ")})
    body = response.get_json()

    assert response.status_code == 422
    assert body["error"] == "MissingAirportCoords"
    assert body["missing_airports"] == ["ZZZZ"]


def test_ingest_hands_entry_to_submitter(client):
    submitted = []
    app.config['LOGBOOK_SUBMITTER'] = submitted.append

    response = client.post('/ingest', json={"raw_text": OFP})

    assert response.status_code == 200
    assert response.get_json()["result"] == "PendingFlightCreated"
    assert submitted[0]["Route"] == "CYYZ CYOW"
    assert submitted[0]["Properties"][2] == {"PropTypeID": 529, "DecValue": 1.5}


def test_ingest_reports_submitter_failure(client, capsys):
    def failing(entry):
        raise RuntimeError("logbook service unavailable")

    app.config['LOGBOOK_SUBMITTER'] = failing

    response = client.post('/ingest', json={"raw_text": OFP})

    assert response.status_code == 500
    assert response.get_json() == {"ok": False, "error": "logbook service unavailable"}
    assert "Error" in capsys.readouterr().out
