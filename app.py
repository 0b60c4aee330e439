from flask import Flask, request, jsonify
import os
import argparse

from airports import load_airport_lookup
from logbook_values import (
    MissingAirportCoordsError,
    MissingFieldsError,
    compute_flight_record,
    computed_summary,
    logbook_entry,
    normalize_pilot_role,
)
from night_time import DEFAULT_TWILIGHT_ALTITUDE
from ofp_parser import DEFAULT_CARRIER_CODE, parse_ofp

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 3 * 1024 * 1024  # OFP pastes are small; cap at 3MB
app.config['AIRPORTS_PATH'] = os.environ.get('AIRPORTS_PATH')  # Optional JSON coordinate overrides
app.config['TWILIGHT_ALTITUDE'] = DEFAULT_TWILIGHT_ALTITUDE
app.config['CARRIER_CODE'] = DEFAULT_CARRIER_CODE
# Callable taking the logbook entry dict; set by the deployment that owns the
# logbook service credentials. Left unset, entries are computed but not sent.
app.config['LOGBOOK_SUBMITTER'] = None


def get_airport_lookup():
    """Airport lookup for this app, built once from AIRPORTS_PATH."""
    lookup = app.config.get('AIRPORT_LOOKUP')
    if lookup is None:
        lookup = load_airport_lookup(app.config.get('AIRPORTS_PATH'))
        app.config['AIRPORT_LOOKUP'] = lookup
    return lookup


@app.route('/ingest', methods=['POST'])
def ingest():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    raw = payload.get('raw_text')
    pf_mode = normalize_pilot_role(payload.get('pf_mode'))

    if not raw:
        return jsonify(ok=False, error="Missing raw_text"), 400

    carrier_code = app.config['CARRIER_CODE']

    try:
        record = compute_flight_record(
            raw,
            pilot_role=pf_mode,
            lookup=get_airport_lookup(),
            twilight_altitude=app.config['TWILIGHT_ALTITUDE'],
            carrier_code=carrier_code,
        )
    except MissingFieldsError as e:
        parsed = parse_ofp(raw, carrier_code=carrier_code).as_dict()
        return jsonify(ok=False, error="ParserMissingFields", missing=e.missing, parsed=parsed), 422
    except MissingAirportCoordsError as e:
        parsed = parse_ofp(raw, carrier_code=carrier_code).as_dict()
        return jsonify(
            ok=False,
            error="MissingAirportCoords",
            missing_airports=e.codes,
            hint="Add them to the airport file set in AIRPORTS_PATH",
            parsed=parsed,
        ), 422
    except Exception as e:
        print(f"Error: Failed to compute flight record: {e}")
        return jsonify(ok=False, error=str(e)), 500

    entry = logbook_entry(record.values)
    result = "Computed"
    submitter = app.config.get('LOGBOOK_SUBMITTER')
    if submitter:
        try:
            submitter(entry)
        except Exception as e:
            print(f"Error: Logbook submission failed: {e}")
            return jsonify(ok=False, error=str(e)), 500
        result = "PendingFlightCreated"

    return jsonify(
        ok=True,
        pf_mode=pf_mode,
        parsed=record.fact.as_dict(),
        computed=computed_summary(record),
        entry=entry,
        result=result,
    )


@app.route('/health', methods=['GET'])
def health():
    return jsonify(ok=True)


if __name__ == '__main__':
    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Run the OFP logbook web service')
    parser.add_argument('--port', type=int, default=int(os.environ.get('PORT', 3000)), help='Port to run the web server on')
    parser.add_argument('--host', type=str, default='127.0.0.1', help='Host to run the web server on')
    parser.add_argument('--airports', type=str, default=app.config['AIRPORTS_PATH'], help='JSON file of ICAO coordinate overrides')
    args = parser.parse_args()

    app.config['AIRPORTS_PATH'] = args.airports

    # Run the app
    app.run(debug=True, host=args.host, port=args.port)
