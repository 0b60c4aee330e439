import pandas as pd
from datetime import datetime
import argparse
import os

from airports import load_airport_lookup
from logbook_values import (
    LOGBOOK_FIELD_MAPPING,
    PILOT_ROLES,
    LogbookValidationError,
    compute_flight_record,
    logbook_entry,
)
from night_time import DEFAULT_TWILIGHT_ALTITUDE
from ofp_parser import DEFAULT_CARRIER_CODE

# Columns for the flight properties, appended after the logbook fields
PROPERTY_COLUMNS = {
    'pic_name': 'PIC Name',
    'sic_name': 'SIC Name',
    'pilot_flying_time': 'PF Time',
    'pilot_monitoring_time': 'PM Time',
}

# Time columns formatted with 1 decimal place
FLOAT_COLUMNS = ['TotalTime', 'SIC', 'PIC', 'CrossCountry', 'Night', 'IMC', 'PF Time', 'PM Time']


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Compute logbook entries, including night time and day/night landings, from OFP text files.',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    parser.add_argument(
        '--ofp',
        type=str,
        nargs='+',
        required=True,
        help='One or more OFP text files, one flight per file'
    )

    default_output = f"Logbook_{datetime.now().strftime('%Y-%m-%d')}.csv"

    parser.add_argument(
        '--output',
        type=str,
        default=default_output,
        help='Output CSV file path where the logbook entries will be written'
    )

    parser.add_argument(
        '--role',
        type=str,
        choices=list(PILOT_ROLES),
        default='PF',
        help='Pilot flying or pilot monitoring, applied to every flight'
    )

    parser.add_argument(
        '--twilight',
        type=float,
        default=DEFAULT_TWILIGHT_ALTITUDE,
        help='Solar altitude in degrees below which time counts as night'
    )

    parser.add_argument(
        '--airports',
        type=str,
        help='Optional JSON file of ICAO coordinate overrides ({"CYYZ": {"lat": .., "lon": ..}})'
    )

    parser.add_argument(
        '--carrier',
        type=str,
        default=DEFAULT_CARRIER_CODE,
        help='Carrier code prefixing flight numbers in the OFP'
    )

    return parser.parse_args(argv)


def entry_row(record):
    """Flatten a FlightRecord into one CSV row keyed by logbook column names."""
    entry = logbook_entry(record.values)
    row = {column: entry[column] for column in LOGBOOK_FIELD_MAPPING.values()}
    for prop in record.values.properties:
        row[PROPERTY_COLUMNS[prop.name]] = prop.value
    row['Night Minutes'] = record.night.night_minutes
    row['Night Reason'] = record.night.reason
    row['Landing Reason'] = record.landing.reason
    return row


def process_ofp_files(paths, output_csv, role='PF', twilight=DEFAULT_TWILIGHT_ALTITUDE,
                      airports_path=None, carrier_code=DEFAULT_CARRIER_CODE):
    """
    Compute a logbook entry for each OFP file and write them all to a CSV.

    Files that cannot be read or are missing required facts are skipped with
    a warning.

    Returns:
        Number of flights written
    """
    lookup = load_airport_lookup(airports_path)
    rows = []

    for path in paths:
        if not os.path.exists(path):
            print(f"Warning: OFP file '{path}' not found, skipping.")
            continue

        with open(path, encoding="utf-8", errors="replace") as f:
            raw_text = f.read()

        try:
            record = compute_flight_record(
                raw_text,
                pilot_role=role,
                lookup=lookup,
                twilight_altitude=twilight,
                carrier_code=carrier_code,
            )
        except LogbookValidationError as e:
            print(f"Warning: Skipping {path}: {e}")
            continue

        row = entry_row(record)
        row['Source'] = os.path.basename(path)
        rows.append(row)

    if not rows:
        raise ValueError("No valid flight data could be processed")

    df = pd.DataFrame(rows)
    df = df.sort_values(by=['Date', 'Source'], kind='stable')

    for col in FLOAT_COLUMNS:
        if col in df.columns:
            df[col] = df[col].apply(lambda x: round(float(x), 1))

    df.to_csv(output_csv, index=False)
    return len(rows)


def main(argv=None):
    """
    Process OFP text files into a CSV logbook.

    For every file the OFP is parsed, night time is sampled minute by minute
    along the great-circle route, the landing is classified as day or night,
    and the fixed logbook rules are applied.
    """
    args = parse_args(argv)

    print(f"Processing {len(args.ofp)} OFP file(s)...")
    count = process_ofp_files(
        args.ofp,
        args.output,
        role=args.role,
        twilight=args.twilight,
        airports_path=args.airports,
        carrier_code=args.carrier,
    )
    print(f"Wrote {count} flight(s) to {args.output}")
    return count


if __name__ == "__main__":
    main()
