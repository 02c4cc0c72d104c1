"""
Run a meter reading CSV upload from the command line.
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from app.services.meter_reading_upload_service import create_meter_reading_upload_orchestrator
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate and store meter readings from a CSV file.")
    parser.add_argument("path", type=Path, help="Path to the meter readings CSV file.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    if not args.path.is_file():
        parser.error(f"File not found: {args.path}")

    with SessionLocal() as db, args.path.open("rb") as handle:
        orchestrator = create_meter_reading_upload_orchestrator(db)
        result = orchestrator.process_upload(handle, file_name=args.path.name)

    payload = {
        "successfulReadings": result.successful_readings,
        "failedReadings": result.failed_readings,
        "errors": result.errors,
        "fileName": result.file_name,
    }
    print(json.dumps(payload, indent=2))
    return 1 if result.is_aborted else 0


if __name__ == "__main__":
    raise SystemExit(main())
