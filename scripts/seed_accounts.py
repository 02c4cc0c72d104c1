"""
Seed the accounts table from a CSV file (AccountId,FirstName,LastName).
"""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from app.repositories.meter_reading_repository import MeterReadingRepository
from app.services.account_seed_service import AccountSeedService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed accounts from a CSV file.")
    parser.add_argument("path", type=Path, help="Path to the accounts CSV file.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    if not args.path.is_file():
        parser.error(f"File not found: {args.path}")

    with SessionLocal() as db, args.path.open("rb") as handle:
        summary = AccountSeedService(MeterReadingRepository(db)).seed_from_stream(handle)

    payload = {
        "rows_read": summary.rows_read,
        "accounts_inserted": summary.accounts_inserted,
        "rows_skipped": summary.rows_skipped,
        "errors": summary.errors,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
