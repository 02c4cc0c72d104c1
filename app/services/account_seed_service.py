"""
app/services/account_seed_service.py

Seeds the accounts table from a CSV file (AccountId,FirstName,LastName).
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Mapping
from typing import IO, Any

from app.domain.account import AccountInput, AccountSeedSummary
from app.repositories.meter_reading_repository import MeterReadingRepository

logger = logging.getLogger(__name__)

_NAME_MAX_LENGTH = 100


class AccountSeedService:
    """
    Reads account rows, skips invalid ones, and inserts unknown accounts.
    """

    def __init__(self, repository: MeterReadingRepository) -> None:
        self._repository = repository

    def seed_from_stream(self, stream: IO[Any]) -> AccountSeedSummary:
        text_stream: io.TextIOWrapper | None = None
        if isinstance(stream, io.TextIOBase):
            source: IO[str] = stream
        else:
            text_stream = io.TextIOWrapper(stream, encoding="utf-8-sig", newline="")
            source = text_stream

        accounts: list[AccountInput] = []
        errors: list[str] = []
        rows_read = 0
        try:
            reader = csv.DictReader(source)
            if reader.fieldnames:
                reader.fieldnames = [name.strip() for name in reader.fieldnames]
            for row_number, raw_row in enumerate(reader, start=2):
                rows_read += 1
                account, error = self._parse_row(raw_row)
                if error is not None:
                    errors.append(f"Row {row_number}: {error}")
                    continue
                if account is not None:
                    accounts.append(account)
        finally:
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

        inserted = self._repository.upsert_accounts(accounts)
        logger.info(
            "Account seeding finished rows_read=%d inserted=%d skipped=%d",
            rows_read,
            inserted,
            len(errors),
        )
        return AccountSeedSummary(
            rows_read=rows_read,
            accounts_inserted=inserted,
            rows_skipped=len(errors),
            errors=errors,
        )

    @staticmethod
    def _parse_row(raw_row: Mapping[str, Any]) -> tuple[AccountInput | None, str | None]:
        account_text = str(raw_row.get("AccountId") or "").strip()
        first_name = str(raw_row.get("FirstName") or "").strip()
        last_name = str(raw_row.get("LastName") or "").strip()

        if not (account_text.isascii() and account_text.isdigit()):
            return None, f"Invalid AccountId '{account_text}'."
        if not first_name or not last_name:
            return None, "FirstName and LastName are required."
        if len(first_name) > _NAME_MAX_LENGTH or len(last_name) > _NAME_MAX_LENGTH:
            return None, f"Names must be at most {_NAME_MAX_LENGTH} characters."

        return (
            AccountInput(
                account_id=int(account_text),
                first_name=first_name,
                last_name=last_name,
            ),
            None,
        )
