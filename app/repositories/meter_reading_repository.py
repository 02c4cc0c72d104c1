"""
app/repositories/meter_reading_repository.py

SQLAlchemy persistence for accounts and meter readings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import exists, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.account import AccountInput
from app.domain.meter_reading import LatestReading, MeterReadingInput
from app.repositories.errors import (
    MeterReadingPersistenceError,
    MeterReadingRepositoryError,
    ReferenceDataUnavailableError,
)
from db.models.account import Account
from db.models.meter_reading import MeterReading

_DEFAULT_CHUNK_SIZE = 1000
_READING_KEY_COLUMNS = ("account_id", "reading_at", "value")


class MeterReadingRepository:
    """
    Repository implementing the ``MeterReadingStore`` contract over one session.
    """

    def __init__(self, session: Session, *, save_chunk_size: int = _DEFAULT_CHUNK_SIZE) -> None:
        self._session = session
        self._chunk_size = max(1, save_chunk_size)

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    def get_valid_account_ids(self) -> set[int]:
        try:
            return set(self._session.scalars(select(Account.account_id)).all())
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise ReferenceDataUnavailableError(
                f"Unable to load account ids ({exc.__class__.__name__})."
            ) from exc

    def get_latest_reading_per_account(
        self,
        account_ids: Iterable[int],
    ) -> dict[int, LatestReading]:
        """
        Return the most recent stored reading for each requested account.

        Accounts without readings are absent from the result. When two
        readings share the latest timestamp, the larger value wins.
        """

        ids = sorted(set(account_ids))
        if not ids:
            return {}

        latest: dict[int, LatestReading] = {}
        try:
            for start in range(0, len(ids), self._chunk_size):
                chunk = ids[start : start + self._chunk_size]
                ranked = (
                    select(
                        MeterReading.account_id,
                        MeterReading.reading_at,
                        MeterReading.value,
                        func.row_number()
                        .over(
                            partition_by=MeterReading.account_id,
                            order_by=(MeterReading.reading_at.desc(), MeterReading.value.desc()),
                        )
                        .label("position"),
                    )
                    .where(MeterReading.account_id.in_(chunk))
                    .subquery()
                )
                stmt = select(ranked.c.account_id, ranked.c.reading_at, ranked.c.value).where(
                    ranked.c.position == 1
                )
                for account_id, reading_at, value in self._session.execute(stmt):
                    latest[account_id] = LatestReading(
                        account_id=account_id,
                        reading_at=reading_at,
                        value=value,
                    )
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise ReferenceDataUnavailableError(
                f"Unable to load latest meter readings ({exc.__class__.__name__})."
            ) from exc

        return latest

    def exists_reading(self, account_id: int, reading_at: datetime, value: int) -> bool:
        stmt = select(
            exists().where(
                MeterReading.account_id == account_id,
                MeterReading.reading_at == reading_at,
                MeterReading.value == value,
            )
        )
        try:
            return bool(self._session.scalar(stmt))
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise MeterReadingRepositoryError(
                f"Unable to check for an existing meter reading ({exc.__class__.__name__})."
            ) from exc

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def save_readings(self, batch: Sequence[MeterReadingInput]) -> int:
        """
        Insert all readings in one transaction and return how many were stored.

        Rows that collide with the unique reading key are skipped and not
        counted. Any database error rolls the whole batch back.
        """

        if not batch:
            return 0

        payloads: list[dict[str, Any]] = [
            {
                "account_id": reading.account_id,
                "reading_at": reading.reading_at,
                "value": reading.value,
            }
            for reading in batch
        ]

        try:
            inserted = self._insert_ignoring_conflicts(
                MeterReading,
                payloads,
                conflict_columns=_READING_KEY_COLUMNS,
                returning=MeterReading.id,
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise MeterReadingPersistenceError(
                f"Failed to persist meter readings ({exc.__class__.__name__})."
            ) from exc

        return inserted

    def upsert_accounts(self, accounts: Sequence[AccountInput]) -> int:
        """
        Insert accounts whose ids are not yet known; return the number inserted.
        """

        if not accounts:
            return 0

        payloads: list[dict[str, Any]] = [
            {
                "account_id": account.account_id,
                "first_name": account.first_name,
                "last_name": account.last_name,
            }
            for account in accounts
        ]

        try:
            inserted = self._insert_ignoring_conflicts(
                Account,
                payloads,
                conflict_columns=("account_id",),
                returning=Account.account_id,
            )
            self._session.commit()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise MeterReadingRepositoryError(
                f"Failed to persist accounts ({exc.__class__.__name__})."
            ) from exc

        return inserted

    def _insert_ignoring_conflicts(
        self,
        model: type[Any],
        payloads: Sequence[dict[str, Any]],
        *,
        conflict_columns: Sequence[str],
        returning: Any,
    ) -> int:
        dialect_name = self._session.get_bind().dialect.name
        insert = sqlite.insert if dialect_name == "sqlite" else postgresql.insert

        inserted = 0
        for start in range(0, len(payloads), self._chunk_size):
            chunk = payloads[start : start + self._chunk_size]
            stmt = (
                insert(model)
                .values(list(chunk))
                .on_conflict_do_nothing(index_elements=list(conflict_columns))
                .returning(returning)
            )
            inserted += len(self._session.scalars(stmt).all())
        return inserted
