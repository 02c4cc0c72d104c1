"""
tests/conftest.py

Shared fixtures: an in-memory SQLite session with the full schema, and an
in-memory fake of the meter reading store.
"""

from __future__ import annotations

from collections.abc import Generator, Iterable, Sequence
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401  (registers tables on Base.metadata)
from app.domain.meter_reading import LatestReading, MeterReadingInput
from db.base import Base
from db.models.account import Account


class FakeMeterReadingStore:
    """
    Dictionary-backed store recording every call made against it.
    """

    def __init__(
        self,
        *,
        account_ids: Iterable[int] = (),
        latest: dict[int, LatestReading] | None = None,
        existing: Iterable[tuple[int, datetime, int]] = (),
        saved_count: int | None = None,
        save_error: Exception | None = None,
        accounts_error: Exception | None = None,
        exists_error: Exception | None = None,
        exists_error_after: int = 0,
    ) -> None:
        self.account_ids = set(account_ids)
        self.latest = dict(latest or {})
        self.existing = set(existing)
        self.saved_count = saved_count
        self.save_error = save_error
        self.accounts_error = accounts_error
        self.exists_error = exists_error
        self.exists_error_after = exists_error_after

        self.exists_calls: list[tuple[int, datetime, int]] = []
        self.saved_batches: list[list[MeterReadingInput]] = []
        self.latest_calls = 0

    def get_valid_account_ids(self) -> set[int]:
        if self.accounts_error is not None:
            raise self.accounts_error
        return set(self.account_ids)

    def get_latest_reading_per_account(self, account_ids: Iterable[int]) -> dict[int, LatestReading]:
        self.latest_calls += 1
        ids = set(account_ids)
        return {key: value for key, value in self.latest.items() if key in ids}

    def exists_reading(self, account_id: int, reading_at: datetime, value: int) -> bool:
        self.exists_calls.append((account_id, reading_at, value))
        if self.exists_error is not None and len(self.exists_calls) > self.exists_error_after:
            raise self.exists_error
        return (account_id, reading_at, value) in self.existing

    def save_readings(self, batch: Sequence[MeterReadingInput]) -> int:
        self.saved_batches.append(list(batch))
        if self.save_error is not None:
            raise self.save_error
        if self.saved_count is not None:
            return self.saved_count
        return len(batch)


@pytest.fixture()
def fake_store() -> FakeMeterReadingStore:
    return FakeMeterReadingStore(account_ids={1, 2})


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    session = factory()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def seeded_session(db_session: Session) -> Session:
    """Session with accounts 2344, 2233 and 8766 already stored."""
    db_session.add_all(
        [
            Account(account_id=2344, first_name="Tommy", last_name="Test"),
            Account(account_id=2233, first_name="Barry", last_name="Test"),
            Account(account_id=8766, first_name="Sally", last_name="Test"),
        ]
    )
    db_session.commit()
    return db_session
