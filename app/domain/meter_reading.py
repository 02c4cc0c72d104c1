"""
app/domain/meter_reading.py

Domain models used by the meter reading upload flow.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType

CONTEXT_FAILURE_SENTINEL = -1

ReadingKey = tuple[int, datetime, int]


@dataclass(frozen=True)
class MeterReadingRecord:
    """
    One parsed CSV row. The value stays textual until format validation.
    """

    account_id: int
    reading_at: datetime
    value_text: str


@dataclass(frozen=True)
class RowParseResult:
    """
    Outcome of reading one CSV data row (row 2 is the first row after the header).
    """

    row_number: int
    record: MeterReadingRecord | None = None
    error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.record is not None and self.error is None

    @classmethod
    def success(cls, row_number: int, record: MeterReadingRecord) -> RowParseResult:
        return cls(row_number=row_number, record=record)

    @classmethod
    def failure(cls, row_number: int, error: str) -> RowParseResult:
        return cls(row_number=row_number, error=error)


@dataclass(frozen=True)
class LatestReading:
    """
    Most recent stored reading for one account.
    """

    account_id: int
    reading_at: datetime
    value: int


@dataclass(frozen=True)
class ReferenceSnapshot:
    """
    Point-in-time reference data shared read-only by every rule of one upload.
    """

    valid_account_ids: frozenset[int]
    latest_reading_by_account: Mapping[int, LatestReading]

    @classmethod
    def create(
        cls,
        *,
        valid_account_ids: set[int] | frozenset[int],
        latest_reading_by_account: Mapping[int, LatestReading],
    ) -> ReferenceSnapshot:
        return cls(
            valid_account_ids=frozenset(valid_account_ids),
            latest_reading_by_account=MappingProxyType(dict(latest_reading_by_account)),
        )


class BatchDuplicateTracker:
    """
    Reading keys already seen within the current upload.

    A tracker belongs to exactly one upload and is never shared.
    """

    def __init__(self) -> None:
        self._seen: set[ReadingKey] = set()

    def add(self, key: ReadingKey) -> bool:
        """
        Insert ``key``; return False when it was already present.
        """

        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __contains__(self, key: object) -> bool:
        return key in self._seen

    def __len__(self) -> int:
        return len(self._seen)


class ValidationFailureKind(str, Enum):
    ACCOUNT_NOT_FOUND = "account_not_found"
    BAD_VALUE_FORMAT = "bad_value_format"
    INTERNAL_FORMAT_INCONSISTENCY = "internal_format_inconsistency"
    DUPLICATE_IN_BATCH = "duplicate_in_batch"
    DUPLICATE_IN_STORE = "duplicate_in_store"
    OLDER_THAN_LATEST = "older_than_latest"


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Result of one rule applied to one record.
    """

    is_valid: bool
    message: str | None = None
    kind: ValidationFailureKind | None = None

    @classmethod
    def success(cls) -> ValidationOutcome:
        return cls(is_valid=True)

    @classmethod
    def failure(cls, kind: ValidationFailureKind, message: str) -> ValidationOutcome:
        return cls(is_valid=False, message=message, kind=kind)


@dataclass(frozen=True)
class MeterReadingInput:
    """
    Typed meter reading prepared for persistence.
    """

    account_id: int
    reading_at: datetime
    value: int


@dataclass
class MeterReadingUploadResult:
    """
    End-of-run upload summary.

    ``failed_readings == CONTEXT_FAILURE_SENTINEL`` means reference data could
    not be loaded and no row was read.
    """

    successful_readings: int = 0
    failed_readings: int = 0
    errors: list[str] = field(default_factory=list)
    file_name: str | None = None

    @property
    def is_aborted(self) -> bool:
        return self.failed_readings == CONTEXT_FAILURE_SENTINEL
