"""
app/validators/meter_reading_rules.py

Independent validation rules for parsed meter reading records.

Every rule declares ``requires_lookup``. Rules with ``requires_lookup = False``
only read the record, the reference snapshot and the batch duplicate tracker;
rules with ``requires_lookup = True`` query the store and are evaluated only
for records that passed every local rule.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from app.domain.meter_reading import (
    BatchDuplicateTracker,
    MeterReadingRecord,
    ReferenceSnapshot,
    ValidationFailureKind,
    ValidationOutcome,
)
from app.repositories.meter_reading_store import MeterReadingStore

_READ_VALUE_PATTERN = re.compile(r"[0-9]{1,5}")
_LENIENT_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_MESSAGE_DATETIME_FORMAT = "%d/%m/%Y %H:%M"


def parse_read_value(value_text: str | None) -> int | None:
    """
    Parse a meter value as an integer, or return None when it is not one.

    This is deliberately looser than the NNNNN format check: it only decides
    whether a reading key can be built at all.
    """

    if value_text is None or not _LENIENT_INTEGER_PATTERN.fullmatch(value_text):
        return None
    return int(value_text)


class BaseMeterReadingRule(ABC):
    """
    Contract for one meter reading validation check.

    Implementations return exactly one ``ValidationOutcome`` per record and
    must not raise for malformed record content.
    """

    requires_lookup: bool = False

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def validate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> ValidationOutcome:
        """
        Evaluate *record* and return success or a specific failure.
        """


class AccountExistsRule(BaseMeterReadingRule):
    requires_lookup = False

    def validate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> ValidationOutcome:
        if record.account_id not in snapshot.valid_account_ids:
            return ValidationOutcome.failure(
                ValidationFailureKind.ACCOUNT_NOT_FOUND,
                f"Invalid AccountId: {record.account_id}. Account does not exist.",
            )
        return ValidationOutcome.success()


class MeterValueFormatRule(BaseMeterReadingRule):
    """
    Value must be 1 to 5 ASCII digits with no sign, decimal point or padding.
    """

    requires_lookup = False

    def validate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> ValidationOutcome:
        value_text = record.value_text
        if value_text is None or not value_text.strip():
            return ValidationOutcome.failure(
                ValidationFailureKind.BAD_VALUE_FORMAT,
                "MeterReadValue is missing or empty.",
            )

        if not _READ_VALUE_PATTERN.fullmatch(value_text):
            return ValidationOutcome.failure(
                ValidationFailureKind.BAD_VALUE_FORMAT,
                f"Invalid MeterReadValue format: '{value_text}'. Must be NNNNN (1-5 digits).",
            )

        parsed = parse_read_value(value_text)
        if parsed is None or parsed < 0:
            return ValidationOutcome.failure(
                ValidationFailureKind.INTERNAL_FORMAT_INCONSISTENCY,
                f"Internal Error: MeterReadValue '{value_text}' passed format check "
                "but failed integer parsing.",
            )

        return ValidationOutcome.success()


class DuplicateInBatchRule(BaseMeterReadingRule):
    """
    Rejects a reading key already seen earlier in the same upload.

    The key is recorded on first sight, so only the second and later
    occurrences fail.
    """

    requires_lookup = False

    def validate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> ValidationOutcome:
        value = parse_read_value(record.value_text)
        if value is None:
            return ValidationOutcome.failure(
                ValidationFailureKind.BAD_VALUE_FORMAT,
                "Invalid value format prevented batch duplicate check. "
                "Ensure format validation runs first.",
            )

        if not tracker.add((record.account_id, record.reading_at, value)):
            return ValidationOutcome.failure(
                ValidationFailureKind.DUPLICATE_IN_BATCH,
                "Duplicate entry found within the uploaded file/batch.",
            )
        return ValidationOutcome.success()


class DuplicateInStoreRule(BaseMeterReadingRule):
    requires_lookup = True

    def __init__(self, store: MeterReadingStore) -> None:
        self._store = store

    def validate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> ValidationOutcome:
        value = parse_read_value(record.value_text)
        if value is None:
            return ValidationOutcome.failure(
                ValidationFailureKind.BAD_VALUE_FORMAT,
                "Invalid value format prevented database duplicate check.",
            )

        if self._store.exists_reading(record.account_id, record.reading_at, value):
            return ValidationOutcome.failure(
                ValidationFailureKind.DUPLICATE_IN_STORE,
                "Duplicate entry already exists in the database.",
            )
        return ValidationOutcome.success()


class OlderReadingRule(BaseMeterReadingRule):
    """
    A reading may not predate the latest stored reading for its account.

    Equal timestamps pass; exact repeats are left to the duplicate rules.
    """

    requires_lookup = False

    def validate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> ValidationOutcome:
        latest = snapshot.latest_reading_by_account.get(record.account_id)
        if latest is not None and record.reading_at < latest.reading_at:
            return ValidationOutcome.failure(
                ValidationFailureKind.OLDER_THAN_LATEST,
                f"Reading date ({record.reading_at.strftime(_MESSAGE_DATETIME_FORMAT)}) is older "
                f"than latest existing reading date ({latest.reading_at.strftime(_MESSAGE_DATETIME_FORMAT)}) "
                "for this account.",
            )
        return ValidationOutcome.success()


def build_default_rules(store: MeterReadingStore) -> list[BaseMeterReadingRule]:
    """
    Return the standard rule list in evaluation order.
    """

    return [
        AccountExistsRule(),
        MeterValueFormatRule(),
        DuplicateInBatchRule(),
        DuplicateInStoreRule(store),
        OlderReadingRule(),
    ]
