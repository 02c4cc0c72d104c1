"""
tests/test_meter_reading_rules.py

Unit tests for the individual meter reading validation rules.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from app.domain.meter_reading import (
    BatchDuplicateTracker,
    LatestReading,
    MeterReadingRecord,
    ReferenceSnapshot,
    ValidationFailureKind,
)
from app.validators.meter_reading_rules import (
    AccountExistsRule,
    DuplicateInBatchRule,
    DuplicateInStoreRule,
    MeterValueFormatRule,
    OlderReadingRule,
    build_default_rules,
    parse_read_value,
)
from tests.conftest import FakeMeterReadingStore

READ_AT = datetime(2019, 4, 22, 9, 24)


def _record(account_id: int = 1, value_text: str = "00001", reading_at: datetime = READ_AT) -> MeterReadingRecord:
    return MeterReadingRecord(account_id=account_id, reading_at=reading_at, value_text=value_text)


def _snapshot(account_ids=(1, 2), latest=None) -> ReferenceSnapshot:
    return ReferenceSnapshot.create(valid_account_ids=set(account_ids), latest_reading_by_account=latest or {})


class TestParseReadValue:
    @pytest.mark.parametrize("text, expected", [("00001", 1), ("-5", -5), ("+7", 7), ("123456", 123456)])
    def test_parses_signed_integers(self, text: str, expected: int) -> None:
        assert parse_read_value(text) == expected

    @pytest.mark.parametrize("text", ["", "VOID", "1.5", None])
    def test_returns_none_for_non_integers(self, text) -> None:
        assert parse_read_value(text) is None


class TestAccountExistsRule:
    def test_known_account_passes(self) -> None:
        outcome = AccountExistsRule().validate(_record(1), _snapshot(), BatchDuplicateTracker())
        assert outcome.is_valid

    def test_unknown_account_fails(self) -> None:
        outcome = AccountExistsRule().validate(_record(3), _snapshot(), BatchDuplicateTracker())

        assert not outcome.is_valid
        assert outcome.kind is ValidationFailureKind.ACCOUNT_NOT_FOUND
        assert outcome.message == "Invalid AccountId: 3. Account does not exist."


class TestMeterValueFormatRule:
    @pytest.mark.parametrize("text", ["0", "00001", "99999", "12345"])
    def test_accepts_one_to_five_digits(self, text: str) -> None:
        outcome = MeterValueFormatRule().validate(_record(value_text=text), _snapshot(), BatchDuplicateTracker())
        assert outcome.is_valid

    @pytest.mark.parametrize("text", ["123456", "-1", "+1", "1.0", "VOID", "12a"])
    def test_rejects_other_formats(self, text: str) -> None:
        outcome = MeterValueFormatRule().validate(_record(value_text=text), _snapshot(), BatchDuplicateTracker())

        assert not outcome.is_valid
        assert outcome.kind is ValidationFailureKind.BAD_VALUE_FORMAT
        assert outcome.message == f"Invalid MeterReadValue format: '{text}'. Must be NNNNN (1-5 digits)."

    def test_empty_value_has_its_own_message(self) -> None:
        outcome = MeterValueFormatRule().validate(_record(value_text=""), _snapshot(), BatchDuplicateTracker())

        assert not outcome.is_valid
        assert outcome.message == "MeterReadValue is missing or empty."

    def test_rejects_non_ascii_digits(self) -> None:
        outcome = MeterValueFormatRule().validate(
            _record(value_text="١٢٣"), _snapshot(), BatchDuplicateTracker()
        )
        assert not outcome.is_valid


class TestDuplicateInBatchRule:
    def test_first_occurrence_passes_and_is_recorded(self) -> None:
        tracker = BatchDuplicateTracker()

        outcome = DuplicateInBatchRule().validate(_record(value_text="00001"), _snapshot(), tracker)

        assert outcome.is_valid
        assert (1, READ_AT, 1) in tracker

    def test_second_occurrence_fails(self) -> None:
        tracker = BatchDuplicateTracker()
        rule = DuplicateInBatchRule()
        rule.validate(_record(value_text="00001"), _snapshot(), tracker)

        outcome = rule.validate(_record(value_text="1"), _snapshot(), tracker)

        assert not outcome.is_valid
        assert outcome.kind is ValidationFailureKind.DUPLICATE_IN_BATCH
        assert outcome.message == "Duplicate entry found within the uploaded file/batch."
        assert len(tracker) == 1

    def test_unparsable_value_reports_precondition_and_records_nothing(self) -> None:
        tracker = BatchDuplicateTracker()

        outcome = DuplicateInBatchRule().validate(_record(value_text="VOID"), _snapshot(), tracker)

        assert not outcome.is_valid
        assert outcome.message.startswith("Invalid value format prevented batch duplicate check.")
        assert len(tracker) == 0


class TestDuplicateInStoreRule:
    def test_declares_lookup(self) -> None:
        assert DuplicateInStoreRule(FakeMeterReadingStore()).requires_lookup is True

    def test_existing_reading_fails(self) -> None:
        store = FakeMeterReadingStore(existing={(1, READ_AT, 1)})

        outcome = DuplicateInStoreRule(store).validate(_record(value_text="00001"), _snapshot(), BatchDuplicateTracker())

        assert not outcome.is_valid
        assert outcome.kind is ValidationFailureKind.DUPLICATE_IN_STORE
        assert outcome.message == "Duplicate entry already exists in the database."
        assert store.exists_calls == [(1, READ_AT, 1)]

    def test_new_reading_passes(self) -> None:
        store = FakeMeterReadingStore()

        outcome = DuplicateInStoreRule(store).validate(_record(), _snapshot(), BatchDuplicateTracker())

        assert outcome.is_valid


class TestOlderReadingRule:
    def _latest(self, when: datetime) -> dict[int, LatestReading]:
        return {1: LatestReading(account_id=1, reading_at=when, value=10)}

    def test_older_reading_fails(self) -> None:
        snapshot = _snapshot(latest=self._latest(datetime(2019, 4, 23, 10, 0)))

        outcome = OlderReadingRule().validate(_record(), snapshot, BatchDuplicateTracker())

        assert not outcome.is_valid
        assert outcome.kind is ValidationFailureKind.OLDER_THAN_LATEST
        assert outcome.message == (
            "Reading date (22/04/2019 09:24) is older than latest existing reading date "
            "(23/04/2019 10:00) for this account."
        )

    def test_equal_timestamp_passes(self) -> None:
        snapshot = _snapshot(latest=self._latest(READ_AT))

        assert OlderReadingRule().validate(_record(), snapshot, BatchDuplicateTracker()).is_valid

    def test_account_without_readings_passes(self) -> None:
        assert OlderReadingRule().validate(_record(), _snapshot(), BatchDuplicateTracker()).is_valid


def test_default_rules_keep_evaluation_order() -> None:
    rules = build_default_rules(FakeMeterReadingStore())

    assert [rule.name for rule in rules] == [
        "AccountExistsRule",
        "MeterValueFormatRule",
        "DuplicateInBatchRule",
        "DuplicateInStoreRule",
        "OlderReadingRule",
    ]
    assert [rule.requires_lookup for rule in rules] == [False, False, False, True, False]
