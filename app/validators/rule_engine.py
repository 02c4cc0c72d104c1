"""
app/validators/rule_engine.py

Two-stage evaluation of meter reading rules.

Local rules run first, in declaration order, and all of their failures are
collected. Lookup rules run only when no local rule failed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from app.domain.meter_reading import (
    BatchDuplicateTracker,
    MeterReadingRecord,
    ReferenceSnapshot,
    ValidationOutcome,
)
from app.validators.meter_reading_rules import BaseMeterReadingRule

logger = logging.getLogger(__name__)


class MeterReadingRuleEngine:
    """
    Evaluates an ordered rule list against one record at a time.
    """

    def __init__(self, rules: Sequence[BaseMeterReadingRule]) -> None:
        self._local_rules = tuple(rule for rule in rules if not rule.requires_lookup)
        self._lookup_rules = tuple(rule for rule in rules if rule.requires_lookup)

    @property
    def local_rules(self) -> tuple[BaseMeterReadingRule, ...]:
        return self._local_rules

    @property
    def lookup_rules(self) -> tuple[BaseMeterReadingRule, ...]:
        return self._lookup_rules

    def evaluate(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> list[str]:
        """
        Return failure messages for *record*; an empty list means valid.
        """

        return [
            self._message_for(rule_name, outcome)
            for rule_name, outcome in self.evaluate_outcomes(record, snapshot, tracker)
        ]

    def evaluate_outcomes(
        self,
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> list[tuple[str, ValidationOutcome]]:
        """
        Return ``(rule_name, outcome)`` for every failed rule, in evaluation order.
        """

        failures = self._run_stage(self._local_rules, record, snapshot, tracker)
        if failures:
            logger.debug(
                "Lookup rules skipped for account=%s: %d local rule(s) failed",
                record.account_id,
                len(failures),
            )
            return failures

        return self._run_stage(self._lookup_rules, record, snapshot, tracker)

    @staticmethod
    def _run_stage(
        rules: Sequence[BaseMeterReadingRule],
        record: MeterReadingRecord,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
    ) -> list[tuple[str, ValidationOutcome]]:
        failures: list[tuple[str, ValidationOutcome]] = []
        for rule in rules:
            outcome = rule.validate(record, snapshot, tracker)
            if not outcome.is_valid:
                failures.append((rule.name, outcome))
        return failures

    @staticmethod
    def _message_for(rule_name: str, outcome: ValidationOutcome) -> str:
        return outcome.message or f"Validation failed (Rule: {rule_name})"
