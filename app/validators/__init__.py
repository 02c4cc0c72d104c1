"""
app/validators package marker.
"""

from app.validators.meter_reading_rules import (
    AccountExistsRule,
    BaseMeterReadingRule,
    DuplicateInBatchRule,
    DuplicateInStoreRule,
    MeterValueFormatRule,
    OlderReadingRule,
    build_default_rules,
)
from app.validators.rule_engine import MeterReadingRuleEngine

__all__ = [
    "AccountExistsRule",
    "BaseMeterReadingRule",
    "DuplicateInBatchRule",
    "DuplicateInStoreRule",
    "MeterReadingRuleEngine",
    "MeterValueFormatRule",
    "OlderReadingRule",
    "build_default_rules",
]
