"""
app/domain package marker.
"""

from app.domain.account import AccountInput, AccountSeedSummary
from app.domain.meter_reading import (
    BatchDuplicateTracker,
    LatestReading,
    MeterReadingInput,
    MeterReadingRecord,
    MeterReadingUploadResult,
    ReferenceSnapshot,
    RowParseResult,
    ValidationFailureKind,
    ValidationOutcome,
)

__all__ = [
    "AccountInput",
    "AccountSeedSummary",
    "BatchDuplicateTracker",
    "LatestReading",
    "MeterReadingInput",
    "MeterReadingRecord",
    "MeterReadingUploadResult",
    "ReferenceSnapshot",
    "RowParseResult",
    "ValidationFailureKind",
    "ValidationOutcome",
]
