"""
app/repositories package marker.
"""

from app.repositories.errors import (
    MeterReadingPersistenceError,
    MeterReadingRepositoryError,
    ReferenceDataUnavailableError,
)
from app.repositories.meter_reading_repository import MeterReadingRepository
from app.repositories.meter_reading_store import MeterReadingStore

__all__ = [
    "MeterReadingPersistenceError",
    "MeterReadingRepository",
    "MeterReadingRepositoryError",
    "MeterReadingStore",
    "ReferenceDataUnavailableError",
]
