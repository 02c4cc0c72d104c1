"""
Persistence contract used by the meter reading upload pipeline.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Protocol

from app.domain.meter_reading import LatestReading, MeterReadingInput


class MeterReadingStore(Protocol):
    """
    Storage collaborator for reference lookups and batch persistence.

    ``save_readings`` returns the number of rows actually stored, which may be
    lower than ``len(batch)`` when the store rejects some of them.
    """

    def get_valid_account_ids(self) -> set[int]:
        ...

    def get_latest_reading_per_account(
        self,
        account_ids: Iterable[int],
    ) -> dict[int, LatestReading]:
        ...

    def exists_reading(self, account_id: int, reading_at: datetime, value: int) -> bool:
        ...

    def save_readings(self, batch: Sequence[MeterReadingInput]) -> int:
        ...
