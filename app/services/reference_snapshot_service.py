"""
app/services/reference_snapshot_service.py

Loads the per-upload reference data used by the validation rules.
"""

from __future__ import annotations

import logging

from app.domain.meter_reading import ReferenceSnapshot
from app.repositories.errors import ReferenceDataUnavailableError
from app.repositories.meter_reading_store import MeterReadingStore

logger = logging.getLogger(__name__)


class ReferenceSnapshotBuilder:
    """
    Builds one ``ReferenceSnapshot`` from the store.

    Called once per upload, before any row is read.
    """

    def __init__(self, store: MeterReadingStore) -> None:
        self._store = store

    def build(self) -> ReferenceSnapshot:
        """
        Fetch known account ids and the latest reading of each account.

        Raises ReferenceDataUnavailableError when the store cannot be read.
        """

        logger.debug("Building reference snapshot")
        try:
            account_ids = set(self._store.get_valid_account_ids())
            latest_readings = self._store.get_latest_reading_per_account(account_ids)
        except ReferenceDataUnavailableError:
            raise
        except Exception as exc:
            logger.error("Reference data could not be loaded: %s", exc)
            raise ReferenceDataUnavailableError(
                f"Failed to build validation context: {exc}"
            ) from exc

        snapshot = ReferenceSnapshot.create(
            valid_account_ids=account_ids,
            latest_reading_by_account=latest_readings,
        )
        logger.debug(
            "Reference snapshot built accounts=%d accounts_with_readings=%d",
            len(snapshot.valid_account_ids),
            len(snapshot.latest_reading_by_account),
        )
        return snapshot
