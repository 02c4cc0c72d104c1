"""
tests/test_meter_reading_upload_flow.py

End-to-end upload through the real repository on in-memory SQLite.
"""

from __future__ import annotations

import io

from sqlalchemy.orm import Session

from app.repositories.meter_reading_repository import MeterReadingRepository
from app.services.meter_reading_upload_service import MeterReadingUploadOrchestrator

CSV_TEXT = (
    "AccountId,MeterReadingDateTime,MeterReadValue,\n"
    "2344,22/04/2019 09:24,01002,\n"
    "2233,22/04/2019 12:25,00323,\n"
    "8766,22/04/2019 12:25,VOID,\n"
    "2344,22/04/2019 09:24,01002,\n"
    "9999,22/04/2019 12:25,00001,\n"
)


def _upload(session: Session, text: str):
    orchestrator = MeterReadingUploadOrchestrator(store=MeterReadingRepository(session))
    return orchestrator.process_upload(io.BytesIO(text.encode("utf-8")), file_name="Meter_Reading.csv")


def test_upload_persists_only_valid_rows(seeded_session: Session) -> None:
    result = _upload(seeded_session, CSV_TEXT)

    assert result.successful_readings == 2
    assert result.failed_readings == 3
    assert MeterReadingRepository(seeded_session).get_latest_reading_per_account({2344, 2233}).keys() == {
        2344,
        2233,
    }


def test_second_upload_of_same_file_rejects_store_duplicates(seeded_session: Session) -> None:
    _upload(seeded_session, CSV_TEXT)

    result = _upload(seeded_session, CSV_TEXT)

    assert result.successful_readings == 0
    assert result.failed_readings == 5
    assert sum("Duplicate entry already exists in the database." in error for error in result.errors) == 2


def test_older_reading_rejected_after_newer_one_saved(seeded_session: Session) -> None:
    header = "AccountId,MeterReadingDateTime,MeterReadValue\n"
    _upload(seeded_session, header + "2344,25/04/2019 09:24,01100\n")

    result = _upload(seeded_session, header + "2344,22/04/2019 09:24,01002\n")

    assert result.successful_readings == 0
    assert "is older than latest existing reading date (25/04/2019 09:24)" in result.errors[0]
