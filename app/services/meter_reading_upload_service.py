"""
app/services/meter_reading_upload_service.py

Service layer for meter reading upload orchestration.

One upload runs through these stages:

    1. ReferenceSnapshotBuilder.build()  - loads accounts and latest readings once
    2. MeterReadingCSVReader.iter_rows()  - streams rows lazily from the file
    3. MeterReadingRuleEngine.evaluate()  - validates each parsed row
    4. MeterReadingStore.save_readings()  - persists every valid row in one call

A snapshot failure aborts the upload before the file is read. Row failures are
counted and reported without stopping the stream. Save failures and partial
saves are reconciled into the returned counts. No failure kind escapes this
module as an exception; every one becomes an error line on the result.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import IO, Any

from sqlalchemy.orm import Session

from app.config import get_meter_upload_settings
from app.domain.meter_reading import (
    CONTEXT_FAILURE_SENTINEL,
    BatchDuplicateTracker,
    MeterReadingInput,
    MeterReadingRecord,
    MeterReadingUploadResult,
    ReferenceSnapshot,
    RowParseResult,
)
from app.logging_utils import UploadEventLog
from app.parsers.meter_reading_csv_reader import MeterReadingCSVReader
from app.repositories.meter_reading_repository import MeterReadingRepository
from app.repositories.meter_reading_store import MeterReadingStore
from app.services.reference_snapshot_service import ReferenceSnapshotBuilder
from app.validators.meter_reading_rules import build_default_rules
from app.validators.rule_engine import MeterReadingRuleEngine

logger = logging.getLogger(__name__)

_UNNAMED_STREAM = "Unnamed Stream"
_DETAIL_DATETIME_FORMAT = "%d/%m/%y %H:%M"


class MeterReadingUploadOrchestrator:
    """
    Coordinates reference loading, CSV streaming, validation, and persistence.
    """

    def __init__(
        self,
        *,
        store: MeterReadingStore,
        reader: MeterReadingCSVReader | None = None,
        rule_engine: MeterReadingRuleEngine | None = None,
        snapshot_builder: ReferenceSnapshotBuilder | None = None,
        log_validation_errors: bool = True,
    ) -> None:
        self._store = store
        self._reader = reader or MeterReadingCSVReader()
        self._rule_engine = rule_engine or MeterReadingRuleEngine(build_default_rules(store))
        self._snapshot_builder = snapshot_builder or ReferenceSnapshotBuilder(store)
        self._log_validation_errors = log_validation_errors

    def process_upload(
        self,
        stream: IO[Any],
        file_name: str | None = None,
    ) -> MeterReadingUploadResult:
        """
        Process one CSV upload and return its per-row accounting.

        Args:
            stream:     Binary or text stream positioned at the start of the CSV.
            file_name:  Optional original file name, echoed on the result.
        """
        log_name = file_name or _UNNAMED_STREAM
        result = MeterReadingUploadResult(file_name=file_name)
        events = UploadEventLog(logger, log_name)
        events.emit("meter_upload_started")

        try:
            snapshot = self._snapshot_builder.build()
        except Exception as exc:  # noqa: BLE001
            logger.critical(
                "Failed to build validation context for file %s. Aborting processing.",
                log_name,
                exc_info=True,
            )
            result.failed_readings = CONTEXT_FAILURE_SENTINEL
            result.errors.append(
                f"Critical Error: Failed to initialize validation context - {exc}. Upload aborted."
            )
            events.emit("meter_upload_aborted", level=logging.CRITICAL, reason=str(exc))
            return result

        pending = self._stream_rows(
            stream=stream,
            snapshot=snapshot,
            result=result,
            log_name=log_name,
        )

        if pending:
            self._persist(pending=pending, result=result, log_name=log_name)
        else:
            logger.info("No valid readings found to save from file %s.", log_name)

        events.emit(
            "meter_upload_completed",
            successful_readings=result.successful_readings,
            failed_readings=result.failed_readings,
            error_count=len(result.errors),
        )
        return result

    # ------------------------------------------------------------------
    # Streaming
    # ------------------------------------------------------------------

    def _stream_rows(
        self,
        *,
        stream: IO[Any],
        snapshot: ReferenceSnapshot,
        result: MeterReadingUploadResult,
        log_name: str,
    ) -> list[MeterReadingInput]:
        tracker = BatchDuplicateTracker()
        pending: list[MeterReadingInput] = []
        rows: Iterator[RowParseResult] | None = None

        try:
            rows = self._reader.iter_rows(stream)
            for parse_result in rows:
                reading = self._process_row(
                    parse_result=parse_result,
                    snapshot=snapshot,
                    tracker=tracker,
                    result=result,
                    log_name=log_name,
                )
                if reading is not None:
                    pending.append(reading)
        except Exception as exc:  # noqa: BLE001
            logger.critical(
                "Unexpected error during stream processing for file %s. Processing stopped.",
                log_name,
                exc_info=True,
            )
            result.errors.append(
                f"Critical Error during processing: {exc}. Results may be incomplete."
            )
        finally:
            close = getattr(rows, "close", None)
            if close is not None:
                close()

        return pending

    def _process_row(
        self,
        *,
        parse_result: RowParseResult,
        snapshot: ReferenceSnapshot,
        tracker: BatchDuplicateTracker,
        result: MeterReadingUploadResult,
        log_name: str,
    ) -> MeterReadingInput | None:
        row_id = f"Row {parse_result.row_number}"

        record = parse_result.record
        if not parse_result.is_success or record is None:
            result.failed_readings += 1
            self._record_error(
                result,
                f"{row_id}: Parse Error - {parse_result.error}",
                log_name=log_name,
            )
            return None

        detail = _record_detail(record)
        messages = self._rule_engine.evaluate(record, snapshot, tracker)
        if messages:
            result.failed_readings += 1
            for message in messages:
                self._record_error(result, f"{row_id}: {message} ({detail})", log_name=log_name)
            return None

        try:
            value = int(record.value_text)
        except ValueError:
            result.failed_readings += 1
            result.errors.append(
                f"{row_id}: Internal Error - Failed to parse validated value "
                f"'{record.value_text}'. ({detail})"
            )
            logger.error(
                "Internal error parsing validated value for %s in %s: %r",
                row_id,
                log_name,
                record,
            )
            return None

        return MeterReadingInput(
            account_id=record.account_id,
            reading_at=record.reading_at,
            value=value,
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _persist(
        self,
        *,
        pending: list[MeterReadingInput],
        result: MeterReadingUploadResult,
        log_name: str,
    ) -> None:
        attempted = len(pending)
        logger.info("Attempting to save %d valid readings from file %s.", attempted, log_name)

        try:
            saved = self._store.save_readings(pending)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Database save operation failed for batch from file %s.",
                log_name,
                exc_info=True,
            )
            result.successful_readings = 0
            result.failed_readings += attempted
            result.errors.append(
                f"Database Save Failed: {exc}. None of the {attempted} prepared readings could be saved."
            )
            return

        if saved > attempted or saved < 0:
            logger.warning(
                "Store reported %d saved readings for a batch of %d from file %s.",
                saved,
                attempted,
                log_name,
            )
            saved = min(max(saved, 0), attempted)

        result.successful_readings = saved
        if saved < attempted:
            shortfall = attempted - saved
            result.failed_readings += shortfall
            result.errors.append(
                f"Database Warning: Only {saved} of {attempted} readings were saved. "
                f"{shortfall} failed, possibly due to duplicates or other DB constraints. Check logs."
            )
            logger.warning(
                "Partial save occurred for %s: %d/%d readings saved.",
                log_name,
                saved,
                attempted,
            )
        else:
            logger.info("Successfully saved %d readings from file %s.", saved, log_name)

    def _record_error(
        self,
        result: MeterReadingUploadResult,
        message: str,
        *,
        log_name: str,
    ) -> None:
        if self._log_validation_errors:
            logger.warning("Meter upload row rejected file=%s: %s", log_name, message)
        result.errors.append(message)


def _record_detail(record: MeterReadingRecord) -> str:
    return (
        f"Acc={record.account_id}, "
        f"Date={record.reading_at.strftime(_DETAIL_DATETIME_FORMAT)}, "
        f"Val='{record.value_text}'"
    )


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_meter_reading_upload_orchestrator(db: Session) -> MeterReadingUploadOrchestrator:
    """
    Build an orchestrator bound to one SQLAlchemy session with env-driven settings.
    """
    settings = get_meter_upload_settings()
    repository = MeterReadingRepository(db, save_chunk_size=settings.save_chunk_size)
    return MeterReadingUploadOrchestrator(
        store=repository,
        log_validation_errors=settings.log_validation_errors,
    )
