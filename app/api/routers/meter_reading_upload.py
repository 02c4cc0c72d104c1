"""
app/api/routers/meter_reading_upload.py

Meter reading upload HTTP endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_csv_upload, get_meter_reading_upload_orchestrator
from app.schemas.meter_reading_upload import MeterReadingUploadResponse
from app.services.meter_reading_upload_service import MeterReadingUploadOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/meter-reading-uploads", tags=["meter-readings"])


@router.post("", response_model=MeterReadingUploadResponse)
def upload_meter_readings(
    file: UploadFile = Depends(get_csv_upload),
    orchestrator: MeterReadingUploadOrchestrator = Depends(get_meter_reading_upload_orchestrator),
) -> MeterReadingUploadResponse:
    """
    Process one meter reading CSV. Row failures are reported in the body, not as HTTP errors.
    """

    file_name = file.filename
    logger.info("Meter reading upload received file=%s size=%s", file_name, file.size)
    try:
        file.file.seek(0)
        result = orchestrator.process_upload(file.file, file_name=file_name)
    except Exception as exc:
        logger.exception("Unexpected error processing meter reading upload file=%s", file_name)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=(
                f"An unexpected error occurred while processing the file '{file_name}'. "
                "Please check server logs or contact support."
            ),
        ) from exc
    finally:
        file.file.close()

    logger.info(
        "Meter reading upload processed file=%s successful=%d failed=%d",
        file_name,
        result.successful_readings,
        result.failed_readings,
    )
    return MeterReadingUploadResponse.from_result(result)
