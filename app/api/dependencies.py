"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and service wiring.
"""

from __future__ import annotations

import os

from fastapi import Depends, File, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from app.config import get_meter_upload_settings
from app.services.meter_reading_upload_service import (
    MeterReadingUploadOrchestrator,
    create_meter_reading_upload_orchestrator,
)
from db.session import get_db

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}


def _upload_size(file: UploadFile) -> int:
    if file.size is not None:
        return file.size
    stream = file.file
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def get_csv_upload(file: UploadFile | None = File(default=None)) -> UploadFile:
    """
    Validate that a non-empty CSV file within the size limit was uploaded.
    """

    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a file to upload.",
        )

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    if not filename.endswith(".csv") or content_type not in CSV_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid file type. Please upload a valid CSV file (.csv).",
        )

    size = _upload_size(file)
    if size == 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide a file to upload.",
        )
    if size > get_meter_upload_settings().max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail="Uploaded file exceeds the maximum allowed size.",
        )

    return file


def get_meter_reading_upload_orchestrator(
    db: Session = Depends(get_db),
) -> MeterReadingUploadOrchestrator:
    return create_meter_reading_upload_orchestrator(db)
