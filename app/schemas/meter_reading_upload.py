"""
app/schemas/meter_reading_upload.py

Response schemas for meter reading upload endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.domain.meter_reading import MeterReadingUploadResult


class MeterReadingUploadResponse(BaseModel):
    """
    API response model for one processed upload.

    ``failedReadings`` is -1 when reference data could not be loaded and no
    row was processed.
    """

    model_config = ConfigDict(populate_by_name=True)

    successful_readings: int = Field(..., ge=0, alias="successfulReadings")
    failed_readings: int = Field(..., ge=-1, alias="failedReadings")
    errors: list[str] = Field(default_factory=list)
    file_name: str | None = Field(default=None, alias="fileName")

    @classmethod
    def from_result(cls, result: MeterReadingUploadResult) -> MeterReadingUploadResponse:
        return cls(
            successful_readings=result.successful_readings,
            failed_readings=result.failed_readings,
            errors=list(result.errors),
            file_name=result.file_name,
        )
