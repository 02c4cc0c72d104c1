"""
app/schemas package marker.
"""

from app.schemas.meter_reading_upload import MeterReadingUploadResponse

__all__ = [
    "MeterReadingUploadResponse",
]
