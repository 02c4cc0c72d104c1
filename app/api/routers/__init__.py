"""
app/api/routers package marker.
"""

from app.api.routers.meter_reading_upload import router as meter_reading_upload_router

__all__ = [
    "meter_reading_upload_router",
]
