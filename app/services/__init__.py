"""
app/services package marker.
"""

from app.services.account_seed_service import AccountSeedService
from app.services.meter_reading_upload_service import (
    MeterReadingUploadOrchestrator,
    create_meter_reading_upload_orchestrator,
)
from app.services.reference_snapshot_service import ReferenceSnapshotBuilder

__all__ = [
    "AccountSeedService",
    "MeterReadingUploadOrchestrator",
    "ReferenceSnapshotBuilder",
    "create_meter_reading_upload_orchestrator",
]
