"""
tests/test_meter_reading_upload_router.py

HTTP contract tests for POST /api/meter-reading-uploads.

The orchestrator dependency is replaced with a stub so no database is needed.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api import dependencies
from app.api.dependencies import get_meter_reading_upload_orchestrator
from app.config import MeterUploadSettings
from app.domain.meter_reading import MeterReadingUploadResult
from app.main import create_app

UPLOAD_URL = "/api/meter-reading-uploads"
CSV_BYTES = b"AccountId,MeterReadingDateTime,MeterReadValue\n2344,22/04/2019 09:24,01002\n"


class _StubOrchestrator:
    def __init__(self, result: MeterReadingUploadResult | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.received: list[tuple[bytes, str | None]] = []

    def process_upload(self, stream, file_name=None) -> MeterReadingUploadResult:
        self.received.append((stream.read(), file_name))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def stub() -> _StubOrchestrator:
    return _StubOrchestrator(
        result=MeterReadingUploadResult(
            successful_readings=1,
            failed_readings=1,
            errors=["Row 3: Parse Error - bad row"],
            file_name="Meter_Reading.csv",
        )
    )


@pytest.fixture()
def client(stub: _StubOrchestrator) -> TestClient:
    application = create_app(check_database=False)
    application.dependency_overrides[get_meter_reading_upload_orchestrator] = lambda: stub
    return TestClient(application)


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_upload_returns_result_body(client: TestClient, stub: _StubOrchestrator) -> None:
    response = client.post(UPLOAD_URL, files={"file": ("Meter_Reading.csv", CSV_BYTES, "text/csv")})

    assert response.status_code == 200
    assert response.json() == {
        "successfulReadings": 1,
        "failedReadings": 1,
        "errors": ["Row 3: Parse Error - bad row"],
        "fileName": "Meter_Reading.csv",
    }
    assert stub.received == [(CSV_BYTES, "Meter_Reading.csv")]


def test_aborted_upload_is_still_ok(client: TestClient, stub: _StubOrchestrator) -> None:
    stub.result = MeterReadingUploadResult(
        failed_readings=-1,
        errors=["Critical Error: Failed to initialize validation context - down. Upload aborted."],
        file_name="Meter_Reading.csv",
    )

    response = client.post(UPLOAD_URL, files={"file": ("Meter_Reading.csv", CSV_BYTES, "text/csv")})

    assert response.status_code == 200
    assert response.json()["failedReadings"] == -1


def test_missing_file_is_rejected(client: TestClient) -> None:
    response = client.post(UPLOAD_URL)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide a file to upload."


def test_empty_file_is_rejected(client: TestClient) -> None:
    response = client.post(UPLOAD_URL, files={"file": ("Meter_Reading.csv", b"", "text/csv")})

    assert response.status_code == 400


@pytest.mark.parametrize(
    "filename, content_type",
    [
        ("readings.txt", "text/csv"),
        ("readings.csv", "application/json"),
    ],
)
def test_non_csv_upload_is_rejected(client: TestClient, filename: str, content_type: str) -> None:
    response = client.post(UPLOAD_URL, files={"file": (filename, CSV_BYTES, content_type)})

    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid file type. Please upload a valid CSV file (.csv)."


def test_oversized_upload_is_rejected(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        dependencies,
        "get_meter_upload_settings",
        lambda: MeterUploadSettings(max_upload_bytes=10),
    )

    response = client.post(UPLOAD_URL, files={"file": ("Meter_Reading.csv", CSV_BYTES, "text/csv")})

    assert response.status_code == 413


def test_unexpected_error_maps_to_500(client: TestClient, stub: _StubOrchestrator) -> None:
    stub.error = RuntimeError("boom")

    response = client.post(UPLOAD_URL, files={"file": ("Meter_Reading.csv", CSV_BYTES, "text/csv")})

    assert response.status_code == 500
    assert "Meter_Reading.csv" in response.json()["detail"]
