"""
app/parsers package marker.
"""

from app.parsers.meter_reading_csv_reader import (
    EXPECTED_COLUMNS,
    READING_DATETIME_FORMAT,
    MeterReadingCSVReader,
)

__all__ = [
    "EXPECTED_COLUMNS",
    "READING_DATETIME_FORMAT",
    "MeterReadingCSVReader",
]
