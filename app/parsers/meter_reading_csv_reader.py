"""
app/parsers/meter_reading_csv_reader.py

Lazy row-by-row reader for meter reading CSV uploads.

Rows are produced one at a time from the underlying stream, so files larger
than available memory can be processed. Each produced item is a
``RowParseResult`` carrying either a parsed record or a readable cause.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from collections.abc import Iterator, Mapping, Sequence
from datetime import datetime
from typing import IO, Any

from app.domain.meter_reading import MeterReadingRecord, RowParseResult

logger = logging.getLogger(__name__)

ACCOUNT_ID_COLUMN = "AccountId"
READING_DATETIME_COLUMN = "MeterReadingDateTime"
READ_VALUE_COLUMN = "MeterReadValue"

EXPECTED_COLUMNS: tuple[str, ...] = (
    ACCOUNT_ID_COLUMN,
    READING_DATETIME_COLUMN,
    READ_VALUE_COLUMN,
)
# MeterReadValue may be absent; value validation rejects the empty string later.
REQUIRED_COLUMNS: tuple[str, ...] = (ACCOUNT_ID_COLUMN, READING_DATETIME_COLUMN)

READING_DATETIME_FORMAT = "%d/%m/%Y %H:%M"
READING_DATETIME_DISPLAY = "dd/MM/yyyy HH:mm"

_READING_DATETIME_PATTERN = re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4} [0-9]{2}:[0-9]{2}")
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_EXTRA_FIELDS_KEY = "__extra_fields__"
_FIRST_DATA_ROW = 2


class MeterReadingCSVReader:
    """
    Turns a CSV stream into a lazy sequence of per-row parse results.
    """

    def __init__(self, *, encoding: str = "utf-8-sig") -> None:
        self._encoding = encoding

    def iter_rows(self, stream: IO[Any]) -> Iterator[RowParseResult]:
        """
        Yield one ``RowParseResult`` per data row, numbering from row 2.

        Binary streams are wrapped for decoding and detached again when the
        iteration ends, so the caller keeps ownership of the file object.
        Header-only and empty streams yield nothing.
        """

        text_stream: io.TextIOWrapper | None = None
        if isinstance(stream, io.TextIOBase):
            source: IO[str] = stream
        else:
            text_stream = io.TextIOWrapper(stream, encoding=self._encoding, newline="")
            source = text_stream

        try:
            yield from self._read(source)
        finally:
            if text_stream is not None:
                try:
                    text_stream.detach()
                except ValueError:
                    pass

    def _read(self, source: IO[str]) -> Iterator[RowParseResult]:
        reader = csv.DictReader(source, restkey=_EXTRA_FIELDS_KEY, restval=None)
        try:
            fieldnames = reader.fieldnames
        except csv.Error as exc:
            logger.warning("CSV header could not be read: %s", exc)
            return
        if not fieldnames:
            return

        headers = [name.strip() for name in fieldnames]
        reader.fieldnames = headers
        missing_columns = [column for column in REQUIRED_COLUMNS if column not in headers]
        if missing_columns:
            logger.warning("CSV header is missing required columns: %s", ", ".join(missing_columns))

        rows = iter(reader)
        row_number = _FIRST_DATA_ROW - 1
        while True:
            row_number += 1
            try:
                raw_row = next(rows)
            except StopIteration:
                return
            except csv.Error as exc:
                logger.warning("CSV lexer error at row %s: %s", row_number, exc)
                yield RowParseResult.failure(row_number, f"CSV Parsing Error: {exc}")
                continue

            yield self._parse_row(
                raw_row=raw_row,
                row_number=row_number,
                headers=headers,
                missing_columns=missing_columns,
            )

    def _parse_row(
        self,
        *,
        raw_row: Mapping[str, Any],
        row_number: int,
        headers: Sequence[str],
        missing_columns: Sequence[str],
    ) -> RowParseResult:
        if missing_columns:
            return RowParseResult.failure(
                row_number,
                f"Missing Field Error: Field with name '{missing_columns[0]}' does not exist in the header.",
            )

        extra_fields = raw_row.get(_EXTRA_FIELDS_KEY)
        if extra_fields:
            return RowParseResult.failure(
                row_number,
                f"Column Count Error: Row has {len(headers) + len(extra_fields)} fields "
                f"but the header defines {len(headers)}.",
            )

        account_text = self._cell(raw_row, ACCOUNT_ID_COLUMN)
        if not _INTEGER_PATTERN.fullmatch(account_text):
            return RowParseResult.failure(
                row_number,
                self._conversion_error("AccountId must be a whole number.", account_text, ACCOUNT_ID_COLUMN),
            )

        reading_text = self._cell(raw_row, READING_DATETIME_COLUMN)
        reading_at = self._parse_reading_datetime(reading_text)
        if reading_at is None:
            return RowParseResult.failure(
                row_number,
                self._conversion_error(
                    f"MeterReadingDateTime must match {READING_DATETIME_DISPLAY}.",
                    reading_text,
                    READING_DATETIME_COLUMN,
                ),
            )

        return RowParseResult.success(
            row_number,
            MeterReadingRecord(
                account_id=int(account_text),
                reading_at=reading_at,
                value_text=self._cell(raw_row, READ_VALUE_COLUMN),
            ),
        )

    @staticmethod
    def _parse_reading_datetime(text: str) -> datetime | None:
        if not _READING_DATETIME_PATTERN.fullmatch(text):
            return None
        try:
            return datetime.strptime(text, READING_DATETIME_FORMAT)
        except ValueError:
            return None

    @staticmethod
    def _cell(raw_row: Mapping[str, Any], column: str) -> str:
        value = raw_row.get(column)
        if value is None:
            return ""
        return str(value).strip()

    @staticmethod
    def _conversion_error(reason: str, text: str, column: str) -> str:
        return f"Type Conversion Error: {reason} (Field Value: '{text}', Target Field: '{column}')"
