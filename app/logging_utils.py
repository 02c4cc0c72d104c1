"""
Structured lifecycle logging for meter reading uploads.

Each upload gets one ``UploadEventLog`` bound to its file name. Events are
written as compact JSON lines carrying the elapsed time since the log was
opened, so one upload can be followed end to end in aggregated logs.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any


class UploadEventLog:
    def __init__(self, logger: logging.Logger, file_name: str) -> None:
        self._logger = logger
        self._file_name = file_name
        self._started = time.perf_counter()

    @property
    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self._started) * 1000)

    def emit(self, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        payload = {
            "event": event,
            "file_name": self._file_name,
            "elapsed_ms": self.elapsed_ms,
            **fields,
        }
        self._logger.log(level, json.dumps(payload, default=str, sort_keys=True))
