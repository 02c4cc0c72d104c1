"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

_DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class MeterUploadSettings:
    """
    Runtime settings for meter reading uploads.
    """

    max_upload_bytes: int = _DEFAULT_MAX_UPLOAD_BYTES
    log_validation_errors: bool = True
    save_chunk_size: int = 1000


@dataclass(frozen=True)
class LoggingSettings:
    """
    Process-wide logging settings.
    """

    level: str = "INFO"


@lru_cache(maxsize=1)
def get_meter_upload_settings() -> MeterUploadSettings:
    """
    Return cached meter upload settings from environment variables.
    """

    return MeterUploadSettings(
        max_upload_bytes=max(1, _get_int_env("METER_UPLOAD_MAX_BYTES", _DEFAULT_MAX_UPLOAD_BYTES)),
        log_validation_errors=_get_bool_env("METER_UPLOAD_LOG_VALIDATION_ERRORS", True),
        save_chunk_size=max(1, _get_int_env("METER_UPLOAD_SAVE_CHUNK_SIZE", 1000)),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """
    Return cached logging settings.
    """

    return LoggingSettings(level=_get_str_env("LOG_LEVEL", "INFO").upper())
