"""
Repository-layer exceptions for meter reading upload flows.
"""

from __future__ import annotations


class MeterReadingRepositoryError(Exception):
    """Base exception for meter reading repository failures."""


class ReferenceDataUnavailableError(MeterReadingRepositoryError):
    """Raised when account or latest-reading reference data cannot be loaded."""


class MeterReadingPersistenceError(MeterReadingRepositoryError):
    """Raised when a batch of meter readings cannot be persisted."""
