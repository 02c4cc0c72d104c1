"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.account import Account
from db.models.meter_reading import MeterReading

__all__ = [
    "Account",
    "MeterReading",
]
