"""
db/models/meter_reading.py

Stored meter reading. One row per (account, reading time, value).
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from db.models.account import Account

METER_READING_UNIQUE_CONSTRAINT = "uq_meter_readings_account_reading_value"
METER_READING_MAX_VALUE = 99999


class MeterReading(Base, CreatedAtMixin):
    __tablename__ = "meter_readings"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    account_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("accounts.account_id", ondelete="CASCADE"),
        nullable=False,
    )
    reading_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        comment="Local meter reading time, minute precision",
    )
    value: Mapped[int] = mapped_column(Integer, nullable=False)

    account: Mapped["Account"] = relationship("Account", back_populates="meter_readings")

    __table_args__ = (
        UniqueConstraint(
            "account_id",
            "reading_at",
            "value",
            name=METER_READING_UNIQUE_CONSTRAINT,
        ),
        CheckConstraint(
            f"value >= 0 AND value <= {METER_READING_MAX_VALUE}",
            name="ck_meter_readings_value_range",
        ),
        Index("ix_meter_readings_account_reading_at", "account_id", "reading_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<MeterReading id={self.id} account_id={self.account_id} "
            f"reading_at={self.reading_at:%Y-%m-%d %H:%M} value={self.value}>"
        )
