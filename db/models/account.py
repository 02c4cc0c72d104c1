"""
db/models/account.py

Account model: the customer a meter reading is recorded against.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.meter_reading import MeterReading


class Account(Base, TimestampMixin):
    """
    Known customer account. Account ids come from the seed file, not a sequence.
    """

    __tablename__ = "accounts"

    account_id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)

    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # ── Relationships ──────────────────────────────────────────────────────────

    meter_readings: Mapped[list["MeterReading"]] = relationship(
        "MeterReading",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Account account_id={self.account_id} name={self.first_name!r} {self.last_name!r}>"
