"""
app/domain/account.py

Domain models used by account seeding.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AccountInput:
    """
    Account row prepared for insertion.
    """

    account_id: int
    first_name: str
    last_name: str


@dataclass(frozen=True)
class AccountSeedSummary:
    """
    End-of-run account seeding summary.
    """

    rows_read: int
    accounts_inserted: int
    rows_skipped: int
    errors: list[str] = field(default_factory=list)
