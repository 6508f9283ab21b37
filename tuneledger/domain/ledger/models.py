"""Domain models for ledger operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class EntryKind(str, enum.Enum):
    PURCHASE_CREDIT = "purchase_credit"
    JOB_DEBIT = "job_debit"
    REFUND = "refund"
    ADMIN_ADJUSTMENT = "admin_adjustment"


CREDIT_KINDS = frozenset({EntryKind.PURCHASE_CREDIT, EntryKind.REFUND, EntryKind.ADMIN_ADJUSTMENT})


@dataclass(slots=True, frozen=True)
class LedgerEntry:
    id: int
    account_id: str
    kind: EntryKind
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    job_ref: Optional[str]
    external_ref: Optional[str]
    description: Optional[str]
    processed_by: Optional[str]
    created_at: datetime


@dataclass(slots=True, frozen=True)
class CreditOutcome:
    """Result of an idempotent credit; ``duplicate`` means nothing was applied."""

    entry: LedgerEntry
    duplicate: bool = False


@dataclass(slots=True)
class LedgerAudit:
    account_id: str
    balance: Decimal
    entry_count: int
    consistent: bool
    problems: list[str] = field(default_factory=list)
