"""Ledger domain exports"""

from .exceptions import DuplicateExternalRef, InsufficientFunds, InvalidAmount, LedgerError, UnknownAccount
from .models import CreditOutcome, EntryKind, LedgerAudit, LedgerEntry
from .service import LedgerService

__all__ = [
    "CreditOutcome",
    "DuplicateExternalRef",
    "EntryKind",
    "InsufficientFunds",
    "InvalidAmount",
    "LedgerAudit",
    "LedgerEntry",
    "LedgerError",
    "LedgerService",
    "UnknownAccount",
]
