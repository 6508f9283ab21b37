"""Ledger domain specific exceptions."""

from __future__ import annotations

from decimal import Decimal

from tuneledger.core.errors import DomainError


class LedgerError(DomainError):
    """Base class for ledger domain errors."""


class InsufficientFunds(LedgerError):
    code = "insufficient_funds"
    status_code = 402

    def __init__(self, account_id: str, required: Decimal, available: Decimal) -> None:
        self.account_id = account_id
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient credits. Required: {required}, available: {available}",
            required=str(required),
            available=str(available),
        )


class DuplicateExternalRef(LedgerError):
    """A credit with this external reference already exists.

    Never raised to callers of ``LedgerService.credit``; duplicates come back
    as ``CreditOutcome(duplicate=True)``.
    """

    code = "duplicate_external_ref"
    status_code = 200


class UnknownAccount(LedgerError):
    code = "unknown_account"
    status_code = 404

    def __init__(self, account_id: str) -> None:
        self.account_id = account_id
        super().__init__(f"Account {account_id} does not exist", account_id=account_id)


class InvalidAmount(LedgerError):
    code = "invalid_amount"
    status_code = 422
