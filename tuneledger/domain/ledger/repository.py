"""Repository protocol for ledger operations."""

from __future__ import annotations

from typing import Protocol, Sequence

from tuneledger.infrastructure.database.models import LedgerEntry as LedgerEntryModel


class LedgerRepository(Protocol):
    async def get_balance(self, account_id: str) -> int | None:
        ...

    async def decrement_balance(self, account_id: str, amount_cents: int) -> int | None:
        ...

    async def increment_balance(self, account_id: str, amount_cents: int) -> int | None:
        ...

    async def add_entry(
        self,
        *,
        account_id: str,
        kind: str,
        amount_cents: int,
        balance_before_cents: int,
        balance_after_cents: int,
        job_ref: str | None = None,
        external_ref: str | None = None,
        description: str | None = None,
        processed_by: str | None = None,
    ) -> LedgerEntryModel:
        ...

    async def attach_job(self, entry_id: int, job_id: str) -> LedgerEntryModel:
        ...

    async def get_entry(self, entry_id: int) -> LedgerEntryModel | None:
        ...

    async def get_by_external_ref(self, external_ref: str) -> LedgerEntryModel | None:
        ...

    async def list_entries(self, account_id: str, limit: int, offset: int) -> Sequence[LedgerEntryModel]:
        ...

    async def replay_entries(self, account_id: str) -> Sequence[LedgerEntryModel]:
        ...
