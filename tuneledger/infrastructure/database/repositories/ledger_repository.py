"""SQLAlchemy implementation for the ledger store."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import asc, desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.clock import utcnow
from tuneledger.infrastructure.database.models import Account, LedgerEntry


class SqlLedgerRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_balance(self, account_id: str) -> int | None:
        stmt = select(Account.balance_cents).where(Account.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def decrement_balance(self, account_id: str, amount_cents: int) -> int | None:
        """Atomically subtract ``amount_cents`` if the balance covers it.

        Returns the new balance, or ``None`` when the account is missing or
        the balance is too low. The guard lives in the WHERE clause so the read
        and the write are one statement.
        """
        stmt = (
            update(Account)
            .where(Account.id == account_id, Account.balance_cents >= amount_cents)
            .values(balance_cents=Account.balance_cents - amount_cents, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
            .returning(Account.balance_cents)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_balance(self, account_id: str, amount_cents: int) -> int | None:
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(balance_cents=Account.balance_cents + amount_cents, updated_at=utcnow())
            .execution_options(synchronize_session="fetch")
            .returning(Account.balance_cents)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

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
    ) -> LedgerEntry:
        entry = LedgerEntry(
            account_id=account_id,
            kind=kind,
            amount_cents=amount_cents,
            balance_before_cents=balance_before_cents,
            balance_after_cents=balance_after_cents,
            job_ref=job_ref,
            external_ref=external_ref,
            description=description,
            processed_by=processed_by,
            created_at=utcnow(),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def attach_job(self, entry_id: int, job_id: str) -> LedgerEntry:
        entry = await self.session.get(LedgerEntry, entry_id)
        if entry is None:
            raise LookupError(f"ledger entry {entry_id} not found")
        entry.job_ref = job_id
        await self.session.flush()
        return entry

    async def get_entry(self, entry_id: int) -> LedgerEntry | None:
        return await self.session.get(LedgerEntry, entry_id)

    async def get_by_external_ref(self, external_ref: str) -> LedgerEntry | None:
        stmt = select(LedgerEntry).where(LedgerEntry.external_ref == external_ref)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_entries(self, account_id: str, limit: int, offset: int) -> Sequence[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.account_id == account_id)
            .order_by(desc(LedgerEntry.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def replay_entries(self, account_id: str) -> Sequence[LedgerEntry]:
        stmt = (
            select(LedgerEntry)
            .where(LedgerEntry.account_id == account_id)
            .order_by(asc(LedgerEntry.id))
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
