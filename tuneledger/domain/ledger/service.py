"""Ledger domain service.

The ledger owns every account balance. Each successful mutation changes the
balance and appends exactly one ``LedgerEntry`` inside a SAVEPOINT, so a failed
entry insert never leaves a moved balance behind.

* debits are a single compare-and-decrement statement; a balance that does not
  cover the amount yields ``InsufficientFunds`` and nothing is written;
* credits are idempotent on ``external_ref``; the UNIQUE constraint on that
  column, not a prior lookup, decides which of two racing deliveries wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.money import from_cents, to_cents
from tuneledger.infrastructure.database.models import LedgerEntry as LedgerEntryModel
from tuneledger.infrastructure.database.repositories.ledger_repository import SqlLedgerRepository

from .exceptions import InsufficientFunds, InvalidAmount, UnknownAccount
from .models import CREDIT_KINDS, CreditOutcome, EntryKind, LedgerAudit, LedgerEntry
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LedgerService:
    repository: LedgerRepository
    session: AsyncSession

    @classmethod
    def with_session(cls, session: AsyncSession) -> "LedgerService":
        return cls(SqlLedgerRepository(session), session)

    async def get_balance(self, account_id: str) -> Decimal:
        cents = await self.repository.get_balance(account_id)
        if cents is None:
            raise UnknownAccount(account_id)
        return from_cents(cents)

    async def debit(
        self,
        *,
        account_id: str,
        amount: Decimal,
        job_ref: Optional[str] = None,
        kind: EntryKind = EntryKind.JOB_DEBIT,
        description: Optional[str] = None,
        processed_by: Optional[str] = None,
    ) -> LedgerEntry:
        cents = self._positive_cents(amount)
        async with self.session.begin_nested():
            balance_after = await self.repository.decrement_balance(account_id, cents)
            if balance_after is None:
                available = await self.repository.get_balance(account_id)
                if available is None:
                    raise UnknownAccount(account_id)
                logger.info(
                    "Debit of %s refused for account %s (available %s)",
                    from_cents(cents), account_id, from_cents(available),
                )
                raise InsufficientFunds(account_id, from_cents(cents), from_cents(available))
            model = await self.repository.add_entry(
                account_id=account_id,
                kind=kind.value,
                amount_cents=-cents,
                balance_before_cents=balance_after + cents,
                balance_after_cents=balance_after,
                job_ref=job_ref,
                description=description,
                processed_by=processed_by,
            )
        logger.info(
            "Debited %s from account %s (%s -> %s)",
            from_cents(cents), account_id, from_cents(balance_after + cents), from_cents(balance_after),
        )
        return self._to_entry(model)

    async def credit(
        self,
        *,
        account_id: str,
        amount: Decimal,
        external_ref: str,
        kind: EntryKind = EntryKind.PURCHASE_CREDIT,
        job_ref: Optional[str] = None,
        description: Optional[str] = None,
        processed_by: Optional[str] = None,
    ) -> CreditOutcome:
        if kind not in CREDIT_KINDS:
            raise InvalidAmount(f"{kind.value} is not a credit kind")
        if not external_ref:
            raise InvalidAmount("Credits require an external reference")
        cents = self._positive_cents(amount)

        existing = await self.repository.get_by_external_ref(external_ref)
        if existing is not None:
            return self._duplicate(existing)

        try:
            async with self.session.begin_nested():
                balance_after = await self.repository.increment_balance(account_id, cents)
                if balance_after is None:
                    raise UnknownAccount(account_id)
                model = await self.repository.add_entry(
                    account_id=account_id,
                    kind=kind.value,
                    amount_cents=cents,
                    balance_before_cents=balance_after - cents,
                    balance_after_cents=balance_after,
                    job_ref=job_ref,
                    external_ref=external_ref,
                    description=description,
                    processed_by=processed_by,
                )
        except IntegrityError:
            existing = await self.repository.get_by_external_ref(external_ref)
            if existing is None:
                raise
            return self._duplicate(existing)

        logger.info(
            "Credited %s to account %s (%s, ref %s)",
            from_cents(cents), account_id, kind.value, external_ref,
        )
        return CreditOutcome(entry=self._to_entry(model), duplicate=False)

    async def adjust(
        self,
        *,
        account_id: str,
        amount: Decimal,
        admin_id: str,
        description: str,
    ) -> LedgerEntry:
        """Apply a signed admin adjustment.

        Negative adjustments go through the same guarded decrement as job
        debits, so an adjustment can never take a balance below zero.
        """
        try:
            cents = to_cents(amount)
        except ValueError as exc:
            raise InvalidAmount(str(exc)) from exc
        if cents == 0:
            raise InvalidAmount("Adjustment amount must not be zero")
        if cents < 0:
            return await self.debit(
                account_id=account_id,
                amount=from_cents(-cents),
                kind=EntryKind.ADMIN_ADJUSTMENT,
                description=description,
                processed_by=admin_id,
            )

        async with self.session.begin_nested():
            balance_after = await self.repository.increment_balance(account_id, cents)
            if balance_after is None:
                raise UnknownAccount(account_id)
            model = await self.repository.add_entry(
                account_id=account_id,
                kind=EntryKind.ADMIN_ADJUSTMENT.value,
                amount_cents=cents,
                balance_before_cents=balance_after - cents,
                balance_after_cents=balance_after,
                description=description,
                processed_by=admin_id,
            )
        logger.info("Admin %s adjusted account %s by %s", admin_id, account_id, from_cents(cents))
        return self._to_entry(model)

    async def attach_job(self, entry_id: int, job_id: str) -> LedgerEntry:
        model = await self.repository.attach_job(entry_id, job_id)
        return self._to_entry(model)

    async def list_entries(self, account_id: str, limit: int = 50, offset: int = 0) -> list[LedgerEntry]:
        rows = await self.repository.list_entries(account_id, limit, offset)
        return [self._to_entry(row) for row in rows]

    async def verify(self, account_id: str) -> LedgerAudit:
        """Replay the account's entries and compare them with the stored balance."""
        balance_cents = await self.repository.get_balance(account_id)
        if balance_cents is None:
            raise UnknownAccount(account_id)
        entries = await self.repository.replay_entries(account_id)

        problems: list[str] = []
        running: int | None = None
        for entry in entries:
            if running is None:
                running = entry.balance_before_cents
            if entry.balance_before_cents != running:
                problems.append(
                    f"entry {entry.id}: balance_before {entry.balance_before_cents} != expected {running}"
                )
            if entry.balance_before_cents + entry.amount_cents != entry.balance_after_cents:
                problems.append(f"entry {entry.id}: before + amount != after")
            if entry.balance_after_cents < 0:
                problems.append(f"entry {entry.id}: negative balance_after")
            running = entry.balance_after_cents

        expected = running if running is not None else balance_cents
        if expected != balance_cents:
            problems.append(f"stored balance {balance_cents} != replayed {expected}")
        if problems:
            logger.warning("Ledger replay for account %s found %d problem(s)", account_id, len(problems))
        return LedgerAudit(
            account_id=account_id,
            balance=from_cents(balance_cents),
            entry_count=len(entries),
            consistent=not problems,
            problems=problems,
        )

    def _duplicate(self, model: LedgerEntryModel) -> CreditOutcome:
        logger.warning("Credit %s already applied as entry %s; skipping", model.external_ref, model.id)
        return CreditOutcome(entry=self._to_entry(model), duplicate=True)

    @staticmethod
    def _positive_cents(amount: Decimal) -> int:
        try:
            cents = to_cents(amount)
        except ValueError as exc:
            raise InvalidAmount(str(exc)) from exc
        if cents <= 0:
            raise InvalidAmount("Amount must be positive")
        return cents

    @staticmethod
    def _to_entry(model: LedgerEntryModel) -> LedgerEntry:
        return LedgerEntry(
            id=model.id,
            account_id=model.account_id,
            kind=EntryKind(model.kind),
            amount=from_cents(model.amount_cents),
            balance_before=from_cents(model.balance_before_cents),
            balance_after=from_cents(model.balance_after_cents),
            job_ref=model.job_ref,
            external_ref=model.external_ref,
            description=model.description,
            processed_by=model.processed_by,
            created_at=model.created_at,
        )
