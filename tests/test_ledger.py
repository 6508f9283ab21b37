"""Ledger store: balances, idempotent credits, guarded debits and replay."""
import asyncio
from decimal import Decimal

import pytest
from sqlalchemy import select

from tests.conftest import balance_of, create_account, new_id, run
from tuneledger.domain.ledger import EntryKind, InsufficientFunds, InvalidAmount, LedgerService, UnknownAccount
from tuneledger.infrastructure.database.immutability import ImmutableRecordError
from tuneledger.infrastructure.database.models import LedgerEntry as LedgerEntryModel


async def _credit(session_factory, account_id, amount, external_ref):
    async with session_factory() as session:
        outcome = await LedgerService.with_session(session).credit(
            account_id=account_id, amount=Decimal(amount), external_ref=external_ref
        )
        await session.commit()
        return outcome


async def _debit(session_factory, account_id, amount):
    async with session_factory() as session:
        entry = await LedgerService.with_session(session).debit(account_id=account_id, amount=Decimal(amount))
        await session.commit()
        return entry


async def _entries(session_factory, account_id):
    async with session_factory() as session:
        return await LedgerService.with_session(session).list_entries(account_id)


class TestCredit:
    def test_credit_increases_balance_and_records_entry(self, session_factory):
        account = create_account(session_factory)

        outcome = run(_credit(session_factory, account.id, "50.00", "pay_1"))

        assert outcome.duplicate is False
        assert outcome.entry.kind is EntryKind.PURCHASE_CREDIT
        assert outcome.entry.amount == Decimal("50.00")
        assert outcome.entry.balance_before == Decimal("0.00")
        assert outcome.entry.balance_after == Decimal("50.00")
        assert run(balance_of(session_factory, account.id)) == Decimal("50.00")

    def test_replayed_external_ref_applies_once(self, session_factory):
        account = create_account(session_factory)

        first = run(_credit(session_factory, account.id, "50.00", "pay_1"))
        second = run(_credit(session_factory, account.id, "50.00", "pay_1"))

        assert second.duplicate is True
        assert second.entry.id == first.entry.id
        assert run(balance_of(session_factory, account.id)) == Decimal("50.00")
        assert len(run(_entries(session_factory, account.id))) == 1

    def test_concurrent_deliveries_credit_once(self, session_factory):
        account = create_account(session_factory)

        async def _race():
            return await asyncio.gather(
                *(_credit(session_factory, account.id, "25.00", "pay_race") for _ in range(4))
            )

        outcomes = run(_race())

        assert sum(1 for outcome in outcomes if not outcome.duplicate) == 1
        assert len({outcome.entry.id for outcome in outcomes}) == 1
        assert run(balance_of(session_factory, account.id)) == Decimal("25.00")

    def test_unknown_account_is_rejected(self, session_factory):
        with pytest.raises(UnknownAccount):
            run(_credit(session_factory, new_id(), "10.00", "pay_x"))

    @pytest.mark.parametrize("amount", ["0", "-5.00", "1.005"])
    def test_invalid_amounts_are_rejected(self, session_factory, amount):
        account = create_account(session_factory)
        with pytest.raises(InvalidAmount):
            run(_credit(session_factory, account.id, amount, "pay_bad"))


class TestDebit:
    def test_debit_decreases_balance(self, session_factory):
        account = create_account(session_factory, balance=Decimal("100.00"))

        entry = run(_debit(session_factory, account.id, "30.00"))

        assert entry.kind is EntryKind.JOB_DEBIT
        assert entry.amount == Decimal("-30.00")
        assert entry.balance_before == Decimal("100.00")
        assert entry.balance_after == Decimal("70.00")
        assert run(balance_of(session_factory, account.id)) == Decimal("70.00")

    def test_insufficient_funds_writes_nothing(self, session_factory):
        account = create_account(session_factory, balance=Decimal("20.00"))

        with pytest.raises(InsufficientFunds) as exc_info:
            run(_debit(session_factory, account.id, "20.01"))

        assert exc_info.value.required == Decimal("20.01")
        assert exc_info.value.available == Decimal("20.00")
        assert run(balance_of(session_factory, account.id)) == Decimal("20.00")
        assert len(run(_entries(session_factory, account.id))) == 1

    def test_debit_to_exactly_zero_is_allowed(self, session_factory):
        account = create_account(session_factory, balance=Decimal("20.00"))

        entry = run(_debit(session_factory, account.id, "20.00"))

        assert entry.balance_after == Decimal("0.00")

    def test_concurrent_debits_never_overdraw(self, session_factory):
        account = create_account(session_factory, balance=Decimal("100.00"))

        async def _race():
            return await asyncio.gather(
                _debit(session_factory, account.id, "80.00"),
                _debit(session_factory, account.id, "80.00"),
                return_exceptions=True,
            )

        results = run(_race())

        assert sum(1 for result in results if isinstance(result, InsufficientFunds)) == 1
        assert run(balance_of(session_factory, account.id)) == Decimal("20.00")


class TestAdjustments:
    def test_positive_adjustment_records_admin(self, session_factory):
        account = create_account(session_factory)
        admin = create_account(session_factory, role="admin")

        async def _adjust():
            async with session_factory() as session:
                entry = await LedgerService.with_session(session).adjust(
                    account_id=account.id, amount=Decimal("15.00"), admin_id=admin.id, description="Goodwill"
                )
                await session.commit()
                return entry

        entry = run(_adjust())

        assert entry.kind is EntryKind.ADMIN_ADJUSTMENT
        assert entry.processed_by == admin.id
        assert run(balance_of(session_factory, account.id)) == Decimal("15.00")

    def test_negative_adjustment_cannot_go_below_zero(self, session_factory):
        account = create_account(session_factory, balance=Decimal("10.00"))
        admin = create_account(session_factory, role="admin")

        async def _adjust():
            async with session_factory() as session:
                await LedgerService.with_session(session).adjust(
                    account_id=account.id, amount=Decimal("-10.01"), admin_id=admin.id, description="Correction"
                )

        with pytest.raises(InsufficientFunds):
            run(_adjust())
        assert run(balance_of(session_factory, account.id)) == Decimal("10.00")


class TestReplay:
    def test_mixed_operations_replay_to_stored_balance(self, session_factory):
        account = create_account(session_factory, balance=Decimal("100.00"))
        run(_debit(session_factory, account.id, "35.50"))
        run(_credit(session_factory, account.id, "20.00", "pay_2"))
        run(_debit(session_factory, account.id, "4.50"))

        async def _verify():
            async with session_factory() as session:
                return await LedgerService.with_session(session).verify(account.id)

        audit = run(_verify())

        assert audit.consistent, audit.problems
        assert audit.entry_count == 4
        assert audit.balance == Decimal("80.00")

    def test_entries_listed_newest_first(self, session_factory):
        account = create_account(session_factory, balance=Decimal("100.00"))
        run(_debit(session_factory, account.id, "10.00"))

        entries = run(_entries(session_factory, account.id))

        assert [entry.kind for entry in entries] == [EntryKind.JOB_DEBIT, EntryKind.PURCHASE_CREDIT]


class TestImmutability:
    def test_entry_amount_cannot_be_rewritten(self, session_factory):
        account = create_account(session_factory, balance=Decimal("10.00"))

        async def _tamper():
            async with session_factory() as session:
                entry = (await session.execute(select(LedgerEntryModel))).scalars().first()
                entry.amount_cents = 999
                await session.flush()

        with pytest.raises(ImmutableRecordError):
            run(_tamper())

    def test_entry_cannot_be_deleted(self, session_factory):
        create_account(session_factory, balance=Decimal("10.00"))

        async def _delete():
            async with session_factory() as session:
                entry = (await session.execute(select(LedgerEntryModel))).scalars().first()
                await session.delete(entry)
                await session.flush()

        with pytest.raises(ImmutableRecordError):
            run(_delete())
