"""Debit-on-create and job transitions through the service layer."""
import asyncio
import re
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from tests.conftest import VEHICLE, balance_of, create_account, run
from tuneledger.core.errors import Unauthorized
from tuneledger.domain.catalog import CatalogService, UnknownServiceCode
from tuneledger.domain.jobs import (
    InvalidTransition,
    JobNotFound,
    JobService,
    JobStatus,
    RevisionReasonRequired,
    TransitionConflict,
    VehicleInfo,
)
from tuneledger.domain.ledger import EntryKind, InsufficientFunds, InvalidAmount, LedgerService
from tuneledger.domain.messages import MessageService
from tuneledger.infrastructure.database.models import Job as JobModel
from tuneledger.infrastructure.database.models import LedgerEntry as LedgerEntryModel


async def _create(session_factory, owner_id, codes):
    async with session_factory() as session:
        created = await JobService.with_session(session).create_job(
            owner_id=owner_id, vehicle=VehicleInfo(**VEHICLE), codes=codes
        )
        await session.commit()
        return created


async def _transition(session_factory, job_id, target, actor, **kwargs):
    async with session_factory() as session:
        job = await JobService.with_session(session).transition(job_id=job_id, target=target, actor=actor, **kwargs)
        await session.commit()
        return job


async def _count(session_factory, model):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(model))).scalar_one()


class TestCreateJob:
    def test_job_is_paid_and_snapshotted(self, seeded):
        owner = create_account(seeded, balance=Decimal("300.00"))

        created = run(_create(seeded, owner.id, ["stage1", "dpf_off"]))

        job = created.job
        assert job.status is JobStatus.PENDING
        assert job.credits_used == Decimal("250.00")
        assert [(item.code, item.price) for item in job.priced_items] == [
            ("stage1", Decimal("150.00")),
            ("dpf_off", Decimal("100.00")),
        ]
        assert re.fullmatch(r"TUN-\d{8}-0001", job.reference_number)
        assert created.balance_after == Decimal("50.00")
        assert run(balance_of(seeded, owner.id)) == Decimal("50.00")

        async def _debit_entry():
            async with seeded() as session:
                entries = await LedgerService.with_session(session).list_entries(owner.id)
                return entries[0]

        entry = run(_debit_entry())
        assert entry.id == created.ledger_entry_id
        assert entry.kind is EntryKind.JOB_DEBIT
        assert entry.job_ref == job.id
        assert entry.amount == Decimal("-250.00")

    def test_reference_numbers_are_sequential(self, seeded):
        owner = create_account(seeded, balance=Decimal("500.00"))

        first = run(_create(seeded, owner.id, ["egr_off"])).job
        second = run(_create(seeded, owner.id, ["egr_off"])).job

        assert first.reference_number.endswith("-0001")
        assert second.reference_number.endswith("-0002")

    def test_insufficient_funds_creates_nothing(self, seeded):
        owner = create_account(seeded, balance=Decimal("100.00"))

        with pytest.raises(InsufficientFunds):
            run(_create(seeded, owner.id, ["stage1"]))

        assert run(_count(seeded, JobModel)) == 0
        assert run(_count(seeded, LedgerEntryModel)) == 1
        assert run(balance_of(seeded, owner.id)) == Decimal("100.00")

    def test_unknown_code_creates_nothing(self, seeded):
        owner = create_account(seeded, balance=Decimal("500.00"))

        with pytest.raises(UnknownServiceCode) as exc_info:
            run(_create(seeded, owner.id, ["stage1", "turbo_swap"]))

        assert exc_info.value.codes == ["turbo_swap"]
        assert run(_count(seeded, JobModel)) == 0
        assert run(balance_of(seeded, owner.id)) == Decimal("500.00")

    def test_concurrent_jobs_cannot_overdraw(self, seeded):
        owner = create_account(seeded, balance=Decimal("100.00"))

        async def _race():
            return await asyncio.gather(
                _create(seeded, owner.id, ["egr_off"]),
                _create(seeded, owner.id, ["egr_off"]),
                return_exceptions=True,
            )

        results = run(_race())

        assert sum(1 for result in results if isinstance(result, InsufficientFunds)) == 1
        assert run(_count(seeded, JobModel)) == 1
        assert run(balance_of(seeded, owner.id)) == Decimal("20.00")

    def test_later_price_change_does_not_touch_existing_job(self, seeded):
        owner = create_account(seeded, balance=Decimal("300.00"))
        job = run(_create(seeded, owner.id, ["stage1"])).job

        async def _reprice_and_reload():
            async with seeded() as session:
                await CatalogService.with_session(session).update_item("stage1", price=Decimal("999.00"))
                await session.commit()
            async with seeded() as session:
                return await JobService.with_session(session).get_job(job.id)

        reloaded = run(_reprice_and_reload())

        assert reloaded.priced_items[0].price == Decimal("150.00")
        assert reloaded.credits_used == Decimal("150.00")


class TestTransitions:
    def test_admin_walks_job_to_completion(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job

        started = run(_transition(seeded, job.id, JobStatus.IN_PROGRESS, admin))
        done = run(_transition(seeded, job.id, "completed", admin, admin_notes="flashed"))

        assert started.started_at is not None
        assert started.assigned_admin_id == admin.id
        assert done.status is JobStatus.COMPLETED
        assert done.completed_at is not None
        assert done.admin_notes == "flashed"
        assert done.version == job.version + 2

    def test_invalid_move_is_refused(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job

        with pytest.raises(InvalidTransition):
            run(_transition(seeded, job.id, JobStatus.COMPLETED, admin))

    def test_client_may_only_request_revision(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        job = run(_create(seeded, owner.id, ["stage1"])).job

        with pytest.raises(Unauthorized):
            run(_transition(seeded, job.id, JobStatus.IN_PROGRESS, owner))

    def test_other_clients_cannot_see_the_job(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        stranger = create_account(seeded)
        job = run(_create(seeded, owner.id, ["stage1"])).job

        with pytest.raises(JobNotFound):
            run(_transition(seeded, job.id, JobStatus.REVISION_REQUESTED, stranger, reason="x"))

    def test_revision_request_posts_message(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job
        run(_transition(seeded, job.id, JobStatus.IN_PROGRESS, admin))
        run(_transition(seeded, job.id, JobStatus.COMPLETED, admin))

        async def _revise():
            async with seeded() as session:
                revised = await JobService.with_session(session).request_revision(
                    job_id=job.id, actor=owner, reason="Limp mode at 3000 rpm"
                )
                await session.commit()
            async with seeded() as session:
                messages = await MessageService.with_session(session).list_messages(job_id=job.id, viewer=owner)
            return revised, messages

        revised, messages = run(_revise())

        assert revised.status is JobStatus.REVISION_REQUESTED
        assert revised.revision_count == 1
        assert [message.body for message in messages] == ["Revision requested: Limp mode at 3000 rpm"]

    def test_revision_without_reason_is_refused(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job
        run(_transition(seeded, job.id, JobStatus.IN_PROGRESS, admin))
        run(_transition(seeded, job.id, JobStatus.COMPLETED, admin))

        with pytest.raises(RevisionReasonRequired):
            run(_transition(seeded, job.id, JobStatus.REVISION_REQUESTED, owner, reason="  "))

    def test_racing_transitions_apply_once(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job
        run(_transition(seeded, job.id, JobStatus.IN_PROGRESS, admin))

        async def _race():
            return await asyncio.gather(
                _transition(seeded, job.id, JobStatus.COMPLETED, admin),
                _transition(seeded, job.id, JobStatus.REJECTED, admin),
                return_exceptions=True,
            )

        results = run(_race())

        assert sum(1 for result in results if isinstance(result, InvalidTransition)) == 1

    def test_stale_version_is_detected(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job

        class StaleRepository:
            """Always loses the compare-and-set, as if another writer kept winning."""

            def __init__(self, inner):
                self.inner = inner

            async def get_job(self, job_id):
                return await self.inner.get_job(job_id)

            async def apply_transition(self, job_id, *, expected_version, values):
                return False

        async def _attempt():
            async with seeded() as session:
                service = JobService.with_session(session)
                service.repository = StaleRepository(service.repository)
                await service.transition(job_id=job.id, target=JobStatus.IN_PROGRESS, actor=admin)

        with pytest.raises(TransitionConflict):
            run(_attempt())


class TestRefunds:
    def test_refund_is_applied_once(self, seeded):
        owner = create_account(seeded, balance=Decimal("200.00"))
        admin = create_account(seeded, role="admin")
        job = run(_create(seeded, owner.id, ["stage1"])).job

        async def _refund():
            async with seeded() as session:
                outcome = await JobService.with_session(session).refund(job_id=job.id, admin=admin)
                await session.commit()
                return outcome

        first = run(_refund())
        second = run(_refund())

        assert first.duplicate is False
        assert first.entry.kind is EntryKind.REFUND
        assert first.entry.job_ref == job.id
        assert first.entry.processed_by == admin.id
        assert second.duplicate is True
        assert run(balance_of(seeded, owner.id)) == Decimal("200.00")

    def test_free_job_cannot_be_refunded(self, seeded):
        owner = create_account(seeded)
        admin = create_account(seeded, role="admin")

        async def _free_job_and_refund():
            async with seeded() as session:
                await CatalogService.with_session(session).add_item(code="check", name="Check", price=Decimal("0"))
                await session.commit()
            created = await _create(seeded, owner.id, ["check"])
            assert created.ledger_entry_id is None
            async with seeded() as session:
                await JobService.with_session(session).refund(job_id=created.job.id, admin=admin)

        with pytest.raises(InvalidAmount):
            run(_free_job_and_refund())
