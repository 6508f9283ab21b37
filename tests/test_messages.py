"""Job messages: access, internal notes and idempotent optimistic ids."""
from decimal import Decimal

import pytest

from tests.conftest import VEHICLE, create_account, new_id, run
from tuneledger.core.errors import Unauthorized
from tuneledger.domain.jobs import InvalidTransition, JobNotFound, JobService, JobStatus, VehicleInfo
from tuneledger.domain.messages import EmptyMessage, MessageService
from tuneledger.infrastructure.database.repositories import SqlJobRepository, SqlMessageRepository


@pytest.fixture
def job_setup(seeded):
    owner = create_account(seeded, balance=Decimal("200.00"))
    admin = create_account(seeded, role="admin")

    async def _create():
        async with seeded() as session:
            created = await JobService.with_session(session).create_job(
                owner_id=owner.id, vehicle=VehicleInfo(**VEHICLE), codes=["stage1"]
            )
            await session.commit()
            return created.job

    return owner, admin, run(_create())


async def _post(session_factory, job_id, sender, body, **kwargs):
    async with session_factory() as session:
        message = await MessageService.with_session(session).post(job_id=job_id, sender=sender, body=body, **kwargs)
        await session.commit()
        return message


async def _list(session_factory, job_id, viewer):
    async with session_factory() as session:
        return await MessageService.with_session(session).list_messages(job_id=job_id, viewer=viewer)


def test_owner_and_admin_converse_in_order(seeded, job_setup):
    owner, admin, job = job_setup

    run(_post(seeded, job.id, owner, "Original file attached"))
    run(_post(seeded, job.id, admin, "Thanks, starting now"))

    messages = run(_list(seeded, job.id, owner))
    assert [message.body for message in messages] == ["Original file attached", "Thanks, starting now"]


def test_internal_notes_are_hidden_from_clients(seeded, job_setup):
    owner, admin, job = job_setup

    run(_post(seeded, job.id, admin, "Customer map looks modified", internal=True))
    run(_post(seeded, job.id, admin, "Working on it"))

    assert [m.body for m in run(_list(seeded, job.id, owner))] == ["Working on it"]
    assert len(run(_list(seeded, job.id, admin))) == 2


def test_clients_cannot_post_internal_notes(seeded, job_setup):
    owner, _, job = job_setup

    with pytest.raises(Unauthorized):
        run(_post(seeded, job.id, owner, "psst", internal=True))


def test_strangers_cannot_see_the_job(seeded, job_setup):
    _, _, job = job_setup
    stranger = create_account(seeded)

    with pytest.raises(JobNotFound):
        run(_list(seeded, job.id, stranger))
    with pytest.raises(JobNotFound):
        run(_post(seeded, job.id, stranger, "hello"))


def test_blank_message_is_rejected(seeded, job_setup):
    owner, _, job = job_setup

    with pytest.raises(EmptyMessage):
        run(_post(seeded, job.id, owner, "   "))


def test_resent_optimistic_id_is_stored_once(seeded, job_setup):
    owner, _, job = job_setup
    message_id = new_id()

    first = run(_post(seeded, job.id, owner, "Is it done?", message_id=message_id))
    second = run(_post(seeded, job.id, owner, "Is it done?", message_id=message_id))

    assert first.id == second.id == message_id
    assert len(run(_list(seeded, job.id, owner))) == 1


class StaleReadMessageRepository(SqlMessageRepository):
    """Misses the first lookup, as a concurrent post with the same id would."""

    def __init__(self, session):
        super().__init__(session)
        self.missed = False

    async def get_message(self, message_id):
        if not self.missed:
            self.missed = True
            return None
        return await super().get_message(message_id)


def test_concurrent_post_with_same_id_returns_the_stored_message(seeded, job_setup):
    owner, _, job = job_setup
    message_id = new_id()
    run(_post(seeded, job.id, owner, "Is it done?", message_id=message_id))

    async def _race():
        async with seeded() as session:
            service = MessageService(StaleReadMessageRepository(session), SqlJobRepository(session), session)
            message = await service.post(job_id=job.id, sender=owner, body="Is it done?", message_id=message_id)
            await session.commit()
            return message

    message = run(_race())

    assert message.id == message_id
    assert len(run(_list(seeded, job.id, owner))) == 1


def test_rejected_job_refuses_revision_but_keeps_messaging(seeded, job_setup):
    owner, admin, job = job_setup

    async def _reject():
        async with seeded() as session:
            await JobService.with_session(session).transition(
                job_id=job.id, target=JobStatus.REJECTED, actor=admin, admin_notes="Unsupported ECU"
            )
            await session.commit()

    async def _request_revision():
        async with seeded() as session:
            await JobService.with_session(session).request_revision(
                job_id=job.id, actor=owner, reason="Please try again"
            )

    run(_reject())
    with pytest.raises(InvalidTransition):
        run(_request_revision())
    message = run(_post(seeded, job.id, owner, "Why was it rejected?"))

    assert message.body == "Why was it rejected?"
    assert [m.body for m in run(_list(seeded, job.id, owner))] == ["Why was it rejected?"]
