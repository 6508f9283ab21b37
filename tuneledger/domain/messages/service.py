"""Job messaging: append-only and independent of the job's lifecycle status."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.errors import Unauthorized
from tuneledger.domain.accounts.models import Account
from tuneledger.domain.jobs.exceptions import JobNotFound
from tuneledger.domain.jobs.repository import JobRepository
from tuneledger.infrastructure.database.models import Message as MessageModel
from tuneledger.infrastructure.database.repositories.job_repository import SqlJobRepository
from tuneledger.infrastructure.database.repositories.message_repository import SqlMessageRepository

from .exceptions import EmptyMessage
from .models import Message
from .repository import MessageRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MessageService:
    repository: MessageRepository
    jobs: JobRepository
    session: AsyncSession

    @classmethod
    def with_session(cls, session: AsyncSession) -> "MessageService":
        return cls(SqlMessageRepository(session), SqlJobRepository(session), session)

    async def post(
        self,
        *,
        job_id: str,
        sender: Account,
        body: str,
        internal: bool = False,
        message_id: Optional[str] = None,
    ) -> Message:
        """Append a message; ``message_id`` lets a client reuse its optimistic id."""
        await self._check_access(job_id, sender)
        body = (body or "").strip()
        if not body:
            raise EmptyMessage()
        if internal and not sender.is_admin():
            raise Unauthorized("Only staff can post internal notes")
        if message_id is not None:
            existing = await self.repository.get_message(message_id)
            if existing is not None:
                return self._resent(existing, job_id, sender)
        try:
            async with self.session.begin_nested():
                model = await self.repository.add_message(
                    job_id=job_id,
                    sender_id=sender.id,
                    body=body,
                    internal=internal,
                    message_id=message_id,
                )
        except IntegrityError:
            # a concurrent post with the same optimistic id won
            existing = await self.repository.get_message(message_id) if message_id else None
            if existing is None:
                raise
            return self._resent(existing, job_id, sender)
        logger.info("Message %s posted on job %s by %s", model.id, job_id, sender.id)
        return self._to_domain(model)

    def _resent(self, existing: MessageModel, job_id: str, sender: Account) -> Message:
        if existing.job_id != job_id or existing.sender_id != sender.id:
            raise Unauthorized("Message id already in use")
        return self._to_domain(existing)

    async def list_messages(self, *, job_id: str, viewer: Account) -> list[Message]:
        await self._check_access(job_id, viewer)
        rows = await self.repository.list_messages(job_id, include_internal=viewer.is_admin())
        return [self._to_domain(row) for row in rows]

    async def _check_access(self, job_id: str, account: Account) -> None:
        job = await self.jobs.get_job(job_id)
        if job is None or (job.owner_id != account.id and not account.is_admin()):
            raise JobNotFound(job_id)

    @staticmethod
    def _to_domain(model: MessageModel) -> Message:
        return Message(
            id=model.id,
            job_id=model.job_id,
            sender_id=model.sender_id,
            body=model.body,
            internal=model.internal,
            created_at=model.created_at,
        )
