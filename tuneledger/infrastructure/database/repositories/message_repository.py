"""SQLAlchemy implementation for job messages."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.clock import utcnow
from tuneledger.infrastructure.database.models import Message


class SqlMessageRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add_message(
        self,
        *,
        job_id: str,
        sender_id: str,
        body: str,
        internal: bool = False,
        message_id: str | None = None,
    ) -> Message:
        message = Message(job_id=job_id, sender_id=sender_id, body=body, internal=internal, created_at=utcnow())
        if message_id is not None:
            message.id = message_id
        self.session.add(message)
        await self.session.flush()
        return message

    async def get_message(self, message_id: str) -> Message | None:
        return await self.session.get(Message, message_id)

    async def list_messages(self, job_id: str, include_internal: bool) -> Sequence[Message]:
        stmt = select(Message).where(Message.job_id == job_id)
        if not include_internal:
            stmt = stmt.where(Message.internal.is_(False))
        stmt = stmt.order_by(asc(Message.created_at), asc(Message.id))
        result = await self.session.execute(stmt)
        return result.scalars().all()
