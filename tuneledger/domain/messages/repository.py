"""Repository protocol for job messages."""

from __future__ import annotations

from typing import Protocol, Sequence

from tuneledger.infrastructure.database.models import Message as MessageModel


class MessageRepository(Protocol):
    async def add_message(
        self,
        *,
        job_id: str,
        sender_id: str,
        body: str,
        internal: bool = False,
        message_id: str | None = None,
    ) -> MessageModel:
        ...

    async def get_message(self, message_id: str) -> MessageModel | None:
        ...

    async def list_messages(self, job_id: str, include_internal: bool) -> Sequence[MessageModel]:
        ...
