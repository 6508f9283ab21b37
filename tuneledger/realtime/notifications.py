"""Builders for the notifications the API emits after a successful commit."""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.domain.jobs.models import Job
from tuneledger.domain.ledger.models import LedgerEntry
from tuneledger.domain.messages.models import Message

from .hub import ChangeNotification, NotificationHub, account_scope, job_scope, publish_after_commit, staff_scope


def message_payload(message: Message) -> dict[str, Any]:
    return {
        "id": message.id,
        "job_id": message.job_id,
        "sender_id": message.sender_id,
        "body": message.body,
        "internal": message.internal,
        "created_at": message.created_at.isoformat(),
    }


def job_changed(session: AsyncSession, hub: NotificationHub, job: Job, change_kind: str = "updated") -> None:
    publish_after_commit(
        session,
        hub,
        ChangeNotification(
            entity_type="job",
            entity_id=job.id,
            change_kind=change_kind,
            scope=job_scope(job.id),
            payload={"status": job.status.value, "version": job.version},
        ),
    )


def message_posted(session: AsyncSession, hub: NotificationHub, message: Message) -> None:
    scope = staff_scope(message.job_id) if message.internal else job_scope(message.job_id)
    publish_after_commit(
        session,
        hub,
        ChangeNotification(
            entity_type="message",
            entity_id=message.id,
            change_kind="created",
            scope=scope,
            payload=message_payload(message),
        ),
    )


def ledger_changed(
    session: AsyncSession,
    hub: NotificationHub,
    account_id: str,
    entry: Optional[LedgerEntry] = None,
) -> None:
    payload = None
    if entry is not None:
        payload = {"entry_id": entry.id, "kind": entry.kind.value, "balance_after": str(entry.balance_after)}
    publish_after_commit(
        session,
        hub,
        ChangeNotification(
            entity_type="ledger",
            entity_id=str(entry.id) if entry is not None else account_id,
            change_kind="created",
            scope=account_scope(account_id),
            payload=payload,
        ),
    )
