"""Client-side views that converge on server state after change hints.

A notification never carries state the view trusts on its own except for
message payloads, which are append-only and keyed by id. Everything else is
re-fetched, so a missed, reordered or duplicated notification at most delays
convergence until the next one (or ``poll()``).
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Awaitable, Callable, Mapping, Optional

from .hub import ChangeNotification, Subscription

logger = logging.getLogger(__name__)

JobFetcher = Callable[[str], Awaitable[Mapping[str, Any]]]
MessagesFetcher = Callable[[str], Awaitable[list[Mapping[str, Any]]]]
BalanceFetcher = Callable[[str], Awaitable[Decimal]]


def _message_order(message: Mapping[str, Any]) -> tuple[str, str]:
    created_at = message.get("created_at") or ""
    if isinstance(created_at, datetime):
        created_at = created_at.isoformat()
    return (str(created_at), str(message["id"]))


@dataclass
class JobView:
    job: Optional[Mapping[str, Any]] = None
    messages: list[Mapping[str, Any]] = field(default_factory=list)
    stale: bool = True


class JobViewReconciler:
    def __init__(
        self,
        job_id: str,
        fetch_job: JobFetcher,
        fetch_messages: Optional[MessagesFetcher] = None,
    ) -> None:
        self.job_id = job_id
        self.fetch_job = fetch_job
        self.fetch_messages = fetch_messages
        self.view = JobView()

    async def refresh(self) -> bool:
        """Re-fetch the job (and messages); on failure keep the old view and mark it stale."""
        try:
            job = await self.fetch_job(self.job_id)
            messages = await self.fetch_messages(self.job_id) if self.fetch_messages else None
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Refreshing job %s failed, view is stale: %s", self.job_id, exc)
            self.view.stale = True
            return False
        self.view.job = job
        if messages is not None:
            self._merge_messages(messages)
        self.view.stale = False
        return True

    async def apply(self, notification: ChangeNotification) -> None:
        if notification.entity_type == "message":
            payload = notification.payload
            if payload and payload.get("job_id") == self.job_id:
                self._merge_messages([payload])
                if self.view.stale:
                    await self.refresh()
                return
            await self.refresh()
            return
        if notification.entity_type == "job" and notification.entity_id == self.job_id:
            await self.refresh()
            return
        if self.view.stale:
            await self.refresh()

    def insert_optimistic(self, message: Mapping[str, Any]) -> None:
        """Show a locally sent message now; the echoed copy will dedupe by id."""
        self._merge_messages([message])

    async def poll(self) -> bool:
        if self.view.stale:
            return await self.refresh()
        return True

    async def run(self, subscription: Subscription) -> None:
        await self.refresh()
        async for notification in subscription:
            await self.apply(notification)

    def _merge_messages(self, incoming: list[Mapping[str, Any]]) -> None:
        by_id = {message["id"]: message for message in self.view.messages}
        for message in incoming:
            by_id[message["id"]] = message
        self.view.messages = sorted(by_id.values(), key=_message_order)


class AccountViewReconciler:
    def __init__(self, account_id: str, fetch_balance: BalanceFetcher) -> None:
        self.account_id = account_id
        self.fetch_balance = fetch_balance
        self.balance: Optional[Decimal] = None
        self.stale = True

    async def refresh(self) -> bool:
        try:
            balance = await self.fetch_balance(self.account_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Refreshing balance of %s failed, view is stale: %s", self.account_id, exc)
            self.stale = True
            return False
        self.balance = balance
        self.stale = False
        return True

    async def apply(self, notification: ChangeNotification) -> None:
        if notification.entity_type == "ledger" or self.stale:
            await self.refresh()

    async def poll(self) -> bool:
        if self.stale:
            return await self.refresh()
        return True

    async def run(self, subscription: Subscription) -> None:
        await self.refresh()
        async for notification in subscription:
            await self.apply(notification)
