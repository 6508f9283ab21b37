"""In-process fan-out of change notifications to websocket subscribers.

Notifications are hints, not state: a subscriber that misses one (slow
consumer, reconnect) re-fetches and converges anyway, so a full queue drops
its oldest notification instead of blocking the publisher.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Set

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from tuneledger.core.config import get_settings

logger = logging.getLogger(__name__)

_PENDING_KEY = "tuneledger.pending_notifications"
_CLOSED = object()


def job_scope(job_id: str) -> str:
    return f"job:{job_id}"


def staff_scope(job_id: str) -> str:
    """Scope for internal notes; only staff subscribe to it."""
    return f"job:{job_id}:staff"


def account_scope(account_id: str) -> str:
    return f"account:{account_id}"


@dataclass(slots=True, frozen=True)
class ChangeNotification:
    entity_type: str  # job, message, ledger
    entity_id: str
    change_kind: str  # created, updated
    scope: str
    payload: Optional[Dict[str, Any]] = None

    def to_message(self) -> dict:
        return {
            "type": "change",
            "data": {
                "entity_type": self.entity_type,
                "entity_id": self.entity_id,
                "change_kind": self.change_kind,
                "scope": self.scope,
                "payload": self.payload,
            },
        }


class Subscription:
    """One subscriber's queue; ``close()`` may be called any number of times.

    Closing drops undelivered notifications and wakes a consumer blocked in
    ``get()``, which then sees ``None`` and an ``async for`` loop ends.
    """

    def __init__(self, hub: "NotificationHub", scope: str, maxsize: int) -> None:
        self.hub = hub
        self.scope = scope
        self.queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self.closed = False

    def offer(self, notification: ChangeNotification) -> None:
        if self.closed:
            return
        if self.queue.full():
            dropped = self.queue.get_nowait()
            logger.warning("Subscriber on %s is slow, dropped %s notification", self.scope, dropped.entity_type)
        self.queue.put_nowait(notification)

    def pending(self) -> int:
        """Undelivered notifications."""
        if self.closed:
            return 0
        return self.queue.qsize()

    async def get(self) -> Optional[ChangeNotification]:
        item = await self.queue.get()
        if item is _CLOSED:
            # leave the marker for any other waiter
            self.queue.put_nowait(_CLOSED)
            return None
        return item

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.hub._release(self)
        while not self.queue.empty():
            self.queue.get_nowait()
        self.queue.put_nowait(_CLOSED)

    def __aiter__(self) -> "Subscription":
        return self

    async def __anext__(self) -> ChangeNotification:
        if self.closed:
            raise StopAsyncIteration
        notification = await self.get()
        if notification is None:
            raise StopAsyncIteration
        return notification

    async def __aenter__(self) -> "Subscription":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()


class NotificationHub:
    def __init__(self, queue_size: int = 100) -> None:
        self.queue_size = queue_size
        self.subscriptions: Dict[str, Set[Subscription]] = {}

    def subscribe(self, scope: str) -> Subscription:
        subscription = Subscription(self, scope, self.queue_size)
        self.subscriptions.setdefault(scope, set()).add(subscription)
        logger.debug("Subscribed to %s (%d subscriber(s))", scope, len(self.subscriptions[scope]))
        return subscription

    def publish(self, notification: ChangeNotification) -> int:
        subscribers = list(self.subscriptions.get(notification.scope, ()))
        for subscription in subscribers:
            subscription.offer(notification)
        return len(subscribers)

    def subscriber_count(self, scope: Optional[str] = None) -> int:
        if scope is not None:
            return len(self.subscriptions.get(scope, ()))
        return sum(len(subs) for subs in self.subscriptions.values())

    def _release(self, subscription: Subscription) -> None:
        subs = self.subscriptions.get(subscription.scope)
        if not subs:
            return
        subs.discard(subscription)
        if not subs:
            del self.subscriptions[subscription.scope]


@dataclass(slots=True)
class _Pending:
    hub: NotificationHub
    notifications: list[ChangeNotification] = field(default_factory=list)


def publish_after_commit(session: AsyncSession, hub: NotificationHub, *notifications: ChangeNotification) -> None:
    """Queue notifications on ``session``; they go out only once it commits."""
    pending: list[_Pending] = session.sync_session.info.setdefault(_PENDING_KEY, [])
    pending.append(_Pending(hub, list(notifications)))


def _flush_pending(session: Session) -> None:
    if session.in_nested_transaction():
        return
    for item in session.info.pop(_PENDING_KEY, []):
        for notification in item.notifications:
            item.hub.publish(notification)


def _discard_pending(session: Session) -> None:
    if session.in_nested_transaction():
        return
    if session.info.pop(_PENDING_KEY, None):
        logger.debug("Dropped notifications of a rolled back transaction")


def install_commit_hooks() -> None:
    if not event.contains(Session, "after_commit", _flush_pending):
        event.listen(Session, "after_commit", _flush_pending)
    if not event.contains(Session, "after_rollback", _discard_pending):
        event.listen(Session, "after_rollback", _discard_pending)


_hub: NotificationHub | None = None


def get_hub() -> NotificationHub:
    global _hub
    if _hub is None:
        _hub = NotificationHub(get_settings().realtime.subscription_queue_size)
    return _hub
