"""Websocket push channel for job and account change notifications.

Sockets only carry hints; clients re-fetch through the HTTP API. The database
session is used for the access check and released before streaming starts.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.errors import DomainError
from tuneledger.core.security import decode_access_token
from tuneledger.domain.accounts import Account
from tuneledger.domain.jobs import JobService
from tuneledger.interfaces.http.deps import get_db_session, get_notification_hub, resolve_account
from tuneledger.realtime import NotificationHub, Subscription, account_scope, job_scope, staff_scope

logger = logging.getLogger(__name__)

router = APIRouter()


async def _authenticate(websocket: WebSocket, token: str, db: AsyncSession) -> Account | None:
    try:
        account = await resolve_account(decode_access_token(token), db)
        await db.commit()
        return account
    except DomainError as exc:
        logger.info("Websocket rejected: %s", exc.detail)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.detail)
        return None


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    async for notification in subscription:
        await websocket.send_json(notification.to_message())


async def _stream(websocket: WebSocket, subscriptions: list[Subscription]) -> None:
    forwarders = [asyncio.create_task(_forward(websocket, subscription)) for subscription in subscriptions]
    try:
        while True:
            # clients may send pings; anything received just keeps the socket alive
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        for task in forwarders:
            task.cancel()
        for subscription in subscriptions:
            subscription.close()
        await asyncio.gather(*forwarders, return_exceptions=True)


@router.websocket("/ws/jobs/{job_id}")
async def job_socket(
    websocket: WebSocket,
    job_id: str,
    token: str = Query(...),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> None:
    account = await _authenticate(websocket, token, db)
    if account is None:
        return
    try:
        await JobService.with_session(db).get_job(job_id, viewer=account)
    except DomainError as exc:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.detail)
        return
    finally:
        await db.commit()

    await websocket.accept()
    subscriptions = [hub.subscribe(job_scope(job_id))]
    if account.is_admin():
        subscriptions.append(hub.subscribe(staff_scope(job_id)))
    logger.info("Account %s watching job %s", account.id, job_id)
    await websocket.send_json({"type": "ready", "data": {"scope": job_scope(job_id)}})
    await _stream(websocket, subscriptions)
    logger.info("Account %s stopped watching job %s", account.id, job_id)


@router.websocket("/ws/accounts/me")
async def account_socket(
    websocket: WebSocket,
    token: str = Query(...),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> None:
    account = await _authenticate(websocket, token, db)
    if account is None:
        return
    await websocket.accept()
    subscription = hub.subscribe(account_scope(account.id))
    await websocket.send_json({"type": "ready", "data": {"scope": account_scope(account.id)}})
    await _stream(websocket, [subscription])
