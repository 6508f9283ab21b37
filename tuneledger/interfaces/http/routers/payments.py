"""Payment provider webhook."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.config import get_settings
from tuneledger.domain.payments import PaymentService
from tuneledger.interfaces.http.deps import get_db_session, get_notification_hub
from tuneledger.interfaces.http.schemas import WebhookAck
from tuneledger.realtime import NotificationHub
from tuneledger.realtime.notifications import ledger_changed

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook", response_model=WebhookAck, summary="Payment provider events")
async def payment_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> WebhookAck:
    settings = get_settings().payments
    raw_body = await request.body()
    service = PaymentService.with_session(db, settings)
    result = await service.handle_webhook(raw_body, request.headers.get(settings.signature_header))
    if result.outcome == "credited" and result.account_id is not None:
        ledger_changed(db, hub, result.account_id)
    return WebhookAck(duplicate=result.duplicate, outcome=result.outcome)
