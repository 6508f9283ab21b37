"""Job conversation endpoints, open to the job's owner and to staff."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.domain.accounts import Account
from tuneledger.domain.messages import MessageService
from tuneledger.interfaces.http.deps import get_current_account, get_db_session, get_notification_hub
from tuneledger.interfaces.http.schemas import MessageCreate, MessageListResponse, MessageResponse
from tuneledger.realtime import NotificationHub
from tuneledger.realtime.notifications import message_posted

router = APIRouter()


@router.get("/{job_id}/messages", response_model=MessageListResponse, summary="Messages of a job, oldest first")
async def list_messages(
    job_id: str = Path(...),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> MessageListResponse:
    messages = await MessageService.with_session(db).list_messages(job_id=job_id, viewer=account)
    return MessageListResponse(messages=[MessageResponse.model_validate(message) for message in messages])


@router.post(
    "/{job_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post a message on a job",
)
async def post_message(
    payload: MessageCreate,
    job_id: str = Path(...),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> MessageResponse:
    message = await MessageService.with_session(db).post(
        job_id=job_id,
        sender=account,
        body=payload.body,
        internal=payload.internal,
        message_id=payload.id,
    )
    message_posted(db, hub, message)
    return MessageResponse.model_validate(message)
