"""Customer-facing endpoints: own account, balance, ledger and jobs."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.config import get_settings
from tuneledger.domain.accounts import Account
from tuneledger.domain.jobs import JobService, VehicleInfo
from tuneledger.domain.ledger import LedgerService
from tuneledger.interfaces.http.deps import get_current_account, get_db_session, get_notification_hub
from tuneledger.interfaces.http.schemas import (
    AccountResponse,
    BalanceResponse,
    JobCreateRequest,
    JobCreateResponse,
    JobListResponse,
    JobResponse,
    LedgerEntryListResponse,
    LedgerEntryResponse,
    RevisionRequest,
)
from tuneledger.realtime import NotificationHub
from tuneledger.realtime.notifications import job_changed, ledger_changed

router = APIRouter()


@router.get("/me", response_model=AccountResponse, summary="Current account")
async def customer_profile(account: Account = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.model_validate(account)


@router.get("/balance", response_model=BalanceResponse, summary="Current credit balance")
async def customer_balance(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> BalanceResponse:
    balance = await LedgerService.with_session(db).get_balance(account.id)
    return BalanceResponse(account_id=account.id, balance=balance, currency=get_settings().payments.currency)


@router.get("/ledger", response_model=LedgerEntryListResponse, summary="Own ledger entries, newest first")
async def customer_ledger(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryListResponse:
    entries = await LedgerService.with_session(db).list_entries(account.id, limit, offset)
    return LedgerEntryListResponse(entries=[LedgerEntryResponse.model_validate(entry) for entry in entries])


@router.post(
    "/jobs",
    response_model=JobCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a job and pay for it",
)
async def create_job(
    payload: JobCreateRequest,
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> JobCreateResponse:
    service = JobService.with_session(db)
    created = await service.create_job(
        owner_id=account.id,
        vehicle=VehicleInfo(**payload.vehicle.model_dump()),
        codes=payload.service_codes,
        job_type=payload.job_type,
        client_notes=payload.client_notes,
    )
    job_changed(db, hub, created.job, change_kind="created")
    if created.ledger_entry_id is not None:
        ledger_changed(db, hub, account.id)
    return JobCreateResponse.model_validate(created)


@router.get("/jobs", response_model=JobListResponse, summary="Own jobs")
async def list_jobs(
    status_filter: Optional[str] = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> JobListResponse:
    jobs = await JobService.with_session(db).list_jobs(
        owner_id=account.id, status=status_filter, limit=limit, offset=offset
    )
    return JobListResponse(jobs=[JobResponse.model_validate(job) for job in jobs])


@router.get("/jobs/{job_id}", response_model=JobResponse, summary="One of the caller's jobs")
async def get_job(
    job_id: str = Path(...),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> JobResponse:
    job = await JobService.with_session(db).get_job(job_id, viewer=account)
    return JobResponse.model_validate(job)


@router.post("/jobs/{job_id}/revision", response_model=JobResponse, summary="Ask for a revision of a completed job")
async def request_revision(
    payload: RevisionRequest,
    job_id: str = Path(...),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> JobResponse:
    job = await JobService.with_session(db).request_revision(job_id=job_id, actor=account, reason=payload.reason)
    job_changed(db, hub, job)
    return JobResponse.model_validate(job)
