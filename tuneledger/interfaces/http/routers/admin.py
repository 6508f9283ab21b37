"""Staff endpoints: job lifecycle, refunds, credit adjustments and the catalog."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.domain.accounts import Account, AccountService
from tuneledger.domain.catalog import CatalogService
from tuneledger.domain.jobs import JobService
from tuneledger.domain.ledger import LedgerService
from tuneledger.interfaces.http.deps import get_current_admin, get_db_session, get_notification_hub
from tuneledger.interfaces.http.schemas import (
    AccountResponse,
    AdjustmentRequest,
    CatalogItemResponse,
    CatalogItemUpdate,
    JobListResponse,
    JobResponse,
    LedgerAuditResponse,
    LedgerEntryListResponse,
    LedgerEntryResponse,
    RefundRequest,
    RefundResponse,
    TransitionRequest,
)
from tuneledger.realtime import NotificationHub
from tuneledger.realtime.notifications import job_changed, ledger_changed

router = APIRouter()


@router.get("/jobs", response_model=JobListResponse, summary="All jobs")
async def list_jobs(
    status_filter: Optional[str] = Query(None, alias="status"),
    owner_id: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> JobListResponse:
    jobs = await JobService.with_session(db).list_jobs(
        owner_id=owner_id, status=status_filter, limit=limit, offset=offset
    )
    return JobListResponse(jobs=[JobResponse.model_validate(job) for job in jobs])


@router.post("/jobs/{job_id}/transition", response_model=JobResponse, summary="Change a job's status")
async def transition_job(
    payload: TransitionRequest,
    job_id: str = Path(...),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> JobResponse:
    job = await JobService.with_session(db).transition(
        job_id=job_id,
        target=payload.status,
        actor=admin,
        reason=payload.reason,
        admin_notes=payload.admin_notes,
    )
    job_changed(db, hub, job)
    return JobResponse.model_validate(job)


@router.post("/jobs/{job_id}/refund", response_model=RefundResponse, summary="Refund a job's credits")
async def refund_job(
    payload: RefundRequest,
    job_id: str = Path(...),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> RefundResponse:
    outcome = await JobService.with_session(db).refund(job_id=job_id, admin=admin, reason=payload.reason)
    if not outcome.duplicate:
        ledger_changed(db, hub, outcome.entry.account_id, outcome.entry)
    return RefundResponse.model_validate(outcome)


@router.get("/accounts", response_model=list[AccountResponse], summary="All accounts")
async def list_accounts(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> list[AccountResponse]:
    accounts = await AccountService.with_session(db).list_accounts(limit, offset)
    return [AccountResponse.model_validate(account) for account in accounts]


@router.post(
    "/accounts/{account_id}/adjustments",
    response_model=LedgerEntryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add or remove credits by hand",
)
async def adjust_credits(
    payload: AdjustmentRequest,
    account_id: str = Path(...),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
    hub: NotificationHub = Depends(get_notification_hub),
) -> LedgerEntryResponse:
    entry = await LedgerService.with_session(db).adjust(
        account_id=account_id,
        amount=payload.amount,
        admin_id=admin.id,
        description=payload.description,
    )
    ledger_changed(db, hub, account_id, entry)
    return LedgerEntryResponse.model_validate(entry)


@router.get("/accounts/{account_id}/ledger", response_model=LedgerEntryListResponse, summary="An account's ledger")
async def account_ledger(
    account_id: str = Path(...),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    _: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerEntryListResponse:
    service = LedgerService.with_session(db)
    await service.get_balance(account_id)
    entries = await service.list_entries(account_id, limit, offset)
    return LedgerEntryListResponse(entries=[LedgerEntryResponse.model_validate(entry) for entry in entries])


@router.get(
    "/accounts/{account_id}/ledger/verify",
    response_model=LedgerAuditResponse,
    summary="Replay an account's ledger against its balance",
)
async def verify_ledger(
    account_id: str = Path(...),
    _: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> LedgerAuditResponse:
    audit = await LedgerService.with_session(db).verify(account_id)
    return LedgerAuditResponse.model_validate(audit)


@router.patch("/catalog/{code}", response_model=CatalogItemResponse, summary="Change a service's price or availability")
async def update_catalog_item(
    payload: CatalogItemUpdate,
    code: str = Path(...),
    _: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
) -> CatalogItemResponse:
    item = await CatalogService.with_session(db).update_item(
        code,
        price=payload.price,
        active=payload.active,
        name=payload.name,
    )
    return CatalogItemResponse.model_validate(item)
