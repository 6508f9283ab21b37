"""Request and response models for the HTTP API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from tuneledger.domain.jobs.models import JobStatus, JobType


class AccountResponse(BaseModel):
    id: str
    email: Optional[str] = None
    contact_name: Optional[str] = None
    company_name: Optional[str] = None
    role: str
    is_active: bool
    balance: Decimal
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BalanceResponse(BaseModel):
    account_id: str
    balance: Decimal
    currency: str


class LedgerEntryResponse(BaseModel):
    id: int
    kind: str
    amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    job_ref: Optional[str] = None
    external_ref: Optional[str] = None
    description: Optional[str] = None
    processed_by: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LedgerEntryListResponse(BaseModel):
    entries: list[LedgerEntryResponse] = Field(default_factory=list)


class LedgerAuditResponse(BaseModel):
    account_id: str
    balance: Decimal
    entry_count: int
    consistent: bool
    problems: list[str] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class AdjustmentRequest(BaseModel):
    amount: Decimal = Field(..., decimal_places=2)
    description: str = Field(..., min_length=1, max_length=255)


class CatalogItemResponse(BaseModel):
    code: str
    name: str
    price: Decimal
    active: bool
    description: Optional[str] = None
    category: Optional[str] = None
    sort_order: int = 0

    model_config = ConfigDict(from_attributes=True)


class CatalogItemUpdate(BaseModel):
    price: Optional[Decimal] = Field(None, ge=0, decimal_places=2)
    active: Optional[bool] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class VehiclePayload(BaseModel):
    brand: str = Field(..., min_length=1, max_length=100)
    model: str = Field(..., min_length=1, max_length=100)
    year: str = Field(..., min_length=1, max_length=20)
    engine_type: str = Field(..., min_length=1, max_length=100)
    engine_power_hp: Optional[int] = Field(None, gt=0)
    ecu_type: Optional[str] = None
    tcu_type: Optional[str] = None
    gearbox_type: Optional[str] = None
    vin: Optional[str] = Field(None, max_length=32)
    mileage: Optional[int] = Field(None, ge=0)
    fuel_type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class JobCreateRequest(BaseModel):
    vehicle: VehiclePayload
    service_codes: list[str] = Field(default_factory=list)
    job_type: JobType = JobType.ECU
    client_notes: Optional[str] = None


class PricedItemResponse(BaseModel):
    code: str
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class JobResponse(BaseModel):
    id: str
    reference_number: str
    owner_id: str
    status: JobStatus
    job_type: JobType
    vehicle: VehiclePayload
    priced_items: list[PricedItemResponse]
    credits_used: Decimal
    assigned_admin_id: Optional[str] = None
    client_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    revision_count: int
    created_at: datetime
    updated_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class JobCreateResponse(BaseModel):
    job: JobResponse
    ledger_entry_id: Optional[int] = None
    balance_after: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class JobListResponse(BaseModel):
    jobs: list[JobResponse] = Field(default_factory=list)


class TransitionRequest(BaseModel):
    status: JobStatus
    reason: Optional[str] = None
    admin_notes: Optional[str] = None


class RevisionRequest(BaseModel):
    reason: str = Field(..., max_length=2000)


class RefundRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)


class RefundResponse(BaseModel):
    entry: LedgerEntryResponse
    duplicate: bool

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    body: str = Field(..., max_length=5000)
    internal: bool = False
    id: Optional[str] = Field(None, max_length=36)


class MessageResponse(BaseModel):
    id: str
    job_id: str
    sender_id: str
    body: str
    internal: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageListResponse(BaseModel):
    messages: list[MessageResponse] = Field(default_factory=list)


class WebhookAck(BaseModel):
    received: bool = True
    duplicate: bool = False
    outcome: str
