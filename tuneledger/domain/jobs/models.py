"""Domain models for tuning jobs."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from tuneledger.domain.catalog.models import PricedItem


class JobStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    WAITING_FOR_INFO = "waiting_for_info"
    COMPLETED = "completed"
    REVISION_REQUESTED = "revision_requested"
    REJECTED = "rejected"


class JobType(str, enum.Enum):
    ECU = "ecu"
    TCU = "tcu"


@dataclass(slots=True)
class VehicleInfo:
    brand: str
    model: str
    year: str
    engine_type: str
    engine_power_hp: Optional[int] = None
    ecu_type: Optional[str] = None
    tcu_type: Optional[str] = None
    gearbox_type: Optional[str] = None
    vin: Optional[str] = None
    mileage: Optional[int] = None
    fuel_type: Optional[str] = None


@dataclass(slots=True)
class Job:
    id: str
    reference_number: str
    owner_id: str
    status: JobStatus
    job_type: JobType
    vehicle: VehicleInfo
    priced_items: tuple[PricedItem, ...]
    credits_used: Decimal
    created_at: datetime
    updated_at: datetime
    assigned_admin_id: Optional[str] = None
    client_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    revision_count: int = 0
    version: int = 1


@dataclass(slots=True)
class CreatedJob:
    """A new job together with the ledger entry that paid for it."""

    job: Job
    ledger_entry_id: Optional[int] = None
    balance_after: Optional[Decimal] = None
