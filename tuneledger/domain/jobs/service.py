"""Domain service for tuning jobs: debit-on-create and lifecycle transitions."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.clock import utcnow
from tuneledger.core.errors import Unauthorized
from tuneledger.core.money import from_cents, to_cents
from tuneledger.domain.accounts.models import Account
from tuneledger.domain.catalog.models import PricedItem
from tuneledger.domain.catalog.pricing import PricingResolver, total_price
from tuneledger.domain.ledger.exceptions import InvalidAmount
from tuneledger.domain.ledger.models import CreditOutcome, EntryKind
from tuneledger.domain.ledger.service import LedgerService
from tuneledger.domain.messages.repository import MessageRepository
from tuneledger.infrastructure.database.models import Job as JobModel
from tuneledger.infrastructure.database.repositories.job_repository import SqlJobRepository
from tuneledger.infrastructure.database.repositories.message_repository import SqlMessageRepository

from .exceptions import JobNotFound, TransitionConflict
from .models import CreatedJob, Job, JobStatus, JobType, VehicleInfo
from .repository import JobRepository
from .state_machine import parse_status, plan_transition

logger = logging.getLogger(__name__)

MAX_TRANSITION_ATTEMPTS = 3


@dataclass(slots=True)
class JobService:
    repository: JobRepository
    ledger: LedgerService
    pricing: PricingResolver
    messages: MessageRepository
    session: AsyncSession

    @classmethod
    def with_session(cls, session: AsyncSession) -> "JobService":
        return cls(
            repository=SqlJobRepository(session),
            ledger=LedgerService.with_session(session),
            pricing=PricingResolver.with_session(session),
            messages=SqlMessageRepository(session),
            session=session,
        )

    async def create_job(
        self,
        *,
        owner_id: str,
        vehicle: VehicleInfo,
        codes: Iterable[str],
        job_type: JobType = JobType.ECU,
        client_notes: Optional[str] = None,
    ) -> CreatedJob:
        """Price, debit and create a job as one unit.

        Pricing failures abort before anything is written. The debit, the job
        row, its priced snapshot and the ledger entry's ``job_ref`` share one
        SAVEPOINT, so a failure after the debit rolls the debit back too.
        """
        items = await self.pricing.price(codes)
        total = total_price(items)

        async with self.session.begin_nested():
            entry = None
            if total > 0:
                entry = await self.ledger.debit(
                    account_id=owner_id,
                    amount=total,
                    description=f"Payment for tuning job ({', '.join(item.code for item in items)})",
                )
            model = await self.repository.create_job(
                owner_id=owner_id,
                fields=self._vehicle_columns(vehicle, job_type, client_notes),
                priced_items=[
                    {"code": item.code, "name": item.name, "price_cents": to_cents(item.price)}
                    for item in items
                ],
                credits_used_cents=to_cents(total),
            )
            if entry is not None:
                entry = await self.ledger.attach_job(entry.id, model.id)

        job = self._to_domain(model)
        logger.info(
            "Job %s (%s) created for %s, %s credits",
            job.id, job.reference_number, owner_id, job.credits_used,
        )
        return CreatedJob(
            job=job,
            ledger_entry_id=entry.id if entry else None,
            balance_after=entry.balance_after if entry else None,
        )

    async def get_job(self, job_id: str, viewer: Optional[Account] = None) -> Job:
        model = await self.repository.get_job(job_id)
        if model is None:
            raise JobNotFound(job_id)
        if viewer is not None and model.owner_id != viewer.id and not viewer.is_admin():
            raise JobNotFound(job_id)
        return self._to_domain(model)

    async def list_jobs(
        self,
        *,
        owner_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Job]:
        rows = await self.repository.list_jobs(owner_id=owner_id, status=status, limit=limit, offset=offset)
        return [self._to_domain(row) for row in rows]

    async def transition(
        self,
        *,
        job_id: str,
        target: JobStatus | str,
        actor: Account,
        reason: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> Job:
        """Move a job to ``target`` through the state machine.

        The write is a compare-and-set on the job's version. When another
        transition lands first the job is reloaded and the request is checked
        again against the new status, so two racing requests never both apply
        to the same starting state.
        """
        target = parse_status(target)
        for attempt in range(1, MAX_TRANSITION_ATTEMPTS + 1):
            model = await self.repository.get_job(job_id)
            if model is None:
                raise JobNotFound(job_id)
            job = self._to_domain(model)
            self._authorize(job, target, actor)

            plan = plan_transition(
                job,
                target,
                now=utcnow(),
                reason=reason,
                assign_to=actor.id if actor.is_admin() else None,
                admin_notes=admin_notes,
            )
            applied = await self.repository.apply_transition(
                job_id,
                expected_version=job.version,
                values=plan.column_values(),
            )
            if not applied:
                logger.info("Job %s changed concurrently (attempt %d), re-validating", job_id, attempt)
                continue

            if plan.reason and target is JobStatus.REVISION_REQUESTED:
                await self.messages.add_message(
                    job_id=job_id,
                    sender_id=actor.id,
                    body=f"Revision requested: {plan.reason}",
                )
            logger.info("Job %s: %s -> %s by %s", job_id, plan.source.value, target.value, actor.id)
            return await self.get_job(job_id)

        raise TransitionConflict()

    async def request_revision(self, *, job_id: str, actor: Account, reason: str) -> Job:
        return await self.transition(
            job_id=job_id,
            target=JobStatus.REVISION_REQUESTED,
            actor=actor,
            reason=reason,
        )

    async def refund(self, *, job_id: str, admin: Account, reason: Optional[str] = None) -> CreditOutcome:
        """Return a job's credits to its owner; at most once per job."""
        if not admin.is_admin():
            raise Unauthorized()
        job = await self.get_job(job_id)
        if job.credits_used <= Decimal("0"):
            raise InvalidAmount("This job did not cost any credits")
        return await self.ledger.credit(
            account_id=job.owner_id,
            amount=job.credits_used,
            external_ref=f"refund:{job.id}",
            kind=EntryKind.REFUND,
            job_ref=job.id,
            description=reason or f"Refund for job {job.reference_number}",
            processed_by=admin.id,
        )

    @staticmethod
    def _authorize(job: Job, target: JobStatus, actor: Account) -> None:
        if actor.is_admin():
            return
        if job.owner_id != actor.id:
            raise JobNotFound(job.id)
        if target is not JobStatus.REVISION_REQUESTED:
            raise Unauthorized("Only staff can change the status of a job")

    @staticmethod
    def _vehicle_columns(vehicle: VehicleInfo, job_type: JobType, client_notes: Optional[str]) -> dict:
        data = asdict(vehicle)
        return {
            "vehicle_brand": data.pop("brand"),
            "vehicle_model": data.pop("model"),
            "vehicle_year": data.pop("year"),
            "job_type": JobType(job_type).value,
            "client_notes": client_notes,
            **data,
        }

    @staticmethod
    def _to_domain(model: JobModel) -> Job:
        return Job(
            id=model.id,
            reference_number=model.reference_number,
            owner_id=model.owner_id,
            status=JobStatus(model.status),
            job_type=JobType(model.job_type),
            vehicle=VehicleInfo(
                brand=model.vehicle_brand,
                model=model.vehicle_model,
                year=model.vehicle_year,
                engine_type=model.engine_type,
                engine_power_hp=model.engine_power_hp,
                ecu_type=model.ecu_type,
                tcu_type=model.tcu_type,
                gearbox_type=model.gearbox_type,
                vin=model.vin,
                mileage=model.mileage,
                fuel_type=model.fuel_type,
            ),
            priced_items=tuple(
                PricedItem(code=item.code, name=item.name, price=from_cents(item.price_cents))
                for item in model.priced_items
            ),
            credits_used=from_cents(model.credits_used_cents),
            created_at=model.created_at,
            updated_at=model.updated_at,
            assigned_admin_id=model.assigned_admin_id,
            client_notes=model.client_notes,
            admin_notes=model.admin_notes,
            started_at=model.started_at,
            completed_at=model.completed_at,
            revision_count=model.revision_count,
            version=model.version,
        )
