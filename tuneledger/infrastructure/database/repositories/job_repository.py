"""SQLAlchemy implementation for the job repository."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Iterable, Sequence

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.clock import utcnow
from tuneledger.infrastructure.database.models import Job, JobPricedItem

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "TUN"
_REFERENCE_ATTEMPTS = 5


def reference_prefix(day: date) -> str:
    return f"{REFERENCE_PREFIX}-{day:%Y%m%d}-"


class SqlJobRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def next_reference_number(self, day: date) -> str:
        prefix = reference_prefix(day)
        stmt = select(func.max(Job.reference_number)).where(Job.reference_number.like(f"{prefix}%"))
        result = await self.session.execute(stmt)
        latest = result.scalar_one_or_none()
        sequence = int(latest.rsplit("-", 1)[1]) + 1 if latest else 1
        return f"{prefix}{sequence:04d}"

    async def create_job(
        self,
        *,
        owner_id: str,
        fields: dict[str, Any],
        priced_items: Iterable[dict[str, Any]],
        credits_used_cents: int,
    ) -> Job:
        """Insert a job and its priced snapshot rows.

        Reference numbers are sequential per day; a concurrent insert that
        took the same number is retried with the next one.
        """
        items = list(priced_items)
        for attempt in range(1, _REFERENCE_ATTEMPTS + 1):
            now = utcnow()
            job = Job(
                owner_id=owner_id,
                reference_number=await self.next_reference_number(now.date()),
                status="pending",
                credits_used_cents=credits_used_cents,
                created_at=now,
                updated_at=now,
                revision_count=0,
                version=1,
                **fields,
            )
            job.priced_items = [
                JobPricedItem(position=index, code=item["code"], name=item["name"], price_cents=item["price_cents"])
                for index, item in enumerate(items)
            ]
            try:
                async with self.session.begin_nested():
                    self.session.add(job)
                    await self.session.flush()
            except IntegrityError:
                if attempt == _REFERENCE_ATTEMPTS:
                    raise
                logger.warning("Reference number %s taken, retrying", job.reference_number)
                continue
            return job
        raise RuntimeError("unreachable")

    async def get_job(self, job_id: str) -> Job | None:
        stmt = select(Job).where(Job.id == job_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_jobs(
        self,
        *,
        owner_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[Job]:
        stmt = select(Job)
        if owner_id is not None:
            stmt = stmt.where(Job.owner_id == owner_id)
        if status and status != "all":
            stmt = stmt.where(Job.status == status)
        stmt = stmt.order_by(desc(Job.created_at), desc(Job.reference_number)).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def apply_transition(self, job_id: str, *, expected_version: int, values: dict[str, Any]) -> bool:
        """Compare-and-set on ``version``; returns False when another writer got there first."""
        stmt = (
            update(Job)
            .where(Job.id == job_id, Job.version == expected_version)
            .values(version=Job.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
