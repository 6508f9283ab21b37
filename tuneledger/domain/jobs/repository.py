"""Protocol for job persistence"""

from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Protocol, Sequence

from tuneledger.infrastructure.database.models import Job as JobModel


class JobRepository(Protocol):
    async def next_reference_number(self, day: date) -> str:
        ...

    async def create_job(
        self,
        *,
        owner_id: str,
        fields: dict[str, Any],
        priced_items: Iterable[dict[str, Any]],
        credits_used_cents: int,
    ) -> JobModel:
        ...

    async def get_job(self, job_id: str) -> JobModel | None:
        ...

    async def list_jobs(
        self,
        *,
        owner_id: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Sequence[JobModel]:
        ...

    async def apply_transition(self, job_id: str, *, expected_version: int, values: dict[str, Any]) -> bool:
        ...
