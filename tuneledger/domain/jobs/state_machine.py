"""Job lifecycle state machine.

All status side effects live here: callers ask for a target status and get
back a plan with every timestamp and counter already computed, so nothing can
change ``status`` without also getting ``started_at``, ``completed_at`` and
``revision_count`` right.

    pending            -> in_progress, waiting_for_info, rejected
    in_progress        -> waiting_for_info, completed, rejected
    waiting_for_info   -> in_progress, rejected
    completed          -> revision_requested
    revision_requested -> in_progress
    rejected           -> (terminal)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .exceptions import InvalidTransition, RevisionReasonRequired
from .models import Job, JobStatus

INITIAL_STATUS = JobStatus.PENDING

TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.IN_PROGRESS, JobStatus.WAITING_FOR_INFO, JobStatus.REJECTED}),
    JobStatus.IN_PROGRESS: frozenset({JobStatus.WAITING_FOR_INFO, JobStatus.COMPLETED, JobStatus.REJECTED}),
    JobStatus.WAITING_FOR_INFO: frozenset({JobStatus.IN_PROGRESS, JobStatus.REJECTED}),
    JobStatus.COMPLETED: frozenset({JobStatus.REVISION_REQUESTED}),
    JobStatus.REVISION_REQUESTED: frozenset({JobStatus.IN_PROGRESS}),
    JobStatus.REJECTED: frozenset(),
}


def allowed_targets(current: JobStatus) -> frozenset[JobStatus]:
    return TRANSITIONS[current]


def can_transition(current: JobStatus, target: JobStatus) -> bool:
    return target in TRANSITIONS[current]


def parse_status(value: str | JobStatus) -> JobStatus:
    try:
        return JobStatus(value)
    except ValueError as exc:
        raise InvalidTransition("?", str(value), f"Unknown job status '{value}'") from exc


@dataclass(slots=True, frozen=True)
class TransitionPlan:
    source: JobStatus
    target: JobStatus
    updated_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    revision_count: int
    assigned_admin_id: Optional[str]
    admin_notes: Optional[str]
    reason: Optional[str] = None

    def column_values(self) -> dict[str, Any]:
        return {
            "status": self.target.value,
            "updated_at": self.updated_at,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "revision_count": self.revision_count,
            "assigned_admin_id": self.assigned_admin_id,
            "admin_notes": self.admin_notes,
        }


def plan_transition(
    job: Job,
    target: JobStatus,
    *,
    now: datetime,
    reason: Optional[str] = None,
    assign_to: Optional[str] = None,
    admin_notes: Optional[str] = None,
) -> TransitionPlan:
    """Validate ``job.status -> target`` and compute the resulting row values.

    Raises ``InvalidTransition`` for moves outside the table and
    ``RevisionReasonRequired`` when a revision request has no reason.
    """
    if not can_transition(job.status, target):
        raise InvalidTransition(job.status.value, target.value)

    revision_count = job.revision_count
    clean_reason = reason.strip() if reason else None
    if target is JobStatus.REVISION_REQUESTED:
        if not clean_reason:
            raise RevisionReasonRequired()
        revision_count += 1

    started_at = job.started_at
    if target is JobStatus.IN_PROGRESS and started_at is None:
        started_at = now

    completed_at = job.completed_at
    if target is JobStatus.COMPLETED:
        completed_at = now

    return TransitionPlan(
        source=job.status,
        target=target,
        updated_at=now,
        started_at=started_at,
        completed_at=completed_at,
        revision_count=revision_count,
        assigned_admin_id=assign_to if assign_to is not None else job.assigned_admin_id,
        admin_notes=admin_notes if admin_notes is not None else job.admin_notes,
        reason=clean_reason,
    )
