"""Job domain specific exceptions."""

from __future__ import annotations

from tuneledger.core.errors import DomainError


class JobError(DomainError):
    """Base class for job domain errors."""


class JobNotFound(JobError):
    code = "job_not_found"
    status_code = 404

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found", job_id=job_id)


class InvalidTransition(JobError):
    code = "invalid_transition"
    status_code = 409

    def __init__(self, current: str, target: str, detail: str | None = None) -> None:
        self.current = current
        self.target = target
        super().__init__(
            detail or f"A job in status '{current}' cannot move to '{target}'",
            current=current,
            target=target,
        )


class RevisionReasonRequired(JobError):
    code = "revision_reason_required"
    status_code = 422

    def default_detail(self) -> str:
        return "Please describe what needs to be revised"


class TransitionConflict(JobError):
    code = "transition_conflict"
    status_code = 409

    def default_detail(self) -> str:
        return "The job was changed by someone else, please reload and retry"
