"""Job domain exports"""

from .exceptions import InvalidTransition, JobError, JobNotFound, RevisionReasonRequired, TransitionConflict
from .models import CreatedJob, Job, JobStatus, JobType, VehicleInfo
from .state_machine import INITIAL_STATUS, TRANSITIONS, allowed_targets, can_transition, plan_transition
from .service import JobService

__all__ = [
    "INITIAL_STATUS",
    "TRANSITIONS",
    "CreatedJob",
    "InvalidTransition",
    "Job",
    "JobError",
    "JobNotFound",
    "JobService",
    "JobStatus",
    "JobType",
    "RevisionReasonRequired",
    "TransitionConflict",
    "VehicleInfo",
    "allowed_targets",
    "can_transition",
    "plan_transition",
]
