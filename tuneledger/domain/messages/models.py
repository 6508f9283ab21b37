"""Domain model for job messages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Message:
    id: str
    job_id: str
    sender_id: str
    body: str
    internal: bool
    created_at: datetime
