"""Time source for persisted timestamps (naive UTC, matching the storage columns)."""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


__all__ = ["utcnow"]
