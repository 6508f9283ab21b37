"""ORM guards for append-only tables.

Ledger entries and job messages are never updated or deleted through the ORM.
The single exception is ``LedgerEntry.job_ref``, which the debit-on-create
workflow fills in once after the job row exists.
"""

from __future__ import annotations

import logging

from sqlalchemy import event, inspect

from tuneledger.infrastructure.database.models import JobPricedItem, LedgerEntry, Message

logger = logging.getLogger(__name__)


class ImmutableRecordError(RuntimeError):
    """Raised when a flush would rewrite an append-only record."""


def _changed_columns(target) -> set[str]:
    state = inspect(target)
    changed = set()
    for attr in state.mapper.column_attrs:
        history = state.attrs[attr.key].history
        if history.has_changes():
            changed.add(attr.key)
    return changed


def _guard_ledger_entry_update(mapper, connection, target: LedgerEntry) -> None:
    changed = _changed_columns(target)
    if not changed:
        return
    if changed == {"job_ref"}:
        history = inspect(target).attrs["job_ref"].history
        previous = history.deleted[0] if history.deleted else None
        if previous is None:
            return
    logger.error("Rejected rewrite of ledger entry %s (columns: %s)", target.id, sorted(changed))
    raise ImmutableRecordError(f"ledger entry {target.id} is immutable")


def _reject_update(mapper, connection, target) -> None:
    if _changed_columns(target):
        raise ImmutableRecordError(f"{type(target).__name__} {target.id} is immutable")


def _reject_delete(mapper, connection, target) -> None:
    raise ImmutableRecordError(f"{type(target).__name__} {target.id} cannot be deleted")


_LISTENERS = (
    (LedgerEntry, "before_update", _guard_ledger_entry_update),
    (LedgerEntry, "before_delete", _reject_delete),
    (JobPricedItem, "before_update", _reject_update),
    (JobPricedItem, "before_delete", _reject_delete),
    (Message, "before_update", _reject_update),
    (Message, "before_delete", _reject_delete),
)


def register_immutability_listeners() -> None:
    for model, name, listener in _LISTENERS:
        if not event.contains(model, name, listener):
            event.listen(model, name, listener)


def unregister_immutability_listeners() -> None:
    for model, name, listener in _LISTENERS:
        if event.contains(model, name, listener):
            event.remove(model, name, listener)


__all__ = [
    "ImmutableRecordError",
    "register_immutability_listeners",
    "unregister_immutability_listeners",
]
