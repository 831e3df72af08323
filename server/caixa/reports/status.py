"""Effective status resolution.

Stored status is a last-known value. Every report derives the status it
shows from the record's due date and a single as-of date supplied by the
caller, so ``overdue`` is never persisted as a durable state: a record whose
due date is moved forward reads as ``pending`` again.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, Union

from .errors import ValidationError
from .periods import DateLike, parse_date
from .records import SETTLED_STATUSES, EffectiveStatus, StoredStatus

StatusLike = Union[StoredStatus, EffectiveStatus, str]


class HasDueStatus(Protocol):
    status: StoredStatus

    @property
    def status_due_date(self) -> date: ...


def _status_value(status: StatusLike) -> str:
    value = status.value if isinstance(status, (StoredStatus, EffectiveStatus)) else str(status).lower()
    if value not in EffectiveStatus._value2member_map_:
        raise ValidationError(f"Unknown status: {status!r}")
    return value


def resolve_status(status: StatusLike, due_date: DateLike, as_of: DateLike) -> EffectiveStatus:
    value = _status_value(status)
    if value in SETTLED_STATUSES:
        return EffectiveStatus(value)

    due = parse_date(due_date, "due_date")
    today = parse_date(as_of, "as_of")
    if due < today:
        return EffectiveStatus.OVERDUE
    return EffectiveStatus.PENDING


def effective_status(record: HasDueStatus, as_of: DateLike) -> EffectiveStatus:
    return resolve_status(record.status, record.status_due_date, as_of)


def days_until_due(due_date: DateLike, as_of: DateLike) -> int:
    """Whole days from ``as_of`` to ``due_date``; negative once overdue, 0 when due today."""
    return (parse_date(due_date, "due_date") - parse_date(as_of, "as_of")).days


def is_open(record: HasDueStatus) -> bool:
    return record.status.value not in SETTLED_STATUSES
