"""Read-only records the engine consumes.

The storage layer converts ORM rows into these frozen dataclasses so every
aggregation works on plain values and never touches a database session.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional


class EntryType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class Basis(str, Enum):
    CASH = "cash"
    ACCRUAL = "accrual"


class StoredStatus(str, Enum):
    """Last-known status as persisted. Advisory only."""

    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"
    RECEIVED = "received"
    CONFIRMED = "confirmed"


class EffectiveStatus(str, Enum):
    """Status recomputed against an as-of date."""

    PENDING = "pending"
    OVERDUE = "overdue"
    PAID = "paid"
    RECEIVED = "received"
    CONFIRMED = "confirmed"


SETTLED_STATUSES = frozenset({"paid", "received", "confirmed"})


@dataclass(frozen=True)
class Category:
    id: int
    company_id: int
    name: str
    type: EntryType
    dre_category: Optional[str] = None


@dataclass(frozen=True)
class LedgerEntry:
    id: int
    company_id: int
    date: date
    type: EntryType
    amount: Decimal
    status: StoredStatus = StoredStatus.CONFIRMED
    competence_date: Optional[date] = None
    due_date: Optional[date] = None
    gross_amount: Optional[Decimal] = None
    fees: Optional[Decimal] = None
    category_id: Optional[int] = None
    subcategory_id: Optional[int] = None
    cost_center: Optional[str] = None
    payment_method: str = "transfer"
    movement_type: str = "normal"
    recurrence: Optional[str] = None
    description: str = ""

    @property
    def status_due_date(self) -> date:
        return self.due_date or self.date

    @property
    def is_settled(self) -> bool:
        return self.status.value in SETTLED_STATUSES

    def reference_date(self, basis: Basis) -> date:
        # Entries without a recorded competence date belong to the period they settled in.
        if basis == Basis.ACCRUAL:
            return self.competence_date or self.date
        return self.date

    def has_consistent_gross(self) -> bool:
        if self.gross_amount is None:
            return True
        return self.gross_amount >= self.amount + (self.fees or Decimal("0"))


@dataclass(frozen=True)
class Payable:
    id: int
    company_id: int
    amount: Decimal
    due_date: date
    status: StoredStatus = StoredStatus.PENDING
    paid_date: Optional[date] = None
    description: str = ""
    supplier_id: Optional[int] = None
    category_id: Optional[int] = None
    late_fees: Optional[Decimal] = None
    active: bool = True

    type = EntryType.EXPENSE

    @property
    def status_due_date(self) -> date:
        return self.due_date

    @property
    def is_settled(self) -> bool:
        return self.status.value in SETTLED_STATUSES

    @property
    def settled_date(self) -> Optional[date]:
        return self.paid_date

    def reference_date(self, basis: Basis = Basis.CASH) -> date:
        return self.paid_date or self.due_date


@dataclass(frozen=True)
class Receivable:
    id: int
    company_id: int
    amount: Decimal
    due_date: date
    status: StoredStatus = StoredStatus.PENDING
    received_date: Optional[date] = None
    description: str = ""
    client_id: Optional[int] = None
    category_id: Optional[int] = None
    late_fees: Optional[Decimal] = None
    active: bool = True

    type = EntryType.INCOME

    @property
    def status_due_date(self) -> date:
        return self.due_date

    @property
    def is_settled(self) -> bool:
        return self.status.value in SETTLED_STATUSES

    @property
    def settled_date(self) -> Optional[date]:
        return self.received_date

    def reference_date(self, basis: Basis = Basis.CASH) -> date:
        return self.received_date or self.due_date
