"""Storage collaborator: the narrow read interface the engine depends on."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterator, List, Optional, Protocol

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from caixa.models import (
    AccountPayable,
    AccountReceivable,
    BalanceAdjustment,
    CashFlowEntry,
    Category as CategoryRow,
    Company,
)
from caixa.utils import to_decimal

from .errors import NotFoundError, UpstreamError, ValidationError
from .periods import DateRange
from .records import Basis, Category, EntryType, LedgerEntry, Payable, Receivable, StoredStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompanySettings:
    id: int
    name: str
    opex_breakdown: Optional[str] = None


class ReportStore(Protocol):
    def get_company_settings(self, company_id: int) -> CompanySettings: ...

    def list_ledger_entries(self, company_id: int, date_range: DateRange, basis: Basis) -> List[LedgerEntry]: ...

    def list_payables(self, company_id: int, date_range: DateRange) -> List[Payable]: ...

    def list_receivables(self, company_id: int, date_range: DateRange) -> List[Receivable]: ...

    def list_categories(self, company_id: int) -> List[Category]: ...

    def get_opening_balance(self, company_id: int, as_of: date, basis: Basis = Basis.CASH) -> Decimal: ...


def validate_company_id(company_id: object) -> int:
    if isinstance(company_id, bool) or not isinstance(company_id, int) or company_id <= 0:
        raise ValidationError(f"Invalid company id: {company_id!r}")
    return company_id


def _decimal(value) -> Decimal:
    return to_decimal(value)


def _optional_decimal(value) -> Optional[Decimal]:
    return None if value is None else to_decimal(value)


def _ledger_entry(row: CashFlowEntry) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,
        company_id=row.company_id,
        date=row.date,
        type=EntryType(row.type),
        amount=_decimal(row.amount),
        status=StoredStatus(row.status),
        competence_date=row.competence_date,
        due_date=row.due_date,
        gross_amount=_optional_decimal(row.gross_amount),
        fees=_optional_decimal(row.fees),
        category_id=row.category_id,
        subcategory_id=row.subcategory_id,
        cost_center=row.cost_center,
        payment_method=row.payment_method,
        movement_type=row.movement_type,
        recurrence=row.recurrence,
        description=row.description,
    )


def _payable(row: AccountPayable) -> Payable:
    return Payable(
        id=row.id,
        company_id=row.company_id,
        amount=_decimal(row.amount),
        due_date=row.due_date,
        status=StoredStatus(row.status),
        paid_date=row.payment_date,
        description=row.description,
        supplier_id=row.supplier_id,
        category_id=row.category_id,
        late_fees=_optional_decimal(row.late_fees),
        active=row.active,
    )


def _receivable(row: AccountReceivable) -> Receivable:
    return Receivable(
        id=row.id,
        company_id=row.company_id,
        amount=_decimal(row.amount),
        due_date=row.due_date,
        status=StoredStatus(row.status),
        received_date=row.received_date,
        description=row.description,
        client_id=row.client_id,
        category_id=row.category_id,
        late_fees=_optional_decimal(row.late_fees),
        active=row.active,
    )


# Reference dates mirror ``reference_date()`` on the records so a row is
# filed under the same day by the list queries and the opening balance.


def _ledger_reference(basis: Basis):
    if basis == Basis.ACCRUAL:
        return func.coalesce(CashFlowEntry.competence_date, CashFlowEntry.date)
    return CashFlowEntry.date


def _payable_reference():
    return func.coalesce(AccountPayable.payment_date, AccountPayable.due_date)


def _receivable_reference():
    return func.coalesce(AccountReceivable.received_date, AccountReceivable.due_date)


class SqlAlchemyReportStore:
    """Reads report inputs through a SQLAlchemy session.

    Every query is filtered by company before anything else. Database
    failures surface as ``UpstreamError`` so callers can tell a failed read
    from an empty period.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _reading(self, what: str, company_id: int) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Failed to read %s for company_id=%s", what, company_id)
            raise UpstreamError(f"Could not read {what}.") from exc

    def get_company_settings(self, company_id: int) -> CompanySettings:
        company_id = validate_company_id(company_id)
        with self._reading("company", company_id):
            company = self.db.query(Company).filter(Company.id == company_id).first()
        if not company:
            raise NotFoundError(f"Company {company_id} not found.")
        return CompanySettings(id=company.id, name=company.name, opex_breakdown=company.opex_breakdown)

    def list_ledger_entries(self, company_id: int, date_range: DateRange, basis: Basis = Basis.CASH) -> List[LedgerEntry]:
        company_id = validate_company_id(company_id)
        reference = _ledger_reference(basis)
        with self._reading("ledger entries", company_id):
            rows = (
                self.db.query(CashFlowEntry)
                .filter(CashFlowEntry.company_id == company_id)
                .filter(reference >= date_range.start, reference <= date_range.end)
                .order_by(CashFlowEntry.date.asc(), CashFlowEntry.id.asc())
                .all()
            )
        logger.debug("Loaded %s ledger entries for company_id=%s", len(rows), company_id)
        return [_ledger_entry(row) for row in rows]

    def list_payables(self, company_id: int, date_range: DateRange) -> List[Payable]:
        company_id = validate_company_id(company_id)
        reference = _payable_reference()
        with self._reading("payables", company_id):
            rows = (
                self.db.query(AccountPayable)
                .filter(AccountPayable.company_id == company_id)
                .filter(AccountPayable.active.is_(True))
                .filter(reference >= date_range.start, reference <= date_range.end)
                .order_by(AccountPayable.due_date.asc(), AccountPayable.id.asc())
                .all()
            )
        return [_payable(row) for row in rows]

    def list_receivables(self, company_id: int, date_range: DateRange) -> List[Receivable]:
        company_id = validate_company_id(company_id)
        reference = _receivable_reference()
        with self._reading("receivables", company_id):
            rows = (
                self.db.query(AccountReceivable)
                .filter(AccountReceivable.company_id == company_id)
                .filter(AccountReceivable.active.is_(True))
                .filter(reference >= date_range.start, reference <= date_range.end)
                .order_by(AccountReceivable.due_date.asc(), AccountReceivable.id.asc())
                .all()
            )
        return [_receivable(row) for row in rows]

    def list_categories(self, company_id: int) -> List[Category]:
        company_id = validate_company_id(company_id)
        with self._reading("categories", company_id):
            rows = (
                self.db.query(CategoryRow)
                .filter(CategoryRow.company_id == company_id)
                .order_by(CategoryRow.name.asc())
                .all()
            )
        return [
            Category(
                id=row.id,
                company_id=row.company_id,
                name=row.name,
                type=EntryType(row.type),
                dre_category=row.dre_category,
            )
            for row in rows
        ]

    def get_opening_balance(self, company_id: int, as_of: date, basis: Basis = Basis.CASH) -> Decimal:
        """Running balance carried into ``as_of``.

        Sums ``initial`` balance adjustments dated before ``as_of`` plus every
        movement the daily buckets would have filed before it: all ledger
        entries on their ``basis`` date, and active payables and receivables
        on their settlement date (due date while open). A balance therefore
        does not depend on where the requested range starts.
        """
        company_id = validate_company_id(company_id)
        ledger_reference = _ledger_reference(basis)
        with self._reading("opening balance", company_id):
            adjustments = (
                self.db.query(func.coalesce(func.sum(BalanceAdjustment.amount), 0))
                .filter(BalanceAdjustment.company_id == company_id)
                .filter(BalanceAdjustment.balance_type == "initial")
                .filter(BalanceAdjustment.date < as_of)
                .scalar()
            )
            ledger_rows = (
                self.db.query(CashFlowEntry.type, func.coalesce(func.sum(CashFlowEntry.amount), 0))
                .filter(CashFlowEntry.company_id == company_id)
                .filter(ledger_reference < as_of)
                .group_by(CashFlowEntry.type)
                .all()
            )
            receivables = (
                self.db.query(func.coalesce(func.sum(AccountReceivable.amount), 0))
                .filter(AccountReceivable.company_id == company_id)
                .filter(AccountReceivable.active.is_(True))
                .filter(_receivable_reference() < as_of)
                .scalar()
            )
            payables = (
                self.db.query(func.coalesce(func.sum(AccountPayable.amount), 0))
                .filter(AccountPayable.company_id == company_id)
                .filter(AccountPayable.active.is_(True))
                .filter(_payable_reference() < as_of)
                .scalar()
            )

        ledger = {entry_type: _decimal(total) for entry_type, total in ledger_rows}
        return (
            _decimal(adjustments)
            + ledger.get("income", Decimal("0"))
            - ledger.get("expense", Decimal("0"))
            + _decimal(receivables)
            - _decimal(payables)
        )
