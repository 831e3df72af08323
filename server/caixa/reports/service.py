"""Report entry points.

Each function validates its arguments, reads what it needs from the store
and pipes the records through the pure aggregation functions. Nothing is
cached between calls.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from caixa.config import DEFAULT_BASIS, DEFAULT_OPEX_BREAKDOWN

from .bucketing import CashFlowPoint, bucketize, coerce_basis
from .categories import CategoryExpense, aggregate_by_category
from .dre import DREComparison, compose_dre, get_opex_strategy
from .kpis import (
    CashFlowAlert,
    CashFlowKpis,
    DashboardStats,
    cash_flow_alerts,
    cash_flow_kpis,
    summarize,
    with_comparison,
)
from .periods import DateLike, DateRange, DREPeriod, parse_date
from .records import Basis, LedgerEntry, Payable, Receivable
from .store import ReportStore, validate_company_id

logger = logging.getLogger(__name__)


def _today(as_of: Optional[DateLike]) -> date:
    if as_of is not None:
        return parse_date(as_of, "as_of")
    return datetime.utcnow().date()


def _accounts(store: ReportStore, company_id: int, date_range: DateRange) -> Tuple[List[Payable], List[Receivable]]:
    return store.list_payables(company_id, date_range), store.list_receivables(company_id, date_range)


def get_dashboard_stats(
    store: ReportStore,
    company_id: int,
    start_date: DateLike,
    end_date: DateLike,
    as_of: Optional[DateLike] = None,
) -> DashboardStats:
    company_id = validate_company_id(company_id)
    date_range = DateRange.parse(start_date, end_date)
    previous_range = date_range.previous()
    today = _today(as_of)
    store.get_company_settings(company_id)

    current = summarize(
        *_accounts(store, company_id, date_range),
        store.list_ledger_entries(company_id, date_range, Basis.CASH),
        date_range.start,
        date_range.end,
        today,
    )
    previous = summarize(
        *_accounts(store, company_id, previous_range),
        store.list_ledger_entries(company_id, previous_range, Basis.CASH),
        previous_range.start,
        previous_range.end,
        today,
    )
    stats = with_comparison(current, previous)
    logger.info(
        "Dashboard stats for company_id=%s %s..%s as of %s",
        company_id,
        date_range.start,
        date_range.end,
        today,
    )
    return stats


def _cash_flow_inputs(
    store: ReportStore,
    company_id: int,
    date_range: DateRange,
    basis: Basis,
    today: date,
) -> Tuple[List[CashFlowPoint], List[Payable], List[Receivable]]:
    entries: List[LedgerEntry] = store.list_ledger_entries(company_id, date_range, basis)
    for entry in entries:
        if not entry.has_consistent_gross():
            logger.warning(
                "Ledger entry %s has gross amount %s below amount %s plus fees %s",
                entry.id,
                entry.gross_amount,
                entry.amount,
                entry.fees,
            )
    payables, receivables = _accounts(store, company_id, date_range)
    opening_balance = store.get_opening_balance(company_id, date_range.start, basis)
    points = bucketize(
        [*entries, *payables, *receivables],
        date_range.start,
        date_range.end,
        opening_balance,
        basis=basis,
        as_of=today,
    )
    return points, payables, receivables


def get_cash_flow(
    store: ReportStore,
    company_id: int,
    start_date: DateLike,
    end_date: DateLike,
    basis: Union[Basis, str, None] = None,
    as_of: Optional[DateLike] = None,
) -> List[CashFlowPoint]:
    company_id = validate_company_id(company_id)
    date_range = DateRange.parse(start_date, end_date)
    basis = coerce_basis(basis or DEFAULT_BASIS)
    today = _today(as_of)
    store.get_company_settings(company_id)

    points, _, _ = _cash_flow_inputs(store, company_id, date_range, basis, today)
    logger.info("Cash flow for company_id=%s: %s points (%s basis)", company_id, len(points), basis.value)
    return points


def get_cash_flow_kpis(
    store: ReportStore,
    company_id: int,
    start_date: DateLike,
    end_date: DateLike,
    basis: Union[Basis, str, None] = None,
    as_of: Optional[DateLike] = None,
) -> CashFlowKpis:
    company_id = validate_company_id(company_id)
    date_range = DateRange.parse(start_date, end_date)
    basis = coerce_basis(basis or DEFAULT_BASIS)
    today = _today(as_of)
    store.get_company_settings(company_id)

    points, payables, receivables = _cash_flow_inputs(store, company_id, date_range, basis, today)
    return cash_flow_kpis(points, payables, receivables, today)


def get_cash_flow_alerts(
    store: ReportStore,
    company_id: int,
    start_date: DateLike,
    end_date: DateLike,
    as_of: Optional[DateLike] = None,
) -> List[CashFlowAlert]:
    company_id = validate_company_id(company_id)
    date_range = DateRange.parse(start_date, end_date)
    today = _today(as_of)
    store.get_company_settings(company_id)

    points, payables, receivables = _cash_flow_inputs(store, company_id, date_range, Basis.CASH, today)
    return cash_flow_alerts(points, payables, receivables, today)


def get_category_expenses(
    store: ReportStore,
    company_id: int,
    start_date: DateLike,
    end_date: DateLike,
    basis: Union[Basis, str, None] = None,
) -> List[CategoryExpense]:
    company_id = validate_company_id(company_id)
    date_range = DateRange.parse(start_date, end_date)
    basis = coerce_basis(basis or DEFAULT_BASIS)
    store.get_company_settings(company_id)

    entries = store.list_ledger_entries(company_id, date_range, basis)
    payables = store.list_payables(company_id, date_range)
    categories = store.list_categories(company_id)
    return aggregate_by_category(
        [*entries, *payables],
        date_range.start,
        date_range.end,
        categories=categories,
        basis=basis,
    )


def get_dre(
    store: ReportStore,
    company_id: int,
    year: int,
    month: int,
    breakdown: Optional[str] = None,
) -> DREComparison:
    """Income statement for ``(year, month)`` compared with the month before.

    ``breakdown`` overrides the tenant's operating expense breakdown mode for
    this call; otherwise the company setting wins, then the configured default.
    """
    company_id = validate_company_id(company_id)
    period = DREPeriod(year, month)
    span = DateRange(period.previous().start, period.end)
    override = get_opex_strategy(breakdown) if breakdown else None
    settings = store.get_company_settings(company_id)
    strategy = override or get_opex_strategy(settings.opex_breakdown or DEFAULT_OPEX_BREAKDOWN)

    records = [
        *store.list_ledger_entries(company_id, span, Basis.ACCRUAL),
        *store.list_payables(company_id, span),
        *store.list_receivables(company_id, span),
    ]
    categories = store.list_categories(company_id)
    logger.debug("DRE %s for company_id=%s over %s records", period.label, company_id, len(records))
    return compose_dre(records, categories, period.year, period.month, strategy=strategy)
