"""Dashboard KPIs, cash-flow indicators and alerts.

All functions take the as-of date explicitly. The service captures it once
per request so every figure in a response is derived from the same "today".
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Union

from caixa.utils import quantize_money, quantize_percent

from .bucketing import CashFlowPoint
from .comparison import percent_change
from .periods import DateLike, DateRange, parse_date
from .records import Basis, EffectiveStatus, EntryType, LedgerEntry, Payable, Receivable
from .status import days_until_due, effective_status, is_open

D = Decimal
ZERO = D("0")
RATIO_PLACES = D("0.0001")
DUE_SOON_DAYS = 7

Account = Union[Payable, Receivable]


@dataclass(frozen=True)
class DashboardStats:
    as_of: date
    start_date: date
    end_date: date
    total_revenue: Decimal
    total_expenses: Decimal
    balance: Decimal
    projected_balance: Decimal
    pending_receivables: Decimal
    pending_payables: Decimal
    overdue_payables: int
    overdue_receivables: int
    due_today_count: int
    due_this_week_count: int
    comparison: Dict[str, Optional[Decimal]] = field(default_factory=dict)


@dataclass(frozen=True)
class CashFlowKpis:
    average_balance: Decimal
    income_vs_expense: Decimal
    delinquency_rate: Decimal
    immediate_liquidity: Decimal
    burn_rate: Decimal


@dataclass(frozen=True)
class CashFlowAlert:
    id: str
    type: str
    severity: str
    message: str
    count: int = 0
    total: Decimal = ZERO


def _safe_div(num: Decimal, denom: Decimal) -> Decimal:
    if denom == 0:
        return ZERO
    return num / denom


def _in_range(record, date_range: DateRange) -> bool:
    return record.reference_date(Basis.CASH) in date_range


def summarize(
    payables: Iterable[Payable],
    receivables: Iterable[Receivable],
    entries: Iterable[LedgerEntry],
    start_date: DateLike,
    end_date: DateLike,
    as_of: DateLike,
) -> DashboardStats:
    """Compute the dashboard scalars for one range.

    Revenue and expenses are realized figures: received receivables, paid
    payables and confirmed ledger entries. Items still pending (and not yet
    overdue) feed the projected balance.
    """
    date_range = DateRange.parse(start_date, end_date)
    today = parse_date(as_of, "as_of")

    revenue = expenses = ZERO
    pending_in = pending_out = ZERO
    overdue_counts = {EntryType.INCOME: 0, EntryType.EXPENSE: 0}
    due_today = due_this_week = 0

    accounts: List[Account] = [
        record
        for record in (*payables, *receivables)
        if record.active and _in_range(record, date_range)
    ]
    for record in accounts:
        status = effective_status(record, today)
        amount = D(record.amount)
        if status in (EffectiveStatus.PAID, EffectiveStatus.RECEIVED):
            if record.type == EntryType.INCOME:
                revenue += amount
            else:
                expenses += amount
            continue

        if status == EffectiveStatus.OVERDUE:
            overdue_counts[record.type] += 1
        elif record.type == EntryType.INCOME:
            pending_in += amount
        else:
            pending_out += amount

        remaining = days_until_due(record.due_date, today)
        if remaining == 0:
            due_today += 1
        if 0 <= remaining <= DUE_SOON_DAYS:
            due_this_week += 1

    for entry in entries:
        if entry.date not in date_range:
            continue
        status = effective_status(entry, today)
        amount = D(entry.amount)
        if status == EffectiveStatus.CONFIRMED:
            if entry.type == EntryType.INCOME:
                revenue += amount
            else:
                expenses += amount
        elif status == EffectiveStatus.PENDING:
            if entry.type == EntryType.INCOME:
                pending_in += amount
            else:
                pending_out += amount

    balance = revenue - expenses
    return DashboardStats(
        as_of=today,
        start_date=date_range.start,
        end_date=date_range.end,
        total_revenue=revenue,
        total_expenses=expenses,
        balance=balance,
        projected_balance=balance + pending_in - pending_out,
        pending_receivables=pending_in,
        pending_payables=pending_out,
        overdue_payables=overdue_counts[EntryType.EXPENSE],
        overdue_receivables=overdue_counts[EntryType.INCOME],
        due_today_count=due_today,
        due_this_week_count=due_this_week,
    )


def with_comparison(current: DashboardStats, previous: DashboardStats) -> DashboardStats:
    comparison = {
        "total_revenue": quantize_percent(percent_change(current.total_revenue, previous.total_revenue)),
        "total_expenses": quantize_percent(percent_change(current.total_expenses, previous.total_expenses)),
        "balance": quantize_percent(percent_change(current.balance, previous.balance)),
    }
    return dataclasses.replace(current, comparison=comparison)


def cash_flow_kpis(
    points: Sequence[CashFlowPoint],
    payables: Iterable[Payable],
    receivables: Iterable[Receivable],
    as_of: DateLike,
) -> CashFlowKpis:
    today = parse_date(as_of, "as_of")
    if not points:
        return CashFlowKpis(ZERO, ZERO, ZERO, D("1"), ZERO)

    average_balance = sum((point.balance for point in points), ZERO) / len(points)

    total_income = sum((point.income for point in points), ZERO)
    total_expense = sum((point.expense for point in points), ZERO)
    income_vs_expense = _safe_div(total_income - total_expense, total_income)

    open_accounts = [record for record in (*payables, *receivables) if record.active and is_open(record)]
    overdue = sum(1 for record in open_accounts if effective_status(record, today) == EffectiveStatus.OVERDUE)
    delinquency_rate = _safe_div(D(overdue), D(len(open_accounts)))

    current_balance = next((point.balance for point in points if point.date == today), ZERO)
    next_week_expenses = sum(
        (point.expense for point in points if 0 <= (point.date - today).days < DUE_SOON_DAYS),
        ZERO,
    )
    immediate_liquidity = current_balance / next_week_expenses if next_week_expenses > 0 else D("1")

    spending_days = [point.expense for point in points if not point.projected and point.expense > 0]
    burn_rate = sum(spending_days, ZERO) / len(spending_days) if spending_days else ZERO

    return CashFlowKpis(
        average_balance=quantize_money(average_balance),
        income_vs_expense=income_vs_expense.quantize(RATIO_PLACES),
        delinquency_rate=delinquency_rate.quantize(RATIO_PLACES),
        immediate_liquidity=immediate_liquidity.quantize(RATIO_PLACES),
        burn_rate=quantize_money(burn_rate),
    )


def cash_flow_alerts(
    points: Sequence[CashFlowPoint],
    payables: Iterable[Payable],
    receivables: Iterable[Receivable],
    as_of: DateLike,
) -> List[CashFlowAlert]:
    today = parse_date(as_of, "as_of")
    alerts: List[CashFlowAlert] = []

    current_balance = next((point.balance for point in points if point.date == today), None)
    if current_balance is not None and current_balance < 0:
        alerts.append(
            CashFlowAlert(
                id="negative-balance",
                type="balance",
                severity="high",
                message=f"Negative balance: {current_balance:.2f}",
                total=current_balance,
            )
        )

    for alert_id, alert_type, label, records in (
        ("overdue-payables", "payable", "overdue payables", payables),
        ("late-receivables", "receivable", "late receivables", receivables),
    ):
        overdue = [
            record
            for record in records
            if record.active and effective_status(record, today) == EffectiveStatus.OVERDUE
        ]
        if not overdue:
            continue
        total = sum((D(record.amount) for record in overdue), ZERO)
        alerts.append(
            CashFlowAlert(
                id=alert_id,
                type=alert_type,
                severity="medium",
                message=f"{len(overdue)} {label} ({total:.2f})",
                count=len(overdue),
                total=total,
            )
        )
    return alerts
