"""Income statement (DRE) composition.

Settled records are classified through their category's ``dre_category``
into statement buckets, then the statement is derived top-down::

    gross revenue - deductions          = net revenue
    net revenue - costs                 = gross profit
    gross profit - operating expenses   = operating profit (EBIT)
    EBIT + depreciation + amortization  = EBITDA
    EBIT - IRPJ - CSLL - other taxes    = net profit

Tax lines are read from stored amounts, never derived from tax rules.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from caixa.utils import quantize_money, quantize_percent

from .comparison import percent_change
from .errors import ValidationError
from .periods import DREPeriod
from .records import Basis, Category, LedgerEntry, Payable, Receivable

logger = logging.getLogger(__name__)

D = Decimal
ZERO = D("0")
HUNDRED = D("100")

DEDUCTION_TAXES = ("pis", "cofins", "icms", "iss")
INCOME_TAXES = ("irpj", "csll", "other_taxes")
DRE_CATEGORIES = frozenset(
    {
        "revenue",
        "deductions",
        *DEDUCTION_TAXES,
        "costs",
        "operational_expenses",
        "depreciation",
        "amortization",
        *INCOME_TAXES,
    }
)
OPEX_CATEGORIES = frozenset({"operational_expenses", "depreciation", "amortization"})

Record = Union[LedgerEntry, Payable, Receivable]
BreakdownLine = Tuple[str, str, Decimal]


@dataclass(frozen=True)
class DRELine:
    key: str
    label: str
    value: Decimal
    percentage: Decimal
    kind: str = "decrease"  # total | subtotal | decrease | increase
    children: Tuple["DRELine", ...] = ()


@dataclass(frozen=True)
class PeriodTotals:
    """Raw bucket sums for one period, before any derivation."""

    amounts: Dict[str, Decimal] = field(default_factory=dict)
    opex_by_category: Dict[Optional[int], Decimal] = field(default_factory=dict)

    def get(self, key: str) -> Decimal:
        return self.amounts.get(key, ZERO)


@dataclass(frozen=True)
class DREData:
    year: int
    month: int
    gross_revenue: Decimal
    pis: Decimal
    cofins: Decimal
    icms: Decimal
    iss: Decimal
    other_deductions: Decimal
    deductions: Decimal
    net_revenue: Decimal
    costs: Decimal
    gross_profit: Decimal
    contribution_margin: Decimal
    operational_expenses: Decimal
    depreciation: Decimal
    amortization: Decimal
    operational_profit: Decimal
    ebitda: Decimal
    irpj: Decimal
    csll: Decimal
    other_taxes: Decimal
    profit_before_tax: Decimal
    tax_expense: Decimal
    net_profit: Decimal
    breakdown_mode: str
    lines: Tuple[DRELine, ...] = ()


@dataclass(frozen=True)
class DREComparison:
    current: DREData
    previous: DREData
    percentage_change: Dict[str, Optional[Decimal]]


# ---------------------------------------------------------------------------
# Operating expense breakdown strategies
# ---------------------------------------------------------------------------


class OpexBreakdownStrategy(Protocol):
    key: str

    def breakdown(
        self,
        total: Decimal,
        by_category: Dict[Optional[int], Decimal],
        names: Dict[int, str],
    ) -> List[BreakdownLine]: ...


class FixedRatioFallback:
    """Split the operating expense total into fixed display proportions.

    The last share absorbs rounding so the sub-lines always add back up to
    the total.
    """

    key = "fixed_ratio"
    RATIOS: Tuple[Tuple[str, str, Decimal], ...] = (
        ("administrative_expenses", "Administrative expenses", D("0.40")),
        ("sales_expenses", "Sales expenses", D("0.30")),
        ("financial_expenses", "Financial expenses", D("0.20")),
        ("other_operational_expenses", "Other operating expenses", D("0.10")),
    )

    def breakdown(
        self,
        total: Decimal,
        by_category: Dict[Optional[int], Decimal],
        names: Dict[int, str],
    ) -> List[BreakdownLine]:
        lines: List[BreakdownLine] = []
        allocated = ZERO
        for index, (key, label, ratio) in enumerate(self.RATIOS):
            if index == len(self.RATIOS) - 1:
                value = total - allocated
            else:
                value = quantize_money(total * ratio)
                allocated += value
            lines.append((key, label, value))
        return lines


class DirectCategorySum:
    """One sub-line per category that carried operating expenses.

    Falls back to the fixed split when the total has no category detail to
    account for it (e.g. a total supplied without its source records).
    """

    key = "direct"

    def __init__(self, fallback: Optional[OpexBreakdownStrategy] = None):
        self.fallback = fallback or FixedRatioFallback()

    def breakdown(
        self,
        total: Decimal,
        by_category: Dict[Optional[int], Decimal],
        names: Dict[int, str],
    ) -> List[BreakdownLine]:
        if sum(by_category.values(), ZERO) != total:
            logger.debug("Operating expenses lack category detail; using %s split", self.fallback.key)
            return self.fallback.breakdown(total, by_category, names)
        rows = sorted(by_category.items(), key=lambda item: (-item[1], str(item[0])))
        return [
            (
                f"category_{category_id}",
                names.get(category_id, str(category_id)) if category_id is not None else "Uncategorized",
                amount,
            )
            for category_id, amount in rows
        ]


OPEX_STRATEGIES = {
    DirectCategorySum.key: DirectCategorySum,
    FixedRatioFallback.key: FixedRatioFallback,
}


def get_opex_strategy(mode: str) -> OpexBreakdownStrategy:
    try:
        return OPEX_STRATEGIES[mode]()
    except KeyError as exc:
        raise ValidationError(f"Unknown operating expense breakdown: {mode!r}") from exc


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


def _is_settled(record: Record) -> bool:
    if not getattr(record, "active", True):
        return False
    return record.is_settled


def collect_period_totals(
    records: Iterable[Record],
    categories: Iterable[Category],
    period: DREPeriod,
) -> PeriodTotals:
    """Sum settled records whose competence date falls inside ``period``."""
    dre_category_by_id = {category.id: category.dre_category for category in categories}
    date_range = period.date_range
    amounts: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    opex_by_category: Dict[Optional[int], Decimal] = defaultdict(lambda: ZERO)
    skipped = 0

    for record in records:
        if not _is_settled(record):
            continue
        if record.reference_date(Basis.ACCRUAL) not in date_range:
            continue
        dre_category = dre_category_by_id.get(record.category_id)
        if dre_category not in DRE_CATEGORIES:
            skipped += 1
            continue
        amount = abs(D(record.amount))
        amounts[dre_category] += amount
        if dre_category in OPEX_CATEGORIES:
            opex_by_category[record.category_id] += amount

    if skipped:
        logger.debug("DRE %s: %s settled records without a statement category", period.label, skipped)
    return PeriodTotals(amounts=dict(amounts), opex_by_category=dict(opex_by_category))


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def build_dre(
    totals: PeriodTotals,
    period: DREPeriod,
    strategy: Optional[OpexBreakdownStrategy] = None,
    category_names: Optional[Dict[int, str]] = None,
) -> DREData:
    strategy = strategy or DirectCategorySum()
    names = category_names or {}

    gross_revenue = totals.get("revenue")
    pis, cofins, icms, iss = (totals.get(key) for key in DEDUCTION_TAXES)
    other_deductions = totals.get("deductions")
    deductions = pis + cofins + icms + iss + other_deductions
    net_revenue = gross_revenue - deductions

    costs = totals.get("costs")
    gross_profit = net_revenue - costs

    depreciation = totals.get("depreciation")
    amortization = totals.get("amortization")
    operational_expenses = totals.get("operational_expenses") + depreciation + amortization
    operational_profit = gross_profit - operational_expenses
    ebitda = operational_profit + depreciation + amortization

    irpj, csll, other_taxes = (totals.get(key) for key in INCOME_TAXES)
    tax_expense = irpj + csll + other_taxes
    net_profit = operational_profit - tax_expense

    def pct(value: Decimal) -> Decimal:
        if gross_revenue == 0:
            return D("0.00")
        return quantize_percent(value / gross_revenue * HUNDRED)

    def line(key: str, label: str, value: Decimal, kind: str = "decrease", children: Sequence[DRELine] = ()) -> DRELine:
        return DRELine(key=key, label=label, value=value, percentage=pct(value), kind=kind, children=tuple(children))

    opex_children = [
        line(key, label, value)
        for key, label, value in strategy.breakdown(operational_expenses, totals.opex_by_category, names)
    ]

    lines = (
        line("gross_revenue", "Gross revenue", gross_revenue, kind="total"),
        line(
            "deductions",
            "Deductions from revenue",
            deductions,
            children=[
                line("pis", "PIS", pis),
                line("cofins", "COFINS", cofins),
                line("icms", "ICMS", icms),
                line("iss", "ISS", iss),
                line("other_deductions", "Other deductions", other_deductions),
            ],
        ),
        line("net_revenue", "Net revenue", net_revenue, kind="subtotal"),
        line("costs", "Cost of goods and services sold", costs),
        line("gross_profit", "Gross profit", gross_profit, kind="subtotal"),
        line("operational_expenses", "Operating expenses", operational_expenses, children=opex_children),
        line("operational_profit", "Operating profit (EBIT)", operational_profit, kind="subtotal"),
        line(
            "ebitda",
            "EBITDA",
            ebitda,
            kind="subtotal",
            children=[
                line("depreciation", "Depreciation", depreciation, kind="increase"),
                line("amortization", "Amortization", amortization, kind="increase"),
            ],
        ),
        line(
            "taxes",
            "Income taxes",
            tax_expense,
            children=[
                line("irpj", "IRPJ", irpj),
                line("csll", "CSLL", csll),
                line("other_taxes", "Other taxes", other_taxes),
            ],
        ),
        line("net_profit", "Net profit", net_profit, kind="total"),
    )

    return DREData(
        year=period.year,
        month=period.month,
        gross_revenue=gross_revenue,
        pis=pis,
        cofins=cofins,
        icms=icms,
        iss=iss,
        other_deductions=other_deductions,
        deductions=deductions,
        net_revenue=net_revenue,
        costs=costs,
        gross_profit=gross_profit,
        contribution_margin=net_revenue - costs,
        operational_expenses=operational_expenses,
        depreciation=depreciation,
        amortization=amortization,
        operational_profit=operational_profit,
        ebitda=ebitda,
        irpj=irpj,
        csll=csll,
        other_taxes=other_taxes,
        profit_before_tax=operational_profit,
        tax_expense=tax_expense,
        net_profit=net_profit,
        breakdown_mode=strategy.key,
        lines=lines,
    )


COMPARED_LINES = ("gross_revenue", "net_revenue", "gross_profit", "ebitda", "net_profit")


def compare_dre(current: DREData, previous: DREData) -> DREComparison:
    return DREComparison(
        current=current,
        previous=previous,
        percentage_change={
            key: quantize_percent(percent_change(getattr(current, key), getattr(previous, key)))
            for key in COMPARED_LINES
        },
    )


def compose_dre(
    records: Iterable[Record],
    categories: Iterable[Category],
    year: int,
    month: int,
    strategy: Optional[OpexBreakdownStrategy] = None,
) -> DREComparison:
    """Build the statement for ``(year, month)`` and for the month before it."""
    period = DREPeriod(year, month)
    previous_period = period.previous()
    records = list(records)
    categories = list(categories)
    names = {category.id: category.name for category in categories}

    current = build_dre(collect_period_totals(records, categories, period), period, strategy, names)
    previous = build_dre(collect_period_totals(records, categories, previous_period), previous_period, strategy, names)
    return compare_dre(current, previous)
