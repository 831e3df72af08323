"""Response schemas. Decimals serialize as exact strings."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class CashFlowPointResponse(BaseModel):
    date: date
    income: Decimal
    expense: Decimal
    balance: Decimal
    opening_balance: Decimal
    projected: bool = False

    model_config = ConfigDict(from_attributes=True)


class CategoryExpenseResponse(BaseModel):
    category_id: Optional[int] = None
    category_name: str
    amount: Decimal
    percentage: Decimal

    model_config = ConfigDict(from_attributes=True)


class DashboardStatsResponse(BaseModel):
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
    comparison: Dict[str, Optional[Decimal]] = {}

    model_config = ConfigDict(from_attributes=True)


class CashFlowKpisResponse(BaseModel):
    average_balance: Decimal
    income_vs_expense: Decimal
    delinquency_rate: Decimal
    immediate_liquidity: Decimal
    burn_rate: Decimal

    model_config = ConfigDict(from_attributes=True)


class CashFlowAlertResponse(BaseModel):
    id: str
    type: str
    severity: str  # low | medium | high
    message: str
    count: int = 0
    total: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


class DRELineResponse(BaseModel):
    key: str
    label: str
    value: Decimal
    percentage: Decimal
    kind: str = "decrease"  # total | subtotal | decrease | increase
    children: List["DRELineResponse"] = []

    model_config = ConfigDict(from_attributes=True)


class DREDataResponse(BaseModel):
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
    lines: List[DRELineResponse] = []

    model_config = ConfigDict(from_attributes=True)


class DREComparisonResponse(BaseModel):
    current: DREDataResponse
    previous: DREDataResponse
    percentage_change: Dict[str, Optional[Decimal]]

    model_config = ConfigDict(from_attributes=True)


DRELineResponse.model_rebuild()
