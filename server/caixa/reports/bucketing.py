"""Daily cash-flow buckets with a running balance.

Every calendar day of the inclusive range yields one point, including days
without movements, so the balance can be charted without gaps. Amounts are
summed with ``Decimal`` end to end; nothing is rounded until serialization.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Protocol, Union

from .errors import ValidationError
from .periods import DateLike, DateRange, parse_date
from .records import Basis, EntryType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class Movement(Protocol):
    type: EntryType
    amount: Decimal

    def reference_date(self, basis: Basis) -> date: ...


@dataclass(frozen=True)
class CashFlowPoint:
    date: date
    income: Decimal
    expense: Decimal
    balance: Decimal
    opening_balance: Decimal
    projected: bool = False


def coerce_basis(basis: Union[Basis, str]) -> Basis:
    try:
        return Basis(basis)
    except ValueError as exc:
        raise ValidationError("Basis must be cash or accrual.") from exc


def daily_totals(
    movements: Iterable[Movement],
    date_range: DateRange,
    basis: Basis,
) -> Dict[date, Dict[EntryType, Decimal]]:
    totals: Dict[date, Dict[EntryType, Decimal]] = defaultdict(
        lambda: {EntryType.INCOME: ZERO, EntryType.EXPENSE: ZERO}
    )
    for movement in movements:
        day = movement.reference_date(basis)
        if day not in date_range:
            continue
        kind = EntryType(movement.type)
        totals[day][kind] += abs(Decimal(movement.amount))
    return totals


def bucketize(
    movements: Iterable[Movement],
    start_date: DateLike,
    end_date: DateLike,
    opening_balance: Decimal,
    basis: Union[Basis, str] = Basis.CASH,
    as_of: Optional[DateLike] = None,
) -> List[CashFlowPoint]:
    """Group movements into one point per day of ``[start_date, end_date]``.

    ``basis`` picks the date each movement is filed under: settlement date
    for cash basis, competence date for accrual basis. ``as_of`` only marks
    days after it as projected and never changes the sums.
    """
    date_range = DateRange.parse(start_date, end_date)
    basis = coerce_basis(basis)
    today = parse_date(as_of, "as_of") if as_of is not None else None

    totals = daily_totals(movements, date_range, basis)
    logger.debug(
        "Bucketing %s days (%s basis) with %s active days",
        date_range.days,
        basis.value,
        len(totals),
    )

    running = Decimal(opening_balance)
    points: List[CashFlowPoint] = []
    for day in date_range.iter_days():
        day_totals = totals.get(day)
        income = day_totals[EntryType.INCOME] if day_totals else ZERO
        expense = day_totals[EntryType.EXPENSE] if day_totals else ZERO
        day_opening = running
        running = running + income - expense
        points.append(
            CashFlowPoint(
                date=day,
                income=income,
                expense=expense,
                balance=running,
                opening_balance=day_opening,
                projected=today is not None and day > today,
            )
        )
    return points
