from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from typing import Dict, Iterable, List, Optional, Protocol, Union

from .bucketing import coerce_basis
from .periods import DateLike, DateRange
from .records import Basis, Category, EntryType

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
DISPLAY_STEP = Decimal("0.1")
UNCATEGORIZED_NAME = "Uncategorized"


class CategorizedMovement(Protocol):
    type: EntryType
    amount: Decimal
    category_id: Optional[int]

    def reference_date(self, basis: Basis) -> date: ...


@dataclass(frozen=True)
class CategoryExpense:
    category_id: Optional[int]
    category_name: str
    amount: Decimal
    percentage: Decimal


def _display_percentages(amounts: List[Decimal], total: Decimal) -> List[Decimal]:
    """Round shares to one decimal so they still add up to exactly 100.0.

    Shares are floored to the display step and the leftover tenths go to the
    largest remainders (ties resolved by position, so output is stable).
    """
    exact = [amount / total * HUNDRED for amount in amounts]
    floored = [share.quantize(DISPLAY_STEP, rounding=ROUND_FLOOR) for share in exact]
    leftover = int(((HUNDRED - sum(floored, ZERO)) / DISPLAY_STEP).to_integral_value())
    order = sorted(range(len(exact)), key=lambda i: (-(exact[i] - floored[i]), i))
    for index in order[:max(leftover, 0)]:
        floored[index] += DISPLAY_STEP
    return floored


def aggregate_by_category(
    movements: Iterable[CategorizedMovement],
    start_date: DateLike,
    end_date: DateLike,
    categories: Iterable[Category] = (),
    basis: Union[Basis, str] = Basis.CASH,
) -> List[CategoryExpense]:
    """Sum expense movements per category, largest first.

    Movements without a category are kept under an explicit uncategorized
    bucket. Returns an empty list when nothing was spent in the range.
    """
    date_range = DateRange.parse(start_date, end_date)
    basis = coerce_basis(basis)
    names: Dict[int, str] = {category.id: category.name for category in categories}

    totals: "OrderedDict[Optional[int], Decimal]" = OrderedDict()
    for movement in movements:
        if EntryType(movement.type) != EntryType.EXPENSE:
            continue
        if movement.reference_date(basis) not in date_range:
            continue
        key = movement.category_id
        totals[key] = totals.get(key, ZERO) + abs(Decimal(movement.amount))

    grand_total = sum(totals.values(), ZERO)
    if grand_total == 0:
        return []

    unknown = [key for key in totals if key is not None and key not in names]
    if unknown:
        logger.warning("Expenses reference unknown category ids: %s", unknown)

    rows = sorted(totals.items(), key=lambda item: (-item[1], str(item[0])))
    percentages = _display_percentages([amount for _, amount in rows], grand_total)
    return [
        CategoryExpense(
            category_id=category_id,
            category_name=UNCATEGORIZED_NAME if category_id is None else names.get(category_id, str(category_id)),
            amount=amount,
            percentage=percentage,
        )
        for (category_id, amount), percentage in zip(rows, percentages)
    ]
