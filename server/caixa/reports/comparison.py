from __future__ import annotations

from decimal import Decimal
from typing import Optional

HUNDRED = Decimal("100")


def percent_change(current: Decimal, previous: Decimal) -> Optional[Decimal]:
    """Signed change of ``current`` relative to ``previous``; ``None`` when there is no base."""
    current = Decimal(current)
    previous = Decimal(previous)
    if previous == 0:
        return None
    return (current - previous) / abs(previous) * HUNDRED
