from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, Tuple

from .models import MonthlyReading

PeriodKey = Tuple[int, int] | Tuple[int]


def aggregate_generation(
    monthly: Iterable[MonthlyReading],
    period: str = "year",
) -> Dict[PeriodKey, float]:
    """Sum monthly generation (kWh) by month or year."""

    totals: Dict[PeriodKey, float] = defaultdict(float)
    for item in monthly:
        key = _period_key(item, period)
        totals[key] += item.monthly_kwh
    return dict(totals)


def _period_key(item: MonthlyReading, period: str) -> PeriodKey:
    if period == "month":
        return (item.year, item.month)
    if period == "year":
        return (item.year,)
    raise ValueError("period must be 'month' or 'year'")
