from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

from .aggregates import PeriodKey, aggregate_generation
from .models import MonthlyReading


@dataclass(frozen=True)
class GenerationReport:
    count: int
    total_kwh: float
    mean_kwh: float
    max_kwh: float
    min_kwh: float
    growth_pct: float
    last_month_growth_pct: float
    trend_kwh_per_month: float
    max_month: str | None
    min_month: str | None
    first_month: str | None
    latest_month: str | None
    yearly_totals: Dict[PeriodKey, float]


def build_generation_report(monthly: Sequence[MonthlyReading]) -> GenerationReport:
    """Summarise a chronologically sorted monthly series.

    Totals use full-precision monthly values; rounding is left to display.
    Growth compares the first and last cumulative values.
    """

    monthly = list(monthly)
    if not monthly:
        return GenerationReport(
            count=0,
            total_kwh=0.0,
            mean_kwh=0.0,
            max_kwh=0.0,
            min_kwh=0.0,
            growth_pct=0.0,
            last_month_growth_pct=0.0,
            trend_kwh_per_month=0.0,
            max_month=None,
            min_month=None,
            first_month=None,
            latest_month=None,
            yearly_totals={},
        )

    values = [item.monthly_kwh for item in monthly]
    total = sum(values)
    max_item = max(monthly, key=lambda item: item.monthly_kwh)
    min_item = min(monthly, key=lambda item: item.monthly_kwh)

    return GenerationReport(
        count=len(monthly),
        total_kwh=total,
        mean_kwh=total / len(values),
        max_kwh=max_item.monthly_kwh,
        min_kwh=min_item.monthly_kwh,
        growth_pct=_growth_pct(monthly[0].cumulative_kwh, monthly[-1].cumulative_kwh),
        last_month_growth_pct=_last_month_growth_pct(values),
        trend_kwh_per_month=_trend_slope(values),
        max_month=max_item.label,
        min_month=min_item.label,
        first_month=monthly[0].label,
        latest_month=monthly[-1].label,
        yearly_totals=aggregate_generation(monthly, period="year"),
    )


def _growth_pct(first: float, last: float) -> float:
    if first == 0:
        return 0.0
    return (last - first) / first * 100.0


def _last_month_growth_pct(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    return _growth_pct(values[-2], values[-1])


def _trend_slope(values: Sequence[float]) -> float:
    # Least-squares slope against the month index.
    n = len(values)
    if n < 2:
        return 0.0
    sum_x = sum(range(n))
    sum_y = sum(values)
    sum_xy = sum(x * y for x, y in enumerate(values))
    sum_xx = sum(x * x for x in range(n))
    return (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
