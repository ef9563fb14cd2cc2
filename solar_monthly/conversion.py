from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .models import WH_PER_KWH, CumulativeReading, MonthlyReading

logger = logging.getLogger(__name__)


def cumulative_to_monthly(readings: Iterable[CumulativeReading]) -> List[MonthlyReading]:
    """Derive per-month generation from year-to-date cumulative readings.

    Readings are sorted by (year, month) first. The first month reports its
    cumulative value as generation; each later month reports the increase
    over its predecessor, clamped at zero when the meter went backwards.
    A timestamp seen more than once keeps its last reading.
    """

    ordered = sorted(_dedupe_keep_last(readings).values(), key=lambda r: (r.year, r.month))

    results: List[MonthlyReading] = []
    previous: CumulativeReading | None = None
    for current in ordered:
        if previous is None:
            delta_wh = current.cumulative_wh
            previous_kwh = None
        else:
            delta_wh = max(0.0, current.cumulative_wh - previous.cumulative_wh)
            previous_kwh = previous.cumulative_kwh
        results.append(
            MonthlyReading(
                timestamp=current.timestamp,
                monthly_kwh=delta_wh / WH_PER_KWH,
                cumulative_wh=current.cumulative_wh,
                previous_cumulative_kwh=previous_kwh,
            )
        )
        previous = current
    return results


def _dedupe_keep_last(readings: Iterable[CumulativeReading]) -> Dict[str, CumulativeReading]:
    by_timestamp: Dict[str, CumulativeReading] = {}
    for reading in readings:
        if reading.timestamp in by_timestamp:
            logger.warning("Duplicate reading for %s; keeping the last one", reading.timestamp)
        by_timestamp[reading.timestamp] = reading
    return by_timestamp
