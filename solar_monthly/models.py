from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, Tuple

WH_PER_KWH = 1000.0

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True)
class CumulativeReading:
    """Year-to-date energy total reported for one month."""

    timestamp: str
    cumulative_wh: float

    @property
    def year(self) -> int:
        return parse_month_timestamp(self.timestamp)[0]

    @property
    def month(self) -> int:
        return parse_month_timestamp(self.timestamp)[1]

    @property
    def cumulative_kwh(self) -> float:
        return self.cumulative_wh / WH_PER_KWH


@dataclass(frozen=True)
class MonthlyReading:
    """Energy generated within one calendar month."""

    timestamp: str
    monthly_kwh: float
    cumulative_wh: float
    previous_cumulative_kwh: float | None = None

    @property
    def year(self) -> int:
        return parse_month_timestamp(self.timestamp)[0]

    @property
    def month(self) -> int:
        return parse_month_timestamp(self.timestamp)[1]

    @property
    def cumulative_kwh(self) -> float:
        return self.cumulative_wh / WH_PER_KWH

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def label(self) -> str:
        return f"{self.month_name} {self.year}"

    @property
    def short_label(self) -> str:
        return f"{self.month_name[:3]} '{self.timestamp[2:4]}"

    @property
    def calculation(self) -> str:
        if self.previous_cumulative_kwh is None:
            return "First month: Monthly = Cumulative"
        return f"Monthly = {self.cumulative_kwh:.2f} - {self.previous_cumulative_kwh:.2f}"


@dataclass(frozen=True)
class CumulativeSeries:
    """Cumulative readings returned for one device key and data point."""

    ps_key: str
    data_point: str
    readings: Tuple[CumulativeReading, ...]

    def __len__(self) -> int:
        return len(self.readings)

    @classmethod
    def from_rows(
        cls,
        ps_key: str,
        data_point: str,
        rows: Iterable[Mapping[str, object]],
        timestamp_key: str = "time_stamp",
    ) -> "CumulativeSeries":
        parsed = []
        for row in rows:
            timestamp = str(row[timestamp_key]).strip()
            parse_month_timestamp(timestamp)
            parsed.append(
                CumulativeReading(
                    timestamp=timestamp,
                    cumulative_wh=_row_value(row, data_point, timestamp_key),
                )
            )
        return cls(ps_key=ps_key, data_point=data_point, readings=tuple(parsed))


def parse_month_timestamp(timestamp: str) -> Tuple[int, int]:
    """Split a YYYYMM timestamp into (year, month)."""

    if len(timestamp) < 6 or not timestamp[:6].isdigit():
        raise ValueError(f"Invalid month timestamp: {timestamp!r}")
    year = int(timestamp[:4])
    month = int(timestamp[4:6])
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in timestamp: {timestamp!r}")
    return year, month


def format_month_timestamp(year: int, month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    return f"{year:04d}{month:02d}"


def _row_value(row: Mapping[str, object], data_point: str, timestamp_key: str) -> float:
    # The value sits under the data point name; older payloads use any other key.
    if data_point in row:
        raw = row[data_point]
    else:
        value_keys = [key for key in row if key != timestamp_key]
        if not value_keys:
            return 0.0
        raw = row[value_keys[0]]
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid energy value: {raw!r}") from exc
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Invalid energy value: {raw!r}")
    return value
