from __future__ import annotations

import csv
import io
from datetime import date
from typing import Iterable, List

from openpyxl import Workbook

from .models import MonthlyReading

EXPORT_HEADERS = [
    "Year",
    "Month",
    "Cumulative (Wh)",
    "Cumulative (kWh)",
    "Monthly (kWh)",
    "Calculation",
]


def export_rows(monthly: Iterable[MonthlyReading]) -> List[List[object]]:
    """One export row per monthly reading, values rounded for display."""

    return [
        [
            item.year,
            item.month_name,
            _format_wh(item.cumulative_wh),
            f"{item.cumulative_kwh:.2f}",
            f"{item.monthly_kwh:.2f}",
            item.calculation,
        ]
        for item in monthly
    ]


def monthly_to_csv(monthly: Iterable[MonthlyReading]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)
    writer.writerows(export_rows(monthly))
    return buffer.getvalue()


def monthly_to_xlsx(monthly: Iterable[MonthlyReading]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Monthly energy"
    sheet.append(EXPORT_HEADERS)
    for item in monthly:
        sheet.append(
            [
                item.year,
                item.month_name,
                item.cumulative_wh,
                round(item.cumulative_kwh, 2),
                round(item.monthly_kwh, 2),
                item.calculation,
            ]
        )
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_filename(extension: str, today: date | None = None) -> str:
    stamp = (today or date.today()).isoformat()
    return f"monthly-energy-data-{stamp}.{extension}"


def _format_wh(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
