"""Monthly solar generation derived from cumulative meter readings: transform, statistics, export and charts."""

from .aggregates import aggregate_generation
from .charts import build_monthly_chart
from .conversion import cumulative_to_monthly
from .export import monthly_to_csv, monthly_to_xlsx
from .models import CumulativeReading, CumulativeSeries, MonthlyReading
from .reporting import GenerationReport, build_generation_report

__all__ = [
    "aggregate_generation",
    "build_generation_report",
    "build_monthly_chart",
    "cumulative_to_monthly",
    "CumulativeReading",
    "CumulativeSeries",
    "GenerationReport",
    "monthly_to_csv",
    "monthly_to_xlsx",
    "MonthlyReading",
]
