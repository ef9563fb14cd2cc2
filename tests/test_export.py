import csv
import io
from datetime import date

from openpyxl import load_workbook

from solar_monthly.conversion import cumulative_to_monthly
from solar_monthly.export import EXPORT_HEADERS, export_filename, monthly_to_csv, monthly_to_xlsx
from solar_monthly.models import CumulativeReading


def make_monthly():
    return cumulative_to_monthly(
        [
            CumulativeReading("202405", 1000000.0),
            CumulativeReading("202406", 1523450.0),
        ]
    )


def test_csv_export():
    text = monthly_to_csv(make_monthly())
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[0] == EXPORT_HEADERS
    assert rows[1] == ["2024", "May", "1000000", "1000.00", "1000.00", "First month: Monthly = Cumulative"]
    assert rows[2] == ["2024", "June", "1523450", "1523.45", "523.45", "Monthly = 1523.45 - 1000.00"]


def test_csv_export_empty():
    assert monthly_to_csv([]).strip() == ",".join(EXPORT_HEADERS)


def test_xlsx_export():
    workbook = load_workbook(io.BytesIO(monthly_to_xlsx(make_monthly())))
    rows = list(workbook.active.iter_rows(values_only=True))
    assert list(rows[0]) == EXPORT_HEADERS
    assert rows[2][0] == 2024
    assert rows[2][4] == 523.45
    assert len(rows) == 3


def test_export_filename():
    assert export_filename("csv", date(2025, 3, 9)) == "monthly-energy-data-2025-03-09.csv"
