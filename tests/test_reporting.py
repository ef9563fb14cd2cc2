import pytest

from solar_monthly.aggregates import aggregate_generation
from solar_monthly.conversion import cumulative_to_monthly
from solar_monthly.models import CumulativeReading
from solar_monthly.reporting import build_generation_report


def make_monthly():
    return cumulative_to_monthly(
        [
            CumulativeReading("202401", 1000000.0),
            CumulativeReading("202402", 1500000.0),
            CumulativeReading("202403", 1400000.0),
            CumulativeReading("202404", 2000000.0),
        ]
    )


def test_report_statistics():
    report = build_generation_report(make_monthly())
    assert report.count == 4
    assert report.total_kwh == pytest.approx(2100.0)
    assert report.mean_kwh == pytest.approx(525.0)
    assert report.max_kwh == pytest.approx(1000.0)
    assert report.min_kwh == 0.0
    assert report.max_month == "January 2024"
    assert report.min_month == "March 2024"
    assert report.first_month == "January 2024"
    assert report.latest_month == "April 2024"
    # (2000 - 1000) / 1000 * 100
    assert report.growth_pct == pytest.approx(100.0)
    # previous month generated 0 kWh
    assert report.last_month_growth_pct == 0.0
    # least squares over [1000, 500, 0, 600]
    assert report.trend_kwh_per_month == pytest.approx(-170.0)
    assert report.yearly_totals == {(2024,): pytest.approx(2100.0)}


def test_growth_is_zero_when_first_cumulative_is_zero():
    monthly = cumulative_to_monthly(
        [CumulativeReading("202401", 0.0), CumulativeReading("202402", 5000.0)]
    )
    report = build_generation_report(monthly)
    assert report.growth_pct == 0.0
    assert report.last_month_growth_pct == 0.0


def test_empty_report():
    report = build_generation_report([])
    assert report.count == 0
    assert report.total_kwh == 0.0
    assert report.max_month is None
    assert report.yearly_totals == {}


def test_aggregate_generation_by_period():
    monthly = cumulative_to_monthly(
        [
            CumulativeReading("202411", 100000.0),
            CumulativeReading("202412", 180000.0),
            CumulativeReading("202501", 30000.0),
        ]
    )
    assert aggregate_generation(monthly, period="year") == {
        (2024,): pytest.approx(180.0),
        (2025,): pytest.approx(0.0),
    }
    assert aggregate_generation(monthly, period="month")[(2024, 12)] == pytest.approx(80.0)
    with pytest.raises(ValueError):
        aggregate_generation(monthly, period="day")
