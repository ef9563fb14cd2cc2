import pytest

from solar_monthly.conversion import cumulative_to_monthly
from solar_monthly.models import CumulativeReading


def make_readings():
    # Jan-Apr 2024, with a meter correction in March
    return [
        CumulativeReading("202401", 1000000.0),
        CumulativeReading("202402", 1500000.0),
        CumulativeReading("202403", 1400000.0),
        CumulativeReading("202404", 2000000.0),
    ]


def test_monthly_deltas_with_clamping():
    monthly = cumulative_to_monthly(make_readings())
    assert [m.timestamp for m in monthly] == ["202401", "202402", "202403", "202404"]
    assert [m.monthly_kwh for m in monthly] == pytest.approx([1000.0, 500.0, 0.0, 600.0])
    assert all(m.monthly_kwh >= 0 for m in monthly)


def test_first_month_equals_cumulative():
    monthly = cumulative_to_monthly(make_readings())
    assert monthly[0].monthly_kwh == monthly[0].cumulative_kwh == 1000.0
    assert monthly[0].previous_cumulative_kwh is None
    assert monthly[1].previous_cumulative_kwh == 1000.0


def test_unsorted_input_matches_sorted():
    readings = make_readings()
    shuffled = [readings[2], readings[0], readings[3], readings[1]]
    assert cumulative_to_monthly(shuffled) == cumulative_to_monthly(readings)


def test_sorting_crosses_year_boundary():
    readings = [
        CumulativeReading("202501", 50000.0),
        CumulativeReading("202412", 900000.0),
    ]
    monthly = cumulative_to_monthly(readings)
    assert [m.timestamp for m in monthly] == ["202412", "202501"]
    # Year-to-date totals restart in January, so the drop clamps to zero.
    assert monthly[1].monthly_kwh == 0.0


def test_input_is_not_mutated():
    readings = make_readings()
    shuffled = [readings[3], readings[1], readings[0], readings[2]]
    before = list(shuffled)
    cumulative_to_monthly(shuffled)
    assert shuffled == before


def test_empty_and_single_input():
    assert cumulative_to_monthly([]) == []
    monthly = cumulative_to_monthly([CumulativeReading("202406", 123456.0)])
    assert len(monthly) == 1
    assert monthly[0].monthly_kwh == pytest.approx(123.456)


def test_sum_matches_span_without_clamping():
    readings = [
        CumulativeReading("202401", 200000.0),
        CumulativeReading("202402", 450000.0),
        CumulativeReading("202403", 900500.0),
    ]
    monthly = cumulative_to_monthly(readings)
    expected = (900500.0 - 200000.0) / 1000 + monthly[0].monthly_kwh
    assert sum(m.monthly_kwh for m in monthly) == pytest.approx(expected)


def test_duplicate_timestamp_keeps_last():
    readings = [
        CumulativeReading("202401", 100000.0),
        CumulativeReading("202402", 300000.0),
        CumulativeReading("202402", 250000.0),
    ]
    monthly = cumulative_to_monthly(readings)
    assert len(monthly) == 2
    assert monthly[1].cumulative_wh == 250000.0
    assert monthly[1].monthly_kwh == pytest.approx(150.0)
