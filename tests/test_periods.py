from datetime import date
from types import SimpleNamespace

import pandas as pd
import pytest

import smb_kasir.periods as periods
from smb_kasir.config import FiscalYear

FY = FiscalYear(start_date=date(2025, 1, 1), end_date=date(2025, 12, 31))


def args(**kwargs) -> SimpleNamespace:
    values = {"period": None, "from_date": None, "to_date": None}
    values.update(kwargs)
    return SimpleNamespace(**values)


def test_filter_records_by_period_inclusive_bounds() -> None:
    """filter_records_by_period should keep records dated in [start, end]."""
    df = pd.DataFrame(
        {
            "date": pd.to_datetime(
                ["2025-01-01", "2025-02-15", "2025-03-10", "2025-04-01", "2025-05-01"]
            ),
            "amount": [10, 20, 5, 15, 30],
        }
    )

    p = periods.Period(start=date(2025, 2, 1), end=date(2025, 4, 1), label="Test")
    filtered = periods.filter_records_by_period(df, p)

    assert len(filtered) == 3
    assert filtered["date"].min() == pd.Timestamp("2025-02-15")
    assert filtered["date"].max() == pd.Timestamp("2025-04-01")

    assert len(periods.filter_records_by_period(df, None)) == 5
    assert len(periods.records_before(df, date(2025, 3, 10))) == 2


def test_no_period_arguments_means_no_filter():
    assert periods.determine_period_from_args(args(), FY) is None


def test_custom_dates_take_priority_over_period():
    p = periods.determine_period_from_args(
        args(period="fy", from_date="2025-02-01", to_date="2025-02-28"), FY
    )
    assert (p.start, p.end) == (date(2025, 2, 1), date(2025, 2, 28))


def test_custom_date_missing_bound_comes_from_fiscal_year():
    p = periods.determine_period_from_args(args(from_date="2025-06-01"), FY)
    assert (p.start, p.end) == (date(2025, 6, 1), date(2025, 12, 31))


def test_custom_dates_errors():
    with pytest.raises(ValueError):
        periods.determine_period_from_args(args(from_date="June"), FY)
    with pytest.raises(ValueError):
        periods.determine_period_from_args(
            args(from_date="2025-06-02", to_date="2025-06-01"), FY
        )


def test_predefined_periods(monkeypatch):
    monkeypatch.setattr(periods, "_today", lambda: date(2025, 3, 18))

    assert periods.determine_period_from_args(args(period="today"), FY).start == date(
        2025, 3, 18
    )

    mtd = periods.determine_period_from_args(args(period="mtd"), FY)
    assert (mtd.start, mtd.end) == (date(2025, 3, 1), date(2025, 3, 18))

    ytd = periods.determine_period_from_args(args(period="ytd"), FY)
    assert (ytd.start, ytd.end) == (date(2025, 1, 1), date(2025, 3, 18))

    last_month = periods.determine_period_from_args(args(period="last-month"), FY)
    assert (last_month.start, last_month.end) == (date(2025, 2, 1), date(2025, 2, 28))

    last_fy = periods.determine_period_from_args(args(period="last-fy"), FY)
    assert (last_fy.start, last_fy.end) == (date(2024, 1, 1), date(2024, 12, 31))

    with pytest.raises(ValueError):
        periods.determine_period_from_args(args(period="quarter"), FY)


def test_last_month_in_january_and_mtd_outside_fiscal_year(monkeypatch):
    monkeypatch.setattr(periods, "_today", lambda: date(2026, 1, 10))

    # Today is after the fiscal year end: fall back to the fiscal year.
    assert periods.period_mtd(FY).label == "Fiscal year 2025"

    last_month = periods.period_last_month(FY)
    assert (last_month.start, last_month.end) == (date(2025, 12, 1), date(2025, 12, 31))


def test_last_fy_handles_leap_day():
    fy = FiscalYear(start_date=date(2024, 3, 1), end_date=date(2025, 2, 28))
    shifted = periods.period_last_fy(fy)
    assert shifted.start == date(2023, 3, 1)

    leap = FiscalYear(start_date=date(2023, 3, 1), end_date=date(2024, 2, 29))
    assert periods.period_last_fy(leap).end == date(2023, 2, 28)
