# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for SMB Kasir.

This module defines a Period value object and helpers to derive
reporting periods (today, month to date, year to date, last month, fiscal
year, last fiscal year) from the configured fiscal year and CLI arguments.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import pandas as pd

from .config import FiscalYear

PERIOD_CHOICES = ["today", "mtd", "ytd", "last-month", "fy", "last-fy"]


@dataclass
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def period_today() -> Period:
    """The current day only."""
    today = _today()
    return Period(start=today, end=today, label="Today")


def period_fy(fy: FiscalYear) -> Period:
    """Full current fiscal year."""
    return Period(
        start=fy.start_date,
        end=fy.end_date,
        label=f"Fiscal year {fy.start_date.year}",
    )


def period_ytd(fy: FiscalYear) -> Period:
    """Year-to-date within the fiscal year."""
    today = _today()
    start = fy.start_date
    end = min(max(today, fy.start_date), fy.end_date)
    return Period(start=start, end=end, label="Year to date")


def period_mtd(fy: FiscalYear) -> Period:
    """Month-to-date within the fiscal year."""
    today = _today()

    # Outside the fiscal year: fall back to the full fiscal year.
    if today < fy.start_date or today > fy.end_date:
        return period_fy(fy)

    start = today.replace(day=1)
    return Period(start=start, end=today, label="Month to date")


def period_last_month(fy: FiscalYear) -> Period:
    """Full previous calendar month, clamped to the fiscal year if needed."""
    today = _today()

    if today.month == 1:
        year = today.year - 1
        month = 12
    else:
        year = today.year
        month = today.month - 1

    start = date(year, month, 1)
    end = date(year, month, monthrange(year, month)[1])

    # No overlap with the fiscal year: fall back to the fiscal year.
    if end < fy.start_date or start > fy.end_date:
        return period_fy(fy)

    return Period(
        start=max(start, fy.start_date),
        end=min(end, fy.end_date),
        label="Last month",
    )


def period_last_fy(fy: FiscalYear) -> Period:
    """
    Previous fiscal year, i.e. the current fiscal year shifted back by one
    year.
    """
    start = _shift_year(fy.start_date, -1)
    end = _shift_year(fy.end_date, -1)
    return Period(
        start=start,
        end=end,
        label=f"Previous fiscal year ({start.year})",
    )


def _shift_year(d: date, years: int) -> date:
    """Shift a date by whole years, mapping 29 February to 28 February."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def determine_period_from_args(
    args,
    fy: FiscalYear,
) -> Optional[Period]:
    """
    Determine the reporting period to use based on CLI args.

    Priority (highest to lowest):

        1. args.from_date / args.to_date (custom period; a missing bound is
           taken from the fiscal year)
        2. args.period (today, mtd, ytd, last-month, fy, last-fy)
        3. None: no period filter, every record of the session is used
    """
    from_raw: Optional[str] = getattr(args, "from_date", None)
    to_raw: Optional[str] = getattr(args, "to_date", None)

    if from_raw or to_raw:
        try:
            start = date.fromisoformat(from_raw) if from_raw else fy.start_date
            end = date.fromisoformat(to_raw) if to_raw else fy.end_date
        except ValueError as exc:
            raise ValueError("Invalid custom period date, expected YYYY-MM-DD.") from exc

        if end < start:
            raise ValueError("Custom period end date cannot be before start date.")

        return Period(start=start, end=end, label=f"Custom period ({start} → {end})")

    p = getattr(args, "period", None)
    if not p:
        return None
    if p == "today":
        return period_today()
    if p == "mtd":
        return period_mtd(fy)
    if p == "ytd":
        return period_ytd(fy)
    if p == "last-month":
        return period_last_month(fy)
    if p == "fy":
        return period_fy(fy)
    if p == "last-fy":
        return period_last_fy(fy)
    raise ValueError(f"Unknown period: {p!r}")


def filter_records_by_period(
    records: pd.DataFrame, period: Optional[Period]
) -> pd.DataFrame:
    """
    Keep only the records dated within the period (inclusive bounds).

    Parameters
    ----------
    records:
        DataFrame with at least a 'date' column of type datetime64[ns], as
        produced by the store's ``*_frame()`` exports.
    period:
        Period defining the [start, end] boundaries. None keeps everything.

    Returns
    -------
    pandas.DataFrame
        Filtered copy of the DataFrame.
    """
    if period is None:
        return records.copy()

    mask = (records["date"] >= pd.Timestamp(period.start)) & (
        records["date"] <= pd.Timestamp(period.end)
    )
    return records.loc[mask].copy()


def records_before(records: pd.DataFrame, day: date) -> pd.DataFrame:
    """Keep only the records dated strictly before `day`."""
    return records.loc[records["date"] < pd.Timestamp(day)].copy()
