# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard figures for SMB Kasir.

`dashboard_snapshot()` gathers everything the home screen shows for a given
day: today's sales and outflows, stock alerts, the month's revenue, the
latest transactions and a profit-margin rating computed on all records.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from .models import SALE, Product
from .periods import Period, _today, filter_records_by_period
from .reports import financial_summary
from .store import AppStore

RECENT_TRANSACTIONS = 5


@dataclass(frozen=True)
class DashboardSnapshot:
    day: date
    today_revenue: float
    today_sales_count: int
    today_outflow: float
    today_outflow_count: int
    product_count: int
    low_stock: list[Product]
    out_of_stock: list[Product]
    month_revenue: float
    net_income: float
    profit_margin: float
    margin_rating: str
    recent_transactions: pd.DataFrame
    is_first_run: bool


def margin_rating(margin: float) -> str:
    """Rate a profit margin expressed in percent."""
    if margin > 15:
        return "Sangat Baik"
    if margin > 10:
        return "Baik"
    return "Perlu Perbaikan"


def _sales(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    return df[df["type"] == SALE]


def dashboard_snapshot(store: AppStore, today: Optional[date] = None) -> DashboardSnapshot:
    """
    Build the dashboard for `today` (the current date by default).

    Notes
    -----
    - today's and the month's sales count every sale, paid or not,
    - today's outflow adds purchases and expenses of the day, whatever
      their status,
    - a product is "low stock" when stock < min_stock and "out of stock"
      when stock == 0 (an out-of-stock product is usually low stock too),
    - the profit margin is net income / revenue over all records, in
      percent (0 when there is no revenue).
    """
    day = today or _today()
    today_period = Period(start=day, end=day, label="Today")
    month_period = Period(start=day.replace(day=1), end=day, label="Month to date")

    transactions = store.transactions_frame()
    today_sales = _sales(filter_records_by_period(transactions, today_period))
    month_sales = _sales(filter_records_by_period(transactions, month_period))

    today_purchases = filter_records_by_period(store.purchases_frame(), today_period)
    today_expenses = filter_records_by_period(store.expenses_frame(), today_period)

    summary = financial_summary(store)
    margin = 0.0
    if summary.total_revenue > 0:
        margin = summary.net_income / summary.total_revenue * 100

    return DashboardSnapshot(
        day=day,
        today_revenue=round(float(today_sales["amount"].sum()), 2),
        today_sales_count=len(today_sales),
        today_outflow=round(
            float(today_purchases["amount"].sum() + today_expenses["amount"].sum()),
            2,
        ),
        today_outflow_count=len(today_purchases) + len(today_expenses),
        product_count=len(store.products),
        low_stock=[p for p in store.products if p.stock < p.min_stock],
        out_of_stock=[p for p in store.products if p.stock == 0],
        month_revenue=round(float(month_sales["amount"].sum()), 2),
        net_income=summary.net_income,
        profit_margin=round(margin, 2),
        margin_rating=margin_rating(margin),
        recent_transactions=transactions.head(RECENT_TRANSACTIONS).reset_index(
            drop=True
        ),
        is_first_run=store.is_empty(),
    )
