# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Financial reports for SMB Kasir.

Reports are derived from the store records (transactions, purchases,
expenses and the product catalogue) every time they are requested. They do
not read the journal.

1. Financial summary
   ------------------
   `financial_summary()` reduces the records of a period to a handful of
   figures:

   - revenue          = paid sales ("Penjualan", "Lunas"),
   - expenses         = paid expenses,
   - purchases        = paid purchases,
   - COGS             = sum over paid sale items of quantity x unit cost
                        (current catalogue cost, else the cost stored on the
                        item, else 0),
   - gross profit     = revenue - COGS,
   - net income       = gross profit - expenses,
   - cash             = revenue - expenses - purchases,
   - inventory value  = sum of stock x cost over the current catalogue,
   - total assets     = max(0, cash) + inventory value,
   - liabilities      = unpaid purchases,
   - equity           = total assets - liabilities.

2. Account balances
   -----------------
   `accounts_data()` derives the balance sheet accounts (Kas, Piutang,
   Persediaan, Peralatan, Hutang Usaha, Hutang Bank, Modal) from the
   summary. Equipment is a fixed share of paid purchases
   (``[accounting].equipment_ratio``).

   Those figures are not a double-entry ledger: assets and liabilities plus
   equity do not necessarily match. `balance_check()` reports the gap, it
   does not enforce anything.

3. Statements
   -----------
   `income_statement()`, `balance_sheet()` and `cash_flow_statement()`
   return long-format DataFrames with the columns
   ``level, display_order, id, name, type, amount`` ("acc" rows hold
   aggregated amounts, "calc" rows are totals). They can be passed to
   ``views.apply_view_level_filter`` like any other statement.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from typing import Optional

import pandas as pd

from .models import EXPENSE_CATEGORIES, PAID, SALE, UNPAID
from .periods import Period, filter_records_by_period, records_before
from .store import AppStore

STATEMENT_COLUMNS = ["level", "display_order", "id", "name", "type", "amount"]

DEFAULT_EQUIPMENT_RATIO = 0.1

# Row ids read back by balance_check().
BS_TOTAL_ASSETS_ID = 1
BS_TOTAL_LIABILITIES_AND_EQUITY_ID = 13


@dataclass(frozen=True)
class FinancialSummary:
    total_revenue: float
    total_sales: float
    total_expenses: float
    total_purchases: float
    cogs: float
    gross_profit: float
    net_income: float
    cash: float
    inventory_value: float
    total_assets: float
    total_liabilities: float
    equity: float

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class AccountBalances:
    """Balance sheet accounts derived from the financial summary."""

    kas: float
    piutang: float
    persediaan: float
    peralatan: float
    hutang_usaha: float
    hutang_bank: float
    modal: float

    @property
    def total_assets(self) -> float:
        return round(self.kas + self.piutang + self.persediaan + self.peralatan, 2)

    @property
    def total_liabilities(self) -> float:
        return round(self.hutang_usaha + self.hutang_bank, 2)


@dataclass(frozen=True)
class BalanceCheck:
    total_assets: float
    total_liabilities_and_equity: float
    difference: float

    @property
    def is_balanced(self) -> bool:
        return self.difference == 0.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _sum(df: pd.DataFrame, mask=None) -> float:
    if df.empty:
        return 0.0
    if mask is not None:
        df = df[mask]
    return float(df["amount"].sum())


def _paid_sales_total(transactions: pd.DataFrame) -> float:
    if transactions.empty:
        return 0.0
    return _sum(
        transactions,
        (transactions["type"] == SALE) & (transactions["status"] == PAID),
    )


def _paid_total(records: pd.DataFrame) -> float:
    if records.empty:
        return 0.0
    return _sum(records, records["status"] == PAID)


def _unpaid_total(records: pd.DataFrame) -> float:
    if records.empty:
        return 0.0
    return _sum(records, records["status"] == UNPAID)


def _paid_sale_items(store: AppStore, period: Optional[Period]) -> pd.DataFrame:
    items = filter_records_by_period(store.sale_items_frame(), period)
    if items.empty:
        return items
    return items[(items["type"] == SALE) & (items["status"] == PAID)].copy()


def _cogs(store: AppStore, items: pd.DataFrame) -> float:
    if items.empty:
        return 0.0
    current_cost = {p.id: p.cost for p in store.products}
    unit_cost = items["product_id"].map(current_cost)
    unit_cost = unit_cost.fillna(items["cost"]).fillna(0.0).astype(float)
    return float((unit_cost * items["quantity"]).sum())


def _inventory_value(store: AppStore) -> float:
    return float(sum(p.stock * p.cost for p in store.products))


def _statement(rows: list[tuple[int, int, str, str, float]]) -> pd.DataFrame:
    """Build a statement DataFrame from (level, id, name, type, amount) rows."""
    out = [
        {
            "level": level,
            "display_order": (i + 1) * 10,
            "id": row_id,
            "name": name,
            "type": row_type,
            "amount": round(float(amount), 2),
        }
        for i, (level, row_id, name, row_type, amount) in enumerate(rows)
    ]
    return pd.DataFrame(out, columns=STATEMENT_COLUMNS)


# ---------------------------------------------------------------------------
# Summary and account balances
# ---------------------------------------------------------------------------


def financial_summary(
    store: AppStore, period: Optional[Period] = None
) -> FinancialSummary:
    """
    Compute the financial summary for a period (all records when None).

    The inventory value always reflects the current catalogue: stock is not
    historised.
    """
    transactions = filter_records_by_period(store.transactions_frame(), period)
    purchases = filter_records_by_period(store.purchases_frame(), period)
    expenses = filter_records_by_period(store.expenses_frame(), period)

    revenue = _paid_sales_total(transactions)
    total_expenses = _paid_total(expenses)
    total_purchases = _paid_total(purchases)
    cogs = _cogs(store, _paid_sale_items(store, period))

    gross_profit = revenue - cogs
    net_income = gross_profit - total_expenses
    cash = revenue - total_expenses - total_purchases
    inventory_value = _inventory_value(store)
    total_assets = max(0.0, cash) + inventory_value
    total_liabilities = _unpaid_total(purchases)

    return FinancialSummary(
        total_revenue=round(revenue, 2),
        total_sales=round(revenue, 2),
        total_expenses=round(total_expenses, 2),
        total_purchases=round(total_purchases, 2),
        cogs=round(cogs, 2),
        gross_profit=round(gross_profit, 2),
        net_income=round(net_income, 2),
        cash=round(cash, 2),
        inventory_value=round(inventory_value, 2),
        total_assets=round(total_assets, 2),
        total_liabilities=round(total_liabilities, 2),
        equity=round(total_assets - total_liabilities, 2),
    )


def accounts_data(
    store: AppStore,
    period: Optional[Period] = None,
    equipment_ratio: float = DEFAULT_EQUIPMENT_RATIO,
) -> AccountBalances:
    """
    Derive the balance sheet accounts for a period.

    - kas:          max(0, revenue - expenses - purchases)
    - piutang:      unpaid transactions (any type)
    - persediaan:   inventory value at cost
    - peralatan:    paid purchases x equipment_ratio
    - hutang_usaha: unpaid purchases
    - hutang_bank:  unpaid expenses
    - modal:        equity of the financial summary
    """
    summary = financial_summary(store, period)
    transactions = filter_records_by_period(store.transactions_frame(), period)
    expenses = filter_records_by_period(store.expenses_frame(), period)

    return AccountBalances(
        kas=round(max(0.0, summary.cash), 2),
        piutang=round(_unpaid_total(transactions), 2),
        persediaan=summary.inventory_value,
        peralatan=round(summary.total_purchases * equipment_ratio, 2),
        hutang_usaha=summary.total_liabilities,
        hutang_bank=round(_unpaid_total(expenses), 2),
        modal=summary.equity,
    )


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


def income_statement(store: AppStore, period: Optional[Period] = None) -> pd.DataFrame:
    """
    Income statement (Laporan Laba Rugi).

    Amounts follow the usual sign convention: revenue positive, costs
    negative. Levels:
      0  revenue, gross profit, net income
      1  cost of goods sold, total expenses
      2  expenses per category
      3  revenue per product
    """
    summary = financial_summary(store, period)
    items = _paid_sale_items(store, period)
    expenses = filter_records_by_period(store.expenses_frame(), period)
    if not expenses.empty:
        expenses = expenses[expenses["status"] == PAID]

    rows: list[tuple[int, int, str, str, float]] = [
        (0, 1, "Pendapatan Penjualan", "acc", summary.total_revenue),
    ]
    if not items.empty:
        items["revenue"] = items["quantity"] * items["price"]
        by_product = (
            items.groupby("product_name", as_index=False, sort=True)["revenue"].sum()
        )
        for i, r in enumerate(by_product.itertuples(index=False)):
            rows.append((3, 100 + i, str(r.product_name), "acc", float(r.revenue)))

    rows.append((1, 2, "Harga Pokok Penjualan", "acc", -summary.cogs))
    rows.append((0, 3, "Laba Kotor", "calc", summary.gross_profit))

    for i, category in enumerate(EXPENSE_CATEGORIES):
        amount = 0.0
        if not expenses.empty:
            amount = float(
                expenses.loc[expenses["category"] == category, "amount"].sum()
            )
        rows.append((2, 10 + i, f"Beban {category}", "acc", -amount))

    rows.append((1, 4, "Total Beban", "calc", -summary.total_expenses))
    rows.append((0, 5, "Laba Bersih", "calc", summary.net_income))
    return _statement(rows)


def balance_sheet(
    store: AppStore,
    period: Optional[Period] = None,
    equipment_ratio: float = DEFAULT_EQUIPMENT_RATIO,
) -> pd.DataFrame:
    """Balance sheet (Neraca) built from :func:`accounts_data`."""
    acc = accounts_data(store, period, equipment_ratio)
    current_assets = acc.kas + acc.piutang + acc.persediaan
    rows = [
        (0, BS_TOTAL_ASSETS_ID, "Total Aset", "calc", acc.total_assets),
        (1, 2, "Aset Lancar", "calc", current_assets),
        (2, 3, "Kas", "acc", acc.kas),
        (2, 4, "Piutang Usaha", "acc", acc.piutang),
        (2, 5, "Persediaan", "acc", acc.persediaan),
        (1, 6, "Aset Tetap", "calc", acc.peralatan),
        (2, 7, "Peralatan", "acc", acc.peralatan),
        (0, 8, "Total Kewajiban", "calc", acc.total_liabilities),
        (2, 9, "Hutang Usaha", "acc", acc.hutang_usaha),
        (2, 10, "Hutang Bank", "acc", acc.hutang_bank),
        (0, 11, "Total Ekuitas", "calc", acc.modal),
        (2, 12, "Modal", "acc", acc.modal),
        (
            0,
            BS_TOTAL_LIABILITIES_AND_EQUITY_ID,
            "Total Kewajiban dan Ekuitas",
            "calc",
            acc.total_liabilities + acc.modal,
        ),
    ]
    return _statement(rows)


def balance_check(statement: pd.DataFrame) -> BalanceCheck:
    """
    Compare total assets with total liabilities and equity of a balance
    sheet produced by :func:`balance_sheet`.

    Raises
    ------
    ValueError
        If the statement does not contain both total rows (for instance a
        view that filtered them out).
    """
    by_id = dict(zip(statement["id"].astype(int), statement["amount"].astype(float)))
    try:
        assets = by_id[BS_TOTAL_ASSETS_ID]
        liabilities_equity = by_id[BS_TOTAL_LIABILITIES_AND_EQUITY_ID]
    except KeyError as exc:
        raise ValueError(
            "Balance sheet is missing its total rows; pass the full statement."
        ) from exc
    return BalanceCheck(
        total_assets=round(assets, 2),
        total_liabilities_and_equity=round(liabilities_equity, 2),
        difference=round(assets - liabilities_equity, 2),
    )


def _cash_position(store: AppStore, before: Optional[Period]) -> float:
    """Paid cash movements dated before the period start (0 without period)."""
    if before is None:
        return 0.0
    transactions = records_before(store.transactions_frame(), before.start)
    purchases = records_before(store.purchases_frame(), before.start)
    expenses = records_before(store.expenses_frame(), before.start)
    return (
        _paid_sales_total(transactions)
        - _paid_total(expenses)
        - _paid_total(purchases)
    )


def cash_flow_statement(
    store: AppStore,
    period: Optional[Period] = None,
    equipment_ratio: float = DEFAULT_EQUIPMENT_RATIO,
) -> pd.DataFrame:
    """
    Cash flow statement (Laporan Arus Kas), direct method.

    - operating: paid sales - paid expenses - paid purchases of goods
      (the share of purchases not counted as equipment),
    - investing: equipment purchases (equipment_ratio x paid purchases),
    - financing: always 0, no loans or capital movements are recorded.

    Opening cash is the net paid cash movement before the period start;
    closing cash = opening + net change.
    """
    summary = financial_summary(store, period)
    goods = summary.total_purchases * (1.0 - equipment_ratio)
    equipment = summary.total_purchases * equipment_ratio

    operating = summary.total_revenue - summary.total_expenses - goods
    investing = -equipment
    financing = 0.0
    net_change = operating + investing + financing
    opening = _cash_position(store, period)

    rows = [
        (0, 1, "Arus Kas dari Aktivitas Operasi", "calc", operating),
        (2, 2, "Penerimaan dari Penjualan", "acc", summary.total_revenue),
        (2, 3, "Pembayaran Beban", "acc", -summary.total_expenses),
        (2, 4, "Pembayaran Persediaan", "acc", -goods),
        (0, 5, "Arus Kas dari Aktivitas Investasi", "calc", investing),
        (2, 6, "Pembelian Peralatan", "acc", -equipment),
        (0, 7, "Arus Kas dari Aktivitas Pendanaan", "calc", financing),
        (1, 8, "Kenaikan (Penurunan) Kas Bersih", "calc", net_change),
        (1, 9, "Kas Awal Periode", "acc", opening),
        (0, 10, "Kas Akhir Periode", "calc", opening + net_change),
    ]
    return _statement(rows)


# ---------------------------------------------------------------------------
# Multi-period
# ---------------------------------------------------------------------------


def financial_summary_multi_period(
    store: AppStore, periods: Sequence[Period]
) -> pd.DataFrame:
    """
    Financial summary for several periods side by side.

    Returns
    -------
    pandas.DataFrame
        One row per summary measure (``measure`` column) and one column per
        period, named after ``Period.label``.
    """
    if not periods:
        raise ValueError("At least one period is required.")

    data: dict[str, list[float]] = {}
    measures: list[str] = []
    for period in periods:
        values = financial_summary(store, period).as_dict()
        measures = list(values)
        data[period.label] = list(values.values())

    df = pd.DataFrame(data)
    df.insert(0, "measure", measures)
    return df
