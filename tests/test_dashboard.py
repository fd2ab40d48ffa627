from datetime import date

import pytest

from smb_kasir.dashboard import dashboard_snapshot, margin_rating
from smb_kasir.models import (
    NewExpense,
    NewProduct,
    NewPurchase,
    NewTransaction,
    SaleItem,
)
from smb_kasir.store import AppStore

TODAY = date(2025, 6, 15)


def sale(day: date, amount: float, status: str = "Lunas", items=()) -> NewTransaction:
    return NewTransaction(
        date=day,
        customer="Pelanggan Umum",
        type="Penjualan",
        amount=amount,
        description="sale",
        status=status,
        items=items,
    )


def make_store() -> AppStore:
    store = AppStore()
    beras = store.add_product(NewProduct("Beras", "Sembako", 10000.0, 8000.0, 20, 5))
    store.add_product(NewProduct("Telur", "Sembako", 2000.0, 1500.0, 3, 10))
    store.add_product(NewProduct("Garam", "Sembako", 3000.0, 2000.0, 0, 5))

    store.add_transaction(sale(date(2025, 5, 31), 40000.0))
    store.add_transaction(sale(date(2025, 6, 1), 20000.0))
    store.add_transaction(
        sale(TODAY, 30000.0, items=(SaleItem(beras.id, "Beras", 3, 10000.0, 8000.0),))
    )
    store.add_transaction(sale(TODAY, 10000.0))
    store.add_transaction(sale(TODAY, 99000.0, status="Belum Lunas"))
    store.add_purchase(NewPurchase(TODAY, "CV A", 5000.0, "Stok", "Belum Lunas"))
    store.add_expense(NewExpense(TODAY, "Parkir", 2000.0, "Lainnya", "Lunas"))
    return store


def test_dashboard_today_figures():
    snap = dashboard_snapshot(make_store(), today=TODAY)

    assert snap.day == TODAY
    # The unpaid sale of the day counts as well.
    assert snap.today_revenue == pytest.approx(139000.0)
    assert snap.today_sales_count == 3
    assert snap.today_outflow == pytest.approx(7000.0)
    assert snap.today_outflow_count == 2
    assert snap.month_revenue == pytest.approx(159000.0)


def test_dashboard_stock_alerts():
    snap = dashboard_snapshot(make_store(), today=TODAY)

    assert snap.product_count == 3
    assert [p.name for p in snap.low_stock] == ["Telur", "Garam"]
    assert [p.name for p in snap.out_of_stock] == ["Garam"]


def test_dashboard_recent_transactions_and_margin():
    snap = dashboard_snapshot(make_store(), today=TODAY)

    assert len(snap.recent_transactions) == 5
    assert snap.recent_transactions.loc[0, "amount"] == pytest.approx(99000.0)

    # revenue 100000, COGS 3 x 8000, paid expenses 2000 -> net 74000
    assert snap.net_income == pytest.approx(74000.0)
    assert snap.profit_margin == pytest.approx(74.0)
    assert snap.margin_rating == "Sangat Baik"
    assert not snap.is_first_run


def test_dashboard_first_run():
    snap = dashboard_snapshot(AppStore(), today=TODAY)
    assert snap.is_first_run
    assert snap.today_revenue == 0.0
    assert snap.profit_margin == 0.0
    assert snap.margin_rating == "Perlu Perbaikan"
    assert snap.recent_transactions.empty


@pytest.mark.parametrize(
    "margin, expected",
    [(20.0, "Sangat Baik"), (15.0, "Baik"), (10.5, "Baik"), (10.0, "Perlu Perbaikan"), (-3.0, "Perlu Perbaikan")],
)
def test_margin_rating_thresholds(margin, expected):
    assert margin_rating(margin) == expected
