from datetime import date

import pytest

from smb_kasir.config import InventoryConfig
from smb_kasir.io import import_expenses, import_products, read_expenses, read_products
from smb_kasir.store import AppStore


def test_read_products_with_indonesian_headers(tmp_path):
    path = tmp_path / "products.csv"
    path.write_text(
        "Nama,Kategori,Harga,Harga_Beli,Stok,Stok_Minimum,Pemasok\n"
        "Beras 5kg,Sembako,70000,62000,12,4,CV Tani\n"
        "Kopi Sachet,Minuman,1500,1000,100,,\n",
        encoding="utf-8",
    )

    df = read_products(path)

    assert df["name"].tolist() == ["Beras 5kg", "Kopi Sachet"]
    assert df["price"].tolist() == [70000.0, 1500.0]
    assert df["stock"].tolist() == [12, 100]
    assert df["min_stock"].tolist() == [4, 0]
    assert df["supplier"].tolist() == ["CV Tani", None]


def test_read_products_missing_column(tmp_path):
    path = tmp_path / "products.csv"
    path.write_text("name,category,price\nA,B,1\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing column"):
        read_products(path)


@pytest.mark.parametrize(
    "row, message",
    [
        ("A,B,abc,1,1", "numeric"),
        ("A,B,0,1,1", "greater than 0"),
        ("A,B,1,1,-1", "negative"),
        ("A,B,1,1,2.5", "whole numbers"),
        (",B,1,1,1", "name"),
    ],
)
def test_read_products_invalid_values(tmp_path, row, message):
    path = tmp_path / "products.csv"
    path.write_text(f"name,category,price,cost,stock\n{row}\n", encoding="utf-8")
    with pytest.raises(ValueError, match=message):
        read_products(path)


def test_import_products_applies_default_min_stock(tmp_path):
    path = tmp_path / "products.csv"
    path.write_text(
        "name,category,price,cost,stock\nGula,Sembako,16000,14000,8\n",
        encoding="utf-8",
    )
    store = AppStore()

    added = import_products(store, path, InventoryConfig(default_min_stock=7))

    assert [p.id for p in added] == ["PRD000001"]
    assert store.products[0].min_stock == 7
    assert store.products[0].supplier is None


def test_read_expenses_defaults_status(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text(
        "Tanggal,Keterangan,Jumlah,Kategori\n"
        "2025-03-01,Sewa,1500000,Operasional\n",
        encoding="utf-8",
    )
    df = read_expenses(path)
    assert df.loc[0, "status"] == "Lunas"
    assert df.loc[0, "amount"] == pytest.approx(1_500_000.0)


@pytest.mark.parametrize(
    "row, message",
    [
        ("not-a-date,Sewa,10,Operasional,Lunas", "date"),
        ("2025-03-01,Sewa,0,Operasional,Lunas", "greater than 0"),
        ("2025-03-01,Sewa,10,Pajak,Lunas", "category"),
        ("2025-03-01,Sewa,10,Operasional,Paid", "status"),
    ],
)
def test_read_expenses_invalid_values(tmp_path, row, message):
    path = tmp_path / "expenses.csv"
    path.write_text(
        f"date,description,amount,category,status\n{row}\n", encoding="utf-8"
    )
    with pytest.raises(ValueError, match=message):
        read_expenses(path)


def test_import_expenses_books_journal_newest_first(tmp_path):
    path = tmp_path / "expenses.csv"
    path.write_text(
        "date,description,amount,category,status\n"
        "2025-03-05,Internet,300000,Administrasi,Belum Lunas\n"
        "2025-03-01,Sewa,1500000,Operasional,Lunas\n",
        encoding="utf-8",
    )
    store = AppStore()

    import_expenses(store, path)

    assert [e.description for e in store.expenses] == ["Internet", "Sewa"]
    assert store.expenses[0].date == date(2025, 3, 5)
    assert len(store.journal_entries) == 2
    assert store.journal_entries[0].debit[0].account == "Beban Administrasi"


def test_import_products_blank_supplier_is_none(tmp_path):
    path = tmp_path / "products.csv"
    path.write_text(
        "name,category,price,cost,stock,supplier\n"
        "Beras 5kg,Sembako,70000,62000,12,CV Tani\n"
        "Sabun,Kebersihan,4000,3000,10,\n",
        encoding="utf-8",
    )

    added = import_products(AppStore(), path)

    assert added[0].supplier == "CV Tani"
    assert added[1].supplier is None
