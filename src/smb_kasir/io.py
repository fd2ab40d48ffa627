# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for SMB Kasir.

The store lives in memory only. To start a session with data, the CLI can
seed it from CSV files read by this module.

Products CSV
------------
Required columns (case-insensitive, Indonesian aliases in brackets):

    name [nama], category [kategori], price [harga], cost [harga_beli],
    stock [stok]

Optional columns:

    min_stock [stok_minimum], supplier [pemasok]

Expenses CSV
------------
Required columns:

    date [tanggal], description [keterangan], amount [jumlah],
    category [kategori]

Optional column:

    status (defaults to "Lunas")

Any other column is ignored. A file that does not match the expected
structure, or that contains invalid values, raises a ValueError with a
clear message.
"""

import os
from typing import Union

import pandas as pd

from .config import InventoryConfig
from .models import (
    EXPENSE_CATEGORIES,
    PAID,
    STATUSES,
    Expense,
    NewExpense,
    NewProduct,
    Product,
)
from .store import AppStore

PathLike = Union[str, "os.PathLike[str]"]

PRODUCT_ALIASES = {
    "nama": "name",
    "kategori": "category",
    "harga": "price",
    "harga_jual": "price",
    "harga_beli": "cost",
    "stok": "stock",
    "stok_minimum": "min_stock",
    "pemasok": "supplier",
}
EXPENSE_ALIASES = {
    "tanggal": "date",
    "keterangan": "description",
    "jumlah": "amount",
    "kategori": "category",
}

PRODUCT_REQUIRED = ["name", "category", "price", "cost", "stock"]
EXPENSE_REQUIRED = ["date", "description", "amount", "category"]


def _normalize_columns(df: pd.DataFrame, aliases: dict[str, str]) -> pd.DataFrame:
    df = df.copy()
    df.columns = [str(c).lower().strip() for c in df.columns]
    renames = {
        alias: canonical
        for alias, canonical in aliases.items()
        if alias in df.columns and canonical not in df.columns
    }
    return df.rename(columns=renames)


def _require_columns(df: pd.DataFrame, required: list[str], what: str) -> None:
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValueError(
            f"Invalid {what} CSV structure: missing column(s) {missing}. "
            f"Expected at least: {', '.join(required)} "
            "(column names are case-insensitive)."
        )


def _numeric(df: pd.DataFrame, col: str) -> pd.Series:
    values = pd.to_numeric(df[col], errors="coerce")
    if values.isna().any():
        raise ValueError(f"Invalid numeric values in '{col}' column.")
    return values


def _integral(df: pd.DataFrame, col: str) -> pd.Series:
    values = _numeric(df, col)
    if (values % 1 != 0).any():
        raise ValueError(f"Values in '{col}' column must be whole numbers.")
    return values.astype(int)


def read_products(path: PathLike) -> pd.DataFrame:
    """
    Read a product seed CSV.

    Returns
    -------
    pandas.DataFrame
        Columns: name, category, price (float), cost (float), stock (int),
        min_stock (int, 0 when absent), supplier (str or None).

    Raises
    ------
    ValueError
        On missing columns, non-numeric values, blank names or categories,
        price or cost <= 0, or negative or fractional stock.
    """
    df = _normalize_columns(pd.read_csv(path), PRODUCT_ALIASES)
    _require_columns(df, PRODUCT_REQUIRED, "products")

    out = pd.DataFrame(
        {
            "name": df["name"].fillna("").astype(str).str.strip(),
            "category": df["category"].fillna("").astype(str).str.strip(),
            "price": _numeric(df, "price").astype(float),
            "cost": _numeric(df, "cost").astype(float),
            "stock": _integral(df, "stock"),
        }
    )
    if "min_stock" in df.columns:
        out["min_stock"] = (
            pd.to_numeric(df["min_stock"], errors="coerce").fillna(0).astype(int)
        )
    else:
        out["min_stock"] = 0
    if "supplier" in df.columns:
        supplier = df["supplier"].astype("string").str.strip()
        out["supplier"] = pd.Series(
            [None if pd.isna(s) or s == "" else str(s) for s in supplier],
            index=out.index,
            dtype=object,
        )
    else:
        out["supplier"] = None

    if (out["name"] == "").any() or (out["category"] == "").any():
        raise ValueError("Every product needs a name and a category.")
    if (out["price"] <= 0).any() or (out["cost"] <= 0).any():
        raise ValueError("Product price and cost must be greater than 0.")
    if (out["stock"] < 0).any():
        raise ValueError("Product stock cannot be negative.")

    return out


def read_expenses(path: PathLike) -> pd.DataFrame:
    """
    Read an expense seed CSV.

    Returns
    -------
    pandas.DataFrame
        Columns: date (datetime64[ns]), description, amount (float),
        category, status.

    Raises
    ------
    ValueError
        On missing columns, invalid dates or amounts, amount <= 0, or an
        unknown category or status.
    """
    df = _normalize_columns(pd.read_csv(path), EXPENSE_ALIASES)
    _require_columns(df, EXPENSE_REQUIRED, "expenses")

    try:
        dates = pd.to_datetime(df["date"], errors="raise")
    except Exception as exc:  # noqa: BLE001
        raise ValueError("Invalid values in 'date' column.") from exc

    out = pd.DataFrame(
        {
            "date": dates,
            "description": df["description"].fillna("").astype(str).str.strip(),
            "amount": _numeric(df, "amount").astype(float),
            "category": df["category"].fillna("").astype(str).str.strip(),
        }
    )
    if "status" in df.columns:
        out["status"] = df["status"].fillna(PAID).astype(str).str.strip()
    else:
        out["status"] = PAID

    if (out["description"] == "").any():
        raise ValueError("Every expense needs a description.")
    if (out["amount"] <= 0).any():
        raise ValueError("Expense amounts must be greater than 0.")
    unknown = sorted(set(out["category"]) - set(EXPENSE_CATEGORIES))
    if unknown:
        raise ValueError(
            f"Unknown expense category(ies): {unknown}. "
            f"Expected one of: {list(EXPENSE_CATEGORIES)}."
        )
    bad_status = sorted(set(out["status"]) - set(STATUSES))
    if bad_status:
        raise ValueError(
            f"Unknown status value(s): {bad_status}. Expected one of: {list(STATUSES)}."
        )

    return out


def import_products(
    store: AppStore,
    path: PathLike,
    inventory: InventoryConfig = InventoryConfig(),
) -> list[Product]:
    """Read a product CSV and add every row to the store catalogue."""
    df = read_products(path)
    added = []
    for row in df.itertuples(index=False):
        added.append(
            store.add_product(
                NewProduct(
                    name=row.name,
                    category=row.category,
                    price=float(row.price),
                    cost=float(row.cost),
                    stock=int(row.stock),
                    min_stock=int(row.min_stock) or inventory.default_min_stock,
                    supplier=None if pd.isna(row.supplier) else row.supplier,
                )
            )
        )
    return added


def import_expenses(store: AppStore, path: PathLike) -> list[Expense]:
    """Read an expense CSV and record every row (with its journal entry)."""
    df = read_expenses(path)
    # Oldest first, so that the store ends up newest first.
    df = df.sort_values("date", kind="stable")
    added = []
    for row in df.itertuples(index=False):
        added.append(
            store.add_expense(
                NewExpense(
                    date=row.date.date(),
                    description=row.description,
                    amount=float(row.amount),
                    category=row.category,
                    status=row.status,
                )
            )
        )
    return added
