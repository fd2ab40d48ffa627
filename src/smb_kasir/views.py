# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for SMB Kasir.

This module prepares computed data for display:

- Rupiah formatting of amounts ("Rp 1.234.567"),
- statement "views" of detail, based on the generic ``level`` column of
  the statements built by reports.py:

  - simplified: levels 0-1 (totals only),
  - regular:    levels 0-2 (totals and accounts),
  - detailed:   all levels (including per-product revenue),

- printable receipts for sale transactions.
"""

import pandas as pd

from .models import Transaction

VIEW_CHOICES = ["simplified", "regular", "detailed"]
RECEIPT_WIDTH = 40


def format_rupiah(amount: float) -> str:
    """
    Format an amount in Indonesian Rupiah without decimals.

    Thousands are separated by dots and fractions are dropped:
    ``format_rupiah(1234567.89) == "Rp 1.234.567"``. Negative amounts are
    prefixed with a minus sign (``"-Rp 5.000"``).
    """
    value = int(abs(float(amount)))
    grouped = f"{value:,}".replace(",", ".")
    sign = "-" if amount < 0 and value != 0 else ""
    return f"{sign}Rp {grouped}"


def apply_view_level_filter(out: pd.DataFrame, view: str) -> pd.DataFrame:
    """Return a view-specific slice with harmonized display_order and columns.

    - "simplified": keep rows with level <= 1,
    - "regular":    keep rows with level <= 2,
    - anything else ("detailed"): keep all rows.

    Rows keep their statement order; display_order is renumbered to
    10, 20, 30, ... and columns are ordered as
    display_order, id, level, name, type, amount.
    """
    if view == "simplified":
        df = out[out["level"] <= 1].copy()
    elif view == "regular":
        df = out[out["level"] <= 2].copy()
    else:
        df = out.copy()

    if "display_order" in df.columns:
        df = df.sort_values("display_order", ascending=True, kind="stable")
    df = df.reset_index(drop=True)
    df["display_order"] = (df.index + 1) * 10

    ordered_cols = ["display_order", "id", "level", "name", "type", "amount"]
    return df[[c for c in ordered_cols if c in df.columns]]


def format_statement(statement: pd.DataFrame) -> pd.DataFrame:
    """
    Add a ``formatted`` column (Rupiah string) and indent names by level.

    Intended for console tables; CSV exports keep the numeric columns.
    """
    df = statement.copy()
    df["name"] = [
        "  " * int(level) + str(name) for level, name in zip(df["level"], df["name"])
    ]
    df["formatted"] = df["amount"].map(format_rupiah)
    return df


def receipt_lines(
    transaction: Transaction, business_name: str = "Toko Saya"
) -> list[str]:
    """Render a sale transaction as the lines of a printed receipt."""
    width = RECEIPT_WIDTH
    sep = "-" * width
    lines = [
        business_name.center(width).rstrip(),
        sep,
        f"No: {transaction.id}",
        f"Tanggal: {transaction.date.isoformat()}",
        f"Pelanggan: {transaction.customer}",
        sep,
    ]
    for item in transaction.items:
        lines.append(item.product_name)
        left = f"  {item.quantity} x {format_rupiah(item.price)}"
        right = format_rupiah(item.subtotal)
        lines.append(left + right.rjust(width - len(left)))
    lines.append(sep)
    lines.append(_receipt_row("Total", transaction.amount, width))
    if transaction.payment_method:
        lines.append(f"Pembayaran: {transaction.payment_method}")
    if transaction.cash_received is not None:
        lines.append(_receipt_row("Tunai", transaction.cash_received, width))
    if transaction.change is not None:
        lines.append(_receipt_row("Kembalian", transaction.change, width))
    lines.append(sep)
    lines.append("Terima kasih!".center(width).rstrip())
    return lines


def _receipt_row(label: str, amount: float, width: int) -> str:
    value = format_rupiah(amount)
    return label + value.rjust(width - len(label))
