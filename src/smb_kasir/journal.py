# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Journal rules and journal aggregation for SMB Kasir.

This module contains:

1. Automatic journal rules
   ------------------------
   When the store records a sale, a purchase or an expense, it books a
   two-line journal entry built by one of the helpers below:

   ===========  ===========================  ========================
   Record       Debit                        Credit
   ===========  ===========================  ========================
   Sale         Kas                          Pendapatan Penjualan
   Purchase     Persediaan                   Kas
   Expense      Beban <category>             Kas
   ===========  ===========================  ========================

   The rules do not look at the paid / unpaid status: an unpaid purchase
   is still credited to Kas. Reports never read the journal, they are
   computed from the records themselves.

2. Manual entry validation
   ------------------------
   ``validate_manual_journal`` applies the checks of the manual journal
   form: required description and reference, at least one usable debit
   and credit line, and equal (non-zero) debit and credit totals.

3. Aggregation helpers
   --------------------
   ``journal_to_dataframe`` flattens entries into one row per line, with a
   signed amount computed as ``credit - debit``, and ``trial_balance``
   totals debit and credit per account.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

import pandas as pd

from .errors import UnbalancedJournalError, ValidationError
from .models import (
    Expense,
    JournalEntry,
    JournalLine,
    NewJournalEntry,
    Purchase,
    Transaction,
)

CASH_ACCOUNT = "Kas"
SALES_REVENUE_ACCOUNT = "Pendapatan Penjualan"
INVENTORY_ACCOUNT = "Persediaan"

JOURNAL_COLUMNS = [
    "entry_id",
    "date",
    "type",
    "reference",
    "description",
    "side",
    "account",
    "debit",
    "credit",
    "amount",
]


def expense_account(category: str) -> str:
    """Return the expense account used for a given expense category."""
    return f"Beban {category}"


# ---------------------------------------------------------------------------
# Automatic journal rules
# ---------------------------------------------------------------------------


def build_sale_journal(transaction: Transaction) -> NewJournalEntry:
    """Debit Kas, credit Pendapatan Penjualan for the sale amount."""
    return NewJournalEntry(
        date=transaction.date,
        description=f"Penjualan - {transaction.description}",
        reference=transaction.id,
        debit=(JournalLine(CASH_ACCOUNT, transaction.amount),),
        credit=(JournalLine(SALES_REVENUE_ACCOUNT, transaction.amount),),
        type="Automatic",
    )


def build_purchase_journal(purchase: Purchase) -> NewJournalEntry:
    """Debit Persediaan, credit Kas for the purchase amount."""
    return NewJournalEntry(
        date=purchase.date,
        description=f"Pembelian - {purchase.description}",
        reference=purchase.id,
        debit=(JournalLine(INVENTORY_ACCOUNT, purchase.amount),),
        credit=(JournalLine(CASH_ACCOUNT, purchase.amount),),
        type="Automatic",
    )


def build_expense_journal(expense: Expense) -> NewJournalEntry:
    """Debit the category expense account, credit Kas."""
    account = expense_account(expense.category)
    return NewJournalEntry(
        date=expense.date,
        description=f"Beban {expense.category} - {expense.description}",
        reference=expense.id,
        debit=(JournalLine(account, expense.amount),),
        credit=(JournalLine(CASH_ACCOUNT, expense.amount),),
        type="Automatic",
    )


# ---------------------------------------------------------------------------
# Manual entries
# ---------------------------------------------------------------------------


def usable_lines(lines: Iterable[JournalLine]) -> tuple[JournalLine, ...]:
    """Keep only lines with a non-blank account and a positive amount."""
    out = []
    for line in lines:
        account = (line.account or "").strip()
        if account and line.amount > 0:
            out.append(JournalLine(account=account, amount=float(line.amount)))
    return tuple(out)


def validate_manual_journal(
    entry_date,
    description: str,
    reference: str,
    debit: Sequence[JournalLine],
    credit: Sequence[JournalLine],
) -> NewJournalEntry:
    """
    Validate a manual journal form and build the entry to store.

    Rules
    -----
    - description and reference are required,
    - blank lines (no account or amount <= 0) are dropped,
    - at least one debit line and one credit line must remain,
    - total debit must equal total credit, and be greater than zero.

    Balance is checked on the kept lines only, so a dropped line can never
    hide an imbalance.

    Raises
    ------
    ValidationError
        If a required field is missing or no usable line remains.
    UnbalancedJournalError
        If debit and credit totals differ.
    """
    description = (description or "").strip()
    reference = (reference or "").strip()
    if not description or not reference:
        raise ValidationError("Journal description and reference are required.")

    debit_lines = usable_lines(debit)
    credit_lines = usable_lines(credit)
    if not debit_lines or not credit_lines:
        raise ValidationError(
            "A journal entry needs at least one valid debit line and one "
            "valid credit line (account name and amount > 0)."
        )

    total_debit = round(sum(line.amount for line in debit_lines), 2)
    total_credit = round(sum(line.amount for line in credit_lines), 2)
    if total_debit != total_credit:
        raise UnbalancedJournalError(
            f"Journal is not balanced: debit {total_debit:.2f} != "
            f"credit {total_credit:.2f} "
            f"(difference {abs(total_debit - total_credit):.2f})."
        )

    return NewJournalEntry(
        date=entry_date,
        description=description,
        reference=reference,
        debit=debit_lines,
        credit=credit_lines,
        type="Manual",
    )


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def journal_to_dataframe(entries: Iterable[JournalEntry]) -> pd.DataFrame:
    """
    Flatten journal entries into a long-format DataFrame.

    Returns
    -------
    pandas.DataFrame
        One row per journal line with columns:
        entry_id, date (datetime64[ns]), type, reference, description,
        side ("debit" / "credit"), account, debit, credit, amount.
        ``amount`` is signed: ``credit - debit``.
    """
    rows: list[dict[str, object]] = []
    for entry in entries:
        for side, lines in (("debit", entry.debit), ("credit", entry.credit)):
            for line in lines:
                debit = float(line.amount) if side == "debit" else 0.0
                credit = float(line.amount) if side == "credit" else 0.0
                rows.append(
                    {
                        "entry_id": entry.id,
                        "date": entry.date,
                        "type": entry.type,
                        "reference": entry.reference,
                        "description": entry.description,
                        "side": side,
                        "account": line.account,
                        "debit": debit,
                        "credit": credit,
                        "amount": credit - debit,
                    }
                )

    if not rows:
        df = pd.DataFrame(columns=JOURNAL_COLUMNS)
        df["date"] = pd.to_datetime(df["date"])
        return df

    df = pd.DataFrame(rows, columns=JOURNAL_COLUMNS)
    df["date"] = pd.to_datetime(df["date"])
    return df


def journal_totals(entries: Iterable[JournalEntry]) -> tuple[float, float]:
    """Return (total debit, total credit) over all entries."""
    total_debit = 0.0
    total_credit = 0.0
    for entry in entries:
        total_debit += entry.total_debit
        total_credit += entry.total_credit
    return round(total_debit, 2), round(total_credit, 2)


def trial_balance(lines: pd.DataFrame) -> pd.DataFrame:
    """
    Build a trial balance from journal lines.

    Parameters
    ----------
    lines:
        DataFrame produced by :func:`journal_to_dataframe`.

    Returns
    -------
    pandas.DataFrame
        One row per account, sorted by account name, with columns:
        account, debit, credit, balance (debit - credit).
    """
    if lines.empty:
        return pd.DataFrame(columns=["account", "debit", "credit", "balance"])

    tb = lines.groupby("account", as_index=False)[["debit", "credit"]].sum()
    tb["balance"] = (tb["debit"] - tb["credit"]).round(2)
    tb["debit"] = tb["debit"].round(2)
    tb["credit"] = tb["credit"].round(2)
    tb = tb.sort_values("account", kind="stable").reset_index(drop=True)
    return tb[["account", "debit", "credit", "balance"]]
