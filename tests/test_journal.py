from datetime import date

import pytest

from smb_kasir.errors import UnbalancedJournalError, ValidationError
from smb_kasir.journal import (
    expense_account,
    journal_to_dataframe,
    journal_totals,
    trial_balance,
    validate_manual_journal,
)
from smb_kasir.models import JournalEntry, JournalLine


def test_expense_account_name():
    assert expense_account("Administrasi") == "Beban Administrasi"


def test_manual_journal_drops_blank_lines_and_checks_balance():
    entry = validate_manual_journal(
        date(2025, 1, 10),
        " Setoran modal ",
        "JM-001",
        [JournalLine("Kas", 1_000_000.0), JournalLine("", 500.0), JournalLine("Bank", 0.0)],
        [JournalLine("Modal", 1_000_000.0)],
    )

    assert entry.type == "Manual"
    assert entry.description == "Setoran modal"
    assert entry.debit == (JournalLine("Kas", 1_000_000.0),)
    assert entry.credit == (JournalLine("Modal", 1_000_000.0),)


def test_manual_journal_requires_description_and_reference():
    with pytest.raises(ValidationError):
        validate_manual_journal(
            date(2025, 1, 10), "", "JM-001", [JournalLine("Kas", 1.0)], [JournalLine("Modal", 1.0)]
        )
    with pytest.raises(ValidationError):
        validate_manual_journal(
            date(2025, 1, 10), "Desc", "  ", [JournalLine("Kas", 1.0)], [JournalLine("Modal", 1.0)]
        )


def test_manual_journal_requires_both_sides():
    with pytest.raises(ValidationError, match="at least one valid debit line"):
        validate_manual_journal(
            date(2025, 1, 10), "Desc", "R", [JournalLine("Kas", 0.0)], [JournalLine("Modal", 10.0)]
        )


def test_manual_journal_unbalanced_is_rejected():
    with pytest.raises(UnbalancedJournalError, match="not balanced"):
        validate_manual_journal(
            date(2025, 1, 10),
            "Desc",
            "R",
            [JournalLine("Kas", 100.0)],
            [JournalLine("Modal", 60.0), JournalLine("Hutang Bank", 30.0)],
        )


def test_unbalanced_error_is_a_validation_error():
    assert issubclass(UnbalancedJournalError, ValidationError)
    assert issubclass(ValidationError, ValueError)


def _entries() -> list[JournalEntry]:
    return [
        JournalEntry(
            id="JRN000002",
            date=date(2025, 2, 1),
            description="Penjualan - Kopi (2)",
            reference="TRX000001",
            debit=(JournalLine("Kas", 30000.0),),
            credit=(JournalLine("Pendapatan Penjualan", 30000.0),),
            type="Automatic",
        ),
        JournalEntry(
            id="JRN000001",
            date=date(2025, 1, 1),
            description="Modal awal",
            reference="JM-1",
            debit=(JournalLine("Kas", 100000.0),),
            credit=(JournalLine("Modal", 100000.0),),
            type="Manual",
        ),
    ]


def test_journal_to_dataframe_long_format_signed_amount():
    df = journal_to_dataframe(_entries())

    assert len(df) == 4
    kas_rows = df[df["account"] == "Kas"]
    assert (kas_rows["side"] == "debit").all()
    assert kas_rows["amount"].tolist() == [-30000.0, -100000.0]

    revenue = df[df["account"] == "Pendapatan Penjualan"].iloc[0]
    assert revenue["credit"] == pytest.approx(30000.0)
    assert revenue["amount"] == pytest.approx(30000.0)


def test_journal_totals_and_trial_balance():
    entries = _entries()
    assert journal_totals(entries) == (130000.0, 130000.0)

    tb = trial_balance(journal_to_dataframe(entries))
    assert tb["account"].tolist() == ["Kas", "Modal", "Pendapatan Penjualan"]
    kas = tb[tb["account"] == "Kas"].iloc[0]
    assert kas["balance"] == pytest.approx(130000.0)
    assert tb["balance"].sum() == pytest.approx(0.0)


def test_trial_balance_empty():
    tb = trial_balance(journal_to_dataframe([]))
    assert tb.empty
    assert list(tb.columns) == ["account", "debit", "credit", "balance"]


def test_is_balanced_property():
    entry = _entries()[0]
    assert entry.is_balanced
    assert entry.total_debit == pytest.approx(30000.0)
