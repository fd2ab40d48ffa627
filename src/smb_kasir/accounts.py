# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Chart of accounts utilities for SMB Kasir.

Journal lines reference accounts by name ("Kas", "Persediaan", ...). The
chart of accounts gives each of those names a code and a class so that the
journal can be grouped and checked.

Responsibilities:
- Provide the built-in chart (the accounts offered by the manual journal
  form plus the expense accounts generated by automatic entries).
- Load a user-maintained chart from CSV (e.g. data/accounts/chart.csv).
- Split journal lines into known and unknown accounts and summarize the
  unknown ones, so that typos in manual entries can be spotted.
"""

import pandas as pd

ACCOUNT_CLASSES = ("asset", "liability", "equity", "revenue", "expense")

# code, name, class
_BUILTIN_CHART: list[tuple[str, str, str]] = [
    ("1-101", "Kas", "asset"),
    ("1-102", "Bank", "asset"),
    ("1-103", "Piutang Usaha", "asset"),
    ("1-104", "Persediaan", "asset"),
    ("1-201", "Peralatan", "asset"),
    ("1-202", "Akumulasi Penyusutan", "asset"),
    ("2-101", "Hutang Usaha", "liability"),
    ("2-201", "Hutang Bank", "liability"),
    ("3-101", "Modal", "equity"),
    ("4-101", "Pendapatan Penjualan", "revenue"),
    ("4-201", "Pendapatan Lain-lain", "revenue"),
    ("5-101", "Beban Operasional", "expense"),
    ("5-102", "Beban Administrasi", "expense"),
    ("5-103", "Beban Penjualan", "expense"),
    ("5-104", "Beban Lainnya", "expense"),
    ("5-201", "Beban Bunga", "expense"),
    ("5-202", "Beban Lain-lain", "expense"),
]


def default_chart_of_accounts() -> pd.DataFrame:
    """Return the built-in chart as a DataFrame (code, name, class)."""
    return pd.DataFrame(_BUILTIN_CHART, columns=["code", "name", "class"])


def common_account_names() -> list[str]:
    """Account names suggested when typing a manual journal entry."""
    return [name for _, name, _ in _BUILTIN_CHART]


def load_chart_of_accounts(path: str) -> pd.DataFrame:
    """Load a chart of accounts from CSV.

    Expected structure
    ------------------
    The CSV must contain at least:
        - one column with the account code:
            'code', 'account_number' or 'account'
        - one column with the account name:
            'name', 'label' or 'description'
    and may contain:
        - one column with the account class:
            'class', 'type' or 'kind'
          (asset, liability, equity, revenue, expense)

    Column names are matched case-insensitively and trimmed. When no class
    column exists, the class is derived from the first digit of the code
    (1 asset, 2 liability, 3 equity, 4 revenue, 5+ expense).

    Args:
        path: Path to the CSV file containing the chart of accounts.

    Returns:
        A DataFrame with exactly three columns: 'code', 'name', 'class'.

    Raises:
        ValueError: if no suitable code or name column can be found, or if a
            class value is not recognised.
    """
    df = pd.read_csv(path, dtype=str)
    # Normalize column names: lowercase + stripped, to be robust to variations.
    col_map = {str(c).strip().lower(): c for c in df.columns}

    code_col = _find_column(col_map, ["code", "account_number", "account"])
    if code_col is None:
        raise ValueError(
            "Could not find an account code column in chart of accounts file. "
            "Expected one of: 'code', 'account_number', 'account'."
        )

    name_col = _find_column(col_map, ["name", "label", "description"])
    if name_col is None:
        raise ValueError(
            "Could not find an account name/label column in chart of accounts "
            "file. Expected one of: 'name', 'label', 'description'."
        )

    class_col = _find_column(col_map, ["class", "type", "kind"])

    out = pd.DataFrame(
        {
            "code": df[code_col].astype(str).str.strip(),
            "name": df[name_col].astype(str).str.strip(),
        }
    )
    if class_col is not None:
        out["class"] = df[class_col].astype(str).str.strip().str.lower()
    else:
        out["class"] = out["code"].map(_class_from_code)

    unknown_classes = sorted(set(out["class"]) - set(ACCOUNT_CLASSES))
    if unknown_classes:
        raise ValueError(
            f"Unknown account class(es) in chart of accounts: {unknown_classes}. "
            f"Expected one of: {list(ACCOUNT_CLASSES)}."
        )

    return out.reset_index(drop=True)


def _find_column(col_map: dict, candidates: list[str]):
    for cand in candidates:
        if cand in col_map:
            return col_map[cand]
    return None


def _class_from_code(code: str) -> str:
    digit = code[:1]
    if digit == "1":
        return "asset"
    if digit == "2":
        return "liability"
    if digit == "3":
        return "equity"
    if digit == "4":
        return "revenue"
    return "expense"


def split_known_and_unknown_accounts(
    journal_lines: pd.DataFrame, known_names: set[str]
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Split journal lines by whether their account exists in the chart.

    Account names are compared case-insensitively, ignoring surrounding
    whitespace.

    Args:
        journal_lines: DataFrame with at least an 'account' column (as built
            by journal.journal_to_dataframe).
        known_names: Account names of the chart of accounts.

    Returns:
        (known_lines, unknown_lines), both copies of the input rows.
    """
    normalized = {str(n).strip().lower() for n in known_names}
    mask = journal_lines["account"].astype(str).str.strip().str.lower().isin(
        normalized
    )
    return journal_lines[mask].copy(), journal_lines[~mask].copy()


def summarize_unknown_accounts(unknown_lines: pd.DataFrame) -> pd.DataFrame:
    """Summarize unknown journal lines per account.

    Returns:
        DataFrame with columns account, lines_count, total_debit,
        total_credit, sorted by account.
    """
    columns = ["account", "lines_count", "total_debit", "total_credit"]
    if unknown_lines.empty:
        return pd.DataFrame(columns=columns)

    summary = (
        unknown_lines.groupby("account", as_index=False)
        .agg(
            lines_count=("account", "size"),
            total_debit=("debit", "sum"),
            total_credit=("credit", "sum"),
        )
        .sort_values("account", kind="stable")
        .reset_index(drop=True)
    )
    return summary[columns]
