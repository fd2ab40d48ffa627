# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for SMB Kasir.

The CLI wires together the building blocks of SMB Kasir:

- global configuration (business identity, fiscal year, inventory and
  accounting rules, display and logging options),
- the in-memory store, seeded from CSV files,
- form services and the cashier checkout,
- reports, dashboard and view helpers.

The CLI is intentionally thin: it does not implement business rules
itself. It orchestrates the underlying modules based on command-line
arguments and configuration.


Sessions
--------

Nothing is persisted. Each invocation starts from an empty store and:

1) loads the TOML configuration (``smb_kasir_config.toml`` by default,
   ``--config PATH`` to override),
2) seeds the store from ``--import-products CSV`` and
   ``--import-expenses CSV`` when given,
3) optionally records one business event through a subcommand:

   - ``checkout --item PRODUCT:QTY ... --method Tunai --cash 50000``
   - ``purchase --supplier S --description D --item NAME:QTY:COST ...``
   - ``expense --description D --amount N --category Operasional``
   - ``journal --description D --reference R --debit ACC:N --credit ACC:N``

4) renders the selected scope for the selected period.


Scopes
------

- ``dashboard`` (default): today's figures, stock alerts, recent sales.
- ``statements``: income statement, balance sheet and cash flow.
- ``journal``: journal lines, totals, trial balance and unknown accounts.
- ``products``: product list and catalogue figures.
- ``all``: everything above.


Periods and views
-----------------

``--period`` (today, mtd, ytd, last-month, fy, last-fy) or
``--from-date`` / ``--to-date`` restrict the records used by statements and
journal listings. Without any of them, every record of the session is used.

``--view simplified|regular|detailed`` controls the level of detail of
statements.


Display modes and output
------------------------

``[display].mode`` in the configuration, overridden by
``--display-mode table|csv|both``:

- ``table``: print tables to stdout,
- ``csv``:   write CSV files only (``<name>_YYYY-MM-DD-HH-MM-SS.csv``),
- ``both``:  do both.

CSV files go to ``--output DIR`` or to ``[display].output_dir``.
"""

import argparse
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from . import __version__
from .accounts import (
    default_chart_of_accounts,
    load_chart_of_accounts,
    split_known_and_unknown_accounts,
    summarize_unknown_accounts,
)
from .checkout import Cart, checkout, settle_payment
from .config import AppConfig, load_app_config
from .dashboard import dashboard_snapshot
from .io import import_expenses, import_products
from .journal import trial_balance
from .models import EXPENSE_CATEGORIES, PAID, PAYMENT_METHODS, STATUSES, JournalLine
from .periods import (
    PERIOD_CHOICES,
    Period,
    determine_period_from_args,
    filter_records_by_period,
)
from .reports import (
    balance_check,
    balance_sheet,
    cash_flow_statement,
    income_statement,
)
from .services import (
    ExpenseForm,
    JournalForm,
    PurchaseForm,
    PurchaseItemForm,
    product_stats,
    record_expense,
    record_manual_journal,
    record_purchase,
)
from .store import AppStore
from .views import (
    VIEW_CHOICES,
    apply_view_level_filter,
    format_rupiah,
    format_statement,
    receipt_lines,
)

logger = logging.getLogger(__name__)

SCOPE_CHOICES = ["dashboard", "statements", "journal", "products", "all"]


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="smb-kasir",
        description=(
            "SMB Kasir - Point-of-sale & bookkeeping for small businesses. "
            "Seeds an in-memory session from CSV files, optionally records a "
            "sale, purchase, expense or journal entry, and renders the "
            "dashboard, financial statements and journal."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of smb_kasir and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'smb_kasir_config.toml' in the current directory is used when present."
        ),
    )

    # Session seed
    ap.add_argument(
        "--import-products",
        dest="products_path",
        metavar="CSV_PATH",
        help="Load the product catalogue from the given CSV file.",
    )
    ap.add_argument(
        "--import-expenses",
        dest="expenses_path",
        metavar="CSV_PATH",
        help="Record the expenses listed in the given CSV file.",
    )

    # Period selection
    ap.add_argument(
        "--period",
        choices=PERIOD_CHOICES,
        help=(
            "Predefined reporting period. If not provided (and no custom dates "
            "are given), every record of the session is used."
        ),
    )
    ap.add_argument(
        "--from-date",
        dest="from_date",
        help=(
            "Custom period start date (YYYY-MM-DD). Without --to-date, the "
            "fiscal year end_date is used."
        ),
    )
    ap.add_argument(
        "--to-date",
        dest="to_date",
        help=(
            "Custom period end date (YYYY-MM-DD). Without --from-date, the "
            "fiscal year start_date is used."
        ),
    )

    # Rendering
    ap.add_argument(
        "--scope",
        choices=SCOPE_CHOICES,
        default="dashboard",
        help="Select what to render (default: dashboard).",
    )
    ap.add_argument(
        "--view",
        choices=VIEW_CHOICES,
        default="regular",
        help=(
            "Level of detail of statements. simplified: totals only; "
            "regular: totals and accounts; detailed: adds revenue per product."
        ),
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "csv", "both"],
        help="Override the [display].mode setting of the configuration file.",
    )
    ap.add_argument(
        "--output",
        dest="output_dir",
        help="Directory for CSV files (default: [display].output_dir).",
    )

    # ------------------------------------------------------------------
    # Subcommands: one business event per invocation
    # ------------------------------------------------------------------
    subparsers = ap.add_subparsers(
        dest="command",
        metavar="command",
        help="Optional subcommand recording one event before rendering.",
    )

    co = subparsers.add_parser("checkout", help="Sell products at the cashier.")
    co.add_argument(
        "--item",
        dest="items",
        action="append",
        required=True,
        metavar="PRODUCT:QTY",
        help="Product id or name and quantity. Repeat for several products.",
    )
    co.add_argument("--method", choices=PAYMENT_METHODS, default="Tunai")
    co.add_argument(
        "--cash", type=float, help="Cash received (required for Tunai)."
    )
    co.add_argument("--customer", help="Customer name (default from config).")
    co.add_argument("--date", dest="event_date", help="Sale date (YYYY-MM-DD).")

    pu = subparsers.add_parser("purchase", help="Record a purchase from a supplier.")
    pu.add_argument("--supplier", required=True)
    pu.add_argument("--description", required=True)
    pu.add_argument(
        "--item",
        dest="items",
        action="append",
        required=True,
        metavar="NAME:QTY:COST",
        help="Product name, quantity and unit cost. Repeat for several items.",
    )
    pu.add_argument(
        "--category", default="Umum", help="Category of newly created products."
    )
    pu.add_argument("--status", choices=STATUSES, default=PAID)
    pu.add_argument("--method", choices=PAYMENT_METHODS, default="Tunai")
    pu.add_argument("--date", dest="event_date", help="Purchase date (YYYY-MM-DD).")

    ex = subparsers.add_parser("expense", help="Record an expense (Beban).")
    ex.add_argument("--description", required=True)
    ex.add_argument("--amount", type=float, required=True)
    ex.add_argument("--category", choices=EXPENSE_CATEGORIES, required=True)
    ex.add_argument("--status", choices=STATUSES, default=PAID)
    ex.add_argument("--date", dest="event_date", help="Expense date (YYYY-MM-DD).")

    jr = subparsers.add_parser("journal", help="Record a manual journal entry.")
    jr.add_argument("--description", required=True)
    jr.add_argument("--reference", required=True)
    jr.add_argument(
        "--debit",
        action="append",
        default=[],
        metavar="ACCOUNT:AMOUNT",
        help="Debit line. Repeat for several lines.",
    )
    jr.add_argument(
        "--credit",
        action="append",
        default=[],
        metavar="ACCOUNT:AMOUNT",
        help="Credit line. Repeat for several lines.",
    )
    jr.add_argument("--date", dest="event_date", help="Entry date (YYYY-MM-DD).")

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """
    Parse an optional CLI date argument (YYYY-MM-DD).

    Raises
    ------
    SystemExit
        If the date format is invalid.
    """
    if value is None:
        return None

    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        msg = f"Invalid date format: {value!r}. Expected YYYY-MM-DD."
        raise SystemExit(msg) from exc


def _split_fields(raw: str, parts: int, what: str) -> list[str]:
    """Split 'A:B[:C]' from the right so that names may contain ':'."""
    values = raw.rsplit(":", parts - 1)
    if len(values) != parts or not all(v.strip() for v in values):
        raise ValueError(f"Invalid {what} {raw!r}.")
    return [v.strip() for v in values]


def _parse_number(raw: str, what: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid number {raw!r} in {what}.") from exc


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


def _handle_checkout(args: argparse.Namespace, store: AppStore, config: AppConfig) -> None:
    cart = Cart()
    for raw in args.items:
        ref, qty_raw = _split_fields(raw, 2, "item (expected PRODUCT:QTY)")
        product = store.get_product(ref) or store.find_product_by_name(ref)
        if product is None:
            raise ValueError(f"Unknown product {ref!r}.")
        quantity = int(_parse_number(qty_raw, "--item"))
        line = cart.add(product)
        cart.update_quantity(product.id, line.quantity - 1 + quantity)

    payment = settle_payment(cart.total, args.method, args.cash)
    transaction = checkout(
        store,
        cart,
        payment,
        on_date=_parse_optional_date(args.event_date),
        customer=args.customer or config.default_customer,
    )

    print()
    for line in receipt_lines(transaction, config.business_name):
        print(line)


def _handle_purchase(args: argparse.Namespace, store: AppStore, config: AppConfig) -> None:
    items = []
    for raw in args.items:
        name, qty_raw, cost_raw = _split_fields(raw, 3, "item (expected NAME:QTY:COST)")
        items.append(
            PurchaseItemForm(
                product_name=name,
                quantity=int(_parse_number(qty_raw, "--item")),
                cost=_parse_number(cost_raw, "--item"),
                category=args.category,
            )
        )

    purchase = record_purchase(
        store,
        PurchaseForm(
            supplier=args.supplier,
            description=args.description,
            items=items,
            date=_parse_optional_date(args.event_date),
            status=args.status,
            payment_method=args.method,
        ),
        config.inventory,
    )
    print(
        f"Recorded purchase {purchase.id} from {purchase.supplier}: "
        f"{format_rupiah(purchase.amount)} ({purchase.status})"
    )


def _handle_expense(args: argparse.Namespace, store: AppStore, config: AppConfig) -> None:
    expense = record_expense(
        store,
        ExpenseForm(
            description=args.description,
            amount=args.amount,
            category=args.category,
            date=_parse_optional_date(args.event_date),
            status=args.status,
        ),
    )
    print(
        f"Recorded expense {expense.id} ({expense.category}): "
        f"{format_rupiah(expense.amount)} ({expense.status})"
    )


def _parse_lines(raws: list[str], what: str) -> list[JournalLine]:
    lines = []
    for raw in raws:
        account, amount_raw = _split_fields(raw, 2, f"{what} (expected ACCOUNT:AMOUNT)")
        lines.append(JournalLine(account=account, amount=_parse_number(amount_raw, what)))
    return lines


def _handle_journal(args: argparse.Namespace, store: AppStore, config: AppConfig) -> None:
    entry = record_manual_journal(
        store,
        JournalForm(
            description=args.description,
            reference=args.reference,
            debit=_parse_lines(args.debit, "--debit"),
            credit=_parse_lines(args.credit, "--credit"),
            date=_parse_optional_date(args.event_date),
        ),
    )
    print(
        f"Recorded journal entry {entry.id} ({entry.reference}): "
        f"{format_rupiah(entry.total_debit)}"
    )


_HANDLERS = {
    "checkout": _handle_checkout,
    "purchase": _handle_purchase,
    "expense": _handle_expense,
    "journal": _handle_journal,
}


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class _Renderer:
    """Print tables and/or write CSV files according to the display mode."""

    def __init__(self, display_mode: str, output_dir: Path) -> None:
        self.display_mode = display_mode
        self.output_dir = output_dir
        self.timestamp = datetime.now().strftime("%Y-%m-%d-%H-%M-%S")

    @property
    def tables(self) -> bool:
        return self.display_mode in {"table", "both"}

    def render(self, name: str, title: str, df: pd.DataFrame, table=None) -> None:
        if self.tables:
            shown = df if table is None else table
            print()
            print(f"=== {title} ===")
            if shown.empty:
                print("(no rows)")
            else:
                print(shown.to_string(index=False))

        if self.display_mode in {"csv", "both"}:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            path = self.output_dir / f"{name}_{self.timestamp}.csv"
            df.to_csv(path, index=False)
            print(f"Wrote {path} ({len(df)} rows)")


def _render_dashboard(store: AppStore, renderer: _Renderer) -> None:
    snap = dashboard_snapshot(store)
    if renderer.tables:
        print()
        print(f"=== Dashboard ({snap.day.isoformat()}) ===")
        print(
            f"Penjualan hari ini : {format_rupiah(snap.today_revenue)} "
            f"({snap.today_sales_count} transaksi)"
        )
        print(
            f"Pengeluaran hari ini: {format_rupiah(snap.today_outflow)} "
            f"({snap.today_outflow_count} catatan)"
        )
        print(f"Penjualan bulan ini: {format_rupiah(snap.month_revenue)}")
        print(f"Laba bersih        : {format_rupiah(snap.net_income)}")
        print(
            f"Margin laba        : {snap.profit_margin:.2f}% ({snap.margin_rating})"
        )
        print(
            f"Produk             : {snap.product_count} "
            f"(stok menipis: {len(snap.low_stock)}, habis: {len(snap.out_of_stock)})"
        )
        for product in snap.low_stock:
            print(f"  - {product.name}: {product.stock} / min {product.min_stock}")

    renderer.render(
        "recent_transactions",
        "Transaksi terbaru",
        snap.recent_transactions,
    )


def _render_statements(
    store: AppStore,
    period: Optional[Period],
    view: str,
    config: AppConfig,
    renderer: _Renderer,
) -> None:
    ratio = config.accounting.equipment_ratio
    statements = [
        ("income_statement", "Laporan Laba Rugi", income_statement(store, period)),
        ("balance_sheet", "Neraca", balance_sheet(store, period, ratio)),
        ("cash_flow", "Laporan Arus Kas", cash_flow_statement(store, period, ratio)),
    ]
    for name, title, statement in statements:
        view_df = apply_view_level_filter(statement, view)
        renderer.render(name, title, view_df, table=format_statement(view_df))

    check = balance_check(statements[1][2])
    if not check.is_balanced:
        print(
            "Note: balance sheet difference (assets - liabilities - equity) = "
            f"{format_rupiah(check.difference)}"
        )


def _load_chart(config: AppConfig) -> pd.DataFrame:
    chart_path = config.accounting.chart_of_accounts
    if chart_path is None:
        return default_chart_of_accounts()
    if not chart_path.is_file():
        raise FileNotFoundError(f"Chart of accounts file not found: {chart_path}")
    return load_chart_of_accounts(str(chart_path))


def _render_journal(
    store: AppStore,
    period: Optional[Period],
    chart: pd.DataFrame,
    renderer: _Renderer,
) -> None:
    lines = filter_records_by_period(store.journal_lines_frame(), period)
    renderer.render("journal", "Jurnal Umum", lines)
    renderer.render("trial_balance", "Neraca Saldo", trial_balance(lines))

    # Same period as the table above.
    total_debit = round(float(lines["debit"].sum()), 2) if not lines.empty else 0.0
    total_credit = round(float(lines["credit"].sum()), 2) if not lines.empty else 0.0
    if renderer.tables:
        print(
            f"Total debit: {format_rupiah(total_debit)} | "
            f"Total kredit: {format_rupiah(total_credit)}"
        )

    _, unknown = split_known_and_unknown_accounts(lines, set(chart["name"]))
    if not unknown.empty:
        logger.warning("%d journal lines use accounts outside the chart", len(unknown))
        renderer.render(
            "unknown_accounts",
            "Akun tidak dikenal",
            summarize_unknown_accounts(unknown),
        )


def _render_products(store: AppStore, config: AppConfig, renderer: _Renderer) -> None:
    renderer.render("products", "Produk", store.products_frame())
    stats = product_stats(store, config.inventory)
    if renderer.tables:
        print(
            f"Total produk: {stats.total_products} | "
            f"Stok menipis: {stats.low_stock_products} | "
            f"Nilai stok: {format_rupiah(stats.total_value)}"
        )


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the SMB Kasir CLI.

    Parses arguments, loads the configuration, seeds the in-memory store,
    runs the optional subcommand and renders the selected scope as console
    tables and/or CSV files.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"smb_kasir version {__version__}")
        return

    # 1) Configuration and logging
    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # 2) Seed the session
    store = AppStore()
    try:
        if args.products_path:
            path = Path(args.products_path)
            if not path.is_file():
                parser.error(f"CSV file for --import-products not found: {path}")
            products = import_products(store, path, config.inventory)
            print(f"Loaded {len(products)} products from {path}")

        if args.expenses_path:
            path = Path(args.expenses_path)
            if not path.is_file():
                parser.error(f"CSV file for --import-expenses not found: {path}")
            expenses = import_expenses(store, path)
            print(f"Loaded {len(expenses)} expenses from {path}")
    except ValueError as exc:
        parser.error(str(exc))

    if store.is_empty() and args.command in {None, "checkout"}:
        print("Warning: the session is empty. Use --import-products to load a catalogue.")

    # 3) Optional business event
    if args.command is not None:
        try:
            _HANDLERS[args.command](args, store, config)
        except ValueError as exc:
            parser.error(str(exc))

    # 4) Period
    try:
        period = determine_period_from_args(args, config.fiscal_year)
    except ValueError as exc:
        parser.error(str(exc))

    if period is not None:
        print(
            f"Applied period: {period.label} "
            f"({period.start.isoformat()} → {period.end.isoformat()})"
        )

    # 5) Render
    display_mode = args.display_mode or config.display_mode
    output_dir = Path(args.output_dir) if args.output_dir else config.output_dir
    renderer = _Renderer(display_mode, output_dir)

    scope = args.scope
    chart = None
    if scope in {"journal", "all"}:
        try:
            chart = _load_chart(config)
        except (FileNotFoundError, ValueError) as exc:
            parser.error(str(exc))

    if scope in {"dashboard", "all"}:
        _render_dashboard(store, renderer)
    if scope in {"statements", "all"}:
        _render_statements(store, period, args.view, config, renderer)
    if chart is not None:
        _render_journal(store, period, chart, renderer)
    if scope in {"products", "all"}:
        _render_products(store, config, renderer)


if __name__ == "__main__":
    main()
