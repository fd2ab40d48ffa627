# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
High-level services for form handling and listing.

This module sits between:
- the in-memory store in `store.py`, and
- user-facing layers such as the CLI.

It exposes a typed interface for the forms of the application (add / edit
product, record purchase, record expense, manual journal entry) and for the
list screens (search, filters and totals).

Responsibilities
----------------
1) Form validation
   - Required fields and numeric bounds are checked here, not in the
     store. Every failure raises a ValidationError (or a subclass) with a
     message suitable for direct display.
   - Defaults from the inventory configuration are applied (minimum stock,
     selling-price markup for products created by a purchase).

2) Purchases and the catalogue
   - Each purchase line refers to a product by name. When a product with
     that name exists (case-insensitive), its stock is increased; otherwise
     a new product is created with the purchased quantity as initial stock
     and a selling price of ``round(cost * purchase_markup)``.

3) Listing & searching
   - Filters mirror the list screens: substring search, type / status /
     category selectors and optional date bounds.
   - Totals (sales vs purchases, paid vs unpaid, ...) are computed on the
     full lists, not on the filtered result, like the summary cards.

Design notes
------------
- The store remains permissive; services are the only place where business
  rules on user input are enforced.
- Listing functions return pandas DataFrames so that the CLI can print or
  export them without further conversion.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import pandas as pd

from .config import InventoryConfig
from .errors import RecordNotFoundError, ValidationError
from .journal import journal_totals as _journal_totals
from .journal import validate_manual_journal
from .models import (
    EXPENSE_CATEGORIES,
    PAID,
    PAYMENT_METHODS,
    PURCHASE,
    SALE,
    STATUSES,
    UNPAID,
    Expense,
    JournalEntry,
    JournalLine,
    NewExpense,
    NewProduct,
    NewPurchase,
    Product,
    ProductUpdate,
    Purchase,
    PurchaseItem,
    Transaction,
)
from .periods import _today
from .store import AppStore

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Forms
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProductForm:
    """Values of the "add product" form. None means the field was left blank."""

    name: Optional[str]
    category: Optional[str]
    price: Optional[float]
    cost: Optional[float]
    stock: Optional[int]
    min_stock: Optional[int] = None
    supplier: Optional[str] = None


@dataclass(frozen=True)
class ProductEditForm:
    """Values of the "edit product" form."""

    name: Optional[str]
    category: Optional[str]
    price: Optional[float]
    stock: Optional[int]


@dataclass(frozen=True)
class PurchaseItemForm:
    product_name: Optional[str]
    quantity: Optional[int]
    cost: Optional[float]
    category: str = "Umum"


@dataclass(frozen=True)
class PurchaseForm:
    supplier: Optional[str]
    description: Optional[str]
    items: Sequence[PurchaseItemForm] = ()
    date: Optional[date] = None
    status: str = PAID
    payment_method: str = "Tunai"


@dataclass(frozen=True)
class ExpenseForm:
    description: Optional[str]
    amount: Optional[float]
    category: Optional[str]
    date: Optional[date] = None
    status: str = PAID


@dataclass(frozen=True)
class JournalForm:
    description: Optional[str]
    reference: Optional[str]
    debit: Sequence[JournalLine] = field(default_factory=tuple)
    credit: Sequence[JournalLine] = field(default_factory=tuple)
    date: Optional[date] = None


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    return False


def _round_half_up(value: float) -> int:
    """Round to the nearest rupiah, halves going up (6.5 -> 7)."""
    return int(math.floor(value + 0.5))


def _check_choice(value: str, choices: Sequence[str], label: str) -> None:
    if value not in choices:
        raise ValidationError(
            f"Invalid {label} {value!r}; expected one of: {', '.join(choices)}."
        )


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


def create_product(
    store: AppStore,
    form: ProductForm,
    inventory: InventoryConfig = InventoryConfig(),
) -> Product:
    """
    Validate the "add product" form and add the product to the catalogue.

    Rules
    -----
    - name, category, price, cost and stock are required,
    - price > 0, cost > 0, stock >= 0,
    - min_stock falls back to ``inventory.default_min_stock`` when missing
      or zero.

    Raises
    ------
    ValidationError
        If a rule is violated.
    """
    required = (form.name, form.category, form.price, form.cost, form.stock)
    if any(_is_blank(v) for v in required):
        raise ValidationError(
            "Name, category, price, cost and stock are required."
        )

    price = float(form.price)
    cost = float(form.cost)
    stock = int(form.stock)
    if price <= 0 or cost <= 0 or stock < 0:
        raise ValidationError(
            "Price and cost must be greater than 0 and stock cannot be negative."
        )

    min_stock = int(form.min_stock or 0) or inventory.default_min_stock
    supplier = None if _is_blank(form.supplier) else form.supplier.strip()

    return store.add_product(
        NewProduct(
            name=form.name.strip(),
            category=form.category.strip(),
            price=price,
            cost=cost,
            stock=stock,
            min_stock=min_stock,
            supplier=supplier,
        )
    )


def edit_product(store: AppStore, product_id: str, form: ProductEditForm) -> Product:
    """
    Validate the "edit product" form and update the product.

    Rules
    -----
    - name, category, price and stock are required,
    - price > 0,
    - stock >= 0.

    Raises
    ------
    RecordNotFoundError
        If the product does not exist.
    ValidationError
        If a rule is violated.
    """
    if store.get_product(product_id) is None:
        raise RecordNotFoundError(f"Product {product_id!r} not found.")

    if any(_is_blank(v) for v in (form.name, form.category, form.price, form.stock)):
        raise ValidationError("Name, category, price and stock are required.")
    if float(form.price) <= 0:
        raise ValidationError("Price must be greater than 0.")
    if int(form.stock) < 0:
        raise ValidationError("Stock cannot be negative.")

    return store.update_product(
        product_id,
        ProductUpdate(
            name=form.name.strip(),
            category=form.category.strip(),
            price=float(form.price),
            stock=int(form.stock),
        ),
    )


def delete_product(store: AppStore, product_id: str) -> Product:
    """Remove a product. Historical transactions keep referencing its id."""
    return store.delete_product(product_id)


@dataclass(frozen=True)
class ProductStats:
    """Summary cards of the product list."""

    total_products: int
    low_stock_products: int
    total_value: float


def search_products(store: AppStore, term: str = "") -> pd.DataFrame:
    """Products whose name or category contains `term` (case-insensitive)."""
    df = store.products_frame()
    term = (term or "").strip().lower()
    if not term or df.empty:
        return df
    mask = df["name"].str.lower().str.contains(term, regex=False) | df[
        "category"
    ].str.lower().str.contains(term, regex=False)
    return df[mask].reset_index(drop=True)


def product_stats(
    store: AppStore, inventory: InventoryConfig = InventoryConfig()
) -> ProductStats:
    """
    Count products, products below ``inventory.low_stock_threshold`` and the
    catalogue value at selling price (price x stock).
    """
    df = store.products_frame()
    if df.empty:
        return ProductStats(total_products=0, low_stock_products=0, total_value=0.0)
    return ProductStats(
        total_products=len(df),
        low_stock_products=int((df["stock"] < inventory.low_stock_threshold).sum()),
        total_value=round(float((df["price"] * df["stock"]).sum()), 2),
    )


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------


def record_purchase(
    store: AppStore,
    form: PurchaseForm,
    inventory: InventoryConfig = InventoryConfig(),
) -> Purchase:
    """
    Validate the purchase form, update the catalogue and record the purchase.

    Rules
    -----
    - supplier, description and at least one item are required,
    - every item needs a product name, quantity > 0 and cost > 0,
    - status and payment method must be known values.

    Catalogue effects
    -----------------
    - existing product (same name, case-insensitive): stock += quantity,
    - otherwise: a new product is created with stock = quantity,
      price = round(cost * inventory.purchase_markup),
      min_stock = inventory.default_min_stock and the purchase supplier.

    Returns
    -------
    Purchase
        The stored purchase. Its items reference the actual product ids.
    """
    if _is_blank(form.supplier) or _is_blank(form.description) or not form.items:
        raise ValidationError(
            "Supplier, description and at least one item are required."
        )
    for item in form.items:
        if (
            _is_blank(item.product_name)
            or item.quantity is None
            or int(item.quantity) <= 0
            or item.cost is None
            or float(item.cost) <= 0
        ):
            raise ValidationError(
                "Every item needs a product name, a quantity > 0 and a cost > 0."
            )
    _check_choice(form.status, STATUSES, "status")
    _check_choice(form.payment_method, PAYMENT_METHODS, "payment method")

    supplier = form.supplier.strip()
    purchase_items: list[PurchaseItem] = []
    for item in form.items:
        name = item.product_name.strip()
        quantity = int(item.quantity)
        cost = float(item.cost)

        existing = store.find_product_by_name(name)
        if existing is not None:
            product = store.update_product_stock(existing.id, quantity, "purchase")
            logger.info("Restocked %s (+%d) from purchase", product.id, quantity)
        else:
            product = store.add_product(
                NewProduct(
                    name=name,
                    category=(item.category or "Umum").strip() or "Umum",
                    price=float(_round_half_up(cost * inventory.purchase_markup)),
                    cost=cost,
                    stock=quantity,
                    min_stock=inventory.default_min_stock,
                    supplier=supplier,
                )
            )

        purchase_items.append(
            PurchaseItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                cost=cost,
            )
        )

    amount = round(sum(i.subtotal for i in purchase_items), 2)
    return store.add_purchase(
        NewPurchase(
            date=form.date or _today(),
            supplier=supplier,
            amount=amount,
            description=form.description.strip(),
            status=form.status,
            items=tuple(purchase_items),
            payment_method=form.payment_method,
        )
    )


def delete_purchase(store: AppStore, purchase_id: str) -> Purchase:
    """Remove a purchase. Stock and journal entry are left untouched."""
    return store.delete_purchase(purchase_id)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def record_expense(store: AppStore, form: ExpenseForm) -> Expense:
    """
    Validate the expense form and record the expense.

    Rules
    -----
    - description, amount and category are required,
    - amount > 0,
    - category is one of Operasional, Administrasi, Penjualan, Lainnya,
    - status is Lunas or Belum Lunas.
    """
    if _is_blank(form.description) or _is_blank(form.amount) or _is_blank(
        form.category
    ):
        raise ValidationError("Description, amount and category are required.")

    amount = float(form.amount)
    if amount <= 0:
        raise ValidationError("Amount must be a valid number greater than 0.")
    _check_choice(form.category, EXPENSE_CATEGORIES, "expense category")
    _check_choice(form.status, STATUSES, "status")

    return store.add_expense(
        NewExpense(
            date=form.date or _today(),
            description=form.description.strip(),
            amount=amount,
            category=form.category,
            status=form.status,
        )
    )


def delete_expense(store: AppStore, expense_id: str) -> Expense:
    return store.delete_expense(expense_id)


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------


def record_manual_journal(store: AppStore, form: JournalForm) -> JournalEntry:
    """
    Validate a manual journal form and store the entry.

    See :func:`journal.validate_manual_journal` for the rules.
    """
    new_entry = validate_manual_journal(
        form.date or _today(),
        form.description or "",
        form.reference or "",
        form.debit,
        form.credit,
    )
    return store.add_journal_entry(new_entry)


def delete_journal_entry(store: AppStore, entry_id: str) -> JournalEntry:
    return store.delete_journal_entry(entry_id)


def journal_totals(store: AppStore) -> tuple[float, float]:
    """(total debit, total credit) over every journal entry of the store."""
    return _journal_totals(store.journal_entries)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def delete_transaction(store: AppStore, transaction_id: str) -> Transaction:
    """Remove a transaction. Stock and journal entry are left untouched."""
    return store.delete_transaction(transaction_id)


# ---------------------------------------------------------------------------
# Listing and search
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TransactionsFilter:
    """
    Filters of the transaction list.

    Attributes
    ----------
    search:
        Case-insensitive substring matched against customer name or id.
    type:
        "Penjualan" / "Pembelian" (case-insensitive), None for all.
    status:
        "Lunas" / "Belum Lunas" (case-insensitive), None for all.
    start, end:
        Inclusive date bounds.
    """

    search: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class PurchasesFilter:
    """search matches supplier or id; status is case-insensitive."""

    search: Optional[str] = None
    status: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None


@dataclass(frozen=True)
class ExpensesFilter:
    """search matches the description; category/status are case-insensitive."""

    search: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    start: Optional[date] = None
    end: Optional[date] = None


def _contains(series: pd.Series, term: str) -> pd.Series:
    return series.astype(str).str.lower().str.contains(term, regex=False)


def _equals_ci(series: pd.Series, value: str) -> pd.Series:
    return series.astype(str).str.lower() == value.strip().lower()


def _apply_date_bounds(
    df: pd.DataFrame, start: Optional[date], end: Optional[date]
) -> pd.DataFrame:
    if start is not None:
        df = df[df["date"] >= pd.Timestamp(start)]
    if end is not None:
        df = df[df["date"] <= pd.Timestamp(end)]
    return df


def filter_transactions(
    store: AppStore, filters: Optional[TransactionsFilter] = None
) -> pd.DataFrame:
    """Transactions matching the filters, newest first."""
    df = store.transactions_frame()
    if filters is None or df.empty:
        return df
    if filters.search:
        term = filters.search.strip().lower()
        df = df[_contains(df["customer"], term) | _contains(df["id"], term)]
    if filters.type:
        df = df[_equals_ci(df["type"], filters.type)]
    if filters.status:
        df = df[_equals_ci(df["status"], filters.status)]
    df = _apply_date_bounds(df, filters.start, filters.end)
    return df.reset_index(drop=True)


def filter_purchases(
    store: AppStore, filters: Optional[PurchasesFilter] = None
) -> pd.DataFrame:
    """Purchases matching the filters, newest first."""
    df = store.purchases_frame()
    if filters is None or df.empty:
        return df
    if filters.search:
        term = filters.search.strip().lower()
        df = df[_contains(df["supplier"], term) | _contains(df["id"], term)]
    if filters.status:
        df = df[_equals_ci(df["status"], filters.status)]
    df = _apply_date_bounds(df, filters.start, filters.end)
    return df.reset_index(drop=True)


def filter_expenses(
    store: AppStore, filters: Optional[ExpensesFilter] = None
) -> pd.DataFrame:
    """Expenses matching the filters, newest first."""
    df = store.expenses_frame()
    if filters is None or df.empty:
        return df
    if filters.search:
        df = df[_contains(df["description"], filters.search.strip().lower())]
    if filters.category:
        df = df[_equals_ci(df["category"], filters.category)]
    if filters.status:
        df = df[_equals_ci(df["status"], filters.status)]
    df = _apply_date_bounds(df, filters.start, filters.end)
    return df.reset_index(drop=True)


@dataclass(frozen=True)
class TransactionTotals:
    sales: float
    purchases: float


@dataclass(frozen=True)
class PurchaseTotals:
    total: float
    unpaid: float


@dataclass(frozen=True)
class ExpenseTotals:
    total: float
    paid: float
    unpaid: float


def _sum_where(df: pd.DataFrame, column: str, value: str) -> float:
    if df.empty:
        return 0.0
    return round(float(df.loc[df[column] == value, "amount"].sum()), 2)


def transaction_totals(store: AppStore) -> TransactionTotals:
    """Total amount of sale and purchase transactions (any status)."""
    df = store.transactions_frame()
    return TransactionTotals(
        sales=_sum_where(df, "type", SALE),
        purchases=_sum_where(df, "type", PURCHASE),
    )


def purchase_totals(store: AppStore) -> PurchaseTotals:
    df = store.purchases_frame()
    return PurchaseTotals(
        total=round(float(df["amount"].sum()), 2) if not df.empty else 0.0,
        unpaid=_sum_where(df, "status", UNPAID),
    )


def expense_totals(store: AppStore) -> ExpenseTotals:
    df = store.expenses_frame()
    return ExpenseTotals(
        total=round(float(df["amount"].sum()), 2) if not df.empty else 0.0,
        paid=_sum_where(df, "status", PAID),
        unpaid=_sum_where(df, "status", UNPAID),
    )
