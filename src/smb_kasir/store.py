# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.


"""
In-memory state store for SMB Kasir.

This module is the single source of truth for a running session. It holds
five plain lists (products, transactions, purchases, journal entries and
expenses) and exposes CRUD operations on them. Nothing is written to disk:
a new session starts from an empty store, optionally seeded from CSV files
by the CLI.

------------------------------------------------------------------------------
Responsibilities
------------------------------------------------------------------------------

1) Record creation
   - Identifiers are generated from per-prefix counters (PRD, TRX, PUR,
     JRN, EXP) and are unique for the lifetime of the store.
   - Products are appended to the catalogue. Transactions, purchases,
     journal entries and expenses are prepended so that the newest record
     comes first, which is the order list screens display.

2) Side effects of recording business events
   - `add_transaction` on a sale ("Penjualan") decrements the stock of
     every sold product (clamped at zero) and books an automatic journal
     entry (Kas / Pendapatan Penjualan).
   - `add_purchase` books Persediaan / Kas.
   - `add_expense` books Beban <category> / Kas.

3) Updates and deletions
   - Records are frozen dataclasses; an update replaces the record in its
     list with a modified copy.
   - Deleting a product does not touch historical transactions that
     reference its id. Deleting a transaction, purchase or expense keeps
     the journal entry it generated.

4) DataFrame exports
   - Each list can be exported as a pandas DataFrame with a `date` column
     of type datetime64[ns], ready for period filtering and aggregation in
     reports.py and dashboard.py.

The store is intentionally permissive, like a raw journal: it does not
validate business rules (positive amounts, balanced manual journals,
required fields). Form-level validation is performed by services.py.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, replace

import pandas as pd

from .errors import RecordNotFoundError, ValidationError
from .journal import (
    build_expense_journal,
    build_purchase_journal,
    build_sale_journal,
    journal_to_dataframe,
)
from .models import (
    SALE,
    Expense,
    IdSequence,
    JournalEntry,
    NewExpense,
    NewJournalEntry,
    NewProduct,
    NewPurchase,
    NewTransaction,
    Product,
    ProductUpdate,
    Purchase,
    StockMovement,
    Transaction,
)

logger = logging.getLogger(__name__)

PRODUCT_COLUMNS = [
    "id",
    "name",
    "category",
    "price",
    "cost",
    "stock",
    "min_stock",
    "supplier",
]
TRANSACTION_COLUMNS = [
    "id",
    "date",
    "customer",
    "type",
    "amount",
    "description",
    "status",
    "payment_method",
    "cash_received",
    "change",
]
SALE_ITEM_COLUMNS = [
    "transaction_id",
    "date",
    "type",
    "status",
    "product_id",
    "product_name",
    "quantity",
    "price",
    "cost",
]
PURCHASE_COLUMNS = [
    "id",
    "date",
    "supplier",
    "amount",
    "description",
    "status",
    "payment_method",
]
EXPENSE_COLUMNS = ["id", "date", "description", "amount", "category", "status"]


def _records_frame(rows: list[dict], columns: list[str]) -> pd.DataFrame:
    """Build a DataFrame with a fixed column set and a datetime `date`."""
    df = pd.DataFrame(rows, columns=columns)
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"])
    return df


class AppStore:
    """
    In-memory container of all records for one session.

    Attributes
    ----------
    products, transactions, purchases, journal_entries, expenses:
        Lists of frozen records. They may be read directly; mutate them
        only through the store methods so that side effects (stock
        movements, automatic journal entries) stay consistent.
    """

    def __init__(self) -> None:
        self.products: list[Product] = []
        self.transactions: list[Transaction] = []
        self.purchases: list[Purchase] = []
        self.journal_entries: list[JournalEntry] = []
        self.expenses: list[Expense] = []
        self._ids = IdSequence()

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def get_product(self, product_id: str) -> Product | None:
        """Return the product with the given id, or None."""
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def find_product_by_name(self, name: str) -> Product | None:
        """Return the first product whose name matches (case-insensitive)."""
        key = name.strip().lower()
        for product in self.products:
            if product.name.strip().lower() == key:
                return product
        return None

    def _require_product(self, product_id: str) -> Product:
        product = self.get_product(product_id)
        if product is None:
            raise RecordNotFoundError(f"Product {product_id!r} not found.")
        return product

    def _replace_product(self, updated: Product) -> Product:
        self.products = [
            updated if p.id == updated.id else p for p in self.products
        ]
        return updated

    def add_product(self, new_product: NewProduct) -> Product:
        """Append a product to the catalogue and return it with its id."""
        product = Product(id=self._ids.next_id("PRD"), **asdict(new_product))
        self.products.append(product)
        logger.info("Added product %s (%s)", product.id, product.name)
        return product

    def update_product(self, product_id: str, update: ProductUpdate) -> Product:
        """
        Apply a partial update to a product.

        Raises
        ------
        RecordNotFoundError
            If the product does not exist.
        ValidationError
            If no fields are provided for update.
        """
        product = self._require_product(product_id)
        changes = {k: v for k, v in asdict(update).items() if v is not None}
        if not changes:
            raise ValidationError("No fields to update in ProductUpdate.")
        updated = self._replace_product(replace(product, **changes))
        logger.info("Updated product %s: %s", product_id, sorted(changes))
        return updated

    def delete_product(self, product_id: str) -> Product:
        """Remove a product from the catalogue and return it."""
        product = self._require_product(product_id)
        self.products = [p for p in self.products if p.id != product_id]
        logger.info("Deleted product %s (%s)", product_id, product.name)
        return product

    def update_product_stock(
        self,
        product_id: str,
        quantity: int,
        kind: StockMovement = "sale",
    ) -> Product:
        """
        Move the stock of a product.

        A "sale" subtracts `quantity` (never going below zero), a
        "purchase" adds it.
        """
        product = self._require_product(product_id)
        if kind == "sale":
            stock = max(0, product.stock - int(quantity))
        elif kind == "purchase":
            stock = product.stock + int(quantity)
        else:
            raise ValueError(f"Unknown stock movement: {kind!r}")
        return self._replace_product(replace(product, stock=stock))

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def get_transaction(self, transaction_id: str) -> Transaction | None:
        for transaction in self.transactions:
            if transaction.id == transaction_id:
                return transaction
        return None

    def add_transaction(self, new: NewTransaction) -> Transaction:
        """
        Record a transaction (newest first).

        For sales, the stock of each sold product is decremented once and an
        automatic journal entry is booked. Items whose product no longer
        exists are skipped for the stock movement.
        """
        transaction = Transaction(id=self._ids.next_id("TRX"), **_fields(new))
        self.transactions.insert(0, transaction)

        if transaction.type == SALE:
            for item in transaction.items:
                if self.get_product(item.product_id) is None:
                    logger.warning(
                        "Sale %s references unknown product %s; stock unchanged",
                        transaction.id,
                        item.product_id,
                    )
                    continue
                self.update_product_stock(item.product_id, item.quantity, "sale")
            self.add_journal_entry(build_sale_journal(transaction))

        logger.info(
            "Recorded %s %s for %.2f", transaction.type, transaction.id,
            transaction.amount,
        )
        return transaction

    def delete_transaction(self, transaction_id: str) -> Transaction:
        transaction = self.get_transaction(transaction_id)
        if transaction is None:
            raise RecordNotFoundError(f"Transaction {transaction_id!r} not found.")
        self.transactions = [
            t for t in self.transactions if t.id != transaction_id
        ]
        logger.info("Deleted transaction %s", transaction_id)
        return transaction

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------

    def get_purchase(self, purchase_id: str) -> Purchase | None:
        for purchase in self.purchases:
            if purchase.id == purchase_id:
                return purchase
        return None

    def add_purchase(self, new: NewPurchase) -> Purchase:
        """Record a purchase (newest first) and book Persediaan / Kas."""
        purchase = Purchase(id=self._ids.next_id("PUR"), **_fields(new))
        self.purchases.insert(0, purchase)
        self.add_journal_entry(build_purchase_journal(purchase))
        logger.info(
            "Recorded purchase %s from %s for %.2f",
            purchase.id,
            purchase.supplier,
            purchase.amount,
        )
        return purchase

    def delete_purchase(self, purchase_id: str) -> Purchase:
        purchase = self.get_purchase(purchase_id)
        if purchase is None:
            raise RecordNotFoundError(f"Purchase {purchase_id!r} not found.")
        self.purchases = [p for p in self.purchases if p.id != purchase_id]
        logger.info("Deleted purchase %s", purchase_id)
        return purchase

    # ------------------------------------------------------------------
    # Journal
    # ------------------------------------------------------------------

    def get_journal_entry(self, entry_id: str) -> JournalEntry | None:
        for entry in self.journal_entries:
            if entry.id == entry_id:
                return entry
        return None

    def add_journal_entry(self, new: NewJournalEntry) -> JournalEntry:
        """Store a journal entry (newest first). No balance check here."""
        entry = JournalEntry(id=self._ids.next_id("JRN"), **_fields(new))
        self.journal_entries.insert(0, entry)
        logger.debug("Booked %s journal entry %s", entry.type, entry.id)
        return entry

    def delete_journal_entry(self, entry_id: str) -> JournalEntry:
        entry = self.get_journal_entry(entry_id)
        if entry is None:
            raise RecordNotFoundError(f"Journal entry {entry_id!r} not found.")
        self.journal_entries = [
            e for e in self.journal_entries if e.id != entry_id
        ]
        logger.info("Deleted journal entry %s", entry_id)
        return entry

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def get_expense(self, expense_id: str) -> Expense | None:
        for expense in self.expenses:
            if expense.id == expense_id:
                return expense
        return None

    def add_expense(self, new: NewExpense) -> Expense:
        """Record an expense (newest first) and book Beban <category> / Kas."""
        expense = Expense(id=self._ids.next_id("EXP"), **_fields(new))
        self.expenses.insert(0, expense)
        self.add_journal_entry(build_expense_journal(expense))
        logger.info(
            "Recorded expense %s (%s) for %.2f",
            expense.id,
            expense.category,
            expense.amount,
        )
        return expense

    def delete_expense(self, expense_id: str) -> Expense:
        expense = self.get_expense(expense_id)
        if expense is None:
            raise RecordNotFoundError(f"Expense {expense_id!r} not found.")
        self.expenses = [e for e in self.expenses if e.id != expense_id]
        logger.info("Deleted expense %s", expense_id)
        return expense

    # ------------------------------------------------------------------
    # DataFrame exports
    # ------------------------------------------------------------------

    def products_frame(self) -> pd.DataFrame:
        """Catalogue as a DataFrame (one row per product)."""
        rows = [asdict(p) for p in self.products]
        df = pd.DataFrame(rows, columns=PRODUCT_COLUMNS)
        df["price"] = df["price"].astype(float)
        df["cost"] = df["cost"].astype(float)
        df["stock"] = df["stock"].astype(int)
        df["min_stock"] = df["min_stock"].astype(int)
        return df

    def transactions_frame(self) -> pd.DataFrame:
        """Transactions without their items (see `sale_items_frame`)."""
        rows = []
        for t in self.transactions:
            row = asdict(t)
            row.pop("items")
            rows.append(row)
        df = _records_frame(rows, TRANSACTION_COLUMNS)
        df["amount"] = df["amount"].astype(float)
        return df

    def sale_items_frame(self) -> pd.DataFrame:
        """One row per transaction item, with the parent's date/type/status."""
        rows = []
        for t in self.transactions:
            for item in t.items:
                rows.append(
                    {
                        "transaction_id": t.id,
                        "date": t.date,
                        "type": t.type,
                        "status": t.status,
                        "product_id": item.product_id,
                        "product_name": item.product_name,
                        "quantity": item.quantity,
                        "price": item.price,
                        "cost": item.cost,
                    }
                )
        return _records_frame(rows, SALE_ITEM_COLUMNS)

    def purchases_frame(self) -> pd.DataFrame:
        rows = []
        for p in self.purchases:
            row = asdict(p)
            row.pop("items")
            rows.append(row)
        df = _records_frame(rows, PURCHASE_COLUMNS)
        df["amount"] = df["amount"].astype(float)
        return df

    def expenses_frame(self) -> pd.DataFrame:
        rows = [asdict(e) for e in self.expenses]
        df = _records_frame(rows, EXPENSE_COLUMNS)
        df["amount"] = df["amount"].astype(float)
        return df

    def journal_lines_frame(self) -> pd.DataFrame:
        """Journal entries flattened to one row per line."""
        return journal_to_dataframe(self.journal_entries)

    def is_empty(self) -> bool:
        """True when no product and no transaction has been recorded yet."""
        return not self.products and not self.transactions


def _fields(new) -> dict:
    """Shallow field dict of a frozen dataclass (keeps nested records)."""
    return {name: getattr(new, name) for name in new.__dataclass_fields__}
