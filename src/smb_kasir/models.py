# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Record types for SMB Kasir.

Every record held by the in-memory store is a frozen dataclass. Records are
never mutated in place: an update produces a new instance (via
``dataclasses.replace``) which replaces the old one in the store list.

Besides the stored records (Product, Transaction, Purchase, JournalEntry,
Expense), this module defines the "new record" payloads accepted by the
store (records without an id) and the partial-update payload for products.

Domain vocabulary
-----------------
The business vocabulary is Indonesian and is kept as-is in the values
because it is what the shop owner sees on receipts and reports:

- status:          "Lunas" (paid) / "Belum Lunas" (unpaid)
- transaction:     "Penjualan" (sale) / "Pembelian" (purchase)
- payment method:  "Tunai" (cash) / "Transfer" / "Kredit" (card)
- journal type:    "Manual" / "Automatic"
- expense:         "Operasional" / "Administrasi" / "Penjualan" / "Lainnya"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Literal

Status = Literal["Lunas", "Belum Lunas"]
TransactionType = Literal["Penjualan", "Pembelian"]
PaymentMethod = Literal["Tunai", "Transfer", "Kredit"]
JournalType = Literal["Manual", "Automatic"]
ExpenseCategory = Literal["Operasional", "Administrasi", "Penjualan", "Lainnya"]
StockMovement = Literal["sale", "purchase"]

PAID: Status = "Lunas"
UNPAID: Status = "Belum Lunas"
SALE: TransactionType = "Penjualan"
PURCHASE: TransactionType = "Pembelian"
CASH: PaymentMethod = "Tunai"

STATUSES: tuple[str, ...] = ("Lunas", "Belum Lunas")
TRANSACTION_TYPES: tuple[str, ...] = ("Penjualan", "Pembelian")
PAYMENT_METHODS: tuple[str, ...] = ("Tunai", "Transfer", "Kredit")
EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Operasional",
    "Administrasi",
    "Penjualan",
    "Lainnya",
)

DEFAULT_CUSTOMER = "Pelanggan Umum"


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Product:
    """
    A product of the shop catalogue.

    Attributes
    ----------
    price:
        Selling price per unit.
    cost:
        Purchase cost per unit (used for COGS and inventory valuation).
    min_stock:
        Threshold below which the dashboard flags the product as low stock.
    """

    id: str
    name: str
    category: str
    price: float
    cost: float
    stock: int
    min_stock: int
    supplier: str | None = None


@dataclass(frozen=True)
class NewProduct:
    """Data required to create a product (the store assigns the id)."""

    name: str
    category: str
    price: float
    cost: float
    stock: int
    min_stock: int
    supplier: str | None = None


@dataclass(frozen=True)
class ProductUpdate:
    """
    Fields that can be updated on an existing product.

    Each attribute is optional. Only non-None values are applied.
    """

    name: str | None = None
    category: str | None = None
    price: float | None = None
    cost: float | None = None
    stock: int | None = None
    min_stock: int | None = None
    supplier: str | None = None


# ---------------------------------------------------------------------------
# Sales transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SaleItem:
    """One line of a transaction. `cost` is the unit cost at time of sale."""

    product_id: str
    product_name: str
    quantity: int
    price: float
    cost: float | None = None

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    customer: str
    type: TransactionType
    amount: float
    description: str
    status: Status
    items: tuple[SaleItem, ...] = ()
    payment_method: PaymentMethod | None = None
    cash_received: float | None = None
    change: float | None = None


@dataclass(frozen=True)
class NewTransaction:
    date: date
    customer: str
    type: TransactionType
    amount: float
    description: str
    status: Status
    items: tuple[SaleItem, ...] = ()
    payment_method: PaymentMethod | None = None
    cash_received: float | None = None
    change: float | None = None


# ---------------------------------------------------------------------------
# Purchases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PurchaseItem:
    product_id: str
    product_name: str
    quantity: int
    cost: float

    @property
    def subtotal(self) -> float:
        return self.cost * self.quantity


@dataclass(frozen=True)
class Purchase:
    id: str
    date: date
    supplier: str
    amount: float
    description: str
    status: Status
    items: tuple[PurchaseItem, ...] = ()
    payment_method: PaymentMethod | None = None


@dataclass(frozen=True)
class NewPurchase:
    date: date
    supplier: str
    amount: float
    description: str
    status: Status
    items: tuple[PurchaseItem, ...] = ()
    payment_method: PaymentMethod | None = None


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JournalLine:
    account: str
    amount: float


@dataclass(frozen=True)
class JournalEntry:
    """
    A journal entry made of one or more debit lines and credit lines.

    Entries are either typed in by the user ("Manual") or generated by the
    store when a sale, purchase or expense is recorded ("Automatic"). In the
    latter case `reference` holds the id of the originating record.
    """

    id: str
    date: date
    description: str
    reference: str
    debit: tuple[JournalLine, ...]
    credit: tuple[JournalLine, ...]
    type: JournalType

    @property
    def total_debit(self) -> float:
        return sum(line.amount for line in self.debit)

    @property
    def total_credit(self) -> float:
        return sum(line.amount for line in self.credit)

    @property
    def is_balanced(self) -> bool:
        return round(self.total_debit, 2) == round(self.total_credit, 2)


@dataclass(frozen=True)
class NewJournalEntry:
    date: date
    description: str
    reference: str
    debit: tuple[JournalLine, ...]
    credit: tuple[JournalLine, ...]
    type: JournalType


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Expense:
    id: str
    date: date
    description: str
    amount: float
    category: ExpenseCategory
    status: Status


@dataclass(frozen=True)
class NewExpense:
    date: date
    description: str
    amount: float
    category: ExpenseCategory
    status: Status


@dataclass
class IdSequence:
    """
    Per-prefix counters used to generate record identifiers.

    Identifiers look like ``TRX000001`` and are unique for the lifetime of
    the owning store.
    """

    width: int = 6
    counters: dict[str, int] = field(default_factory=dict)

    def next_id(self, prefix: str) -> str:
        value = self.counters.get(prefix, 0) + 1
        self.counters[prefix] = value
        return f"{prefix}{value:0{self.width}d}"
