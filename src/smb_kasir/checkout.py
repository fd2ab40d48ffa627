# SMB Kasir - Point-of-sale & bookkeeping for small businesses
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Cashier (Kasir) checkout flow.

A checkout goes through three steps:

1. build a `Cart` from catalogue products (stock-aware),
2. settle the payment with `settle_payment` (cash needs enough money and
   yields change; transfer and card payments carry no cash amounts),
3. call `checkout`, which records a paid "Penjualan" transaction through
   the store. The store decrements stock and books the sale journal entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .errors import PaymentError, RecordNotFoundError, StockError, ValidationError
from .models import (
    CASH,
    DEFAULT_CUSTOMER,
    PAID,
    PAYMENT_METHODS,
    SALE,
    NewTransaction,
    Product,
    SaleItem,
    Transaction,
)
from .periods import _today
from .store import AppStore

logger = logging.getLogger(__name__)

QUICK_CASH_AMOUNTS: list[tuple[str, float]] = [
    ("50rb", 50_000.0),
    ("100rb", 100_000.0),
    ("200rb", 200_000.0),
]


@dataclass
class CartLine:
    product: Product
    quantity: int

    @property
    def subtotal(self) -> float:
        return self.product.price * self.quantity


class Cart:
    """
    Shopping cart of the cashier screen.

    Lines are kept in insertion order. The stock of the product snapshot
    given to `add` bounds the quantity of its line.
    """

    def __init__(self) -> None:
        self._lines: dict[str, CartLine] = {}

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    def add(self, product: Product) -> CartLine:
        """
        Add one unit of `product`.

        Raises
        ------
        StockError
            If the product is out of stock, or if the cart already holds
            all of the available stock.
        """
        if product.stock <= 0:
            raise StockError(f"{product.name} is out of stock.")

        line = self._lines.get(product.id)
        if line is None:
            line = CartLine(product=product, quantity=1)
            self._lines[product.id] = line
            return line

        if line.quantity >= product.stock:
            raise StockError(
                f"Not enough stock for {product.name}: only {product.stock} available."
            )
        line.product = product
        line.quantity += 1
        return line

    def update_quantity(self, product_id: str, quantity: int) -> Optional[CartLine]:
        """
        Set the quantity of a line. A quantity <= 0 removes the line and
        returns None.

        Raises
        ------
        RecordNotFoundError
            If the product is not in the cart.
        StockError
            If `quantity` exceeds the available stock.
        """
        line = self._lines.get(product_id)
        if line is None:
            raise RecordNotFoundError(f"Product {product_id!r} is not in the cart.")
        if quantity <= 0:
            del self._lines[product_id]
            return None
        if quantity > line.product.stock:
            raise StockError(
                f"Not enough stock for {line.product.name}: "
                f"only {line.product.stock} available."
            )
        line.quantity = int(quantity)
        return line

    def remove(self, product_id: str) -> None:
        self._lines.pop(product_id, None)

    @property
    def total(self) -> float:
        return sum(line.subtotal for line in self._lines.values())

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def clear(self) -> None:
        self._lines.clear()


@dataclass(frozen=True)
class Payment:
    """Settled payment. Cash amounts are only set for cash payments."""

    method: str
    cash_received: Optional[float] = None
    change: Optional[float] = None


def settle_payment(
    total: float, method: str, cash_received: Optional[float] = None
) -> Payment:
    """
    Validate a payment for `total`.

    Cash ("Tunai") requires ``cash_received >= total`` and returns the
    change. Transfer and card ("Kredit") payments ignore `cash_received`.

    Raises
    ------
    PaymentError
        Unknown method, or cash missing or insufficient.
    """
    if method not in PAYMENT_METHODS:
        raise PaymentError(
            f"Unknown payment method {method!r}; expected one of: "
            f"{', '.join(PAYMENT_METHODS)}."
        )
    if method != CASH:
        return Payment(method=method)

    if cash_received is None or float(cash_received) < total:
        raise PaymentError("Insufficient cash received for the cart total.")
    cash = float(cash_received)
    return Payment(method=method, cash_received=cash, change=cash - total)


def quick_amounts(total: float) -> list[tuple[str, float]]:
    """Buttons of the cash input: exact amount ("Pas") then fixed notes."""
    return [("Pas", float(total))] + QUICK_CASH_AMOUNTS


def checkout(
    store: AppStore,
    cart: Cart,
    payment: Payment,
    on_date: Optional[date] = None,
    customer: str = DEFAULT_CUSTOMER,
) -> Transaction:
    """
    Turn the cart into a paid sale transaction and empty the cart.

    Each item carries the current catalogue cost of its product (the cost
    of the cart snapshot when the product has been deleted meanwhile).

    Raises
    ------
    ValidationError
        If the cart is empty.
    PaymentError
        If a cash payment does not cover the cart total.
    """
    if cart.is_empty():
        raise ValidationError("Cart is empty.")

    total = cart.total
    # The cart may have changed since the payment was settled.
    payment = settle_payment(total, payment.method, payment.cash_received)

    items = []
    for line in cart.lines:
        current = store.get_product(line.product.id)
        cost = current.cost if current is not None else line.product.cost
        items.append(
            SaleItem(
                product_id=line.product.id,
                product_name=line.product.name,
                quantity=line.quantity,
                price=line.product.price,
                cost=cost,
            )
        )

    description = ", ".join(f"{i.product_name} ({i.quantity})" for i in items)
    transaction = store.add_transaction(
        NewTransaction(
            date=on_date or _today(),
            customer=customer,
            type=SALE,
            amount=total,
            description=description,
            status=PAID,
            items=tuple(items),
            payment_method=payment.method,
            cash_received=payment.cash_received,
            change=payment.change,
        )
    )
    cart.clear()
    logger.info("Checkout %s completed (%d items)", transaction.id, len(items))
    return transaction
