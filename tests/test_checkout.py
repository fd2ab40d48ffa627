from datetime import date

import pytest

from smb_kasir.checkout import Cart, checkout, quick_amounts, settle_payment
from smb_kasir.errors import PaymentError, RecordNotFoundError, StockError, ValidationError
from smb_kasir.models import NewProduct, ProductUpdate
from smb_kasir.store import AppStore


def make_store() -> AppStore:
    store = AppStore()
    store.add_product(NewProduct("Indomie Goreng", "Makanan", 3500.0, 2800.0, 3, 5))
    store.add_product(NewProduct("Aqua 600ml", "Minuman", 4000.0, 3000.0, 20, 10))
    store.add_product(NewProduct("Gula 1kg", "Sembako", 16000.0, 14000.0, 0, 5))
    return store


def test_cart_add_accumulates_and_respects_stock():
    store = make_store()
    mie = store.products[0]
    cart = Cart()

    for _ in range(3):
        cart.add(mie)
    assert cart.lines[0].quantity == 3

    with pytest.raises(StockError):
        cart.add(mie)
    assert cart.total == pytest.approx(10500.0)


def test_cart_rejects_out_of_stock_product():
    store = make_store()
    with pytest.raises(StockError, match="out of stock"):
        Cart().add(store.products[2])


def test_update_quantity_bounds_and_removal():
    store = make_store()
    aqua = store.products[1]
    cart = Cart()
    cart.add(aqua)

    cart.update_quantity(aqua.id, 5)
    assert cart.item_count == 5

    with pytest.raises(StockError):
        cart.update_quantity(aqua.id, 21)

    assert cart.update_quantity(aqua.id, 0) is None
    assert cart.is_empty()

    with pytest.raises(RecordNotFoundError):
        cart.update_quantity(aqua.id, 1)


def test_remove_and_clear():
    store = make_store()
    cart = Cart()
    cart.add(store.products[0])
    cart.add(store.products[1])
    cart.remove(store.products[0].id)
    assert [line.product.name for line in cart.lines] == ["Aqua 600ml"]
    cart.clear()
    assert cart.is_empty()
    assert cart.total == 0


def test_settle_cash_payment_computes_change():
    payment = settle_payment(18500.0, "Tunai", 20000.0)
    assert payment.change == pytest.approx(1500.0)
    assert payment.cash_received == pytest.approx(20000.0)


def test_settle_cash_payment_insufficient_or_missing():
    with pytest.raises(PaymentError):
        settle_payment(18500.0, "Tunai", 10000.0)
    with pytest.raises(PaymentError):
        settle_payment(18500.0, "Tunai")


def test_settle_non_cash_payment_ignores_cash():
    payment = settle_payment(18500.0, "Transfer", 50000.0)
    assert payment.method == "Transfer"
    assert payment.cash_received is None
    assert payment.change is None

    with pytest.raises(PaymentError):
        settle_payment(100.0, "Bitcoin")


def test_quick_amounts():
    assert quick_amounts(18500.0) == [
        ("Pas", 18500.0),
        ("50rb", 50000.0),
        ("100rb", 100000.0),
        ("200rb", 200000.0),
    ]


def test_checkout_records_sale_and_clears_cart():
    store = make_store()
    mie, aqua = store.products[0], store.products[1]
    cart = Cart()
    cart.add(mie)
    cart.add(mie)
    cart.add(aqua)

    payment = settle_payment(cart.total, "Tunai", 20000.0)
    trx = checkout(store, cart, payment, on_date=date(2025, 5, 1))

    assert cart.is_empty()
    assert trx.type == "Penjualan"
    assert trx.status == "Lunas"
    assert trx.customer == "Pelanggan Umum"
    assert trx.amount == pytest.approx(11000.0)
    assert trx.change == pytest.approx(9000.0)
    assert trx.description == "Indomie Goreng (2), Aqua 600ml (1)"
    assert trx.items[0].cost == pytest.approx(2800.0)

    # Stock is decremented exactly once.
    assert store.get_product(mie.id).stock == 1
    assert store.get_product(aqua.id).stock == 19
    assert store.journal_entries[0].reference == trx.id


def test_checkout_uses_current_catalogue_cost():
    store = make_store()
    aqua = store.products[1]
    cart = Cart()
    cart.add(aqua)
    store.update_product(aqua.id, ProductUpdate(cost=3200.0))

    trx = checkout(store, cart, settle_payment(cart.total, "Kredit"))
    assert trx.items[0].cost == pytest.approx(3200.0)
    assert trx.payment_method == "Kredit"
    assert trx.cash_received is None


def test_checkout_empty_cart_is_rejected():
    store = make_store()
    with pytest.raises(ValidationError, match="Cart is empty"):
        checkout(store, Cart(), settle_payment(0.0, "Transfer"))
    assert store.transactions == []


def test_checkout_rechecks_cash_against_cart_total():
    store = make_store()
    cart = Cart()
    cart.add(store.products[1])
    payment = settle_payment(cart.total, "Tunai", 4000.0)
    cart.add(store.products[1])

    with pytest.raises(PaymentError):
        checkout(store, cart, payment)
    assert not cart.is_empty()


def test_checkout_recomputes_change_for_grown_cart():
    store = make_store()
    cart = Cart()
    cart.add(store.products[1])
    payment = settle_payment(cart.total, "Tunai", 50000.0)
    cart.add(store.products[1])

    transaction = checkout(store, cart, payment, on_date=date(2025, 5, 1))

    assert transaction.amount == pytest.approx(8000.0)
    assert transaction.cash_received == pytest.approx(50000.0)
    assert transaction.change == pytest.approx(42000.0)
