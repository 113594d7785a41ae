from decimal import Decimal

import pytest

from pos_mirror.errors import CartError
from pos_mirror.sessions.cart import Cart

COFFEE = {"id": 1, "name": "Coffee", "price": "2.50"}
TEA = {"id": 2, "name": "Tea", "price": "2.00", "stock": 1}


def test_add_then_increment_same_line():
    cart = Cart()
    cart.add(COFFEE)
    cart.add(COFFEE)
    assert len(cart) == 1
    assert cart.items[0].quantity == 2
    assert cart.items[0].to_wire() == {"id": 1, "name": "Coffee", "price": "2.50", "quantity": 2, "total": "5.00"}


def test_lines_keep_insertion_order():
    cart = Cart()
    cart.add(TEA)
    cart.add(COFFEE)
    assert [i.id for i in cart.items] == [2, 1]


def test_quantity_zero_removes_line():
    cart = Cart()
    cart.add(COFFEE)
    cart.update_quantity(1, 0)
    assert len(cart) == 0


def test_update_unknown_product_raises():
    with pytest.raises(CartError):
        Cart().update_quantity(99, 3)


def test_stock_limit_leaves_cart_unchanged():
    cart = Cart()
    cart.add(TEA)
    with pytest.raises(CartError):
        cart.add(TEA)
    with pytest.raises(CartError):
        cart.update_quantity(2, 5)
    assert cart.items[0].quantity == 1

    with pytest.raises(CartError):
        Cart().add({"id": 3, "name": "Scone", "price": "1.00", "stock": 0})


def test_snapshot_totals():
    cart = Cart()
    cart.add(COFFEE)
    cart.update_quantity(1, 2)
    cart.add(TEA)
    snap = cart.snapshot(Decimal("0.0825"))
    assert snap.subtotal == Decimal("7.00")
    # 7.00 * 0.0825 = 0.5775 -> 0.58
    assert snap.tax == Decimal("0.58")
    assert snap.total == Decimal("7.58")

    e = snap.to_envelope(order_number="ord_1")
    assert e.type == "cart_update"
    assert e.get("subtotal") == "7.00"
    assert e.get("tax") == "0.58"
    assert e.get("total") == "7.58"
    assert e.get("orderNumber") == "ord_1"
    assert "restoreCartDisplay" not in e.fields


def test_snapshot_is_independent_of_later_mutations():
    cart = Cart()
    cart.add(COFFEE)
    snap = cart.snapshot(Decimal("0"))
    cart.update_quantity(1, 5)
    assert snap.items[0]["quantity"] == 1
