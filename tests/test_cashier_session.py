from decimal import Decimal

import pytest

from pos_mirror import envelope as env
from pos_mirror.errors import CartError, OrderNotFound
from pos_mirror.sessions.cashier import CashierSession
from pos_mirror.sessions.display import DisplaySession, DisplayState

COFFEE = {"id": 1, "name": "Coffee", "price": "2.50"}
TEA = {"id": 2, "name": "Tea", "price": "2.00"}


def test_every_mutation_pushes_a_full_snapshot(sender):
    cashier = CashierSession(sender, tax_rate=Decimal("0"))
    cashier.add_item(COFFEE)
    cashier.add_item(TEA)
    cashier.update_quantity(1, 3)
    cashier.remove_item(2)

    assert sender.types() == ["cart_update"] * 4
    last = sender.sent[-1]
    assert last.get("cart") == [{"id": 1, "name": "Coffee", "price": "2.50", "quantity": 3, "total": "7.50"}]
    assert last.get("total") == "7.50"


def test_last_update_matches_final_cart_state(sender):
    cashier = CashierSession(sender)
    cashier.add_item(COFFEE)
    for q in (4, 1, 6, 2):
        cashier.update_quantity(1, q)
    cashier.add_item(TEA)
    cashier.clear_cart()
    cashier.add_item(TEA)

    expected = cashier.snapshot().to_envelope(order_number=cashier.active_order_id)
    last = sender.sent[-1]
    assert last.get("cart") == expected.get("cart")
    assert last.get("total") == expected.get("total")


def test_coffee_scenario_reaches_display(sender, scheduler):
    cashier = CashierSession(sender)
    display = DisplaySession(scheduler)

    cashier.add_item(COFFEE)
    cashier.update_quantity(1, 2)
    for e in sender.sent:
        display.handle(e)

    assert display.cart == [{"id": 1, "name": "Coffee", "price": "2.50", "quantity": 2, "total": "5.00"}]
    assert display.state is DisplayState.SHOWING_CART


def test_invalid_mutation_sends_nothing(sender):
    cashier = CashierSession(sender)
    with pytest.raises(CartError):
        cashier.update_quantity(42, 1)
    assert sender.sent == []


def test_only_active_order_is_mirrored(sender):
    cashier = CashierSession(sender)
    first = cashier.active_order_id
    cashier.add_item(COFFEE)

    second = cashier.create_order()
    assert cashier.active_order_id == second
    assert sender.sent[-1].get("cart") == []
    cashier.add_item(TEA)

    cashier.switch_order(first)
    assert [i["id"] for i in sender.sent[-1].get("cart")] == [1]
    assert sender.sent[-1].get("orderNumber") == first

    with pytest.raises(OrderNotFound):
        cashier.switch_order("ord_missing")


def test_removing_active_order_falls_back(sender):
    cashier = CashierSession(sender)
    first = cashier.active_order_id
    second = cashier.create_order()
    cashier.remove_order(second)
    assert cashier.active_order_id == first

    cashier.remove_order(first)
    assert cashier.order_ids() == [cashier.active_order_id]
    assert cashier.active_order_id not in (first, second)


def test_qr_payment_replaces_next_snapshot_without_clearing(sender):
    cashier = CashierSession(sender)
    cashier.add_item(COFFEE)
    sender.sent.clear()

    txn = cashier.start_qr_payment("https://qr.example/abc", 100000, "qr_code", "abc")

    assert txn == "abc"
    assert sender.types() == ["qr_payment"]
    qr = sender.sent[0]
    assert qr.get("amount") == 100000
    assert qr.get("transactionUuid") == "abc"
    assert len(cashier.cart) == 1


def test_qr_payment_can_clear_cart_explicitly(sender):
    cashier = CashierSession(sender)
    cashier.add_item(COFFEE)
    cashier.start_qr_payment("https://qr.example/x", Decimal("5.41"), clear_cart=True)
    assert len(cashier.cart) == 0
    assert sender.sent[-1].get("amount") == "5.41"


def test_cancel_sends_cancel_then_restoring_snapshot(sender):
    cashier = CashierSession(sender)
    cashier.cancel_qr_payment()
    assert sender.sent == []

    cashier.add_item(COFFEE)
    cashier.start_qr_payment("u", 10, transaction_uuid="abc")
    cashier.cancel_qr_payment()
    assert sender.types()[-2:] == ["qr_payment_cancelled", "cart_update"]
    assert sender.sent[-2].get("transactionUuid") == "abc"
    assert sender.sent[-1].get("restoreCartDisplay") is True
    assert [i["id"] for i in sender.sent[-1].get("cart")] == [1]
    assert cashier.pending_qr is None


def test_payment_success_clears_pending_qr(sender):
    cashier = CashierSession(sender)
    cashier.start_qr_payment("u", 10, transaction_uuid="abc")

    cashier.handle_envelope(env.make_envelope(env.PAYMENT_SUCCESS, transactionUuid="other"))
    assert cashier.pending_qr is not None

    cashier.handle_envelope(env.make_envelope(env.PAYMENT_SUCCESS, transactionUuid="abc"))
    assert cashier.pending_qr is None


def test_complete_payment_mirrors_the_cleared_cart(sender):
    cashier = CashierSession(sender)
    cashier.add_item(COFFEE)
    cashier.complete_payment()

    assert sender.types()[-2:] == ["payment_completed", "cart_update"]
    assert sender.sent[-2].get("orderId") == cashier.active_order_id
    assert sender.sent[-1].get("cart") == []
    assert sender.sent[-1].get("total") == "0.00"
    assert len(cashier.cart) == 0


# cashier wired straight into a display


def _deliver(sender, display):
    for e in sender.sent:
        display.handle(e)
    sender.sent.clear()


def test_display_settles_on_empty_cart_after_payment(sender, scheduler):
    cashier = CashierSession(sender)
    display = DisplaySession(scheduler, completed_clear_delay=3)

    cashier.add_item(COFFEE)
    cashier.complete_payment()
    _deliver(sender, display)

    # the paid cart stays up until the delay runs out
    assert display.state is DisplayState.SHOWING_CART
    scheduler.advance(3)
    assert display.state is DisplayState.IDLE
    assert display.cart == []


def test_next_sale_survives_the_previous_payment_clear(sender, scheduler):
    cashier = CashierSession(sender)
    display = DisplaySession(scheduler, completed_clear_delay=3)

    cashier.add_item(COFFEE)
    cashier.complete_payment()
    cashier.add_item(TEA)
    _deliver(sender, display)

    scheduler.advance(3)
    assert display.state is DisplayState.SHOWING_CART
    assert [i["id"] for i in display.cart] == [2]
    assert scheduler.pending() == []


def test_cancel_after_clearing_qr_shows_the_cashiers_cart(sender, scheduler):
    cashier = CashierSession(sender)
    display = DisplaySession(scheduler)

    cashier.add_item(COFFEE)
    cashier.start_qr_payment("https://qr.example/abc", 100000, transaction_uuid="abc", clear_cart=True)
    _deliver(sender, display)
    assert display.state is DisplayState.SHOWING_QR

    cashier.cancel_qr_payment()
    _deliver(sender, display)
    assert len(cashier.cart) == 0
    assert display.cart == []
    assert display.state is DisplayState.IDLE


def test_cancel_without_clearing_brings_the_cart_back(sender, scheduler):
    cashier = CashierSession(sender)
    display = DisplaySession(scheduler)

    cashier.add_item(COFFEE)
    cashier.start_qr_payment("https://qr.example/abc", 100000, transaction_uuid="abc")
    cashier.cancel_qr_payment()
    _deliver(sender, display)

    assert display.state is DisplayState.SHOWING_CART
    assert display.cart == cashier.snapshot().to_envelope().get("cart")
    assert scheduler.pending() == []
