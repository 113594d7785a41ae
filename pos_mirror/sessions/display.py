"""Customer-facing display state.

The display shows one of three things: the welcome screen (``IDLE``), the
cashier's cart (``SHOWING_CART``) or a QR payment request (``SHOWING_QR``).
QR takes precedence: cart updates received while a QR is up are stored but
do not change what is shown unless they carry ``restoreCartDisplay``.
A QR left on screen is cleared after ``qr_timeout`` seconds.

After ``payment_completed`` the paid cart stays up for
``completed_clear_delay`` seconds. A non-empty cart or a new QR within that
window starts the next sale and cancels the pending clear.
"""
import enum
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from .. import envelope as env
from ..envelope import Envelope
from ..helpers import timestamp, to_decimal
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class DisplayState(enum.Enum):
    IDLE = "idle"
    SHOWING_CART = "showing_cart"
    SHOWING_QR = "showing_qr"


class QRPayment:
    __slots__ = ("qr_code_url", "amount", "payment_method", "transaction_uuid")

    def __init__(self, qr_code_url: str, amount: Any, payment_method: str, transaction_uuid: Optional[str]):
        self.qr_code_url = qr_code_url
        self.amount = amount
        self.payment_method = payment_method
        self.transaction_uuid = transaction_uuid

    @classmethod
    def from_envelope(cls, e: Envelope) -> "QRPayment":
        return cls(
            qr_code_url=e.get("qrCodeUrl", ""),
            amount=e.get("amount"),
            payment_method=e.get("paymentMethod", ""),
            transaction_uuid=e.get("transactionUuid"),
        )


def _amount(value: Any) -> Decimal:
    try:
        return to_decimal(value if value is not None else "0")
    except (ArithmeticError, TypeError, ValueError):
        return Decimal("0")


class DisplaySession:
    def __init__(self, scheduler: Scheduler, qr_timeout: float = 300.0, completed_clear_delay: float = 3.0):
        self.scheduler = scheduler
        self.qr_timeout = qr_timeout
        self.completed_clear_delay = completed_clear_delay

        self.state = DisplayState.IDLE
        self.cart: List[Dict[str, Any]] = []
        self.subtotal = Decimal("0")
        self.tax = Decimal("0")
        self.total = Decimal("0")
        self.qr: Optional[QRPayment] = None
        self.store_info: Optional[Dict[str, Any]] = None
        self.order_number: Optional[str] = None

        self._qr_timer: Optional[TimerHandle] = None
        self._clear_timer: Optional[TimerHandle] = None

    # transport hooks

    def on_connect(self, client: Any) -> None:
        client.send(env.make_envelope(env.CUSTOMER_DISPLAY_CONNECTED, timestamp=timestamp()))

    def on_disconnect(self) -> None:
        # nothing survives a reconnect; wait for the next snapshot
        self._reset()

    def close(self) -> None:
        self._cancel_qr_timer()
        self._cancel_clear_timer()

    # dispatch

    def handle(self, e: Envelope) -> None:
        handler = getattr(self, f"_on_{e.type}", None)
        if handler is None:
            logger.debug("display ignoring %s", e.type)
            return
        handler(e)

    def _on_cart_update(self, e: Envelope) -> None:
        cart = e.get("cart") or []
        cart = list(cart) if isinstance(cart, list) else []
        if self._clear_timer is not None:
            if not cart:
                # the paid order's own clear; the pending timer will apply it
                return
            self._cancel_clear_timer()
        self.cart = cart
        self.subtotal = _amount(e.get("subtotal"))
        self.tax = _amount(e.get("tax"))
        self.total = _amount(e.get("total"))
        if e.get("orderNumber"):
            self.order_number = e.get("orderNumber")

        if self.state is DisplayState.SHOWING_QR and not e.get("restoreCartDisplay"):
            return
        self._clear_qr()
        self._settle()

    def _on_qr_payment(self, e: Envelope) -> None:
        if self._clear_timer is not None:
            self._cancel_clear_timer()
            self._clear_cart()
            self.order_number = None
        self._clear_qr()
        self.qr = QRPayment.from_envelope(e)
        self.state = DisplayState.SHOWING_QR
        self._qr_timer = self.scheduler.call_later(self.qr_timeout, self._qr_timed_out)

    def _on_qr_payment_cancelled(self, e: Envelope) -> None:
        if not self._is_current_txn(e.get("transactionUuid")):
            return
        self._clear_qr()
        self._settle()

    def _on_restore_cart_display(self, e: Envelope) -> None:
        self._clear_qr()
        self._settle()

    def _on_popup_close(self, e: Envelope) -> None:
        self._close_paid_qr(e)

    def _on_payment_success(self, e: Envelope) -> None:
        self._close_paid_qr(e)

    def _on_order_created(self, e: Envelope) -> None:
        order = e.get("order") or {}
        if isinstance(order, dict) and order.get("orderNumber"):
            self.order_number = order["orderNumber"]
        if e.get("clearCart"):
            self._clear_cart()
            if self.state is not DisplayState.SHOWING_QR:
                self._settle()

    def _on_payment_completed(self, e: Envelope) -> None:
        self._cancel_clear_timer()
        self._clear_timer = self.scheduler.call_later(self.completed_clear_delay, self._completed)

    def _on_store_info(self, e: Envelope) -> None:
        info = e.get("storeInfo")
        if isinstance(info, dict):
            self.store_info = info

    # transitions

    def _close_paid_qr(self, e: Envelope) -> None:
        if self.qr is None or not self._is_current_txn(e.get("transactionUuid")):
            return
        self._clear_qr()
        self._settle()

    def _is_current_txn(self, transaction_uuid: Optional[str]) -> bool:
        if not transaction_uuid or self.qr is None:
            return True
        return transaction_uuid == self.qr.transaction_uuid

    def _settle(self) -> None:
        self.state = DisplayState.SHOWING_CART if self.cart else DisplayState.IDLE

    def _qr_timed_out(self) -> None:
        self._qr_timer = None
        if self.state is DisplayState.SHOWING_QR:
            logger.info("QR payment timed out, returning to idle")
            self.qr = None
            self.state = DisplayState.IDLE

    def _completed(self) -> None:
        self._clear_timer = None
        self._reset()

    def _clear_qr(self) -> None:
        self._cancel_qr_timer()
        self.qr = None

    def _clear_cart(self) -> None:
        self.cart = []
        self.subtotal = self.tax = self.total = Decimal("0")

    def _reset(self) -> None:
        self.close()
        self._clear_cart()
        self.qr = None
        self.order_number = None
        self.state = DisplayState.IDLE

    def _cancel_qr_timer(self) -> None:
        if self._qr_timer is not None:
            self._qr_timer.cancel()
            self._qr_timer = None

    def _cancel_clear_timer(self) -> None:
        if self._clear_timer is not None:
            self._clear_timer.cancel()
            self._clear_timer = None
