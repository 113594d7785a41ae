import logging
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Protocol
from uuid import uuid4

from .. import envelope as env
from ..envelope import Envelope
from ..errors import OrderNotFound
from ..helpers import money, timestamp, to_decimal
from .cart import Cart, CartSnapshot

logger = logging.getLogger(__name__)


class Sender(Protocol):
    def send(self, envelope: Envelope) -> bool: ...


class PendingQR:
    __slots__ = ("transaction_uuid", "amount", "payment_method")

    def __init__(self, transaction_uuid: str, amount: Decimal, payment_method: str):
        self.transaction_uuid = transaction_uuid
        self.amount = amount
        self.payment_method = payment_method


class CashierSession:
    """Operator-side cart state, mirrored to the customer display.

    Several orders can be open at once; only the active one is mirrored.
    Every mutation pushes a complete ``cart_update`` snapshot through
    ``client`` without waiting for delivery.
    """

    def __init__(self, client: Sender, tax_rate: Decimal = Decimal("0.0825")):
        self.client = client
        self.tax_rate = tax_rate
        self.orders: Dict[str, Cart] = {}
        self.active_order_id = self.create_order(activate=False)
        self.pending_qr: Optional[PendingQR] = None
        self.last_sent: Optional[Envelope] = None

    @property
    def cart(self) -> Cart:
        return self.orders[self.active_order_id]

    def order_ids(self) -> List[str]:
        return list(self.orders)

    # orders

    def create_order(self, activate: bool = True) -> str:
        order_id = f"ord_{uuid4().hex[:8]}"
        self.orders[order_id] = Cart()
        if activate:
            self.switch_order(order_id)
        return order_id

    def switch_order(self, order_id: str) -> None:
        if order_id not in self.orders:
            raise OrderNotFound(order_id)
        self.active_order_id = order_id
        self.push_cart()

    def remove_order(self, order_id: str) -> None:
        if order_id not in self.orders:
            raise OrderNotFound(order_id)
        del self.orders[order_id]
        if order_id != self.active_order_id:
            return
        if self.orders:
            self.switch_order(next(iter(self.orders)))
        else:
            self.create_order()

    # cart mutations

    def add_item(self, product: Mapping[str, Any]) -> None:
        self.cart.add(product)
        self.push_cart()

    def update_quantity(self, product_id: Any, quantity: int) -> None:
        self.cart.update_quantity(product_id, quantity)
        self.push_cart()

    def remove_item(self, product_id: Any) -> None:
        self.cart.remove(product_id)
        self.push_cart()

    def clear_cart(self) -> None:
        self.cart.clear()
        self.push_cart()

    def snapshot(self) -> CartSnapshot:
        return self.cart.snapshot(self.tax_rate)

    def push_cart(self, restore: bool = False) -> None:
        self._send(self.snapshot().to_envelope(order_number=self.active_order_id, restore=restore))

    # payment

    def start_qr_payment(
        self,
        qr_code_url: str,
        amount: Any,
        payment_method: str = "qr_code",
        transaction_uuid: Optional[str] = None,
        clear_cart: bool = False,
    ) -> str:
        """Put a QR payment request on the display.

        Sent instead of the next cart snapshot. ``clear_cart`` empties the
        active cart locally first; it is never implied.
        """
        transaction_uuid = transaction_uuid or uuid4().hex
        if clear_cart:
            self.cart.clear()
        self.pending_qr = PendingQR(transaction_uuid, to_decimal(amount), payment_method)
        self._send(env.make_envelope(
            env.QR_PAYMENT,
            qrCodeUrl=qr_code_url,
            amount=amount if isinstance(amount, (int, float)) else money(amount),
            paymentMethod=payment_method,
            transactionUuid=transaction_uuid,
            timestamp=timestamp(),
        ))
        return transaction_uuid

    def cancel_qr_payment(self) -> None:
        if self.pending_qr is None:
            return
        txn = self.pending_qr.transaction_uuid
        self.pending_qr = None
        self._send(env.make_envelope(env.QR_PAYMENT_CANCELLED, transactionUuid=txn))
        # the display's stored cart may predate a clear_cart=True start
        self.push_cart(restore=True)

    def complete_payment(self, order_id: Optional[str] = None) -> None:
        order_id = order_id or self.active_order_id
        total = self.snapshot().total
        self.pending_qr = None
        self._send(env.make_envelope(env.PAYMENT_COMPLETED, orderId=order_id))
        self.cart.clear()
        # the display holds the paid cart until its completed-clear delay runs out
        self.push_cart()
        logger.info("order %s paid, total %s", order_id, money(total))

    def handle_envelope(self, e: Envelope) -> None:
        if e.type not in (env.PAYMENT_SUCCESS, env.POPUP_CLOSE) or self.pending_qr is None:
            return
        txn = e.get("transactionUuid")
        if txn and txn != self.pending_qr.transaction_uuid:
            return
        if e.type == env.POPUP_CLOSE and not e.get("success", True):
            return
        logger.info("payment confirmed for %s", self.pending_qr.transaction_uuid)
        self.pending_qr = None

    def _send(self, e: Envelope) -> None:
        self.last_sent = e
        self.client.send(e)
