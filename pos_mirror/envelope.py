import json
from typing import Any, Dict, Optional, Union

from .errors import EnvelopeError

PING = "ping"
PONG = "pong"
CART_UPDATE = "cart_update"
QR_PAYMENT = "qr_payment"
QR_PAYMENT_CANCELLED = "qr_payment_cancelled"
RESTORE_CART_DISPLAY = "restore_cart_display"
CUSTOMER_DISPLAY_CONNECTED = "customer_display_connected"
REGISTER_MACHINE = "register_machine"
STORE_INFO = "store_info"
ORDER_CREATED = "order_created"
PAYMENT_COMPLETED = "payment_completed"
POPUP_CLOSE = "popup_close"
PAYMENT_SUCCESS = "payment_success"

# Handled by the relay itself, never forwarded.
CONTROL_TAGS = frozenset({PING, PONG, CUSTOMER_DISPLAY_CONNECTED, REGISTER_MACHINE})

# Forwarded to every other open connection.
FANOUT_TAGS = frozenset({
    CART_UPDATE,
    QR_PAYMENT,
    QR_PAYMENT_CANCELLED,
    RESTORE_CART_DISPLAY,
    STORE_INFO,
    ORDER_CREATED,
    PAYMENT_COMPLETED,
    POPUP_CLOSE,
    PAYMENT_SUCCESS,
})

KNOWN_TAGS = CONTROL_TAGS | FANOUT_TAGS


class Envelope:
    """A tagged wire message. ``fields`` holds everything except ``type``."""

    __slots__ = ("type", "fields")

    def __init__(self, type: str, fields: Optional[Dict[str, Any]] = None):
        self.type = type
        self.fields = dict(fields or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **self.fields}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Envelope):
            return NotImplemented
        return self.type == other.type and self.fields == other.fields

    def __repr__(self) -> str:
        return f"Envelope({self.type!r}, {self.fields!r})"


def make_envelope(tag: str, **fields: Any) -> Envelope:
    if tag not in KNOWN_TAGS:
        raise EnvelopeError(f"unknown envelope type: {tag!r}")
    return Envelope(tag, fields)


def from_dict(data: Any) -> Envelope:
    if not isinstance(data, dict):
        raise EnvelopeError("envelope must be a JSON object")
    tag = data.get("type")
    if not isinstance(tag, str):
        raise EnvelopeError("envelope is missing a string 'type'")
    if tag not in KNOWN_TAGS:
        raise EnvelopeError(f"unknown envelope type: {tag!r}")
    fields = {k: v for k, v in data.items() if k != "type"}
    return Envelope(tag, fields)


def parse_envelope(raw: Union[str, bytes]) -> Envelope:
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise EnvelopeError(f"invalid JSON: {e}") from e
    return from_dict(data)
