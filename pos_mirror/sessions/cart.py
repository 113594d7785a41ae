from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .. import envelope as env
from ..envelope import Envelope
from ..errors import CartError
from ..helpers import money, quantize, timestamp, to_decimal


@dataclass
class CartItem:
    id: Any
    name: str
    price: Decimal
    quantity: int = 1
    stock: Optional[int] = None

    @property
    def total(self) -> Decimal:
        return quantize(self.price * self.quantity)

    def to_wire(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": money(self.price),
            "quantity": self.quantity,
            "total": money(self.total),
        }


@dataclass(frozen=True)
class CartSnapshot:
    """Complete cart state at one instant. Sent whole, never as a diff."""

    items: Tuple[Dict[str, Any], ...]
    subtotal: Decimal
    tax: Decimal
    total: Decimal

    def to_envelope(self, order_number: Optional[str] = None, restore: bool = False) -> Envelope:
        fields: Dict[str, Any] = {
            "cart": [dict(i) for i in self.items],
            "subtotal": money(self.subtotal),
            "tax": money(self.tax),
            "total": money(self.total),
            "timestamp": timestamp(),
        }
        if order_number:
            fields["orderNumber"] = order_number
        if restore:
            fields["restoreCartDisplay"] = True
        return env.make_envelope(env.CART_UPDATE, **fields)


class Cart:
    def __init__(self) -> None:
        self._lines: List[CartItem] = []

    @property
    def items(self) -> List[CartItem]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def find(self, product_id: Any) -> Optional[CartItem]:
        return next((line for line in self._lines if line.id == product_id), None)

    def add(self, product: Mapping[str, Any]) -> CartItem:
        """Add one unit of ``product`` (a mapping with id, name, price and optional stock)."""
        product_id = product["id"]
        stock = product.get("stock")
        if stock is not None and stock <= 0:
            raise CartError(f"{product['name']} is out of stock")

        line = self.find(product_id)
        if line is None:
            line = CartItem(
                id=product_id,
                name=str(product["name"]),
                price=to_decimal(product["price"]),
                quantity=1,
                stock=stock,
            )
            self._lines.append(line)
            return line

        if line.stock is not None and line.quantity >= line.stock:
            raise CartError(f"cannot add more {line.name}, only {line.stock} available")
        line.quantity += 1
        return line

    def update_quantity(self, product_id: Any, quantity: int) -> None:
        line = self.find(product_id)
        if line is None:
            raise CartError(f"product {product_id!r} is not in the cart")
        if quantity <= 0:
            self.remove(product_id)
            return
        if line.stock is not None and quantity > line.stock:
            raise CartError(f"cannot set quantity to {quantity}, only {line.stock} available")
        line.quantity = quantity

    def remove(self, product_id: Any) -> None:
        self._lines = [line for line in self._lines if line.id != product_id]

    def clear(self) -> None:
        self._lines = []

    def snapshot(self, tax_rate: Decimal) -> CartSnapshot:
        subtotal = sum((line.total for line in self._lines), Decimal("0"))
        tax = quantize(subtotal * tax_rate)
        return CartSnapshot(
            items=tuple(line.to_wire() for line in self._lines),
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
        )
