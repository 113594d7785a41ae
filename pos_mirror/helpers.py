from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def timestamp() -> str:
    return utcnow().isoformat()


def to_decimal(value: Union[str, int, float, Decimal]) -> Decimal:
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value)


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def money(amount: Union[str, int, float, Decimal]) -> str:
    return f"{quantize(to_decimal(amount)):.2f}"
