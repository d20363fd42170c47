from decimal import Decimal
from typing import Union

Number = Union[Decimal, int, float, str]

ZERO = Decimal("0")


def as_decimal(value: Number) -> Decimal:
    """Convert to Decimal without inheriting binary float noise (0.1 -> Decimal('0.1'))."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)
