from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Union

from pydantic import PlainSerializer

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Union[Decimal, int, float, str, None]) -> Decimal:
    """Coerce a database or user value to Decimal without going through float repr."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round2(value: Union[Decimal, int, float, str, None]) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


# Decimal internally, JSON number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]
