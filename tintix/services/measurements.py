from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]

SQUARE_INCHES_PER_SQFT = Decimal(144)
CENTS = Decimal("0.01")


def to_decimal(value: Optional[Number]) -> Decimal:
    """Coerce an optional numeric column value; unset counts as zero."""
    if value is None:
        return Decimal(0)
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def square_feet(length_inches: Optional[Number], width_inches: Optional[Number]) -> Optional[Decimal]:
    if length_inches is None or width_inches is None:
        return None
    return to_decimal(length_inches) * to_decimal(width_inches) / SQUARE_INCHES_PER_SQFT


def money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def round_half_up(value: Number, places: int = 0) -> Decimal:
    exp = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exp, rounding=ROUND_HALF_UP)
