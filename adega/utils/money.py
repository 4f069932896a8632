"""
Money helpers: all amounts are Decimal, rounded half-up to cents.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENTS = Decimal("0.01")

Number = Union[Decimal, int, str]


def to_money(value: Number) -> Decimal:
    """Quantize to 2 decimal places, half-up"""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def line_total(quantity: int, unit_price: Number) -> Decimal:
    """quantity x unit price, rounded to cents"""
    return to_money(Decimal(quantity) * Decimal(str(unit_price)))


def money_sum(values: Iterable[Number]) -> Decimal:
    total = Decimal("0")
    for value in values:
        total += Decimal(str(value))
    return to_money(total)
