from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable


MONEY_QUANTUM = Decimal('0.01')


def to_money(value: Decimal | int | str) -> Decimal:
    """Convert to a two-decimal Decimal. Floats are rejected to keep binary rounding out."""
    if isinstance(value, float):
        raise TypeError('Money must not be built from float')
    try:
        amount = Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f'Invalid money amount: {value!r}') from e
    if not amount.is_finite():
        raise ValueError(f'Invalid money amount: {value!r}')
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def sum_money(amounts: Iterable[Decimal]) -> Decimal:
    # Inputs are already two-decimal, so the sum is exact before quantizing
    return to_money(sum(amounts, Decimal('0')))
