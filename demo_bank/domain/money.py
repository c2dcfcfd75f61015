"""Conversion between decimal amounts and integer cents"""

from decimal import Decimal, DecimalException, Inexact, localcontext
from typing import Union

from demo_bank.domain.exceptions import InvalidAmount

CENT = Decimal("0.01")
MAX_CENTS = 10**15  # well inside a signed 64-bit column
MAX_ADJUSTED_EXPONENT = 13  # largest amount below MAX_CENTS has 14 integer digits
MIN_ADJUSTED_EXPONENT = -2  # one cent

AmountLike = Union[Decimal, int, float, str]


def to_cents(amount: AmountLike) -> int:
    """
    Parse a client-supplied amount into a positive number of cents.

    Accepts Decimal, int, float or a numeric string. Floats go through their
    shortest repr so that 0.1 parses as ten cents.

    Raises:
        InvalidAmount: missing, non-numeric, non-finite, non-positive, too
            large, or finer than one cent
    """
    if amount is None or isinstance(amount, bool):
        raise InvalidAmount()

    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (DecimalException, ValueError):
        raise InvalidAmount("Amount must be a number")

    if not value.is_finite():
        raise InvalidAmount("Amount must be a finite number")
    if value <= 0:
        raise InvalidAmount()

    # Bound the exponent before any arithmetic so nothing can overflow or underflow
    if value.adjusted() > MAX_ADJUSTED_EXPONENT:
        raise InvalidAmount("Amount is too large")
    if value.adjusted() < MIN_ADJUSTED_EXPONENT:
        raise InvalidAmount("Amount cannot have more than two decimal places")

    try:
        with localcontext() as ctx:
            ctx.traps[Inexact] = True
            cents = value.scaleb(2)
    except DecimalException:
        raise InvalidAmount("Amount cannot have more than two decimal places")

    if cents != cents.to_integral_value():
        raise InvalidAmount("Amount cannot have more than two decimal places")
    if cents > MAX_CENTS:
        raise InvalidAmount("Amount is too large")

    result = int(cents)
    if result <= 0:
        raise InvalidAmount()
    return result


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-digit decimal amount"""
    return (Decimal(cents) / 100).quantize(CENT)
