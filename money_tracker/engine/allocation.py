"""
Allocation Engine

Splits one income amount into tithe, wants and savings.

RULES:
- Regular income: 10% tithe, the remaining 90% halved between wants and
  savings. Each figure is rounded to cents on its own; the sum may miss
  the amount by one cent and that leftover is NOT pushed into any bucket.
- Supplemental income: everything goes to wants, unrounded.

The engine is pure. Callers validate the amount first; a bad amount
reaching here is a programming error and raises AllocationError.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from money_tracker.models.entry import Allocation, IncomeClassification


TITHE_RATE = Decimal("0.10")
WANTS_SHARE = Decimal("0.5")
SAVINGS_SHARE = Decimal("0.5")

CENT = Decimal("0.01")
ZERO = Decimal("0")

# Largest amount a single entry may carry
MAX_AMOUNT = Decimal("999999999999.99")

Number = Union[Decimal, int, str]


class AllocationError(ValueError):
    """Allocation was asked to split an invalid amount."""
    pass


def round2(value: Decimal) -> Decimal:
    """Round to currency minor units (half-up)."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _to_decimal(amount: Number) -> Decimal:
    if isinstance(amount, bool) or isinstance(amount, float):
        # floats would drag binary noise into the split
        raise AllocationError(f"Amount must be a Decimal, int or str, got {type(amount).__name__}")
    try:
        value = Decimal(str(amount)) if not isinstance(amount, Decimal) else amount
    except InvalidOperation:
        raise AllocationError(f"Amount is not a number: {amount!r}")
    if not value.is_finite() or value <= 0:
        raise AllocationError(f"Amount must be positive, got {amount!r}")
    if value > MAX_AMOUNT:
        raise AllocationError(f"Amount must be at most {MAX_AMOUNT}, got {amount!r}")
    return value


def allocate(
    amount: Number,
    classification: IncomeClassification = IncomeClassification.REGULAR,
) -> Allocation:
    """
    Compute the tithe / wants / savings split for an income.

    Args:
        amount: Positive gross income
        classification: Regular or Supplemental

    Returns:
        The three-way Allocation

    Raises:
        AllocationError: If amount is not a positive number
    """
    value = _to_decimal(amount)

    if classification == IncomeClassification.SUPPLEMENTAL:
        return Allocation(tithe=ZERO, wants=value, savings=ZERO)

    after_tithe = value * (1 - TITHE_RATE)
    return Allocation(
        tithe=round2(value * TITHE_RATE),
        wants=round2(after_tithe * WANTS_SHARE),
        savings=round2(after_tithe * SAVINGS_SHARE),
    )


def preview_allocation(
    raw_amount: Optional[Union[Number, float]],
    classification: IncomeClassification = IncomeClassification.REGULAR,
) -> Optional[Allocation]:
    """
    Allocation for a form that is still being typed.

    Returns None instead of raising when the input is empty,
    unparsable, not positive or too large.
    """
    if raw_amount is None or raw_amount == "":
        return None
    try:
        value = Decimal(str(raw_amount).strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value <= 0 or value > MAX_AMOUNT:
        return None
    try:
        return allocate(value, classification)
    except (ArithmeticError, AllocationError):
        return None
