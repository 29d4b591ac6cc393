"""
Calendar Date Helpers

DESIGN DECISION: Every date in the tracker is a calendar date, never an
instant. Strings are split into year/month/day and built into a
datetime.date directly. Nothing here goes through a timestamp or a
timezone, so an entry made just before local midnight can never slide
into the neighbouring day or month.
"""

from datetime import date
from decimal import Decimal
from typing import Union


def local_today() -> date:
    """Today's date on the local calendar (default for new forms)."""
    return date.today()


def parse_iso_date(value: Union[str, date]) -> date:
    """
    Parse a YYYY-MM-DD string into a calendar date.

    Raises ValueError for anything that is not a valid calendar date.
    """
    if isinstance(value, date):
        return value

    parts = value.strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Not a YYYY-MM-DD date: {value!r}")

    year, month, day = (int(p) for p in parts)
    return date(year, month, day)


def to_iso_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def month_key(value: Union[str, date]) -> str:
    """Zero-padded YYYY-MM key; sorts lexicographically in time order."""
    d = parse_iso_date(value)
    return f"{d.year:04d}-{d.month:02d}"


def month_key_label(key: str) -> str:
    """'2024-01' -> 'January 2024'."""
    year, month = key.split("-")
    return date(int(year), int(month), 1).strftime("%B %Y")


def format_date(value: Union[str, date]) -> str:
    """'2024-01-05' -> 'Jan 5, 2024'."""
    d = parse_iso_date(value)
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def format_month(value: Union[str, date]) -> str:
    """'2024-01-05' -> 'January 2024'."""
    return month_key_label(month_key(value))


def format_currency(amount: Union[Decimal, int, float, None], symbol: str = "$") -> str:
    """
    Format an amount with two decimals and thousands separators.

    None formats as zero. Negative amounts keep the sign in front
    of the symbol: -$12.00.
    """
    value = Decimal(str(amount)) if amount is not None else Decimal("0")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"
