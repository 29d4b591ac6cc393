"""
Ledger Engine Package

Pure functions only: the allocation split for a new income and the
aggregates derived from the full entry lists.
"""

from money_tracker.engine.allocation import (
    MAX_AMOUNT,
    SAVINGS_SHARE,
    TITHE_RATE,
    WANTS_SHARE,
    AllocationError,
    allocate,
    preview_allocation,
    round2,
)
from money_tracker.engine.aggregation import (
    category_breakdown,
    compute_totals,
    filter_by_month,
    group_by_month,
    sort_by_date_desc,
)

__all__ = [
    # Allocation
    "MAX_AMOUNT",
    "SAVINGS_SHARE",
    "TITHE_RATE",
    "WANTS_SHARE",
    "AllocationError",
    "allocate",
    "preview_allocation",
    "round2",
    # Aggregation
    "category_breakdown",
    "compute_totals",
    "filter_by_month",
    "group_by_month",
    "sort_by_date_desc",
]
