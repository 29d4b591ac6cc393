"""Form validation package."""

from money_tracker.validation.validator import EntryValidator

__all__ = ["EntryValidator"]
