"""
Form State

Widget keys for the add-income and add-expense forms, and the values
they go back to once an entry is saved.

Streamlit refuses writes to a widget's key after the widget has been
drawn, so a successful save only marks the form; the reset is applied
at the top of the next run, before the inputs are created.
"""

from collections.abc import MutableMapping
from typing import Optional

from money_tracker.dates import local_today


INCOME_FORM = "income"
EXPENSE_FORM = "expense"

# Classification, savings tag and category are kept between entries
FORM_FIELDS = {
    INCOME_FORM: ("income_amount", "income_date"),
    EXPENSE_FORM: ("expense_name", "expense_amount", "expense_date"),
}


def _saved_flag(form: str) -> str:
    return f"{form}_form_saved"


def form_defaults(form: str) -> dict:
    """Blank values for a form's resettable inputs; dates default to today."""
    today = local_today()
    return {
        key: today if key.endswith("_date") else ""
        for key in FORM_FIELDS[form]
    }


def mark_saved(state: MutableMapping, form: str, message: str) -> None:
    """Record a successful save so the next run clears the form."""
    state[_saved_flag(form)] = message


def apply_pending_reset(state: MutableMapping, form: str) -> Optional[str]:
    """
    Clear a form marked by mark_saved.

    Returns the saved message so it can be shown once, or None when
    there was nothing to reset.
    """
    message = state.pop(_saved_flag(form), None)
    if message is None:
        return None
    state.update(form_defaults(form))
    return message
