"""
Activity Logger

DESIGN DECISION: Every significant action in the ledger is logged as one
structured event. This gives:
1. Traceability of what the user did and what the store answered
2. Debugging capability for gateway failures that the UI only shows
   as a short message

The logger:
- Writes to the local structured log only (nothing is persisted)
- Never raises; a logging problem must not break a submit
- Supports correlation IDs to trace the events of one user action
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from money_tracker.models.activity import ActivityEvent, ActivityEventBuilder


def configure_logging(level: str = "INFO") -> None:
    """
    Configure stdlib logging and structlog for JSON output.

    Safe to call more than once; the last call wins.
    """
    logging.basicConfig(format="%(message)s", level=level.upper(), force=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class ActivityLogger:
    """Central activity logging service."""

    def __init__(self, logger_name: str = "money_tracker.activity"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: ActivityEvent) -> None:
        """Log an activity event at the level matching its severity."""
        log_dict = event.to_log_dict()
        severity = event.severity.value

        try:
            if severity == "error":
                self._logger.error("activity_event", **log_dict)
            elif severity == "warning":
                self._logger.warning("activity_event", **log_dict)
            elif severity == "debug":
                self._logger.debug("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).warning("Failed to write activity event: %s", e)

    def log_signed_in(self, user_id: str, email: str) -> None:
        self.log(ActivityEventBuilder.signed_in(user_id, email))

    def log_signed_up(self, user_id: str, email: str) -> None:
        self.log(ActivityEventBuilder.signed_up(user_id, email))

    def log_signed_out(self, user_id: Optional[str]) -> None:
        self.log(ActivityEventBuilder.signed_out(user_id))

    def log_auth_failed(self, email: str, message: str) -> None:
        self.log(ActivityEventBuilder.auth_failed(email, message))

    def log_entries_loaded(
        self,
        user_id: str,
        income_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.entries_loaded(
            user_id=user_id,
            income_count=income_count,
            expense_count=expense_count,
            correlation_id=correlation_id,
        ))

    def log_stale_load_discarded(
        self,
        user_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.stale_load_discarded(user_id, correlation_id))

    def log_income_added(
        self,
        user_id: str,
        entry_id: str,
        amount: str,
        classification: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.income_added(
            user_id=user_id,
            entry_id=entry_id,
            amount=amount,
            classification=classification,
            correlation_id=correlation_id,
        ))

    def log_expense_added(
        self,
        user_id: str,
        entry_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.expense_added(
            user_id=user_id,
            entry_id=entry_id,
            amount=amount,
            category=category,
            correlation_id=correlation_id,
        ))

    def log_entry_deleted(
        self,
        user_id: str,
        collection: str,
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.entry_deleted(
            user_id=user_id,
            collection=collection,
            entry_id=entry_id,
            correlation_id=correlation_id,
        ))

    def log_submission_rejected(
        self,
        user_id: Optional[str],
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.submission_rejected(
            user_id=user_id,
            form=form,
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_gateway_failed(
        self,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(ActivityEventBuilder.gateway_failed(
            operation=operation,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., an expense submit)
    and pass it through the calls that action makes.
    """
    return uuid4()
