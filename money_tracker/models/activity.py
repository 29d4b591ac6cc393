"""
Activity Models for Money Tracker

Every significant action (sign-in, entry added, gateway failure...)
becomes an ActivityEvent that is written to the structured log.

DESIGN DECISION: These events are operational logging only. They are
never persisted and never used to reconstruct entries; entries have no
edit history.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we log."""
    # Session
    SIGNED_IN = "signed_in"
    SIGNED_UP = "signed_up"
    SIGNED_OUT = "signed_out"
    AUTH_FAILED = "auth_failed"

    # Loading
    ENTRIES_LOADED = "entries_loaded"
    STALE_LOAD_DISCARDED = "stale_load_discarded"

    # Entries
    INCOME_ADDED = "income_added"
    EXPENSE_ADDED = "expense_added"
    ENTRY_DELETED = "entry_deleted"
    SUBMISSION_REJECTED = "submission_rejected"

    # Failures
    GATEWAY_FAILED = "gateway_failed"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityEvent(BaseModel):
    """A single logged action."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO

    # What the event is about
    user_id: Optional[str] = None
    entity_type: Optional[str] = Field(
        default=None,
        description="'income', 'expense' or 'session'"
    )
    entity_id: Optional[str] = None
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.income_added(user_id, entry_id, "1000.00")
    """

    @staticmethod
    def signed_in(user_id: str, email: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SIGNED_IN,
            user_id=user_id,
            entity_type="session",
            description="User signed in",
            details={"email": email},
        )

    @staticmethod
    def signed_up(user_id: str, email: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SIGNED_UP,
            user_id=user_id,
            entity_type="session",
            description="User signed up",
            details={"email": email},
        )

    @staticmethod
    def signed_out(user_id: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SIGNED_OUT,
            user_id=user_id,
            entity_type="session",
            description="User signed out",
        )

    @staticmethod
    def auth_failed(email: str, message: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.AUTH_FAILED,
            severity=ActivitySeverity.WARNING,
            entity_type="session",
            description="Authentication failed",
            details={"email": email},
            error_message=message,
        )

    @staticmethod
    def entries_loaded(
        user_id: str,
        income_count: int,
        expense_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ENTRIES_LOADED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Loaded {income_count} income and {expense_count} expense entries",
            details={
                "income_count": income_count,
                "expense_count": expense_count,
            },
        )

    @staticmethod
    def stale_load_discarded(
        user_id: Optional[str],
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.STALE_LOAD_DISCARDED,
            severity=ActivitySeverity.DEBUG,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Discarded a load that finished after the session changed",
        )

    @staticmethod
    def income_added(
        user_id: str,
        entry_id: str,
        amount: str,
        classification: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.INCOME_ADDED,
            user_id=user_id,
            entity_type="income",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"{classification} income added",
            details={"amount": amount, "classification": classification},
        )

    @staticmethod
    def expense_added(
        user_id: str,
        entry_id: str,
        amount: str,
        category: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.EXPENSE_ADDED,
            user_id=user_id,
            entity_type="expense",
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Expense added in {category}",
            details={"amount": amount, "category": category},
        )

    @staticmethod
    def entry_deleted(
        user_id: str,
        collection: str,
        entry_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.ENTRY_DELETED,
            user_id=user_id,
            entity_type=collection,
            entity_id=entry_id,
            correlation_id=correlation_id,
            description=f"Entry deleted from {collection}",
        )

    @staticmethod
    def submission_rejected(
        user_id: Optional[str],
        form: str,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SUBMISSION_REJECTED,
            severity=ActivitySeverity.DEBUG,
            user_id=user_id,
            entity_type=form,
            correlation_id=correlation_id,
            description=f"{form.title()} form rejected by validation",
            details={"issues": issues},
        )

    @staticmethod
    def gateway_failed(
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.GATEWAY_FAILED,
            severity=ActivitySeverity.ERROR,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Gateway call failed: {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
