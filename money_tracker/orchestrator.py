"""
Main Orchestrator for Money Tracker

This module ties together all the components and defines the
end-to-end flows for:
1. The ledger (load → add/delete entries → derived totals)
2. The session (sign in/up/out → subscription lifecycle)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing reaches the store without passing validation
- The in-memory lists change only after the store confirmed the write
- Totals and month groups are recomputed from the full lists on every read
- A fetch that finishes after a sign-out is thrown away
"""

from decimal import Decimal
from typing import Optional, Union

from money_tracker.activity import (
    ActivityLogger,
    configure_logging,
    create_correlation_id,
)
from money_tracker.config import get_settings
from money_tracker.engine import (
    category_breakdown,
    compute_totals,
    group_by_month,
    preview_allocation,
    sort_by_date_desc,
)
from money_tracker.models.entry import (
    Allocation,
    EntryCollection,
    ExpenseCategory,
    ExpenseEntry,
    IncomeClassification,
    IncomeEntry,
    SavingsTag,
)
from money_tracker.models.ledger import (
    CategoryTotal,
    DerivedTotals,
    MonthGroup,
    SubmitResult,
)
from money_tracker.services.auth import (
    AuthError,
    FirebaseSessionGateway,
    LocalSessionGateway,
    Session,
    SessionEvent,
    SessionGatewayInterface,
    Subscription,
)
from money_tracker.services.storage import (
    EntryStoreInterface,
    GoogleSheetsClient,
    GoogleSheetsEntryStore,
    InMemoryEntryStore,
    StorageError,
)
from money_tracker.validation import EntryValidator
from money_tracker.validation.validator import RawAmount, RawDate


NOT_SIGNED_IN_MESSAGE = "Please sign in first."


class LedgerFlow:
    """
    Owns the entry lists for one signed-in session.

    Flow:
    1. Load → fetch both collections once a session exists
    2. Add → validate → store insert → prepend to the list
    3. Delete → store delete → drop from the list
    4. Read → totals / month groups / breakdowns, recomputed from scratch

    On any store failure the lists stay exactly as they were.
    """

    def __init__(
        self,
        store: EntryStoreInterface,
        validator: Optional[EntryValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._store = store
        self._validator = validator or EntryValidator()
        self._activity = activity_logger or ActivityLogger()

        self._owner_id: Optional[str] = None
        self._incomes: list[IncomeEntry] = []
        self._expenses: list[ExpenseEntry] = []
        self._loaded = False

        # Bumped on every load and clear; a call resolving under an
        # older generation must not touch the lists.
        self._generation = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    @property
    def incomes(self) -> tuple[IncomeEntry, ...]:
        return tuple(self._incomes)

    @property
    def expenses(self) -> tuple[ExpenseEntry, ...]:
        return tuple(self._expenses)

    def is_loaded_for(self, session: Optional[Session]) -> bool:
        """True when the lists belong to this session's user."""
        return (
            session is not None
            and self._loaded
            and self._owner_id == session.user_id
        )

    def clear(self) -> None:
        """Discard everything held for the current session."""
        self._generation += 1
        self._owner_id = None
        self._incomes = []
        self._expenses = []
        self._loaded = False

    async def load(self, session: Optional[Session]) -> bool:
        """
        Fetch all entries for the session's user.

        Returns:
            True if the fetched lists were applied, False when there is
            no session or the result went stale while in flight

        Raises:
            StorageError: If the fetch fails (lists are left unchanged)
        """
        if session is None:
            return False

        self._generation += 1
        generation = self._generation
        correlation_id = create_correlation_id()

        try:
            incomes, expenses = await self._store.fetch_all(session.user_id)
        except StorageError as e:
            self._activity.log_gateway_failed(
                operation="fetch_all",
                error_message=str(e),
                user_id=session.user_id,
                correlation_id=correlation_id,
            )
            raise

        if generation != self._generation:
            self._activity.log_stale_load_discarded(session.user_id, correlation_id)
            return False

        self._owner_id = session.user_id
        self._incomes = list(incomes)
        self._expenses = list(expenses)
        self._loaded = True

        self._activity.log_entries_loaded(
            user_id=session.user_id,
            income_count=len(self._incomes),
            expense_count=len(self._expenses),
            correlation_id=correlation_id,
        )
        return True

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def add_income(
        self,
        amount: RawAmount,
        entry_date: RawDate,
        classification: IncomeClassification = IncomeClassification.REGULAR,
        savings_tag: SavingsTag = SavingsTag.INVESTMENT,
    ) -> SubmitResult:
        """
        Record an income and its allocation.

        The allocation is computed here, once, and stored with the entry.
        """
        if self._owner_id is None:
            return SubmitResult(ok=False, error_message=NOT_SIGNED_IN_MESSAGE)

        correlation_id = create_correlation_id()
        validation = self._validator.validate_income(
            amount=amount,
            entry_date=entry_date,
            classification=classification,
            savings_tag=savings_tag,
        )
        if not validation.is_valid:
            self._log_rejected("income", validation, correlation_id)
            return SubmitResult(ok=False, validation=validation)

        owner_id, generation = self._owner_id, self._generation
        try:
            entry = await self._store.insert_income(owner_id, validation.income_draft)
        except StorageError as e:
            self._activity.log_gateway_failed(
                operation="insert_income",
                error_message=str(e),
                user_id=owner_id,
                correlation_id=correlation_id,
            )
            return SubmitResult(
                ok=False,
                validation=validation,
                error_message="Could not save the income. Please try again.",
            )

        if generation == self._generation:
            self._incomes = [entry] + self._incomes

        self._activity.log_income_added(
            user_id=owner_id,
            entry_id=entry.id,
            amount=str(entry.amount),
            classification=entry.classification.value,
            correlation_id=correlation_id,
        )
        return SubmitResult(ok=True, entry=entry, validation=validation)

    async def add_expense(
        self,
        name: Optional[str],
        amount: RawAmount,
        entry_date: RawDate,
        category: ExpenseCategory = ExpenseCategory.GENERAL,
    ) -> SubmitResult:
        """Record an expense against the wants budget."""
        if self._owner_id is None:
            return SubmitResult(ok=False, error_message=NOT_SIGNED_IN_MESSAGE)

        correlation_id = create_correlation_id()
        validation = self._validator.validate_expense(
            name=name,
            amount=amount,
            entry_date=entry_date,
            category=category,
        )
        if not validation.is_valid:
            self._log_rejected("expense", validation, correlation_id)
            return SubmitResult(ok=False, validation=validation)

        owner_id, generation = self._owner_id, self._generation
        try:
            entry = await self._store.insert_expense(owner_id, validation.expense_draft)
        except StorageError as e:
            self._activity.log_gateway_failed(
                operation="insert_expense",
                error_message=str(e),
                user_id=owner_id,
                correlation_id=correlation_id,
            )
            return SubmitResult(
                ok=False,
                validation=validation,
                error_message="Could not save the expense. Please try again.",
            )

        if generation == self._generation:
            self._expenses = [entry] + self._expenses

        self._activity.log_expense_added(
            user_id=owner_id,
            entry_id=entry.id,
            amount=str(entry.amount),
            category=entry.category.value,
            correlation_id=correlation_id,
        )
        return SubmitResult(ok=True, entry=entry, validation=validation)

    async def delete_income(self, entry_id: str) -> SubmitResult:
        return await self._delete(EntryCollection.INCOME, entry_id)

    async def delete_expense(self, entry_id: str) -> SubmitResult:
        return await self._delete(EntryCollection.EXPENSES, entry_id)

    async def _delete(self, collection: EntryCollection, entry_id: str) -> SubmitResult:
        """Delete permanently; the list only changes once the store agrees."""
        if self._owner_id is None:
            return SubmitResult(ok=False, error_message=NOT_SIGNED_IN_MESSAGE)

        correlation_id = create_correlation_id()
        owner_id, generation = self._owner_id, self._generation

        try:
            deleted = await self._store.delete_entry(collection, owner_id, entry_id)
        except StorageError as e:
            self._activity.log_gateway_failed(
                operation=f"delete_{collection.value}",
                error_message=str(e),
                user_id=owner_id,
                correlation_id=correlation_id,
            )
            return SubmitResult(
                ok=False,
                error_message="Could not delete the entry. Please try again.",
            )

        if not deleted:
            self._activity.log_gateway_failed(
                operation=f"delete_{collection.value}",
                error_message=f"No stored entry {entry_id}",
                user_id=owner_id,
                correlation_id=correlation_id,
            )
            return SubmitResult(
                ok=False,
                error_message="That entry no longer exists. Reload to refresh the list.",
            )

        if generation == self._generation:
            if collection == EntryCollection.INCOME:
                self._incomes = [e for e in self._incomes if e.id != entry_id]
            else:
                self._expenses = [e for e in self._expenses if e.id != entry_id]

        self._activity.log_entry_deleted(
            user_id=owner_id,
            collection=collection.value,
            entry_id=entry_id,
            correlation_id=correlation_id,
        )
        return SubmitResult(ok=True)

    def _log_rejected(self, form: str, validation, correlation_id) -> None:
        self._activity.log_submission_rejected(
            user_id=self._owner_id,
            form=form,
            issues=[
                {"field": i.field, "type": i.issue_type, "message": i.message}
                for i in validation.issues
            ],
            correlation_id=correlation_id,
        )

    # -------------------------------------------------------------------------
    # Derived views (always from scratch)
    # -------------------------------------------------------------------------

    @property
    def totals(self) -> DerivedTotals:
        return compute_totals(self._incomes, self._expenses)

    @property
    def month_groups(self) -> list[MonthGroup]:
        return group_by_month(self._incomes, self._expenses)

    @property
    def category_breakdown(self) -> list[CategoryTotal]:
        return category_breakdown(self._expenses)

    @property
    def sorted_incomes(self) -> list[IncomeEntry]:
        return sort_by_date_desc(self._incomes)

    @property
    def sorted_expenses(self) -> list[ExpenseEntry]:
        return sort_by_date_desc(self._expenses)

    @staticmethod
    def preview(
        amount: Union[RawAmount, Decimal],
        classification: IncomeClassification = IncomeClassification.REGULAR,
    ) -> Optional[Allocation]:
        """Projected split for an amount still being typed."""
        return preview_allocation(amount, classification)


class SessionFlow:
    """
    Orchestrates the session lifecycle.

    The flow subscribes to the gateway on start() and unsubscribes on
    stop(). A sign-out, or a sign-in as a different user, clears the
    ledger so no entries survive into the next session.
    """

    def __init__(
        self,
        gateway: SessionGatewayInterface,
        ledger: LedgerFlow,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._gateway = gateway
        self._ledger = ledger
        self._activity = activity_logger or ActivityLogger()
        self._subscription: Optional[Subscription] = None

    @property
    def session(self) -> Optional[Session]:
        return self._gateway.current_session()

    @property
    def is_started(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> Optional[Session]:
        """Subscribe to session changes; returns the current session."""
        if not self.is_started:
            self._subscription = self._gateway.subscribe(self._on_session_change)
        return self.session

    def stop(self) -> None:
        """Unsubscribe from session changes."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_session_change(self, event: SessionEvent, session: Optional[Session]) -> None:
        if event == SessionEvent.SIGNED_OUT:
            self._ledger.clear()
        elif (
            event == SessionEvent.SIGNED_IN
            and session is not None
            and self._ledger.owner_id not in (None, session.user_id)
        ):
            self._ledger.clear()

    async def sign_in(self, email: str, password: str) -> tuple[Optional[Session], Optional[str]]:
        """
        Sign in.

        Returns:
            (session, None) on success, (None, message) on failure
        """
        try:
            session = await self._gateway.sign_in(email, password)
        except AuthError as e:
            self._activity.log_auth_failed(email, str(e))
            return None, str(e)

        self._activity.log_signed_in(session.user_id, session.email)
        return session, None

    async def sign_up(self, email: str, password: str) -> tuple[Optional[Session], Optional[str]]:
        """
        Create an account and sign in.

        Returns:
            (session, None) on success, (None, message) on failure
        """
        try:
            session = await self._gateway.sign_up(email, password)
        except AuthError as e:
            self._activity.log_auth_failed(email, str(e))
            return None, str(e)

        self._activity.log_signed_up(session.user_id, session.email)
        return session, None

    async def ensure_fresh(self) -> Optional[Session]:
        """
        Refresh an expired session before it is used.

        Returns the usable session, or None when there is none or the
        provider refused the refresh (the user is then signed out).
        """
        session = self.session
        if session is None or not session.is_expired():
            return session

        try:
            return await self._gateway.refresh()
        except AuthError as e:
            self._ledger.clear()
            self._activity.log_auth_failed(session.email, str(e))
            return None

    async def sign_out(self) -> None:
        user_id = self.session.user_id if self.session else None
        await self._gateway.sign_out()
        # Also clear when not started (no listener attached)
        self._ledger.clear()
        self._activity.log_signed_out(user_id)


def create_app_components(
    use_storage: bool = True,
) -> tuple[LedgerFlow, SessionFlow, EntryStoreInterface]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the hosted services (Google Sheets
                    and Firebase). Falls back to the in-memory store and
                    local accounts when False or when they are not configured.

    Returns:
        (ledger_flow, session_flow, entry_store)
    """
    settings = get_settings()
    configure_logging(settings.app.log_level)
    activity_logger = ActivityLogger()

    store: EntryStoreInterface
    gateway: SessionGatewayInterface

    if use_storage:
        try:
            store = GoogleSheetsEntryStore(GoogleSheetsClient(settings.google_sheets))
        except Exception as e:
            # Storage not configured - continue without it
            activity_logger.log_gateway_failed("configure_storage", str(e))
            store = InMemoryEntryStore()

        try:
            gateway = FirebaseSessionGateway(settings.firebase, settings.app)
        except Exception as e:
            activity_logger.log_gateway_failed("configure_auth", str(e))
            gateway = LocalSessionGateway()
    else:
        store = InMemoryEntryStore()
        gateway = LocalSessionGateway()

    ledger_flow = LedgerFlow(store=store, activity_logger=activity_logger)
    session_flow = SessionFlow(
        gateway=gateway,
        ledger=ledger_flow,
        activity_logger=activity_logger,
    )

    return ledger_flow, session_flow, store
