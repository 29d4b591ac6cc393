"""
Streamlit Frontend for Money Tracker

The display layer: sign-in form, dashboard, income and expense forms,
savings, monthly history and category breakdown.

DESIGN PRINCIPLES:
1. Every number on screen comes from the ledger's derived views,
   recomputed from the full entry lists on each rerun
2. A failed save or delete leaves the page as it was and says so
3. Validation problems are shown inline; nothing is sent to the store

Each browser session gets its own ledger and session flow, kept in
st.session_state and discarded with it.
"""

import asyncio

import streamlit as st

from money_tracker.config import get_settings, validate_all_settings
from money_tracker.dates import (
    format_currency,
    format_date,
    local_today,
    month_key,
)
from money_tracker.engine import category_breakdown, filter_by_month
from money_tracker.form_state import (
    EXPENSE_FORM,
    INCOME_FORM,
    apply_pending_reset,
    form_defaults,
    mark_saved,
)
from money_tracker.models.entry import (
    ExpenseCategory,
    IncomeClassification,
    SavingsTag,
)
from money_tracker.orchestrator import LedgerFlow, SessionFlow, create_app_components
from money_tracker.services.storage import StorageError


# Page configuration
st.set_page_config(
    page_title="Money Tracker",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .over-budget {
        padding: 12px 16px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
    .preview-box {
        padding: 12px 16px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components() -> tuple[LedgerFlow, SessionFlow]:
    """Get or create this browser session's flows."""
    if "components" not in st.session_state:
        ledger, session_flow, _ = create_app_components(use_storage=True)
        session_flow.start()
        st.session_state.components = (ledger, session_flow)
    return st.session_state.components


def money(amount) -> str:
    return format_currency(amount, get_settings().app.currency_symbol)


def show_result(result, success_message: str) -> None:
    """Inline feedback for an add/delete result."""
    if result.ok:
        st.success(success_message)
        return
    if result.validation is not None:
        for message in result.validation.error_messages:
            st.error(message)
    if result.error_message:
        st.error(result.error_message)


def prepare_form(form: str) -> None:
    """Clear a just-saved form and seed its inputs before they are drawn."""
    message = apply_pending_reset(st.session_state, form)
    for key, value in form_defaults(form).items():
        st.session_state.setdefault(key, value)
    if message:
        st.success(message)


def main():
    """Main application entry point."""
    ledger, session_flow = get_components()
    session = run_async(session_flow.ensure_fresh())

    if session is None:
        render_auth_page(session_flow)
        return

    if not ledger.is_loaded_for(session):
        with st.spinner("Connecting to cloud..."):
            try:
                run_async(ledger.load(session))
            except StorageError as e:
                st.error(f"Could not load your entries: {e}")
                if st.button("🔄 Retry"):
                    st.rerun()
                return

    # Sidebar navigation
    st.sidebar.title("💰 Money Tracker")
    st.sidebar.caption(session.email)
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "💵 Income",
            "🧾 Expenses",
            "📈 Savings",
            "🗓️ History",
            "🏷️ Categories",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Sign Out"):
        run_async(session_flow.sign_out())
        st.rerun()

    if page == "📊 Dashboard":
        render_dashboard_page(ledger)
    elif page == "💵 Income":
        render_income_page(ledger)
    elif page == "🧾 Expenses":
        render_expenses_page(ledger)
    elif page == "📈 Savings":
        render_savings_page(ledger)
    elif page == "🗓️ History":
        render_history_page(ledger)
    elif page == "🏷️ Categories":
        render_categories_page(ledger)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_auth_page(session_flow: SessionFlow):
    """Sign in / sign up form."""
    st.title("💰 Money Tracker")

    is_sign_up = st.toggle("Create a new account", value=False)

    with st.form("auth_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign Up" if is_sign_up else "Sign In", type="primary")

    if submitted:
        if not email or not password:
            st.error("Please enter your email and password")
            return
        with st.spinner("Signing in..."):
            if is_sign_up:
                session, error = run_async(session_flow.sign_up(email, password))
            else:
                session, error = run_async(session_flow.sign_in(email, password))
        if error:
            st.error(error)
        else:
            st.rerun()


def render_dashboard_page(ledger: LedgerFlow):
    """Metric cards and the most recent income entries."""
    st.title("📊 Dashboard")
    totals = ledger.totals

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("⛪ Total Tithe Given", money(totals.tithe))
        st.caption(f"{totals.income_count} entries · 10% of regular income")
    with col2:
        st.metric("💳 Wants Balance", money(totals.wants_balance))
        st.caption(f"of {money(totals.wants)} allocated")
    with col3:
        st.metric("📈 Total Savings", money(totals.savings))
        st.caption(
            f"Inv: {money(totals.savings_investment)} · "
            f"Em: {money(totals.savings_emergency)}"
        )
    with col4:
        st.metric("🧾 Total Spent", money(totals.spent))
        st.caption(f"{totals.expense_count} expenses")

    st.progress(
        totals.budget_used_pct / 100,
        text=f"{totals.budget_used_pct:.0f}% of wants budget used",
    )
    if totals.is_over_budget:
        render_over_budget(totals.wants_balance)

    st.markdown("---")
    st.subheader("Recent Income")
    limit = get_settings().app.recent_entries_limit
    incomes = ledger.sorted_incomes[:limit]
    if not incomes:
        st.info("💰 Enter your first salary on the Income page to begin.")
    for entry in incomes:
        render_income_row(ledger, entry, key_prefix="dash")


def render_over_budget(balance):
    st.markdown(f"""
    <div class="over-budget">
        ⚠️ Over budget by {money(abs(balance))}
    </div>
    """, unsafe_allow_html=True)


def render_income_row(ledger: LedgerFlow, entry, key_prefix: str, deletable: bool = True):
    col1, col2, col3 = st.columns([4, 4, 1])
    with col1:
        st.markdown(f"**{format_date(entry.date)}** · {entry.classification.value}")
        if entry.savings_tag != SavingsTag.NOT_APPLICABLE:
            st.caption(entry.savings_tag.value)
    with col2:
        st.markdown(
            f"{money(entry.amount)}  \n"
            f"Tithe {money(entry.tithe_amount)} · "
            f"Wants {money(entry.wants_amount)} · "
            f"Savings {money(entry.savings_amount)}"
        )
    with col3:
        if deletable and st.button("🗑️", key=f"{key_prefix}_del_income_{entry.id}"):
            result = run_async(ledger.delete_income(entry.id))
            if result.ok:
                st.rerun()
            show_result(result, "Deleted")


def render_income_page(ledger: LedgerFlow):
    """Income form with a live allocation preview."""
    st.title("💵 Income")
    prepare_form(INCOME_FORM)

    classification = st.radio(
        "Kind of income",
        options=list(IncomeClassification),
        format_func=lambda c: c.value,
        horizontal=True,
    )

    col1, col2 = st.columns(2)
    with col1:
        amount = st.text_input("Amount *", placeholder="0.00", key="income_amount")
    with col2:
        entry_date = st.date_input("Date *", key="income_date")

    if classification == IncomeClassification.REGULAR:
        savings_tag = st.radio(
            "Savings go to",
            options=[SavingsTag.INVESTMENT, SavingsTag.EMERGENCY],
            format_func=lambda t: t.value,
            horizontal=True,
        )
    else:
        savings_tag = SavingsTag.NOT_APPLICABLE

    preview = ledger.preview(amount, classification)
    if preview is not None:
        st.markdown(f"""
        <div class="preview-box">
            Tithe <b>{money(preview.tithe)}</b> ·
            Wants <b>{money(preview.wants)}</b> ·
            Savings <b>{money(preview.savings)}</b>
        </div>
        """, unsafe_allow_html=True)

    if st.button("➕ Add Income", type="primary"):
        result = run_async(ledger.add_income(
            amount=amount,
            entry_date=entry_date,
            classification=classification,
            savings_tag=savings_tag,
        ))
        if result.ok:
            mark_saved(st.session_state, INCOME_FORM, "Income saved")
            st.rerun()
        show_result(result, "Income saved")

    st.markdown("---")
    st.subheader("All Income")
    for entry in ledger.sorted_incomes:
        render_income_row(ledger, entry, key_prefix="income")


def render_expenses_page(ledger: LedgerFlow):
    """Expense form and transaction list."""
    st.title("🧾 Expenses")
    prepare_form(EXPENSE_FORM)
    totals = ledger.totals

    col1, col2 = st.columns(2)
    with col1:
        name = st.text_input("Expense name *", key="expense_name")
        category = st.selectbox(
            "Category",
            options=list(ExpenseCategory),
            format_func=lambda c: c.value,
        )
    with col2:
        amount = st.text_input("Amount *", placeholder="0.00", key="expense_amount")
        entry_date = st.date_input("Date *", key="expense_date")

    if st.button("➕ Add Expense", type="primary"):
        result = run_async(ledger.add_expense(
            name=name,
            amount=amount,
            entry_date=entry_date,
            category=category,
        ))
        if result.ok:
            mark_saved(st.session_state, EXPENSE_FORM, "Expense saved")
            st.rerun()
        show_result(result, "Expense saved")

    if totals.is_over_budget:
        render_over_budget(totals.wants_balance)

    st.markdown("---")
    st.subheader("Transactions")
    expenses = ledger.sorted_expenses
    if not expenses:
        st.info("💸 No expenses recorded yet")

    for entry in expenses:
        col1, col2, col3 = st.columns([5, 3, 1])
        with col1:
            st.markdown(f"**{entry.name}**")
            st.caption(f"{entry.category.value} · {format_date(entry.date)}")
        with col2:
            st.markdown(f"-{money(entry.amount)}")
        with col3:
            if st.button("🗑️", key=f"del_expense_{entry.id}"):
                result = run_async(ledger.delete_expense(entry.id))
                if result.ok:
                    st.rerun()
                show_result(result, "Deleted")


def render_savings_page(ledger: LedgerFlow):
    """Savings split and contributions."""
    st.title("📈 Savings")
    totals = ledger.totals

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("💎 Total Savings", money(totals.savings))
    with col2:
        st.metric("📊 Investments", money(totals.savings_investment))
        st.caption(f"{totals.investment_share_pct:.0f}% of savings")
    with col3:
        st.metric("🛡 Emergency", money(totals.savings_emergency))
        st.caption(f"{totals.emergency_share_pct:.0f}% of savings")

    st.markdown("---")
    st.subheader("Contributions")
    contributions = [e for e in ledger.sorted_incomes if e.savings_amount]
    if not contributions:
        st.info("🌱 No savings yet.")
    for entry in contributions:
        col1, col2 = st.columns([3, 1])
        with col1:
            st.markdown(f"**{format_date(entry.date)}**")
            st.caption(entry.savings_tag.value)
        with col2:
            st.markdown(f"+{money(entry.savings_amount)}")


def render_history_page(ledger: LedgerFlow):
    """Monthly breakdown, newest month first."""
    st.title("🗓️ History")

    groups = ledger.month_groups
    if not groups:
        st.info("Nothing recorded yet.")

    current = month_key(local_today())
    for group in groups:
        header = (
            f"{group.label} · income {money(group.income_total)} · "
            f"spent {money(group.spent_total)}"
        )
        with st.expander(header, expanded=group.key == current):
            st.markdown("**Entries**")
            if not group.incomes:
                st.caption("No income this month")
            for entry in sorted(group.incomes, key=lambda e: e.date, reverse=True):
                render_income_row(ledger, entry, key_prefix=f"hist_{group.key}", deletable=False)

            st.markdown("**Expenses**")
            if not group.expenses:
                st.caption("No expenses this month")
            for entry in sorted(group.expenses, key=lambda e: e.date, reverse=True):
                st.markdown(
                    f"{format_date(entry.date)} · {entry.name} "
                    f"({entry.category.value}) · -{money(entry.amount)}"
                )


def render_categories_page(ledger: LedgerFlow):
    """Spending per category, optionally for one month."""
    st.title("🏷️ Categories")

    months = [g.key for g in ledger.month_groups if g.expenses]
    selected = st.selectbox(
        "Month",
        options=[None] + months,
        format_func=lambda k: "All time" if k is None else k,
    )

    breakdown = category_breakdown(filter_by_month(ledger.expenses, selected))

    if not breakdown:
        st.info("No expenses to break down.")
        return

    for item in breakdown:
        st.progress(
            item.share_pct / 100,
            text=(
                f"{item.category.value}: {money(item.amount)} "
                f"({item.count} × · {item.share_pct:.0f}%)"
            ),
        )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Firebase (Sign-in)", "firebase"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file with your keys. "
        "See `.env.example` for the required variables. Without them, "
        "entries are kept in memory and accounts are local to this process."
    )


if __name__ == "__main__":
    main()
