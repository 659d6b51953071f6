"""
Streamlit Frontend for PocketLedger

This is the user interface people use day to day to track money in,
money out, and how close each category is to its budget.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before anything destructive
3. Clear error messages in simple language
4. Visual feedback for all operations
5. No hidden actions

The UI never touches account state directly. Every action goes through
FinanceService, and every LedgerError is shown using its user_message.
"""

from datetime import date

import streamlit as st

from pocketledger.audit import configure_logging
from pocketledger.budgets import NO_LIMIT
from pocketledger.config import get_settings, validate_all_settings
from pocketledger.exceptions import LedgerError, UnconfirmedBudgetEditError
from pocketledger.models.alert import AlertKind
from pocketledger.models.record import RecordKind
from pocketledger.orchestrator import FinanceService, create_finance_service
from pocketledger.queries import QUICK_PERIODS


# Page configuration
st.set_page_config(
    page_title="PocketLedger",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .error-box {
        padding: 20px;
        background-color: #f8d7da;
        border-radius: 10px;
        border-left: 5px solid #dc3545;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)


ALERT_ICONS = {
    AlertKind.BUDGET_EXCEEDED: "🚨",
    AlertKind.OVERSPENDING: "🔥",
    AlertKind.LOW_BALANCE: "💸",
    AlertKind.BUDGET_WARNING: "⚠️",
}


def streamlit_notifier(alert) -> None:
    """Surface immediate alerts as toasts."""
    st.toast(f"{ALERT_ICONS.get(alert.kind, '🔔')} {alert.message}")


def get_service() -> FinanceService:
    """One FinanceService per browser session."""
    if "service" not in st.session_state:
        try:
            st.session_state.service = create_finance_service(
                use_storage=True, notifier=streamlit_notifier
            )
        except Exception as e:
            st.error(f"Failed to initialize storage: {e}")
            st.session_state.service = create_finance_service(
                use_storage=False, notifier=streamlit_notifier
            )
    return st.session_state.service


def show_error(error: LedgerError) -> None:
    st.markdown(f"""
    <div class="error-box">
        <p>{error.user_message}</p>
    </div>
    """, unsafe_allow_html=True)


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.log_level)
    service = get_service()

    st.sidebar.title("💰 PocketLedger")
    st.sidebar.markdown("---")

    if not service.session.is_authenticated:
        render_login_page(service)
        return

    account = service.current_account()
    st.sidebar.markdown(f"Logged in as **{account.account_id}**")

    banner = service.unread_banner()
    if banner:
        st.sidebar.warning(banner)

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "🏠 Overview",
            "➕ Add Record",
            "🎯 Budgets",
            "🏷️ Categories",
            "🔔 Alerts",
            "📊 Reports",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("🚪 Log out"):
        service.logout()
        st.rerun()

    if page == "🏠 Overview":
        render_overview_page(service)
    elif page == "➕ Add Record":
        render_record_page(service)
    elif page == "🎯 Budgets":
        render_budgets_page(service)
    elif page == "🏷️ Categories":
        render_categories_page(service)
    elif page == "🔔 Alerts":
        render_alerts_page(service)
    elif page == "📊 Reports":
        render_reports_page(service)
    elif page == "⚙️ Settings":
        render_settings_page(service)


def render_login_page(service: FinanceService):
    st.title("🔐 Log in")
    st.markdown("Enter your account id. A new account is created the first time.")

    account_id = st.text_input("Account id")
    if st.button("Log in", type="primary"):
        try:
            service.login(account_id)
            st.rerun()
        except ValueError as e:
            st.error(str(e))


def render_overview_page(service: FinanceService):
    st.title("🏠 Overview")
    overview = service.overview()

    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", f"{overview.balance:,.2f}")
    col2.metric("Total income", f"{overview.total_income:,.2f}")
    col3.metric("Total expense", f"{overview.total_expense:,.2f}")

    st.markdown("### Recent records")
    if not overview.recent_records:
        st.info("No records yet. Use 'Add Record' to get started.")
    for record in reversed(overview.recent_records):
        sign = "+" if record.kind == RecordKind.INCOME else "-"
        st.markdown(
            f"- {record.occurred_at.strftime('%d %b %Y %H:%M')} "
            f"**{record.category}** {sign}{record.amount:,.2f}"
        )


def render_record_page(service: FinanceService):
    st.title("➕ Add Record")

    kind = st.radio("Type", list(RecordKind), format_func=lambda k: k.value.title())
    category = st.text_input("Category")
    amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")

    if st.button("Save record", type="primary"):
        try:
            if kind == RecordKind.INCOME:
                record = service.record_income(amount, category)
            else:
                record = service.record_expense(amount, category)
            st.success(f"Recorded {record.kind.value} of {record.amount:,.2f} in {record.category}")
        except LedgerError as e:
            show_error(e)


def render_budgets_page(service: FinanceService):
    st.title("🎯 Budgets")

    statuses = service.reports().budget_status()
    if statuses:
        for status in statuses:
            st.markdown(f"**{status.category}**: spent {status.spent:,.2f} of {status.limit:,.2f}")
            st.progress(min(status.usage_ratio, 1.0))
            if status.over_budget:
                st.error(f"Over budget by {-status.remaining:,.2f}")
    else:
        st.info("No budgets set.")

    st.markdown("---")
    st.markdown("### Set or change a budget")
    category = st.text_input("Budget category")
    limit = st.number_input("Limit", min_value=0.0, step=1.0, format="%.2f")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("Set budget", type="primary"):
            try:
                service.set_budget(category, limit)
                st.rerun()
            except LedgerError as e:
                show_error(e)
    with col2:
        if st.button("Edit budget"):
            st.session_state.pending_edit = None
            try:
                service.edit_budget(category, limit)
                st.rerun()
            except UnconfirmedBudgetEditError as e:
                st.session_state.pending_edit = (category, limit)
                show_error(e)
            except LedgerError as e:
                show_error(e)
    with col3:
        if st.button("Remove budget"):
            try:
                service.remove_budget(category)
                st.rerun()
            except LedgerError as e:
                show_error(e)

    pending = st.session_state.get("pending_edit")
    if pending and st.button(f"Yes, set {pending[0]} to {pending[1]:,.2f} anyway"):
        service.edit_budget(pending[0], pending[1], confirmed=True)
        st.session_state.pending_edit = None
        st.rerun()

    if category:
        remaining = service.remaining(category)
        if remaining is NO_LIMIT:
            st.caption(f"'{category.strip()}' has no budget.")
        else:
            st.caption(f"Remaining for '{category.strip()}': {remaining:,.2f}")


def render_categories_page(service: FinanceService):
    st.title("🏷️ Categories")

    for totals in service.reports().list_categories():
        st.markdown(
            f"- **{totals.category}**: income {totals.income:,.2f}, "
            f"expense {totals.expense:,.2f}"
        )

    st.markdown("### Rename")
    old = st.text_input("Current name")
    new = st.text_input("New name")
    if st.button("Rename"):
        try:
            result = service.rename_category(old, new)
            st.success(f"Renamed {result.renamed_records} record(s) to {result.new_category}")
        except LedgerError as e:
            show_error(e)

    st.markdown("### Merge")
    sources = st.text_input("Categories to merge (comma separated)")
    target = st.text_input("Merge into")
    if st.button("Merge"):
        try:
            result = service.merge_categories(sources.split(","), target)
            st.success(
                f"Merged {', '.join(result.merged_categories)} into {result.new_category}"
            )
            if result.not_found:
                st.warning(f"Not found: {', '.join(result.not_found)}")
        except LedgerError as e:
            show_error(e)


def render_alerts_page(service: FinanceService):
    st.title("🔔 Alerts")

    alerts = service.view_alerts()
    if not alerts:
        st.info("No alerts.")
    for alert in reversed(alerts):
        marker = "" if alert.read else "🆕 "
        st.markdown(
            f"{marker}{ALERT_ICONS.get(alert.kind, '🔔')} "
            f"{alert.created_at.strftime('%d %b %H:%M')} {alert.message}"
        )

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Check all alerts now"):
            created = service.check_all_alerts()
            st.info(f"{len(created)} new alert(s)")
    with col2:
        if st.button("Clear alerts"):
            service.clear_alerts()
            st.rerun()


def render_reports_page(service: FinanceService):
    st.title("📊 Reports")
    builder = service.reports()

    period = st.selectbox("Quick period", QUICK_PERIODS, index=QUICK_PERIODS.index("month"))
    report = builder.quick_report(period, today=date.today())

    if report.is_empty:
        st.info("No records in this period.")
    else:
        col1, col2, col3 = st.columns(3)
        col1.metric("Income", f"{report.total_income:,.2f}")
        col2.metric("Expense", f"{report.total_expense:,.2f}")
        col3.metric("Net", f"{report.net:,.2f}")
        st.bar_chart(report.expense_by_category)

    st.markdown("### Category summary")
    chosen = st.multiselect("Categories", service.current_account().all_categories())
    if chosen:
        summary = builder.category_summary(chosen)
        for totals in summary.found:
            st.markdown(
                f"- **{totals.category}**: income {totals.income:,.2f}, "
                f"expense {totals.expense:,.2f}"
            )
        if summary.not_found:
            st.warning(f"No records for: {', '.join(summary.not_found)}")


def render_settings_page(service: FinanceService):
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for key in ("alerts", "storage", "app"):
        if status.get(key, False):
            st.success(f"✅ {key.title()} settings loaded")
        else:
            st.error(f"❌ {key.title()} - {status.get(f'{key}_error', 'Invalid')}")

    st.markdown("### Data")
    st.caption(f"Accounts are stored in {get_settings().storage.data_dir}")
    col1, col2 = st.columns(2)
    with col1:
        if st.button("💾 Save now"):
            if service.save():
                st.success("Saved")
            else:
                st.error("Save failed. Check the logs.")
    with col2:
        if st.button("🗄️ Create backup"):
            location = service.create_backup()
            if location:
                st.success(f"Backup written to {location}")
            else:
                st.error("Backup failed. Check the logs.")


if __name__ == "__main__":
    main()
