"""
Streamlit Frontend for the Transaction Analyzer

Upload a bank transaction export and see where the money went,
per currency.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Clear error messages (the exact row and column that failed to decode)
3. Currencies are always shown separately, never summed together
4. No hidden actions: filters are visible next to the results
"""

import asyncio
from datetime import date
from pathlib import Path

import streamlit as st

from transaction_analyzer.audit import create_correlation_id
from transaction_analyzer.config import get_settings, validate_all_settings
from transaction_analyzer.exceptions import TransactionAnalyzerError
from transaction_analyzer.models.analysis import CurrencyAnalysis, TransactionAnalysisResult
from transaction_analyzer.orchestrator import AnalysisFlow, create_app_components
from transaction_analyzer.parsing import format_date, format_time
from transaction_analyzer.reader import TransactionWriter


# Page configuration
st.set_page_config(
    page_title="Transaction Analyzer",
    page_icon="💳",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AnalysisFlow:
    """Get or create application components (cached)."""
    return create_app_components()


def check_upload(uploaded_file) -> str:
    """
    Check an upload against the configured limits.

    Returns an error message, or "" when the file is acceptable.
    """
    settings = get_settings().app

    if uploaded_file.size > settings.max_upload_size_bytes:
        return f"File is too large. The limit is {settings.max_upload_size_mb} MB."

    extension = Path(uploaded_file.name).suffix.lstrip(".").lower()
    if extension not in settings.supported_formats_list:
        return (
            f"Unsupported file type '.{extension}'. "
            f"Please upload one of: {', '.join(settings.supported_formats_list)}"
        )

    if uploaded_file.type and uploaded_file.type.lower() not in settings.supported_mime_types_list:
        return f"Unsupported content type '{uploaded_file.type}'."

    return ""


def main():
    """Main application entry point."""
    flow = get_components()

    if "transactions" not in st.session_state:
        st.session_state.transactions = None
    if "source_name" not in st.session_state:
        st.session_state.source_name = None

    # Sidebar navigation
    st.sidebar.title("💳 Transaction Analyzer")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📤 Upload Export", "📊 Analysis", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Export your transactions as CSV from your bank
        2. Upload the file
        3. Pick a date range and view the analysis
        """
    )

    if page == "📤 Upload Export":
        render_upload_page(flow)
    elif page == "📊 Analysis":
        render_analysis_page(flow)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_upload_page(flow: AnalysisFlow):
    """Render the export upload page."""
    st.title("📤 Upload Export")
    st.markdown("Upload the CSV export of your bank transactions.")

    settings = get_settings().app
    uploaded_file = st.file_uploader(
        "Choose an export file",
        type=settings.supported_formats_list,
        help="The file must have the standard export header row",
    )

    if uploaded_file and st.button("🔍 Read File", type="primary"):
        error = check_upload(uploaded_file)
        if error:
            st.error(error)
            st.stop()

        with st.spinner("Reading transactions..."):
            try:
                transactions = run_async(
                    flow.read(uploaded_file, correlation_id=create_correlation_id())
                )
            except TransactionAnalyzerError as e:
                st.error(f"Could not read the file: {e}")
                st.stop()
            except Exception as e:
                st.error(f"Error: {str(e)}")
                st.stop()

        st.session_state.transactions = transactions
        st.session_state.source_name = uploaded_file.name
        st.success(
            f"✅ Read {len(transactions)} transactions from {uploaded_file.name}. "
            "Open the Analysis page to see the results."
        )

    if st.session_state.transactions is not None:
        st.caption(
            f"Loaded: {st.session_state.source_name} "
            f"({len(st.session_state.transactions)} transactions)"
        )


def render_analysis_page(flow: AnalysisFlow):
    """Render the analysis page."""
    st.title("📊 Analysis")

    transactions = st.session_state.transactions
    if transactions is None:
        st.info("📋 Upload an export first on the 'Upload Export' page.")
        return

    # Filters
    col1, col2, col3 = st.columns(3)

    with col1:
        ignore_internal = st.checkbox(
            "Ignore internal transfers",
            value=False,
            help="Exclude transfers between your own accounts",
        )

    with col2:
        date_from = st.date_input("From", value=None)

    with col3:
        date_to = st.date_input("To", value=None)

    try:
        result = run_async(
            flow.analyze(
                transactions,
                ignore_internal_transactions=ignore_internal,
                date_from=date_from,
                date_to=date_to,
                correlation_id=create_correlation_id(),
            )
        )
    except TransactionAnalyzerError as e:
        st.error(f"Analysis failed: {e}")
        return
    except Exception as e:
        st.error(f"Error: {str(e)}")
        return

    render_summary(result)

    if not result.currency_analyses:
        st.warning("No transactions match the selected filters.")
        return

    tabs = st.tabs([currency.value for currency in result.currencies])
    for tab, analysis in zip(tabs, result.currency_analyses.values()):
        with tab:
            render_currency_analysis(analysis)

    render_recent_transactions(result)


def render_summary(result: TransactionAnalysisResult):
    col1, col2, col3 = st.columns(3)
    col1.metric("Transactions in file", result.total_transaction_count)
    col2.metric("Transactions analyzed", result.filtered_transaction_count)
    col3.metric("Excluded by filters", result.excluded_transaction_count)


def render_currency_analysis(analysis: CurrencyAnalysis):
    """Render every aggregate of one currency."""
    code = analysis.currency.code

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Money in", f"{analysis.total_inflow:,.2f} {code}")
    col2.metric("Money out", f"{analysis.total_outflow:,.2f} {code}")
    col3.metric("Net", f"{analysis.net_amount:,.2f} {code}")
    col4.metric("Fees", f"{analysis.total_fees:,.2f} {code}")

    if analysis.best_income_month:
        st.markdown(
            f"**Average monthly income:** {analysis.average_monthly_income:,.2f} {code} · "
            f"**Best month:** {analysis.best_income_month.month_name} · "
            f"**Worst month:** {analysis.worst_income_month.month_name}"
        )

    if analysis.balance_history:
        st.subheader("Balance")
        st.line_chart(
            [
                {"time": point.timestamp, "balance": float(point.balance)}
                for point in analysis.balance_history
            ],
            x="time",
            y="balance",
        )

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Monthly")
        st.dataframe([
            {
                "Month": m.month_name,
                "Income": float(m.income),
                "Expenses": float(m.expenses),
                "Net": float(m.net_income),
                "Transactions": m.transaction_count,
            }
            for m in analysis.monthly_analyses
        ])
    with col2:
        st.subheader("Yearly")
        st.dataframe([
            {
                "Year": y.year,
                "Income": float(y.income),
                "Expenses": float(y.expenses),
                "Net": float(y.net_income),
                "Transactions": y.transaction_count,
            }
            for y in analysis.yearly_analyses
        ])

    if analysis.income_trends:
        st.subheader("Income trend")
        for trend in analysis.income_trends:
            st.markdown(
                f"{trend.previous_month.month_name} → {trend.current_month.month_name}: "
                f"{trend.change:+,.2f} {code} ({trend.change_percent:+.1f}%)"
            )

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Transaction types")
        st.dataframe([
            {
                "Type": t.transaction_type,
                "Count": t.count,
                "Total": float(t.total_amount),
                "Average": float(t.average_amount),
                "Largest": float(t.largest_amount),
            }
            for t in analysis.transaction_type_analyses
        ])
    with col2:
        st.subheader("Statuses")
        st.dataframe([
            {"Status": s.status, "Count": s.count}
            for s in analysis.status_analyses
        ])

    st.subheader("Counterparties")
    st.dataframe([
        {
            "Counterparty": c.counterparty,
            "Transactions": c.transaction_count,
            "Sent": float(c.amount_sent),
            "Received": float(c.amount_received),
            "Net": float(c.net_amount),
        }
        for c in analysis.top_counterparties
    ])

    with st.expander("Counterparties by transaction type"):
        for transaction_type, counterparties in analysis.counterparties_by_transaction_type.items():
            st.markdown(f"**{transaction_type or '(no type)'}**")
            st.dataframe([
                {"Counterparty": c.counterparty, "Count": c.count, "Total": float(c.total_amount)}
                for c in counterparties
            ])

    with st.expander("Largest transactions"):
        for t in analysis.largest_transactions:
            st.markdown(
                f"- {format_date(t.date)} · {t.counterparty or t.transaction_type} · "
                f"{t.amount.to_display_string()}"
            )
        for t in analysis.largest_transactions_by_type:
            if t.largest_transaction is not None:
                st.markdown(
                    f"- Largest {t.transaction_type}: "
                    f"{t.largest_transaction.amount.to_display_string()}"
                )


def render_recent_transactions(result: TransactionAnalysisResult):
    st.subheader("Recent transactions")
    st.dataframe([
        {
            "Date": format_date(t.date),
            "Time": format_time(t.time),
            "Counterparty": t.counterparty,
            "Type": t.transaction_type,
            "Amount": str(t.amount),
            "Status": t.status,
        }
        for t in result.recent_transactions
    ])

    transactions = st.session_state.transactions
    in_range = [
        t for t in transactions
        if result.date_from <= t.date <= result.date_to
    ]
    st.download_button(
        "⬇️ Download transactions in range (CSV)",
        data=TransactionWriter().to_bytes(in_range),
        file_name=f"transactions_{date.today().isoformat()}.csv",
        mime="text/csv",
    )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("CSV Reader", "reader"),
        ("Analysis", "analysis"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Invalid configuration")
            st.error(f"❌ {name} - {error}")

    settings = get_settings()
    st.markdown("---")
    st.markdown("### Current Values")
    st.json({
        "reader": settings.reader.model_dump(),
        "analysis": settings.analysis.model_dump(),
        "app": settings.app.model_dump(),
    })
    st.markdown(
        "Settings are read from environment variables and a `.env` file "
        "(prefixes `READER_` and `ANALYSIS_`)."
    )


if __name__ == "__main__":
    main()
