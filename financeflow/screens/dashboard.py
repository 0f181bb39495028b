"""Dashboard screen: this month at a glance."""

from __future__ import annotations

from datetime import date

import streamlit as st

from ..formatting import format_currency, format_currency_with_sign, format_percent
from ..models import category_label, find_category
from ..navigation import Screen
from ..selectors import DashboardView, select_dashboard
from ..session import SessionController
from ..visualization import create_category_donut, create_trend_line_chart
from .layout import budget_progress_markup, render_empty_state, rerun
from .transactions import SHOW_ADD_KEY, render_add_transaction_panel

TOP_CATEGORIES = 5


def balance_caption(balance: float) -> str:
    return "📈 Healthy balance" if balance >= 0 else "📉 Over budget"


def render(controller: SessionController) -> None:
    """Render the Dashboard screen."""
    state = controller.state
    today = date.today()
    view = select_dashboard(state, today)

    header, action = st.columns([4, 1])
    with header:
        st.title(f"Welcome back, {state.user.name if state.user else ''}! 👋")
        st.markdown(f"Here's your financial overview for {today:%B %Y}")
    with action:
        if st.button("➕ Add Expense", type="primary", use_container_width=True):
            st.session_state[SHOW_ADD_KEY] = True

    render_add_transaction_panel(controller)

    _render_summary_cards(view)
    st.divider()

    left, right = st.columns(2)
    with left:
        _render_breakdown(controller, view, state.theme)
    with right:
        st.subheader("📈 Spending Trend")
        st.plotly_chart(
            create_trend_line_chart(view.trend, title="Last 7 days", theme=state.theme),
            use_container_width=True,
        )

    st.divider()
    _render_recent(controller, view)


def _render_summary_cards(view: DashboardView) -> None:
    summary = view.summary
    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("💰 Total Balance", format_currency(summary.balance))
        st.caption(balance_caption(summary.balance))

    with col2:
        st.metric("⬆️ Income", format_currency(summary.income))
        st.caption("This month")

    with col3:
        st.metric("⬇️ Expenses", format_currency(summary.expenses))
        if view.budget_band is not None:
            st.markdown(budget_progress_markup(summary.budget_used, view.budget_band), unsafe_allow_html=True)
            st.caption(f"{format_percent(summary.budget_used)} of monthly budget used")
        else:
            st.caption("No monthly budget set")


def _render_breakdown(controller: SessionController, view: DashboardView, theme: str) -> None:
    title_col, link_col = st.columns([4, 1])
    with title_col:
        st.subheader("🥧 Spending by Category")
    with link_col:
        if st.button("↗", key="open_analytics", help="Open analytics"):
            controller.navigate(Screen.ANALYTICS)
            rerun()

    if not view.breakdown:
        render_empty_state("🧾", "No expenses recorded yet", "Add your first expense to see category breakdown")
        return

    st.plotly_chart(create_category_donut(view.breakdown, title=None, theme=theme), use_container_width=True)
    for item in view.breakdown[:TOP_CATEGORIES]:
        name_col, amount_col = st.columns([3, 1])
        with name_col:
            st.markdown(f"{item.category.icon} {item.category.name}")
        with amount_col:
            st.markdown(f"**{format_currency(item.total)}**")


def _render_recent(controller: SessionController, view: DashboardView) -> None:
    title_col, link_col = st.columns([4, 1])
    with title_col:
        st.subheader("🧾 Recent Transactions")
    with link_col:
        if st.button("View All", key="view_all_transactions"):
            controller.navigate(Screen.EXPENSES)
            rerun()

    if not view.recent:
        render_empty_state("🧾", "No transactions yet", "Start tracking your expenses by adding your first transaction")
        return

    for txn in view.recent:
        category = find_category(txn.category)
        icon = category.icon if category else "❔"
        name = category.name if category else category_label(txn.category)
        col1, col2 = st.columns([4, 1])
        with col1:
            st.markdown(f"{icon} **{txn.description}**  \n<small>{name} · {txn.date:%d %b}</small>", unsafe_allow_html=True)
        with col2:
            st.markdown(f"**{format_currency_with_sign(txn.amount, txn.type.value)}**")
