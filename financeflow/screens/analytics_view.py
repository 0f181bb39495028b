"""Analytics screen: month-over-month comparison, category ranking, trend and insights."""

from __future__ import annotations

from datetime import date

import streamlit as st

from ..analytics import Insight
from ..formatting import format_currency, format_percent
from ..selectors import AnalyticsView, select_analytics
from ..session import SessionController
from ..visualization import create_category_donut, create_monthly_bar_chart
from .layout import render_empty_state

SEVERITY_ICONS = {'warning': "⚠️", 'success': "✅", 'info': "💡"}


def delta_label(delta: float) -> str:
    return f"{delta:+.1f}% vs last month"


def render_insight(insight: Insight) -> None:
    icon = SEVERITY_ICONS.get(insight.severity, "💡")
    body = f"**{insight.title}**  \n{insight.message}"
    if insight.severity == 'warning':
        st.warning(body, icon=icon)
    elif insight.severity == 'success':
        st.success(body, icon=icon)
    else:
        st.info(body, icon=icon)


def render(controller: SessionController) -> None:
    """Render the Analytics screen."""
    state = controller.state
    view = select_analytics(state, date.today())

    st.title("Analytics")
    st.markdown("Deep dive into your spending patterns")

    col1, col2, col3 = st.columns(3)
    with col1:
        # Spending growth is shown in red.
        st.metric(
            "This Month",
            format_currency(view.current_total),
            delta=delta_label(view.delta),
            delta_color="inverse",
        )
    with col2:
        st.metric("Last Month", format_currency(view.previous_total))
    with col3:
        st.metric("Categories Used", len(view.breakdown))

    st.divider()
    left, right = st.columns(2)
    with left:
        _render_category_ranking(view, state.theme)
    with right:
        st.subheader("📊 Monthly Comparison")
        st.plotly_chart(
            create_monthly_bar_chart(view.trend, title="Last 6 months", theme=state.theme),
            use_container_width=True,
        )

    st.divider()
    st.subheader("💡 Smart Insights")
    if not view.insights:
        st.caption("Keep adding transactions to unlock personalised insights.")
    for insight in view.insights:
        render_insight(insight)


def _render_category_ranking(view: AnalyticsView, theme: str) -> None:
    st.subheader("🥧 Category Breakdown")
    if not view.breakdown:
        render_empty_state("📊", "No data available", "Add some expenses to see category breakdown")
        return

    st.plotly_chart(create_category_donut(view.breakdown, title=None, theme=theme), use_container_width=True)
    for item in view.breakdown:
        share = item.total / view.current_total * 100 if view.current_total > 0 else 0.0
        name_col, amount_col = st.columns([3, 2])
        with name_col:
            st.markdown(f"{item.category.icon} {item.category.name}")
        with amount_col:
            st.markdown(f"**{format_currency(item.total)}** · {format_percent(share)}")
        st.progress(min(share, 100.0) / 100)
