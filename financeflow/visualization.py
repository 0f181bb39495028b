"""Plotly visualisation helpers for FinanceFlow.

Each function takes the plain results produced by
:mod:`financeflow.analytics` (category totals, trend points) and returns
a ``plotly.graph_objects.Figure`` the screens render with
``st.plotly_chart``. Empty inputs produce an empty figure titled
"No data to display" rather than raising.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

try:
    from .analytics import CategoryTotal, TrendPoint
    from .formatting import CURRENCY_SYMBOL
except ImportError:
    from analytics import CategoryTotal, TrendPoint
    from formatting import CURRENCY_SYMBOL

PRIMARY_COLOR = "#6C5CE7"
DARK_TEMPLATE = "plotly_dark"
LIGHT_TEMPLATE = "plotly_white"


def empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def _template(theme: str) -> str:
    return DARK_TEMPLATE if theme == 'dark' else LIGHT_TEMPLATE


def breakdown_frame(breakdown: Sequence[CategoryTotal]) -> pd.DataFrame:
    """Flatten category totals into a frame with one row per category."""
    return pd.DataFrame(
        [
            {
                "Category": item.category.name,
                "Icon": item.category.icon,
                "Color": item.category.color,
                "Amount": item.total,
            }
            for item in breakdown
        ],
        columns=["Category", "Icon", "Color", "Amount"],
    )


def create_category_donut(
    breakdown: Sequence[CategoryTotal],
    title: str | None = None,
    theme: str = 'light',
) -> go.Figure:
    """Donut chart of spending per category, coloured with each category's colour.

    Parameters
    ----------
    breakdown : sequence of CategoryTotal
        Totals as returned by ``FinanceAnalytics.category_breakdown``.
    title : str, optional
        Chart title.
    theme : str
        ``'light'`` or ``'dark'``.
    """
    if not breakdown:
        return empty_figure()
    df = breakdown_frame(breakdown)
    fig = px.pie(
        df,
        names="Category",
        values="Amount",
        hole=0.55,
        color="Category",
        color_discrete_map=dict(zip(df["Category"], df["Color"])),
    )
    fig.update_traces(
        textposition='inside',
        textinfo='percent',
        hovertemplate=f"%{{label}}: {CURRENCY_SYMBOL}%{{value:,.0f}}<extra></extra>",
    )
    fig.update_layout(title=title or "Spending by category", template=_template(theme))
    return fig


def create_trend_line_chart(
    trend: Sequence[TrendPoint],
    title: str | None = None,
    theme: str = 'light',
) -> go.Figure:
    """Line chart of expense totals over the trailing window, oldest point first."""
    if not trend:
        return empty_figure()
    df = pd.DataFrame({"Period": [p.label for p in trend], "Amount": [p.amount for p in trend]})
    fig = px.line(df, x="Period", y="Amount", markers=True)
    fig.update_traces(line_color=PRIMARY_COLOR)
    fig.update_layout(
        title=title or "Spending trend",
        xaxis_title=None,
        yaxis_title=f"Amount ({CURRENCY_SYMBOL})",
        template=_template(theme),
    )
    return fig


def create_monthly_bar_chart(
    trend: Sequence[TrendPoint],
    title: str | None = None,
    theme: str = 'light',
) -> go.Figure:
    """Bar chart comparing monthly expense totals."""
    if not trend:
        return empty_figure()
    df = pd.DataFrame({"Month": [p.label for p in trend], "Amount": [p.amount for p in trend]})
    fig = px.bar(df, x="Month", y="Amount")
    fig.update_traces(marker_color=PRIMARY_COLOR)
    fig.update_layout(
        title=title or "Monthly comparison",
        xaxis_title=None,
        yaxis_title=f"Amount ({CURRENCY_SYMBOL})",
        template=_template(theme),
    )
    return fig
