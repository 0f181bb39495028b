"""Derived views over :class:`~financeflow.store.AppState` for the screens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Optional, Sequence, Tuple

try:
    from .analytics import (
        CategoryTotal,
        FinanceAnalytics,
        Insight,
        MonthlySummary,
        TrendPoint,
        budget_band,
    )
    from .models import Transaction, TransactionType
    from .store import AppState
except ImportError:
    from analytics import CategoryTotal, FinanceAnalytics, Insight, MonthlySummary, TrendPoint, budget_band
    from models import Transaction, TransactionType
    from store import AppState

RECENT_TRANSACTIONS = 5
DASHBOARD_TREND_DAYS = 7
ANALYTICS_TREND_MONTHS = 6


@dataclass(frozen=True)
class DashboardView:
    summary: MonthlySummary
    budget_band: Optional[str]
    breakdown: List[CategoryTotal]
    trend: List[TrendPoint]
    recent: List[Transaction]


@dataclass(frozen=True)
class AnalyticsView:
    current_total: float
    previous_total: float
    delta: float
    breakdown: List[CategoryTotal]
    trend: List[TrendPoint]
    insights: List[Insight]


@dataclass(frozen=True)
class TransactionListView:
    transactions: List[Transaction]
    expense_total: float


def monthly_budget(state: AppState) -> float:
    return state.user.monthly_budget if state.user else 0.0


def recent_transactions(transactions: Sequence[Transaction], limit: int = RECENT_TRANSACTIONS) -> List[Transaction]:
    ordered = sorted(transactions, key=lambda txn: txn.date, reverse=True)
    return ordered[:limit]


def select_dashboard(state: AppState, today: Optional[date] = None) -> DashboardView:
    today = today or date.today()
    analytics = FinanceAnalytics(state.transactions)
    budget = monthly_budget(state)
    summary = analytics.monthly_summary(today.year, today.month, budget)
    return DashboardView(
        summary=summary,
        budget_band=budget_band(summary.budget_used) if budget > 0 else None,
        breakdown=analytics.category_breakdown(today.year, today.month),
        trend=analytics.trailing_trend(today, points=DASHBOARD_TREND_DAYS, unit='day'),
        recent=recent_transactions(state.transactions),
    )


def select_analytics(state: AppState, today: Optional[date] = None) -> AnalyticsView:
    today = today or date.today()
    analytics = FinanceAnalytics(state.transactions)
    comparison = analytics.month_over_month(today.year, today.month)
    return AnalyticsView(
        current_total=comparison['current'],
        previous_total=comparison['previous'],
        delta=comparison['delta'],
        breakdown=analytics.category_breakdown(today.year, today.month),
        trend=analytics.trailing_trend(today, points=ANALYTICS_TREND_MONTHS, unit='month'),
        insights=analytics.insights(today.year, today.month, monthly_budget(state)),
    )


def filter_transactions(
    transactions: Sequence[Transaction],
    query: str = '',
    category: Optional[str] = None,
    txn_type: Optional[str] = None,
) -> TransactionListView:
    """Search by description, narrow by category and type, newest first.

    ``None`` or ``'all'`` disables the category and type filters.
    """
    needle = (query or '').strip().lower()
    wanted_category = None if category in (None, '', 'all') else category
    wanted_type = None if txn_type in (None, '', 'all') else TransactionType.parse(txn_type)

    matches = [
        txn for txn in transactions
        if needle in txn.description.lower()
        and (wanted_category is None or txn.category == wanted_category)
        and (wanted_type is None or txn.type is wanted_type)
    ]
    matches.sort(key=lambda txn: txn.date, reverse=True)
    expense_total = sum(txn.amount for txn in matches if txn.is_expense)
    return TransactionListView(transactions=matches, expense_total=float(expense_total))


def selected_categories(state: AppState) -> Tuple[str, ...]:
    return state.user.selected_categories if state.user else ()
