"""Spending analytics for the dashboard and analytics screens.

This module turns a flat list of transactions into the figures the screens
display: monthly totals, month-over-month change, per-category breakdowns,
trailing trends and budget insights. Everything here is a pure computation
over a snapshot; nothing is cached between calls and no input is mutated.

Calendar fields (year, month, day) are derived once from ``date`` in
``_prepare_data`` and every computation filters on those columns, so all
figures agree on which period a transaction belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

try:
    from .formatting import format_currency
    from .models import CATEGORIES, Category, Transaction, TransactionType
except ImportError:
    from formatting import format_currency
    from models import CATEGORIES, Category, Transaction, TransactionType

FRAME_COLUMNS = ['id', 'amount', 'category', 'description', 'date', 'type']

OVER_BUDGET_PERCENT = 100.0
APPROACHING_BUDGET_PERCENT = 80.0
TREND_CHANGE_PERCENT = 20.0
CONCENTRATION_BUDGET_PERCENT = 30.0

TREND_UNITS = ('month', 'day')


@dataclass(frozen=True)
class CategoryTotal:
    category: Category
    total: float


@dataclass(frozen=True)
class TrendPoint:
    label: str
    start: date
    amount: float


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    income: float
    expenses: float
    balance: float
    budget_used: float
    transaction_count: int


@dataclass(frozen=True)
class Insight:
    kind: str
    severity: str
    title: str
    message: str


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_over_month_delta(current: float, previous: float) -> float:
    """Percentage change versus the previous period; ``0`` when there is no baseline."""
    if previous > 0:
        return (current - previous) / previous * 100
    return 0.0


def budget_used_percent(spent: float, monthly_budget: Optional[float]) -> float:
    if not monthly_budget or monthly_budget <= 0:
        return 0.0
    return spent / monthly_budget * 100


def budget_band(used_percent: float) -> str:
    """Classify budget usage into ``over``, ``approaching`` or ``on-track``."""
    if used_percent > OVER_BUDGET_PERCENT:
        return 'over'
    if used_percent > APPROACHING_BUDGET_PERCENT:
        return 'approaching'
    return 'on-track'


def generate_insights(
    current_total: float,
    previous_total: float,
    monthly_budget: Optional[float],
    breakdown: Sequence[CategoryTotal],
) -> List[Insight]:
    """Generate up to three spending insights.

    Order is fixed: the budget band (only with a budget configured), then the
    month-over-month trend, then category concentration.
    """
    insights: List[Insight] = []
    has_budget = bool(monthly_budget) and monthly_budget > 0

    if has_budget:
        used = budget_used_percent(current_total, monthly_budget)
        band = budget_band(used)
        if band == 'over':
            insights.append(Insight(
                kind='over',
                severity='warning',
                title='Over Budget',
                message=f"You've exceeded your budget by {format_currency(current_total - monthly_budget)} this month.",
            ))
        elif band == 'approaching':
            insights.append(Insight(
                kind='approaching',
                severity='warning',
                title='Approaching Budget Limit',
                message=f"You've used {used:.0f}% of your monthly budget.",
            ))
        else:
            insights.append(Insight(
                kind='on-track',
                severity='success',
                title='On Track',
                message=f"You're doing great! Only {used:.0f}% of your budget used.",
            ))

    change = month_over_month_delta(current_total, previous_total)
    if change > TREND_CHANGE_PERCENT:
        insights.append(Insight(
            kind='spending-increased',
            severity='warning',
            title='Increased Spending',
            message=f"Your spending increased by {change:.1f}% compared to last month.",
        ))
    elif change < -TREND_CHANGE_PERCENT:
        insights.append(Insight(
            kind='savings',
            severity='success',
            title='Great Savings',
            message=f"Your spending decreased by {abs(change):.1f}% compared to last month!",
        ))

    if breakdown and has_budget:
        top = breakdown[0]
        share_of_budget = top.total / monthly_budget * 100
        if share_of_budget > CONCENTRATION_BUDGET_PERCENT:
            share_of_total = top.total / current_total * 100 if current_total > 0 else 0.0
            insights.append(Insight(
                kind='concentration',
                severity='info',
                title=f"High {top.category.name} Spending",
                message=(
                    f"{top.category.icon} {top.category.name} accounts for "
                    f"{share_of_total:.0f}% of your total spending."
                ),
            ))

    return insights


def transactions_to_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Flatten transaction records into a DataFrame with ``FRAME_COLUMNS``."""
    records = [txn.to_dict() for txn in transactions]
    if not records:
        return pd.DataFrame(columns=FRAME_COLUMNS)
    return pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)


class FinanceAnalytics:
    """Aggregations over a snapshot of transactions."""

    def __init__(self, transactions: Sequence[Transaction]):
        self.data = transactions_to_frame(transactions)
        self._prepare_data()

    def _prepare_data(self) -> None:
        """Normalise types and derive the calendar columns used for filtering."""
        self.data['date'] = pd.to_datetime(self.data['date'], errors='coerce')
        self.data['amount'] = pd.to_numeric(self.data['amount'], errors='coerce').fillna(0.0).astype(float)
        self.data['category'] = self.data['category'].fillna('').astype(str)
        self.data['type'] = self.data['type'].fillna('').astype(str).str.lower()

        self.data['Year'] = self.data['date'].dt.year
        self.data['Month'] = self.data['date'].dt.month
        self.data['Day'] = self.data['date'].dt.normalize()

    def _rows_of_type(self, txn_type: TransactionType, df: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        source = df if df is not None else self.data
        return source[source['type'] == TransactionType.parse(txn_type).value]

    def _month_rows(self, year: int, month: int) -> pd.DataFrame:
        return self.data[(self.data['Year'] == year) & (self.data['Month'] == month)]

    def period_total(self, year: int, month: int, txn_type: TransactionType = TransactionType.EXPENSE) -> float:
        """Sum of ``amount`` for one transaction type within a calendar month."""
        rows = self._rows_of_type(txn_type, self._month_rows(year, month))
        return float(rows['amount'].sum())

    def monthly_summary(self, year: int, month: int, monthly_budget: Optional[float] = None) -> MonthlySummary:
        income = self.period_total(year, month, TransactionType.INCOME)
        expenses = self.period_total(year, month, TransactionType.EXPENSE)
        return MonthlySummary(
            year=year,
            month=month,
            income=income,
            expenses=expenses,
            balance=income - expenses,
            budget_used=budget_used_percent(expenses, monthly_budget),
            transaction_count=len(self._month_rows(year, month)),
        )

    def month_over_month(self, year: int, month: int) -> Dict[str, float]:
        """Current vs previous month expense totals and their percentage change."""
        prev_year, prev_month = previous_month(year, month)
        current = self.period_total(year, month)
        previous = self.period_total(prev_year, prev_month)
        return {
            'current': current,
            'previous': previous,
            'delta': month_over_month_delta(current, previous),
        }

    def category_breakdown(
        self,
        year: int,
        month: int,
        txn_type: TransactionType = TransactionType.EXPENSE,
    ) -> List[CategoryTotal]:
        """Per-category totals for a month, largest first.

        Only the fixed categories are reported and only when their total is
        strictly positive. Equal totals keep the category enumeration order.
        """
        rows = self._rows_of_type(txn_type, self._month_rows(year, month))
        sums = rows.groupby('category')['amount'].sum()
        ordered = sums.reindex([cat.id for cat in CATEGORIES]).fillna(0.0)
        ordered = ordered[ordered > 0].sort_values(ascending=False, kind='stable')
        lookup = {cat.id: cat for cat in CATEGORIES}
        return [CategoryTotal(category=lookup[cat_id], total=float(total)) for cat_id, total in ordered.items()]

    def trailing_trend(self, reference: date, points: int = 6, unit: str = 'month') -> List[TrendPoint]:
        """Expense totals for ``points`` units ending at ``reference``, oldest first.

        ``unit='month'`` labels points with short month names (``Jan``);
        ``unit='day'`` labels them with short weekday names (``Mon``).
        """
        if unit not in TREND_UNITS:
            raise ValueError(f"Unsupported trend unit: {unit!r}")
        if points <= 0:
            return []

        expenses = self._rows_of_type(TransactionType.EXPENSE)
        trend: List[TrendPoint] = []

        if unit == 'month':
            anchor = pd.Period(reference, freq='M')
            by_month = expenses.groupby(['Year', 'Month'])['amount'].sum()
            for offset in range(points - 1, -1, -1):
                period = anchor - offset
                amount = by_month.get((period.year, period.month), 0.0)
                trend.append(TrendPoint(
                    label=period.strftime('%b'),
                    start=period.start_time.date(),
                    amount=float(amount),
                ))
        else:
            by_day = expenses.groupby('Day')['amount'].sum()
            for offset in range(points - 1, -1, -1):
                day = reference - timedelta(days=offset)
                amount = by_day.get(pd.Timestamp(day), 0.0)
                trend.append(TrendPoint(label=day.strftime('%a'), start=day, amount=float(amount)))

        return trend

    def insights(self, year: int, month: int, monthly_budget: Optional[float]) -> List[Insight]:
        comparison = self.month_over_month(year, month)
        return generate_insights(
            comparison['current'],
            comparison['previous'],
            monthly_budget,
            self.category_breakdown(year, month),
        )
