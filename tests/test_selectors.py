from datetime import date

from financeflow.models import Transaction, UserProfile
from financeflow.navigation import Screen
from financeflow.selectors import (
    filter_transactions,
    recent_transactions,
    select_analytics,
    select_dashboard,
    selected_categories,
)
from financeflow.store import AppState

TODAY = date(2024, 3, 15)


def txn(txn_id, amount, category, when, txn_type='expense', description='Item'):
    return Transaction(id=txn_id, amount=amount, category=category, description=description,
                       date=when, type=txn_type)


def sample_state(budget=1000):
    transactions = (
        txn('1', 300, 'food', date(2024, 3, 14), description='Grocery shopping'),
        txn('2', 5000, 'other', date(2024, 3, 10), 'income', 'Salary'),
        txn('3', 550, 'bills', date(2024, 3, 9), description='Electricity'),
        txn('4', 200, 'food', date(2024, 3, 2), description='Restaurant dinner'),
        txn('5', 100, 'transport', date(2024, 2, 20), description='Uber ride'),
        txn('6', 60, 'food', date(2024, 2, 1), description='Coffee'),
    )
    user = UserProfile(id='u1', name='Asha', email='asha@example.com', monthly_budget=budget,
                       selected_categories=('food', 'bills'), onboarding_complete=True)
    return AppState(screen=Screen.DASHBOARD, user=user, transactions=transactions)


def test_dashboard_view():
    view = select_dashboard(sample_state(), TODAY)
    assert view.summary.expenses == 1050
    assert view.summary.income == 5000
    assert view.budget_band == 'over'
    assert [item.category.id for item in view.breakdown] == ['bills', 'food']
    assert len(view.trend) == 7
    assert view.trend[-2].amount == 300
    assert [t.id for t in view.recent] == ['1', '2', '3', '4', '5']


def test_dashboard_without_budget_has_no_band():
    view = select_dashboard(sample_state(budget=0), TODAY)
    assert view.budget_band is None


def test_analytics_view():
    view = select_analytics(sample_state(), TODAY)
    assert view.current_total == 1050
    assert view.previous_total == 160
    assert view.delta > 20
    assert len(view.trend) == 6
    assert [i.kind for i in view.insights] == ['over', 'spending-increased', 'concentration']


def test_filter_by_search_is_case_insensitive():
    view = filter_transactions(sample_state().transactions, query='DINNER')
    assert [t.id for t in view.transactions] == ['4']
    assert view.expense_total == 200


def test_filter_by_category_and_type():
    transactions = sample_state().transactions
    assert [t.id for t in filter_transactions(transactions, category='food').transactions] == ['1', '4', '6']
    income = filter_transactions(transactions, txn_type='income')
    assert [t.id for t in income.transactions] == ['2']
    assert income.expense_total == 0


def test_all_disables_filters():
    transactions = sample_state().transactions
    view = filter_transactions(transactions, '', 'all', 'all')
    assert len(view.transactions) == len(transactions)
    assert view.expense_total == 1210


def test_recent_transactions_limit():
    transactions = sample_state().transactions
    assert len(recent_transactions(transactions, limit=2)) == 2


def test_selected_categories():
    assert selected_categories(sample_state()) == ('food', 'bills')
    assert selected_categories(AppState()) == ()
