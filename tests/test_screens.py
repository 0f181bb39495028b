from datetime import date
from types import SimpleNamespace

import pytest

from financeflow import config
from financeflow.exceptions import BackendError
from financeflow.models import Transaction
from financeflow.navigation import MAIN_SCREENS, Screen
from financeflow.screens import SCREEN_RENDERERS, layout
from financeflow.screens.analytics_view import delta_label
from financeflow.screens.dashboard import balance_caption
from financeflow.screens.layout import (
    BAND_COLORS,
    SIGN_OUT_NOTICE_KEY,
    budget_progress_markup,
    nav_label,
    nav_options,
    sign_out,
)
from financeflow.screens.onboarding import category_option_label
from financeflow.screens.transactions import (
    category_filter_label,
    category_filter_options,
    transactions_table,
)


def test_every_screen_has_a_renderer():
    assert set(SCREEN_RENDERERS) == set(Screen)
    assert all(callable(renderer) for renderer in SCREEN_RENDERERS.values())


def test_navigation_options_are_main_screens():
    assert nav_options() == list(MAIN_SCREENS)
    assert nav_label(Screen.DASHBOARD).endswith('Dashboard')


def test_budget_progress_is_capped():
    markup = budget_progress_markup(140.0, 'over')
    assert 'width:100.0%' in markup
    assert BAND_COLORS['over'] in markup
    assert 'width:0.0%' in budget_progress_markup(-5, 'on-track')


def test_category_filter_labels():
    options = category_filter_options()
    assert options[0] == 'all'
    assert 'food' in options
    assert category_filter_label('all') == "All Categories"
    assert category_filter_label('food').endswith("Food & Dining")
    assert category_filter_label('mystery') == 'unknown'
    assert category_option_label('mystery') == 'mystery'


def test_transactions_table():
    frame = transactions_table([
        Transaction(id='1', amount=250, category='food', description='Lunch', date=date(2024, 3, 1)),
        Transaction(id='2', amount=900, category='ghost', description='Refund', date=date(2024, 3, 2), type='income'),
    ])
    assert list(frame.columns) == ['Date', 'Description', 'Category', 'Type', 'Amount']
    assert frame['Type'].tolist() == ['Expense', 'Income']
    assert frame['Category'].tolist()[1] == 'unknown'
    assert frame['Amount'].iloc[0].startswith('-')
    assert frame['Amount'].iloc[1].startswith('+')


def test_transactions_table_empty():
    frame = transactions_table([])
    assert frame.empty
    assert list(frame.columns) == ['Date', 'Description', 'Category', 'Type', 'Amount']


def test_labels():
    assert balance_caption(0) == "📈 Healthy balance"
    assert balance_caption(-1) == "📉 Over budget"
    assert delta_label(12.345) == "+12.3% vs last month"
    assert delta_label(-4) == "-4.0% vs last month"


@pytest.fixture
def fake_streamlit(monkeypatch):
    fake = SimpleNamespace(session_state={})
    monkeypatch.setattr(layout, 'st', fake)
    monkeypatch.setattr(layout, 'rerun', lambda: None)
    return fake


def test_sign_out_returns_to_login(controller, fake_streamlit):
    controller.login(config.DEMO_EMAIL, config.DEMO_PASSWORD)
    assert sign_out(controller) is True
    assert controller.state.screen is Screen.LOGIN
    assert SIGN_OUT_NOTICE_KEY not in fake_streamlit.session_state


def test_failed_sign_out_keeps_a_notice_for_the_login_screen(controller, mock_backend, fake_streamlit, monkeypatch):
    controller.login(config.DEMO_EMAIL, config.DEMO_PASSWORD)

    def broken():
        raise BackendError('Server unreachable')

    monkeypatch.setattr(mock_backend, 'sign_out', broken)
    assert sign_out(controller) is False
    assert controller.state.screen is Screen.LOGIN
    assert controller.state.user is None
    assert fake_streamlit.session_state[SIGN_OUT_NOTICE_KEY] == 'Server unreachable'
