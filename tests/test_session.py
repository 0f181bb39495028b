import json
from datetime import date, datetime, timezone

import pytest

from financeflow import config, preferences
from financeflow.exceptions import AuthenticationError, FinanceFlowError, InvalidTransition, NotFoundError, ValidationError
from financeflow.models import CATEGORY_IDS, TransactionType
from financeflow.navigation import Screen
from financeflow.session import SessionController
from financeflow.store import Store


def login_demo(controller):
    return controller.login(config.DEMO_EMAIL, config.DEMO_PASSWORD)


def signup_new_user(controller):
    return controller.signup('Asha Rao', 'asha@example.com', 'secret1')


def forbid(backend, name):
    def fail(*args, **kwargs):
        raise AssertionError(f"backend.{name} should not be called")
    setattr(backend, name, fail)


# -- authentication ---------------------------------------------------------


def test_login_onboarded_user_lands_on_dashboard(controller):
    state = login_demo(controller)
    assert state.screen is Screen.DASHBOARD
    assert state.user.email == config.DEMO_EMAIL
    assert not state.is_loading
    assert state.error is None


def test_login_with_blank_fields_never_reaches_backend(controller, mock_backend):
    forbid(mock_backend, 'sign_in')
    with pytest.raises(ValidationError):
        controller.login('', '')
    assert controller.state.error == 'Please fill in all fields'
    assert controller.state.screen is Screen.LOGIN


def test_login_with_wrong_password_records_error(controller):
    with pytest.raises(AuthenticationError):
        controller.login(config.DEMO_EMAIL, 'wrong-password')
    state = controller.state
    assert state.error == 'Invalid login credentials'
    assert state.screen is Screen.LOGIN
    assert state.user is None
    assert not state.is_loading


def test_signup_lands_on_onboarding(controller):
    state = signup_new_user(controller)
    assert state.screen is Screen.ONBOARDING_WELCOME
    assert state.user.name == 'Asha Rao'
    assert not state.user.onboarding_complete


def test_signup_rejects_duplicate_email(controller):
    with pytest.raises(AuthenticationError):
        controller.signup('Someone', config.DEMO_EMAIL, 'secret1')
    assert controller.state.error == 'User already registered'


def test_signup_validation_errors(controller, mock_backend):
    forbid(mock_backend, 'sign_up')
    with pytest.raises(ValidationError) as excinfo:
        controller.signup('', 'not-an-email', '123')
    assert set(excinfo.value.errors) == {'name', 'email', 'password'}


def test_logout_clears_state(controller):
    login_demo(controller)
    controller.navigate(Screen.SETTINGS)
    state = controller.logout()
    assert state.screen is Screen.LOGIN
    assert state.user is None
    assert state.transactions == ()


def test_external_session_expiry_signs_out(controller, mock_backend):
    login_demo(controller)
    controller.navigate(Screen.ANALYTICS)
    mock_backend.expire_session()
    assert controller.state.screen is Screen.LOGIN
    assert controller.state.user is None


def test_restore_session_on_new_controller(mock_backend, prefs_path):
    first = SessionController(Store(), mock_backend, preferences_path=prefs_path, seed_sample_data=False)
    login_demo(first)
    first.close()

    second = SessionController(Store(), mock_backend, preferences_path=prefs_path, seed_sample_data=False)
    assert second.restore_session() is True
    assert second.state.screen is Screen.DASHBOARD
    assert second.state.user.email == config.DEMO_EMAIL


def test_restore_session_without_session(controller):
    assert controller.restore_session() is False
    assert controller.state.screen is Screen.LOGIN
    assert not controller.state.is_loading


def test_password_reset_requires_email(controller, mock_backend):
    forbid(mock_backend, 'request_password_reset')
    with pytest.raises(ValidationError):
        controller.request_password_reset('  ')


def test_password_reset_calls_backend(controller, mock_backend):
    calls = []
    mock_backend.request_password_reset = calls.append
    controller.request_password_reset(' asha@example.com ')
    assert calls == ['asha@example.com']


# -- onboarding -------------------------------------------------------------


def test_full_onboarding_flow_persists_profile(controller, mock_backend):
    signup_new_user(controller)
    controller.begin_onboarding()
    assert controller.state.screen is Screen.ONBOARDING_BUDGET

    controller.submit_onboarding_budget('2500')
    assert controller.state.screen is Screen.ONBOARDING_CATEGORIES
    assert controller.state.user.monthly_budget == 2500
    # Held in state only until onboarding completes.
    assert mock_backend.get_profile(controller.state.user.id).monthly_budget == 0

    state = controller.complete_onboarding(['food', 'travel'])
    assert state.screen is Screen.DASHBOARD
    stored = mock_backend.get_profile(state.user.id)
    assert stored.onboarding_complete
    assert stored.monthly_budget == 2500
    assert stored.selected_categories == ('food', 'travel')


def test_skipping_category_selection_selects_all(controller, mock_backend):
    signup_new_user(controller)
    controller.begin_onboarding()
    controller.submit_onboarding_budget(1000)
    state = controller.complete_onboarding([])
    assert state.user.selected_categories == CATEGORY_IDS


def test_invalid_budget_keeps_budget_step(controller):
    signup_new_user(controller)
    controller.begin_onboarding()
    with pytest.raises(ValidationError) as excinfo:
        controller.submit_onboarding_budget('0')
    assert str(excinfo.value) == 'Please enter a valid budget amount'
    assert controller.state.screen is Screen.ONBOARDING_BUDGET


def test_onboarding_back(controller):
    signup_new_user(controller)
    controller.begin_onboarding()
    controller.onboarding_back()
    assert controller.state.screen is Screen.ONBOARDING_WELCOME
    with pytest.raises(InvalidTransition):
        controller.onboarding_back()


def test_complete_onboarding_only_from_last_step(controller):
    signup_new_user(controller)
    with pytest.raises(InvalidTransition):
        controller.complete_onboarding()


def test_onboarding_seeds_sample_data_for_empty_accounts(mock_backend, prefs_path, today):
    controller = SessionController(
        Store(), mock_backend, preferences_path=prefs_path, seed_sample_data=True, today=lambda: today,
    )
    signup_new_user(controller)
    controller.begin_onboarding()
    controller.submit_onboarding_budget(30000)
    state = controller.complete_onboarding()

    stored = mock_backend.list_transactions(state.user.id)
    assert state.transactions
    assert [t.id for t in state.transactions] == [t.id for t in stored]
    assert all(t.date <= today for t in state.transactions)


# -- transactions -----------------------------------------------------------


def test_add_then_delete_restores_collection(controller):
    login_demo(controller)
    before = controller.state.transactions
    created = controller.add_transaction('250', 'food', 'Groceries', date(2024, 3, 14), 'expense')
    assert controller.state.transactions[0] == created
    assert created.amount == 250
    controller.delete_transaction(created.id)
    assert controller.state.transactions == before


def test_invalid_transaction_never_reaches_backend(controller, mock_backend):
    login_demo(controller)
    forbid(mock_backend, 'insert_transactions')
    with pytest.raises(ValidationError) as excinfo:
        controller.add_transaction('-5', None, ' ')
    assert excinfo.value.errors == {
        'amount': 'Please enter a valid amount',
        'category': 'Please select a category',
        'description': 'Please enter a description',
    }
    assert controller.state.transactions == ()


def test_update_transaction(controller, mock_backend):
    login_demo(controller)
    created = controller.add_transaction(100, 'food', 'Lunch', date(2024, 3, 1))
    updated = controller.update_transaction(created.id, 5000, 'other', 'Bonus', date(2024, 3, 2), 'income')
    assert updated.id == created.id
    assert updated.type is TransactionType.INCOME
    assert controller.state.transactions == (updated,)
    assert mock_backend.get_transaction(controller.state.user.id, created.id) == updated


def test_delete_missing_transaction_records_error(controller):
    login_demo(controller)
    with pytest.raises(NotFoundError):
        controller.delete_transaction('missing')
    assert 'missing' in controller.state.error
    assert not controller.state.is_loading


def test_clear_transactions_refetches(controller):
    login_demo(controller)
    controller.add_transaction(100, 'food', 'Lunch', date(2024, 3, 1))
    controller.add_transaction(200, 'bills', 'Phone bill', date(2024, 3, 2))
    assert controller.clear_transactions() == 2
    assert controller.state.transactions == ()


def test_mutations_require_sign_in(controller):
    with pytest.raises(FinanceFlowError):
        controller.add_transaction(100, 'food', 'Lunch')


# -- profile, theme and exports --------------------------------------------


def test_update_profile(controller, mock_backend):
    login_demo(controller)
    controller.update_profile(' New Name ', '75000')
    assert controller.state.user.name == 'New Name'
    assert mock_backend.get_profile(controller.state.user.id).monthly_budget == 75000


def test_update_profile_validation(controller):
    login_demo(controller)
    with pytest.raises(ValidationError) as excinfo:
        controller.update_profile('', 100)
    assert str(excinfo.value) == 'Name is required'
    with pytest.raises(ValidationError):
        controller.update_profile('Name', -1)


def test_toggle_theme_persists(controller, prefs_path):
    assert controller.toggle_theme() == 'dark'
    assert controller.state.theme == 'dark'
    assert preferences.load_theme(prefs_path) == 'dark'
    assert controller.toggle_theme() == 'light'


def test_theme_survives_logout(controller):
    login_demo(controller)
    controller.toggle_theme()
    controller.logout()
    assert controller.state.theme == 'dark'


def test_load_theme_from_preferences(controller, prefs_path):
    preferences.save_theme('dark', prefs_path)
    assert controller.load_theme() == 'dark'
    assert controller.state.theme == 'dark'


def test_export_csv_uses_filters(controller, today):
    login_demo(controller)
    controller.add_transaction(100, 'food', 'Lunch', date(2024, 3, 1))
    controller.add_transaction(900, 'other', 'Salary', date(2024, 3, 2), 'income')
    content, filename = controller.export_csv(txn_type='income')
    assert filename == f"expenses_{today.isoformat()}.csv"
    lines = content.strip().splitlines()
    assert len(lines) == 2
    assert 'Salary' in lines[1]


def test_export_json_snapshot(controller):
    login_demo(controller)
    controller.add_transaction(100, 'food', 'Lunch', date(2024, 3, 1))
    exported_at = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
    content, filename = controller.export_json(exported_at)
    payload = json.loads(content)
    assert filename == 'financeflow_data_2024-03-15.json'
    assert payload['user']['email'] == config.DEMO_EMAIL
    assert len(payload['expenses']) == 1
    assert payload['exportDate'].startswith('2024-03-15')
