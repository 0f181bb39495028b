import pytest

from financeflow.exceptions import InvalidTransition
from financeflow.navigation import (
    AUTH_SCREENS,
    INITIAL_SCREEN,
    MAIN_SCREENS,
    ONBOARDING_SEQUENCE,
    Screen,
    allowed_targets,
    landing_screen,
    onboarding_next,
    onboarding_previous,
    transition,
)


def test_initial_screen_is_login():
    assert INITIAL_SCREEN is Screen.LOGIN


def test_there_are_ten_screens():
    assert len(Screen) == 10
    assert Screen('forgot-password') is Screen.FORGOT_PASSWORD


def test_landing_screen_depends_on_onboarding():
    assert landing_screen(False) is Screen.ONBOARDING_WELCOME
    assert landing_screen(True) is Screen.DASHBOARD


def test_onboarding_sequence_order():
    assert onboarding_next(Screen.ONBOARDING_WELCOME) is Screen.ONBOARDING_BUDGET
    assert onboarding_next(Screen.ONBOARDING_BUDGET) is Screen.ONBOARDING_CATEGORIES
    assert onboarding_next(Screen.ONBOARDING_CATEGORIES) is Screen.DASHBOARD
    assert onboarding_previous(Screen.ONBOARDING_WELCOME) is None
    assert onboarding_previous(Screen.ONBOARDING_CATEGORIES) is Screen.ONBOARDING_BUDGET


@pytest.mark.parametrize('current', sorted(AUTH_SCREENS, key=lambda s: s.value))
def test_auth_screens_move_freely_when_signed_out(current):
    assert allowed_targets(current, authenticated=False, onboarding_complete=False) == AUTH_SCREENS


@pytest.mark.parametrize('target', list(MAIN_SCREENS) + list(ONBOARDING_SEQUENCE))
def test_signed_out_user_cannot_reach_private_screens(target):
    with pytest.raises(InvalidTransition):
        transition(Screen.LOGIN, target, authenticated=False, onboarding_complete=False)


def test_dashboard_unreachable_before_onboarding_completes():
    with pytest.raises(InvalidTransition) as excinfo:
        transition(Screen.ONBOARDING_CATEGORIES, Screen.DASHBOARD, authenticated=True, onboarding_complete=False)
    assert "onboarding-categories" in str(excinfo.value)


def test_onboarding_steps_forward_and_back():
    assert transition(
        Screen.ONBOARDING_WELCOME, Screen.ONBOARDING_BUDGET, authenticated=True, onboarding_complete=False
    ) is Screen.ONBOARDING_BUDGET
    assert transition(
        Screen.ONBOARDING_BUDGET, Screen.ONBOARDING_WELCOME, authenticated=True, onboarding_complete=False
    ) is Screen.ONBOARDING_WELCOME


def test_onboarding_cannot_skip_steps():
    with pytest.raises(InvalidTransition):
        transition(Screen.ONBOARDING_WELCOME, Screen.ONBOARDING_CATEGORIES, authenticated=True, onboarding_complete=False)


def test_last_onboarding_step_reaches_dashboard_once_complete():
    assert transition(
        Screen.ONBOARDING_CATEGORIES, Screen.DASHBOARD, authenticated=True, onboarding_complete=True
    ) is Screen.DASHBOARD


@pytest.mark.parametrize('current', MAIN_SCREENS)
@pytest.mark.parametrize('target', MAIN_SCREENS)
def test_main_screens_are_fully_connected(current, target):
    assert transition(current, target, authenticated=True, onboarding_complete=True) is target


def test_main_screens_cannot_return_to_auth_screens():
    with pytest.raises(InvalidTransition):
        transition(Screen.DASHBOARD, Screen.LOGIN, authenticated=True, onboarding_complete=True)


def test_transition_accepts_string_values():
    assert transition('dashboard', 'settings', authenticated=True, onboarding_complete=True) is Screen.SETTINGS
