"""Screen identifiers and the rules for moving between them.

Exactly one screen is active at a time. ``transition`` answers whether a
requested move is allowed given the authentication and onboarding status and
returns the screen to show, raising :class:`InvalidTransition` otherwise.
The automatic moves (after sign-in, sign-up and sign-out) are expressed by
``landing_screen`` and ``Screen.LOGIN``.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

try:
    from .exceptions import InvalidTransition
except ImportError:
    from exceptions import InvalidTransition


class Screen(str, Enum):
    LOGIN = 'login'
    SIGNUP = 'signup'
    FORGOT_PASSWORD = 'forgot-password'
    ONBOARDING_WELCOME = 'onboarding-welcome'
    ONBOARDING_BUDGET = 'onboarding-budget'
    ONBOARDING_CATEGORIES = 'onboarding-categories'
    DASHBOARD = 'dashboard'
    EXPENSES = 'expenses'
    ANALYTICS = 'analytics'
    SETTINGS = 'settings'


INITIAL_SCREEN = Screen.LOGIN

AUTH_SCREENS: FrozenSet[Screen] = frozenset({Screen.LOGIN, Screen.SIGNUP, Screen.FORGOT_PASSWORD})

ONBOARDING_SEQUENCE: Tuple[Screen, ...] = (
    Screen.ONBOARDING_WELCOME,
    Screen.ONBOARDING_BUDGET,
    Screen.ONBOARDING_CATEGORIES,
)

MAIN_SCREENS: Tuple[Screen, ...] = (
    Screen.DASHBOARD,
    Screen.EXPENSES,
    Screen.ANALYTICS,
    Screen.SETTINGS,
)

NAV_LABELS: Dict[Screen, str] = {
    Screen.DASHBOARD: 'Dashboard',
    Screen.EXPENSES: 'Expenses',
    Screen.ANALYTICS: 'Analytics',
    Screen.SETTINGS: 'Settings',
}


def landing_screen(onboarding_complete: bool) -> Screen:
    """Where a freshly authenticated user lands."""
    return Screen.DASHBOARD if onboarding_complete else Screen.ONBOARDING_WELCOME


def onboarding_next(current: Screen) -> Screen:
    """The step after ``current``; the last step leads to the dashboard."""
    index = ONBOARDING_SEQUENCE.index(current)
    if index + 1 < len(ONBOARDING_SEQUENCE):
        return ONBOARDING_SEQUENCE[index + 1]
    return Screen.DASHBOARD


def onboarding_previous(current: Screen) -> Optional[Screen]:
    index = ONBOARDING_SEQUENCE.index(current)
    return ONBOARDING_SEQUENCE[index - 1] if index > 0 else None


def allowed_targets(current: Screen, authenticated: bool, onboarding_complete: bool) -> FrozenSet[Screen]:
    """Screens reachable from ``current`` by an explicit user navigation."""
    if not authenticated:
        if current in AUTH_SCREENS:
            return AUTH_SCREENS
        return frozenset()

    if current in ONBOARDING_SEQUENCE:
        targets = {current, onboarding_next(current)}
        previous = onboarding_previous(current)
        if previous is not None:
            targets.add(previous)
        # Leaving the last step requires completing onboarding first.
        if current is ONBOARDING_SEQUENCE[-1] and not onboarding_complete:
            targets.discard(Screen.DASHBOARD)
        return frozenset(targets)

    if onboarding_complete and current in MAIN_SCREENS:
        return frozenset(MAIN_SCREENS)

    return frozenset()


def transition(current: Screen, target: Screen, authenticated: bool, onboarding_complete: bool) -> Screen:
    current = Screen(current)
    target = Screen(target)
    if target not in allowed_targets(current, authenticated, onboarding_complete):
        raise InvalidTransition(current.value, target.value)
    return target
