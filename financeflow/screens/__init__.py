"""Streamlit screens, one renderer per navigation state.

The active screen comes from ``AppState.screen``; :func:`render_screen`
looks up its renderer in :data:`SCREEN_RENDERERS`. Main screens get the
shared sidebar chrome, auth and onboarding screens render full-page.
"""

from __future__ import annotations

from typing import Callable, Dict

from ..navigation import MAIN_SCREENS, Screen
from ..session import SessionController
from . import analytics_view, auth, dashboard, onboarding, settings, transactions
from .layout import apply_theme, render_header

Renderer = Callable[[SessionController], None]

SCREEN_RENDERERS: Dict[Screen, Renderer] = {
    Screen.LOGIN: auth.render_login,
    Screen.SIGNUP: auth.render_signup,
    Screen.FORGOT_PASSWORD: auth.render_forgot_password,
    Screen.ONBOARDING_WELCOME: onboarding.render_welcome,
    Screen.ONBOARDING_BUDGET: onboarding.render_budget,
    Screen.ONBOARDING_CATEGORIES: onboarding.render_categories,
    Screen.DASHBOARD: dashboard.render,
    Screen.EXPENSES: transactions.render,
    Screen.ANALYTICS: analytics_view.render,
    Screen.SETTINGS: settings.render,
}


def render_screen(controller: SessionController) -> None:
    """Render the chrome and the active screen for the current state."""
    state = controller.state
    apply_theme(state.theme)
    if state.screen in MAIN_SCREENS:
        render_header(controller)
    SCREEN_RENDERERS[state.screen](controller)


__all__ = ["SCREEN_RENDERERS", "render_screen"]
