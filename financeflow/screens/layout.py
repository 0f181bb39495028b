"""Shared chrome for the authenticated screens: theme, header and navigation."""

from __future__ import annotations

from typing import Any, Callable, List, Optional

import streamlit as st

from ..exceptions import FinanceFlowError, ValidationError
from ..formatting import initials
from ..logging_setup import get_logger
from ..navigation import MAIN_SCREENS, NAV_LABELS, Screen
from ..session import SessionController

logger = get_logger(__name__)

NAV_ICONS = {
    Screen.DASHBOARD: "🏠",
    Screen.EXPENSES: "🧾",
    Screen.ANALYTICS: "📊",
    Screen.SETTINGS: "⚙️",
}

SIGN_OUT_NOTICE_KEY = "sign_out_notice"

BAND_COLORS = {
    'on-track': "#00B894",
    'approaching': "#FDCB6E",
    'over': "#D63031",
}

_DARK_CSS = """
<style>
.stApp {
    background-color: #1e1e1e;
    color: #ffffff;
}
.stMetric {
    background-color: #2d2d2d;
    padding: 1rem;
    border-radius: 0.5rem;
}
</style>
"""

_BASE_CSS = """
<style>
@media (max-width: 768px) {
    .main .block-container {
        padding: 1rem;
    }
    .stMetric {
        margin-bottom: 0.5rem;
    }
}
</style>
"""


def nav_options() -> List[Screen]:
    return list(MAIN_SCREENS)


def nav_label(screen: Screen) -> str:
    return f"{NAV_ICONS.get(screen, '')} {NAV_LABELS[screen]}".strip()


def apply_theme(theme: str) -> None:
    """Inject the stylesheet for ``theme``."""
    st.markdown(_BASE_CSS, unsafe_allow_html=True)
    if theme == 'dark':
        st.markdown(_DARK_CSS, unsafe_allow_html=True)


def rerun() -> None:
    st.rerun()


def run_command(
    command: Callable[..., Any],
    *args: Any,
    success: Optional[str] = None,
    **kwargs: Any,
) -> bool:
    """Call a controller command and surface its failure in the page.

    Returns True when the command succeeded. Validation failures are shown
    with every field message; other failures show the stored error text.
    """
    try:
        command(*args, **kwargs)
    except ValidationError as exc:
        for message in exc.errors.values():
            st.error(message)
        return False
    except FinanceFlowError as exc:
        logger.debug("Command %s failed: %s", getattr(command, '__name__', command), exc)
        st.error(str(exc))
        return False
    if success:
        st.toast(success)
    return True


def sign_out(controller: SessionController) -> bool:
    """Log out and return to the login screen.

    Local state is cleared even when the backend call fails; the failure is
    kept for the login screen to show after the rerun.
    """
    try:
        controller.logout()
    except FinanceFlowError as exc:
        logger.warning("Sign-out did not reach the backend: %s", exc)
        st.session_state[SIGN_OUT_NOTICE_KEY] = str(exc)
        signed_out = False
    else:
        signed_out = True
    rerun()
    return signed_out


def render_header(controller: SessionController) -> None:
    """Sidebar with user card, navigation, theme toggle and sign-out."""
    state = controller.state
    user = state.user

    with st.sidebar:
        st.title("💰 FinanceFlow")
        if user is not None:
            col1, col2 = st.columns([1, 3])
            with col1:
                st.markdown(f"### {initials(user.name)}")
            with col2:
                st.markdown(f"**{user.name}**")
                st.caption(user.email)

        st.divider()
        for screen in nav_options():
            active = screen == state.screen
            if st.button(
                nav_label(screen),
                key=f"nav_{screen.value}",
                type="primary" if active else "secondary",
                use_container_width=True,
            ) and not active:
                controller.navigate(screen)
                rerun()

        st.divider()
        theme_label = "☀️ Light mode" if state.theme == 'dark' else "🌙 Dark mode"
        if st.button(theme_label, use_container_width=True, key="theme_toggle"):
            controller.toggle_theme()
            rerun()
        if st.button("🚪 Logout", use_container_width=True, key="logout_button"):
            sign_out(controller)


def render_empty_state(icon: str, title: str, message: str) -> None:
    st.markdown(f"<div style='text-align:center;font-size:3rem'>{icon}</div>", unsafe_allow_html=True)
    st.markdown(f"<h3 style='text-align:center'>{title}</h3>", unsafe_allow_html=True)
    st.markdown(f"<p style='text-align:center;opacity:0.7'>{message}</p>", unsafe_allow_html=True)


def budget_progress_markup(percent: float, band: str) -> str:
    """HTML progress bar capped at 100% and coloured by budget band."""
    width = max(0.0, min(percent, 100.0))
    color = BAND_COLORS.get(band, BAND_COLORS['on-track'])
    return (
        "<div style='background:#e0e0e0;border-radius:6px;height:12px;width:100%'>"
        f"<div style='background:{color};width:{width:.1f}%;height:12px;border-radius:6px'></div>"
        "</div>"
    )
