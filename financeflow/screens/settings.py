"""Settings screen: profile, appearance, data management and account."""

from __future__ import annotations

import streamlit as st

from .. import __version__
from ..formatting import initials
from ..session import SessionController
from .layout import rerun, run_command, sign_out

CONFIRM_CLEAR_KEY = "confirm_clear_data"


def render(controller: SessionController) -> None:
    """Render the Settings screen."""
    state = controller.state
    user = state.user

    st.title("Settings")
    st.markdown("Manage your account and preferences")

    if user is not None:
        avatar, details = st.columns([1, 6])
        with avatar:
            st.markdown(f"## {initials(user.name)}")
        with details:
            st.markdown(f"### {user.name}")
            st.caption(user.email)

    _render_profile(controller)
    _render_appearance(controller)
    _render_data_management(controller)
    _render_account(controller)

    st.divider()
    st.caption(f"FinanceFlow v{__version__}")


def _render_profile(controller: SessionController) -> None:
    user = controller.state.user
    with st.container(border=True):
        st.subheader("👤 Profile")
        with st.form("profile_form"):
            name = st.text_input("Name", value=user.name if user else "")
            budget = st.number_input(
                "Monthly Budget (₹)",
                min_value=0.0,
                step=1000.0,
                value=float(user.monthly_budget) if user else 0.0,
            )
            st.caption("Set your monthly spending limit")
            submitted = st.form_submit_button("Save Changes", type="primary")
        if submitted and run_command(controller.update_profile, name, budget, success="Profile updated successfully"):
            rerun()


def _render_appearance(controller: SessionController) -> None:
    with st.container(border=True):
        st.subheader("🎨 Appearance")
        dark = st.toggle(
            "Dark Mode",
            value=controller.state.theme == 'dark',
            help="Switch between light and dark theme",
        )
        if dark != (controller.state.theme == 'dark'):
            controller.toggle_theme()
            rerun()


def _render_data_management(controller: SessionController) -> None:
    with st.container(border=True):
        st.subheader("🗄️ Data Management")

        col1, col2 = st.columns([3, 1])
        with col1:
            st.markdown("**Export Data**")
            st.caption("Download all your data as JSON")
        with col2:
            content, filename = controller.export_json()
            st.download_button(
                "⬇️ Export",
                data=content,
                file_name=filename,
                mime="application/json",
                use_container_width=True,
            )

        col1, col2 = st.columns([3, 1])
        with col1:
            st.markdown("**Clear All Data**")
            st.caption("Permanently delete all your transactions")
        with col2:
            if st.button("🗑️ Clear", use_container_width=True):
                st.session_state[CONFIRM_CLEAR_KEY] = True

        if st.session_state.get(CONFIRM_CLEAR_KEY):
            st.warning("Are you sure you want to delete all data? This cannot be undone.")
            yes, no = st.columns(2)
            with yes:
                if st.button("Yes, delete everything", type="primary", use_container_width=True):
                    st.session_state.pop(CONFIRM_CLEAR_KEY, None)
                    if run_command(controller.clear_transactions, success="All data cleared"):
                        rerun()
            with no:
                if st.button("Cancel", use_container_width=True):
                    st.session_state.pop(CONFIRM_CLEAR_KEY, None)
                    rerun()


def _render_account(controller: SessionController) -> None:
    with st.container(border=True):
        st.subheader("🔐 Account")
        if st.button("🚪 Logout", use_container_width=True, key="settings_logout"):
            sign_out(controller)
