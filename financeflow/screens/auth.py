"""Sign-in, sign-up and password reset screens."""

from __future__ import annotations

import streamlit as st

from .. import config
from ..backend import MockBackend
from ..navigation import Screen
from ..session import SessionController
from .layout import SIGN_OUT_NOTICE_KEY, rerun, run_command

RESET_SENT_KEY = "password_reset_sent_to"


def _brand(subtitle: str) -> None:
    st.markdown("<h1 style='text-align:center'>💰 FinanceFlow</h1>", unsafe_allow_html=True)
    st.markdown(f"<p style='text-align:center;opacity:0.7'>{subtitle}</p>", unsafe_allow_html=True)


def demo_login_available(controller: SessionController) -> bool:
    return isinstance(controller.backend, MockBackend)


def render_login(controller: SessionController) -> None:
    """Render the sign-in form."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        _brand("Welcome back! Sign in to continue")

        notice = st.session_state.pop(SIGN_OUT_NOTICE_KEY, None)
        if notice:
            st.warning(f"You were signed out on this device, but the server reported: {notice}")

        with st.form("login_form"):
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password", placeholder="••••••••")
            submitted = st.form_submit_button(
                "Sign In",
                type="primary",
                use_container_width=True,
                disabled=controller.state.is_loading,
            )
        if submitted:
            with st.spinner("Signing in..."):
                if run_command(controller.login, email, password):
                    rerun()

        if demo_login_available(controller):
            if st.button("Try Demo Account", use_container_width=True):
                with st.spinner("Signing in..."):
                    if run_command(controller.login, config.DEMO_EMAIL, config.DEMO_PASSWORD):
                        rerun()

        col1, col2 = st.columns(2)
        with col1:
            if st.button("Forgot password?", key="goto_forgot"):
                controller.navigate(Screen.FORGOT_PASSWORD)
                rerun()
        with col2:
            if st.button("Don't have an account? Sign up", key="goto_signup"):
                controller.navigate(Screen.SIGNUP)
                rerun()


def render_signup(controller: SessionController) -> None:
    """Render the account creation form."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        _brand("Create your account to get started")

        with st.form("signup_form"):
            name = st.text_input("Full name", placeholder="Jane Doe")
            email = st.text_input("Email", placeholder="you@example.com")
            password = st.text_input("Password", type="password", placeholder="At least 6 characters")
            submitted = st.form_submit_button(
                "Create Account",
                type="primary",
                use_container_width=True,
                disabled=controller.state.is_loading,
            )
        if submitted:
            with st.spinner("Creating account..."):
                if run_command(controller.signup, name, email, password, success="Account created"):
                    rerun()

        if st.button("Already have an account? Sign in", key="goto_login"):
            controller.navigate(Screen.LOGIN)
            rerun()


def render_forgot_password(controller: SessionController) -> None:
    """Render the password reset request form, or its confirmation."""
    _, center, _ = st.columns([1, 2, 1])
    with center:
        sent_to = st.session_state.get(RESET_SENT_KEY)
        if sent_to:
            st.markdown("<h2 style='text-align:center'>📧 Check your email</h2>", unsafe_allow_html=True)
            st.markdown(f"We've sent a password reset link to **{sent_to}**")
            if st.button("Back to Sign In", type="primary", use_container_width=True):
                st.session_state.pop(RESET_SENT_KEY, None)
                controller.navigate(Screen.LOGIN)
                rerun()
            if st.button("Didn't receive the email? Try again", use_container_width=True):
                st.session_state.pop(RESET_SENT_KEY, None)
                rerun()
            return

        _brand("Enter your email and we'll send you a reset link")
        with st.form("forgot_password_form"):
            email = st.text_input("Email", placeholder="you@example.com")
            submitted = st.form_submit_button("Send Reset Link", type="primary", use_container_width=True)
        if submitted and run_command(controller.request_password_reset, email):
            st.session_state[RESET_SENT_KEY] = email.strip()
            rerun()

        if st.button("← Back to Sign In", key="forgot_back"):
            controller.navigate(Screen.LOGIN)
            rerun()
