"""First-run onboarding: welcome, monthly budget and category selection."""

from __future__ import annotations

import streamlit as st

from ..formatting import format_currency
from ..models import CATEGORIES, CATEGORY_IDS, find_category
from ..session import SessionController
from .layout import rerun, run_command

BUDGET_SUGGESTIONS = (20000, 35000, 50000)
BUDGET_INPUT_KEY = "onboarding_budget_input"


def category_option_label(category_id: str) -> str:
    category = find_category(category_id)
    return f"{category.icon} {category.name}" if category else category_id


def _step_header(step: int, total: int = 2) -> None:
    st.caption(f"Step {step} of {total}")
    st.progress(step / total)


def _set_budget(amount: float) -> None:
    st.session_state[BUDGET_INPUT_KEY] = float(amount)


def render_welcome(controller: SessionController) -> None:
    user = controller.state.user
    _, center, _ = st.columns([1, 3, 1])
    with center:
        st.title(f"Welcome, {user.name if user else 'there'}! 👋")
        st.markdown("Let's set up your financial journey in just a few steps")

        col1, col2, col3 = st.columns(3)
        with col1:
            st.markdown("### 📈\n**Track Expenses**\n\nMonitor your spending in real-time")
        with col2:
            st.markdown("### 🥧\n**Visualize Data**\n\nBeautiful charts and insights")
        with col3:
            st.markdown("### 🎯\n**Set Goals**\n\nAchieve your financial targets")

        if st.button("Get Started →", type="primary", use_container_width=True):
            controller.begin_onboarding()
            rerun()
        st.caption("Takes less than 2 minutes to complete")


def render_budget(controller: SessionController) -> None:
    user = controller.state.user
    _, center, _ = st.columns([1, 3, 1])
    with center:
        _step_header(1)
        st.title("Set Your Monthly Budget")
        st.markdown(
            "This helps us track your spending and send alerts when you're close to your limit"
        )

        if BUDGET_INPUT_KEY not in st.session_state and user is not None and user.has_budget:
            st.session_state[BUDGET_INPUT_KEY] = float(user.monthly_budget)

        budget = st.number_input(
            "Monthly budget (₹)",
            min_value=0.0,
            step=1000.0,
            key=BUDGET_INPUT_KEY,
        )
        st.caption("You can change this anytime in settings")

        st.markdown("Quick suggestions:")
        columns = st.columns(len(BUDGET_SUGGESTIONS))
        for column, amount in zip(columns, BUDGET_SUGGESTIONS):
            with column:
                st.button(
                    format_currency(amount),
                    key=f"budget_suggestion_{amount}",
                    on_click=_set_budget,
                    args=(amount,),
                    use_container_width=True,
                )

        back, forward = st.columns(2)
        with back:
            if st.button("← Back", use_container_width=True):
                controller.onboarding_back()
                rerun()
        with forward:
            if st.button("Continue →", type="primary", use_container_width=True):
                if run_command(controller.submit_onboarding_budget, budget):
                    rerun()


def render_categories(controller: SessionController) -> None:
    user = controller.state.user
    _, center, _ = st.columns([1, 3, 1])
    with center:
        _step_header(2)
        st.title("Choose Your Categories")
        st.markdown(
            "Select the categories you want to track. You can always add or remove them later."
        )

        default = [cat for cat in (user.selected_categories if user else ()) if cat in CATEGORY_IDS]
        selected = st.multiselect(
            "Categories",
            [cat.id for cat in CATEGORIES],
            default=default,
            format_func=category_option_label,
            label_visibility="collapsed",
        )

        back, forward = st.columns(2)
        with back:
            if st.button("← Back", use_container_width=True):
                controller.onboarding_back()
                rerun()
        with forward:
            label = f"Complete Setup ({len(selected)})" if selected else "Complete Setup"
            if st.button(label, type="primary", use_container_width=True):
                with st.spinner("Setting up your account..."):
                    if run_command(controller.complete_onboarding, selected, success="Welcome to FinanceFlow!"):
                        st.session_state.pop(BUDGET_INPUT_KEY, None)
                        rerun()
        st.caption("Skip to select all categories by default")
