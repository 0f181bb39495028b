"""FinanceFlow Streamlit application.

One script drives every screen: the active screen is part of the
application state, so Streamlit's page discovery is not used. The backend,
store and controller are created once per browser session and kept in
``st.session_state``.
"""

from __future__ import annotations

from typing import Any, MutableMapping

import streamlit as st
from streamlit.errors import StreamlitAPIException

from . import config
from .backend import create_backend
from .exceptions import FinanceFlowError
from .logging_setup import configure_logging, get_logger
from .screens import render_screen
from .session import SessionController
from .store import Store

logger = get_logger(__name__)

CONTROLLER_KEY = "financeflow_controller"


def setup_page_config() -> None:
    try:
        st.set_page_config(
            page_title="FinanceFlow",
            page_icon="💰",
            layout="wide",
            initial_sidebar_state="expanded",
            menu_items={
                'About': "FinanceFlow - Track expenses, set budgets and see where your money goes.",
            },
        )
    except StreamlitAPIException:
        # Already configured in this run.
        pass


def build_controller(
    backend_kind: str | None = None,
    token_store: MutableMapping[str, Any] | None = None,
) -> SessionController:
    """Create the backend, store and controller, restoring this client's session.

    ``token_store`` belongs to a single client; only a token issued into it
    can be restored.
    """
    config.ensure_data_directories()
    backend = create_backend(backend_kind, token_store=token_store)
    controller = SessionController(Store(), backend)
    controller.load_theme()
    try:
        controller.restore_session()
    except FinanceFlowError as exc:
        logger.warning("Could not restore session: %s", exc)
        controller.clear_error()
    return controller


def get_controller() -> SessionController:
    if CONTROLLER_KEY not in st.session_state:
        logger.info("Starting new browser session (backend=%s)", config.BACKEND)
        st.session_state[CONTROLLER_KEY] = build_controller(token_store=st.session_state)
    return st.session_state[CONTROLLER_KEY]


def main() -> None:
    """Main entry point for the FinanceFlow app."""
    setup_page_config()
    configure_logging(config.LOG_LEVEL)
    controller = get_controller()
    render_screen(controller)


if __name__ == "__main__":
    main()
