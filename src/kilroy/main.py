"""
Main Streamlit application for Kilroy.

Run with `streamlit run src/kilroy/main.py`.
"""

import streamlit as st

from kilroy.error_handling import KilroyError
from kilroy.logging_config import configure_structured_logging, get_logger
from kilroy.ui.components.common import render_error
from kilroy.ui.pages import render_drop_page, render_home_page, render_view_page
from kilroy.ui.session import get_controller, initialize_session_state

# Configure structured logging
configure_structured_logging()
logger = get_logger(__name__)

PAGES = {
    "home": render_home_page,
    "view": render_view_page,
    "drop": render_drop_page,
}


def main() -> None:
    """Main application entry point."""
    st.set_page_config(page_title="Kilroy", page_icon="📍", layout="centered")

    initialize_session_state()

    try:
        controller = get_controller()
    except KilroyError as e:
        logger.error("controller_initialization_failed", error=str(e), code=e.code)
        render_error(e.get_error_info())
        return

    current_page = st.session_state.current_page
    render_page = PAGES.get(current_page)
    if render_page is None:
        logger.warning("unknown_page_requested", page=current_page)
        st.session_state.current_page = "home"
        render_page = render_home_page

    logger.debug("page_rendering", page=current_page, has_place=controller.state.has_place)
    render_page(controller)


if __name__ == "__main__":
    main()
