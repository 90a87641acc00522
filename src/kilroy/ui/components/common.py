"""Reusable UI components for Kilroy."""

from datetime import datetime

import streamlit as st

from ...error_handling import ErrorInfo, ErrorSeverity
from ...logging_config import get_logger

logger = get_logger(__name__)


def render_empty_state(title: str, description: str, icon: str = "📭") -> None:
    """
    Render a centered empty state message.

    Args:
        title: Main title for the empty state
        description: Description text
        icon: Emoji icon to display
    """
    st.markdown(
        f"""
    <div style='text-align: center; padding: 2rem 0;'>
        <div style='font-size: 4rem; margin-bottom: 1rem;'>{icon}</div>
        <h3 style='color: #444; margin-bottom: 1rem;'>{title}</h3>
        <p style='color: #888; margin-bottom: 1rem;'>{description}</p>
    </div>
    """,
        unsafe_allow_html=True,
    )


def render_place_header(title: str, place_name: str) -> None:
    """Render a page title with the current place underneath."""
    st.markdown(f"### {title}")
    st.caption(place_name)


def render_error(error_info: ErrorInfo | None) -> None:
    """Show an error's user message with an alert matching its severity."""
    if error_info is None:
        return

    if error_info.severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL):
        st.error(error_info.user_message)
    elif error_info.severity == ErrorSeverity.MEDIUM:
        st.warning(error_info.user_message)
    else:
        st.info(error_info.user_message)

    logger.info(
        "error_displayed_to_user",
        error_code=error_info.code,
        category=error_info.category.value,
        severity=error_info.severity.value,
    )


def format_relative_time(timestamp_ms: int, now: datetime | None = None) -> str:
    """
    Format a kilroy timestamp relative to now.

    Args:
        timestamp_ms: Epoch milliseconds
        now: Reference time (defaults to the current local time)

    Returns:
        "Today", "Yesterday", "N days ago" within a week, otherwise the date
    """
    date = datetime.fromtimestamp(timestamp_ms / 1000)
    now = now or datetime.now()
    diff_days = int((now - date).total_seconds() // 86400)

    if diff_days <= 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if diff_days < 7:
        return f"{diff_days} days ago"
    return date.strftime("%b %d, %Y")


def navigate_to(page: str) -> None:
    """Switch to another page on the next rerun."""
    st.session_state.current_page = page
    st.rerun()
