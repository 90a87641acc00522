"""Landing page: find the current place and offer to look or leave something."""

import streamlit as st

from ...state import KilroyController
from ..components.common import navigate_to, render_empty_state, render_place_header
from ..session import get_geolocation_provider, request_new_location


def render_home_page(controller: KilroyController) -> None:
    """Render the landing page."""
    state = controller.state

    if state.is_loading:
        with st.spinner("Finding your location..."):
            controller.initialize_location(get_geolocation_provider())

    if state.is_loading:
        render_empty_state("Finding your location...", "Allow location access when your browser asks.", "🧭")
        return

    if state.location_denied or state.place is None:
        render_empty_state(
            "Kilroy only works when you're somewhere.",
            "Enable location to see what's been left here.",
            "📍",
        )
        if st.button("Try Again", type="primary", use_container_width=True):
            request_new_location()
            st.rerun()
        return

    render_place_header("Kilroy", state.place.place_name)

    if st.button("See what's here", use_container_width=True):
        navigate_to("view")

    if st.button("Leave something", type="primary", use_container_width=True):
        navigate_to("drop")
