"""View page: the kilroys left at the current place."""

import streamlit as st

from ...state import KilroyController
from ..components.circle_toggle import render_circle_toggle
from ..components.common import format_relative_time, navigate_to, render_empty_state, render_error, render_place_header


def render_view_page(controller: KilroyController) -> None:
    """Render the kilroys visible to the viewer at the current place."""
    state = controller.state
    if state.place is None:
        navigate_to("home")
        return

    if st.button("Back"):
        navigate_to("home")

    render_place_header("Here", state.place.place_name)
    render_circle_toggle(controller, key="view_circle")

    with st.spinner("Loading..."):
        result = controller.load_kilroys()

    if not result.ok:
        render_error(result.error)
    elif not result.value:
        render_empty_state("Nothing here yet.", "Be the first to leave something.", "👀")
    else:
        for kilroy in result.value:
            with st.container(border=True):
                st.image(kilroy.image_url, use_container_width=True)
                if kilroy.caption:
                    st.write(kilroy.caption)
                st.caption(format_relative_time(kilroy.created_at))

    if st.button("Leave something", type="primary", use_container_width=True):
        navigate_to("drop")
