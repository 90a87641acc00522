"""Drop page: leave a photo and caption at the current place."""

import streamlit as st

from ...logging_config import get_logger
from ...models.kilroy import MAX_CAPTION_LENGTH
from ...services.image_normalizer import is_image_upload
from ...state import KilroyController
from ..components.circle_toggle import CIRCLE_DESCRIPTIONS, render_circle_toggle
from ..components.common import navigate_to, render_error, render_place_header

logger = get_logger(__name__)

ACCEPTED_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp", "heic", "heif"]


def render_drop_page(controller: KilroyController) -> None:
    """Render the form for leaving a kilroy."""
    state = controller.state
    if state.place is None:
        navigate_to("home")
        return

    if st.button("Cancel"):
        navigate_to("view")

    render_place_header("Leave something", state.place.place_name)

    uploaded_file = st.file_uploader("Tap to add photo", type=ACCEPTED_EXTENSIONS, key="drop_image")
    if uploaded_file is not None:
        if is_image_upload(uploaded_file.type):
            st.image(uploaded_file, use_container_width=True)
        else:
            st.error("Please select an image file")

    caption = st.text_area(
        "Caption",
        placeholder="Add a caption (optional)",
        max_chars=MAX_CAPTION_LENGTH,
        height=100,
        key="drop_caption",
        label_visibility="collapsed",
    )

    st.write("Who can see this?")
    circle = render_circle_toggle(controller, key="drop_circle")
    st.caption(CIRCLE_DESCRIPTIONS[circle])

    submitted = st.button("Leave it here", type="primary", use_container_width=True, disabled=uploaded_file is None)
    if submitted and uploaded_file is not None:
        with st.spinner("Leaving it here..."):
            result = controller.submit_kilroy(
                uploaded_file.getvalue(),
                uploaded_file.type,
                caption,
                circle,
            )

        if result.ok:
            logger.info("drop_completed", place_id=state.place.place_id)
            navigate_to("view")
        else:
            render_error(result.error)
