"""Two-way circle selector shared by the view and drop pages."""

import streamlit as st

from ...models.kilroy import Circle
from ...state import KilroyController

CIRCLE_LABELS = {
    Circle.COMMUNITY: "World",
    Circle.VERIFIED: "Verified",
}

CIRCLE_DESCRIPTIONS = {
    Circle.COMMUNITY: "Visible to everyone",
    Circle.VERIFIED: "Only visible to verified humans",
}


def render_circle_toggle(controller: KilroyController, key: str, disabled: bool = False) -> Circle:
    """
    Render the circle toggle and apply a selection.

    Choosing Verified as an unverified viewer starts verification; the
    toggle only moves if it succeeds.

    Returns:
        Circle: The selected circle after this render
    """
    current = controller.state.circle
    columns = st.columns(len(CIRCLE_LABELS))

    for column, (circle, label) in zip(columns, CIRCLE_LABELS.items(), strict=True):
        with column:
            clicked = st.button(
                label,
                key=f"{key}_{circle.value}",
                type="primary" if circle is current else "secondary",
                disabled=disabled,
                use_container_width=True,
            )
            if clicked and circle is not current:
                with st.spinner("Verifying..." if circle is Circle.VERIFIED else "Switching..."):
                    result = controller.change_circle(circle)
                if not result.ok:
                    st.toast(result.error.user_message, icon="⚠️")
                elif result.value is not circle:
                    st.toast("Verification did not complete.", icon="⚠️")
                st.rerun()

    return current
