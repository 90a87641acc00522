"""
Circle access rules.

Community kilroys are open to everyone. Verified kilroys can only be read or
left by viewers who passed the identity verification challenge.
"""

from ..logging_config import get_logger, log_security_event
from ..models.kilroy import Circle

logger = get_logger(__name__)


def can_view(viewer_verified: bool, post_circle: Circle) -> bool:
    """Check whether a viewer may read posts in a circle."""
    if post_circle is Circle.COMMUNITY:
        return True
    return viewer_verified


def can_post_to(viewer_verified: bool, target_circle: Circle) -> bool:
    """Check whether a viewer may leave a post in a circle."""
    if target_circle is Circle.COMMUNITY:
        return True
    return viewer_verified


def resolve_post_circle(viewer_verified: bool, requested: Circle) -> Circle:
    """
    Decide which circle a new post actually goes to.

    A viewer who is not verified and asks for the verified circle is moved to
    community instead of being refused. The downgrade is recorded as a
    security event.

    Args:
        viewer_verified: Whether the poster passed verification
        requested: Circle chosen in the UI

    Returns:
        Circle: Circle the post will be stored under
    """
    if can_post_to(viewer_verified, requested):
        return requested

    log_security_event(
        "post_circle_coerced",
        requested_circle=requested.value,
        effective_circle=Circle.COMMUNITY.value,
    )
    return Circle.COMMUNITY


def effective_view_circle(viewer_verified: bool, requested: Circle) -> Circle:
    """Return the circle to query when listing; unverified viewers only ever see community."""
    if requested is Circle.VERIFIED and viewer_verified:
        return Circle.VERIFIED
    return Circle.COMMUNITY
