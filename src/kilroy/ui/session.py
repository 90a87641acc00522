"""Per-session wiring of state, services and the controller."""

import streamlit as st

from ..config import get_places_api_key, get_places_http_timeout
from ..logging_config import get_logger
from ..models.document_store import get_document_store
from ..services.image_normalizer import get_image_normalizer
from ..services.kilroy_repository import KilroyRepository
from ..services.place_resolver import PlaceCache, PlaceResolver
from ..services.storage import get_storage_service
from ..services.verification import create_verification_service
from ..state import AppState, KilroyController
from .geolocation import BrowserGeolocationProvider

logger = get_logger(__name__)

CONTROLLER_KEY = "kilroy_controller"
GEOLOCATION_ATTEMPT_KEY = "geolocation_attempt"


def initialize_session_state() -> None:
    """Initialize session state variables."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "home"

    if GEOLOCATION_ATTEMPT_KEY not in st.session_state:
        st.session_state[GEOLOCATION_ATTEMPT_KEY] = 0


def notify(message: str) -> None:
    """Signal the viewer that something happened at this place."""
    st.toast(message, icon="📍")


def build_controller() -> KilroyController:
    """
    Build a controller for this session.

    Raises:
        StorageError: If the blob store is not configured
        DatabaseError: If the document store cannot be opened
    """
    resolver = PlaceResolver(
        PlaceCache(st.session_state),
        api_key=get_places_api_key(),
        timeout=get_places_http_timeout(),
    )
    repository = KilroyRepository(get_document_store(), get_storage_service())

    logger.info("session_controller_created", places_api=resolver.api_key is not None)
    return KilroyController(
        state=AppState(),
        place_resolver=resolver,
        repository=repository,
        image_normalizer=get_image_normalizer(),
        verification_service=create_verification_service(),
        notifier=notify,
    )


def get_controller() -> KilroyController:
    """Get this session's controller, creating it on first use."""
    if CONTROLLER_KEY not in st.session_state:
        st.session_state[CONTROLLER_KEY] = build_controller()
    controller: KilroyController = st.session_state[CONTROLLER_KEY]
    return controller


def get_geolocation_provider() -> BrowserGeolocationProvider:
    """Get the browser position provider for the current attempt."""
    return BrowserGeolocationProvider(attempt=st.session_state.get(GEOLOCATION_ATTEMPT_KEY, 0))


def request_new_location() -> None:
    """Ask the browser for a fresh position on the next rerun."""
    st.session_state[GEOLOCATION_ATTEMPT_KEY] = st.session_state.get(GEOLOCATION_ATTEMPT_KEY, 0) + 1
    controller = get_controller()
    controller.state.location_denied = False
    controller.state.is_loading = True
