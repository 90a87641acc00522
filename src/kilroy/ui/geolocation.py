"""
Browser geolocation for the Streamlit app.

The position is read with `navigator.geolocation.getCurrentPosition` through
streamlit-js-eval. The component answers on a later rerun, so the first call
reports nothing and the controller keeps the page in its loading state.
"""

import json
from collections.abc import Callable
from typing import Any

from streamlit_js_eval import streamlit_js_eval  # type: ignore[import-untyped]

from ..logging_config import get_logger
from ..services.geolocation import Coordinates, GeolocationError, GeolocationOptions

logger = get_logger(__name__)

GEOLOCATION_SCRIPT = """new Promise((resolve) => {
  if (!navigator.geolocation) {
    resolve({error: {code: 2, message: "Location is not supported by your browser"}});
    return;
  }
  navigator.geolocation.getCurrentPosition(
    (p) => resolve({coords: {latitude: p.coords.latitude, longitude: p.coords.longitude, accuracy: p.coords.accuracy}}),
    (e) => resolve({error: {code: e.code, message: e.message}}),
    %s
  );
})"""


def build_geolocation_script(options: GeolocationOptions) -> str:
    """Render the browser script for the given request options."""
    js_options = json.dumps(
        {
            "enableHighAccuracy": options.enable_high_accuracy,
            "timeout": options.timeout_ms,
            "maximumAge": options.maximum_age_ms,
        }
    )
    return GEOLOCATION_SCRIPT % js_options


class BrowserGeolocationProvider:
    """Position provider backed by the visitor's browser."""

    def __init__(self, attempt: int = 0, component_key: str = "kilroy_geolocation") -> None:
        """
        Args:
            attempt: Retry counter; a new value asks the browser again instead of reusing the last answer
            component_key: Base key of the streamlit-js-eval component
        """
        self.key = f"{component_key}_{attempt}"

    def get_current_position(
        self,
        on_success: Callable[[Coordinates], None],
        on_error: Callable[[GeolocationError], None],
        options: GeolocationOptions,
    ) -> None:
        response = streamlit_js_eval(js_expressions=build_geolocation_script(options), key=self.key)
        if response is None:
            return
        handle_position_response(response, on_success, on_error)


def handle_position_response(
    response: Any,
    on_success: Callable[[Coordinates], None],
    on_error: Callable[[GeolocationError], None],
) -> None:
    """Dispatch a browser answer to the matching callback."""
    if isinstance(response, dict) and isinstance(response.get("coords"), dict):
        coords = response["coords"]
        try:
            accuracy = coords.get("accuracy")
            on_success(
                Coordinates(
                    latitude=float(coords["latitude"]),
                    longitude=float(coords["longitude"]),
                    accuracy=float(accuracy) if accuracy is not None else None,
                )
            )
            return
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("geolocation_response_malformed", error=str(e))

    if isinstance(response, dict) and isinstance(response.get("error"), dict):
        error = response["error"]
        on_error(
            GeolocationError(
                code=int(error.get("code", GeolocationError.POSITION_UNAVAILABLE)),
                message=str(error.get("message", "")),
            )
        )
        return

    on_error(GeolocationError(code=GeolocationError.POSITION_UNAVAILABLE, message="Unexpected geolocation response"))
