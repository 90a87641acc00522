"""
Geolocation contract.

The position comes from an external provider (the browser in the app). A
provider reports through exactly one of two callbacks. It may also call
neither yet, which happens while the browser is still answering across
Streamlit reruns.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from ..error_handling import LocationDeniedError
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Coordinates:
    """A position fix."""

    latitude: float
    longitude: float
    accuracy: float | None = None


@dataclass(frozen=True)
class GeolocationError:
    """Why the provider could not produce a position."""

    code: int
    message: str

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


@dataclass(frozen=True)
class GeolocationOptions:
    """Options forwarded to the position provider."""

    enable_high_accuracy: bool = True
    timeout_ms: int = 10000
    maximum_age_ms: int = 60000


class GeolocationProvider(Protocol):
    """Source of the device position."""

    def get_current_position(
        self,
        on_success: Callable[[Coordinates], None],
        on_error: Callable[[GeolocationError], None],
        options: GeolocationOptions,
    ) -> None: ...


def locate(provider: GeolocationProvider | None, options: GeolocationOptions | None = None) -> Coordinates | None:
    """
    Ask a provider for the current position.

    Args:
        provider: Position source; None means geolocation is unsupported
        options: Request options (high accuracy, 10 s timeout, 60 s maximum age by default)

    Returns:
        Coordinates, or None while the provider has not answered yet

    Raises:
        LocationDeniedError: If geolocation is unsupported, denied, unavailable or timed out
    """
    if provider is None:
        raise LocationDeniedError(
            "Geolocation is not supported",
            code="location_unsupported",
            details={"reason": "unsupported"},
        )

    options = options or GeolocationOptions()
    outcome: dict[str, Coordinates | GeolocationError] = {}

    def on_success(coordinates: Coordinates) -> None:
        outcome.setdefault("result", coordinates)

    def on_error(error: GeolocationError) -> None:
        outcome.setdefault("result", error)

    provider.get_current_position(on_success, on_error, options)

    result = outcome.get("result")
    if result is None:
        logger.debug("geolocation_pending")
        return None

    if isinstance(result, GeolocationError):
        raise LocationDeniedError(
            f"Geolocation failed: {result.message}",
            code="location_denied" if result.code == GeolocationError.PERMISSION_DENIED else "location_unavailable",
            details={"geolocation_code": result.code},
        )

    logger.debug("geolocation_acquired", accuracy=result.accuracy)
    return result
