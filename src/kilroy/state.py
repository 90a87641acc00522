"""
Application state and the controller behind every user action.

AppState holds what one session knows: the current place, the selected
circle, whether the viewer is a verified human, and the location and loading
flags. KilroyController runs each user action against the services and
reports the outcome as an ActionResult, so the UI never has to catch.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .error_handling import ErrorInfo, KilroyError, LocationDeniedError, UploadError, ValidationError, handle_error
from .logging_config import get_logger, log_user_action
from .models.kilroy import Circle, Kilroy
from .models.place import Place
from .services.geolocation import GeolocationOptions, GeolocationProvider, locate
from .services.image_normalizer import ImageNormalizer, is_image_upload
from .services.kilroy_repository import KilroyRepository
from .services.place_resolver import PlaceResolver
from .services.verification import VerificationService
from .services.visibility import effective_view_circle, resolve_post_circle

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class AppState:
    """Per-session application state."""

    place: Place | None = None
    circle: Circle = Circle.COMMUNITY
    is_verified_human: bool = False
    location_denied: bool = False
    is_loading: bool = True

    @property
    def has_place(self) -> bool:
        return self.place is not None


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Outcome of a controller action."""

    ok: bool
    value: T | None = None
    error: ErrorInfo | None = None

    @classmethod
    def success(cls, value: T | None = None) -> "ActionResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: ErrorInfo) -> "ActionResult[T]":
        return cls(ok=False, error=error)


class KilroyController:
    """Orchestrates place resolution, listing, posting and verification for one session."""

    def __init__(
        self,
        state: AppState,
        place_resolver: PlaceResolver,
        repository: KilroyRepository,
        image_normalizer: ImageNormalizer,
        verification_service: VerificationService,
        notifier: Callable[[str], Any] | None = None,
        geolocation_options: GeolocationOptions | None = None,
    ) -> None:
        """
        Args:
            state: Session state the controller reads and updates
            place_resolver: Coordinates to Place resolution
            repository: Kilroy persistence
            image_normalizer: Upload image normalization
            verification_service: Human verification challenge
            notifier: Optional callback used to signal that a place already has kilroys
            geolocation_options: Options for position requests
        """
        self.state = state
        self.place_resolver = place_resolver
        self.repository = repository
        self.image_normalizer = image_normalizer
        self.verification_service = verification_service
        self.notifier = notifier
        self.geolocation_options = geolocation_options or GeolocationOptions()

    def initialize_location(self, provider: GeolocationProvider | None) -> ActionResult[Place]:
        """
        Establish the current place.

        A place cached earlier in the session is used as is. Otherwise the
        provider is asked for a position which is then resolved to a place.
        While the provider has not answered, the result is successful with no
        value and the state stays loading.
        """
        self.state.is_loading = True

        cached = self.place_resolver.get_cached()
        if cached is not None:
            self.state.place = cached
            self.state.location_denied = False
            self._notify_if_kilroys(cached.place_id)
            self.state.is_loading = False
            return ActionResult.success(cached)

        try:
            coordinates = locate(provider, self.geolocation_options)
        except LocationDeniedError as e:
            self.state.location_denied = True
            self.state.is_loading = False
            return ActionResult.failure(handle_error(e, {"operation": "initialize_location"}))

        if coordinates is None:
            return ActionResult.success(None)

        try:
            place = self.place_resolver.resolve(coordinates.latitude, coordinates.longitude)
        except Exception as e:
            self.state.is_loading = False
            return ActionResult.failure(handle_error(e, {"operation": "resolve_place"}))

        self.state.place = place
        self.state.location_denied = False
        self._notify_if_kilroys(place.place_id)
        self.state.is_loading = False
        log_user_action("place_established", place_id=place.place_id)
        return ActionResult.success(place)

    def retry_location(self, provider: GeolocationProvider | None) -> ActionResult[Place]:
        """Clear the denial flag and ask for the position again."""
        self.state.location_denied = False
        return self.initialize_location(provider)

    def _notify_if_kilroys(self, place_id: str) -> None:
        if self.notifier is None:
            return
        try:
            if self.repository.has_any_posts(place_id):
                self.notifier("Someone was here.")
        except Exception as e:
            # Notification is a hint only
            logger.debug("kilroy_notification_skipped", place_id=place_id, error=str(e))

    def view_circle(self) -> Circle:
        """Circle actually listed for the current viewer."""
        return effective_view_circle(self.state.is_verified_human, self.state.circle)

    def load_kilroys(self) -> ActionResult[list[Kilroy]]:
        """List the current place's kilroys in the circle the viewer may see."""
        place = self.state.place
        if place is None:
            return ActionResult.failure(self._missing_place_error("load_kilroys"))

        try:
            kilroys = self.repository.list_posts(place.place_id, circle=self.view_circle())
        except Exception as e:
            return ActionResult.failure(handle_error(e, {"operation": "load_kilroys", "place_id": place.place_id}))
        return ActionResult.success(kilroys)

    def submit_kilroy(
        self,
        image_data: bytes,
        content_type: str | None,
        caption: str | None,
        circle: Circle | str | None = None,
    ) -> ActionResult[Kilroy]:
        """
        Leave a kilroy at the current place.

        Args:
            image_data: Raw uploaded image bytes
            content_type: Declared content type of the upload
            caption: Optional caption
            circle: Requested circle; defaults to the session's circle

        Returns:
            ActionResult carrying the stored Kilroy
        """
        place = self.state.place
        if place is None:
            return ActionResult.failure(self._missing_place_error("submit_kilroy"))

        if not is_image_upload(content_type):
            error = ValidationError(
                f"Rejected upload with content type {content_type!r}",
                code="not_an_image",
                user_message="Please select an image file",
                details={"content_type": content_type},
            )
            return ActionResult.failure(handle_error(error))

        try:
            requested = Circle.parse(circle) if circle is not None else self.state.circle
        except ValueError as e:
            error = ValidationError(f"Unknown circle {circle!r}", code="unknown_circle", original_exception=e)
            return ActionResult.failure(handle_error(error))

        effective = resolve_post_circle(self.state.is_verified_human, requested)

        try:
            normalized = self.image_normalizer.normalize(image_data)
            kilroy = self.repository.create_post(place, normalized.data, caption, effective)
        except ValidationError as e:
            return ActionResult.failure(handle_error(e))
        except Exception as e:
            upload_error = e if isinstance(e, UploadError) else self._as_upload_error(e, place)
            return ActionResult.failure(handle_error(upload_error, {"operation": "submit_kilroy"}))

        log_user_action("kilroy_submitted", place_id=place.place_id, kilroy_id=kilroy.id, circle=effective.value)
        return ActionResult.success(kilroy)

    def _as_upload_error(self, error: Exception, place: Place) -> UploadError:
        cause_code = error.code if isinstance(error, KilroyError) else type(error).__name__
        return UploadError(
            f"Failed to create kilroy at {place.place_id}: {error}",
            code="kilroy_submit_failed",
            details={"place_id": place.place_id, "cause_code": cause_code},
            original_exception=error,
        )

    def verify(self) -> ActionResult[bool]:
        """
        Run human verification.

        On success the viewer is marked verified and switched to the verified
        circle. A failed or errored challenge leaves the state unchanged.
        """
        try:
            verified = self.verification_service.verify_human()
        except Exception as e:
            return ActionResult.failure(handle_error(e, {"operation": "verify"}))

        if verified:
            self.state.is_verified_human = True
            self.state.circle = Circle.VERIFIED
        return ActionResult.success(verified)

    def change_circle(self, value: Circle | str) -> ActionResult[Circle]:
        """
        Switch the selected circle.

        Selecting verified as an unverified viewer starts verification first;
        the circle only changes if it succeeds.
        """
        try:
            circle = Circle.parse(value)
        except ValueError as e:
            error = ValidationError(f"Unknown circle {value!r}", code="unknown_circle", original_exception=e)
            return ActionResult.failure(handle_error(error))

        if circle is Circle.VERIFIED and not self.state.is_verified_human:
            verification = self.verify()
            if not verification.ok:
                return ActionResult.failure(verification.error)
        else:
            self.state.circle = circle

        return ActionResult.success(self.state.circle)

    def _missing_place_error(self, operation: str) -> ErrorInfo:
        error = ValidationError(
            f"{operation} called before a place was established",
            code="no_place",
            user_message="Kilroy only works when you're somewhere.",
            details={"operation": operation},
        )
        return handle_error(error)
