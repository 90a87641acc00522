"""
Unit tests for application state and the controller.
"""

from unittest.mock import MagicMock

import pytest

from src.kilroy.error_handling import ErrorCategory, ImageProcessingError, StorageError, UploadError
from src.kilroy.models.kilroy import Circle, Kilroy
from src.kilroy.models.place import Place
from src.kilroy.services.geolocation import Coordinates, GeolocationError
from src.kilroy.services.image_normalizer import ImageNormalizer, NormalizedImage
from src.kilroy.services.kilroy_repository import KilroyRepository
from src.kilroy.services.place_resolver import PlaceResolver
from src.kilroy.services.verification import VerificationService
from src.kilroy.state import ActionResult, AppState, KilroyController

PLACE = Place(place_id="ChIJtest", place_name="Corner Cafe", address="1 Main St")


class StubProvider:
    def __init__(self, coordinates=None, error=None):
        self.coordinates = coordinates
        self.error = error

    def get_current_position(self, on_success, on_error, options):
        if self.coordinates is not None:
            on_success(self.coordinates)
        elif self.error is not None:
            on_error(self.error)


def make_kilroy(circle=Circle.COMMUNITY, caption="hi"):
    return Kilroy(
        id="1700000000000_abcdefg",
        place_id=PLACE.place_id,
        image_url="https://example.com/a.jpg",
        caption=caption,
        circle=circle,
        created_at=1700000000000,
    )


class TestAppState:
    def test_defaults(self):
        state = AppState()

        assert state.place is None
        assert state.circle is Circle.COMMUNITY
        assert state.is_verified_human is False
        assert state.location_denied is False
        assert state.is_loading is True
        assert state.has_place is False


class TestActionResult:
    def test_success_and_failure(self):
        assert ActionResult.success(3) == ActionResult(ok=True, value=3, error=None)
        error_info = StorageError("x").get_error_info()
        failure = ActionResult.failure(error_info)
        assert failure.ok is False
        assert failure.error is error_info


class TestKilroyController:
    """Test cases for KilroyController."""

    def setup_method(self):
        """Set up test fixtures."""
        self.state = AppState()
        self.resolver = MagicMock(spec=PlaceResolver)
        self.resolver.get_cached.return_value = None
        self.resolver.resolve.return_value = PLACE
        self.repository = MagicMock(spec=KilroyRepository)
        self.repository.has_any_posts.return_value = False
        self.normalizer = MagicMock(spec=ImageNormalizer)
        self.normalizer.normalize.return_value = NormalizedImage(
            data=b"jpeg", width=10, height=10, quality=0.75, attempts=1
        )
        self.verification = MagicMock(spec=VerificationService)
        self.notifier = MagicMock()
        self.controller = KilroyController(
            state=self.state,
            place_resolver=self.resolver,
            repository=self.repository,
            image_normalizer=self.normalizer,
            verification_service=self.verification,
            notifier=self.notifier,
        )

    # initialize_location

    def test_initialize_uses_cached_place(self):
        self.resolver.get_cached.return_value = PLACE
        provider = MagicMock()

        result = self.controller.initialize_location(provider)

        assert result.ok and result.value == PLACE
        assert self.state.place == PLACE
        assert self.state.is_loading is False
        provider.get_current_position.assert_not_called()

    def test_initialize_resolves_position(self):
        result = self.controller.initialize_location(StubProvider(coordinates=Coordinates(1.0, 2.0)))

        assert result.ok and result.value == PLACE
        self.resolver.resolve.assert_called_once_with(1.0, 2.0)
        assert self.state.place == PLACE
        assert self.state.is_loading is False
        assert self.state.location_denied is False

    def test_initialize_denied(self):
        provider = StubProvider(error=GeolocationError(GeolocationError.PERMISSION_DENIED, "denied"))

        result = self.controller.initialize_location(provider)

        assert result.ok is False
        assert result.error.category is ErrorCategory.LOCATION
        assert self.state.location_denied is True
        assert self.state.is_loading is False
        assert self.state.place is None

    def test_initialize_unsupported(self):
        result = self.controller.initialize_location(None)

        assert result.ok is False
        assert self.state.location_denied is True

    def test_initialize_pending_keeps_loading(self):
        result = self.controller.initialize_location(StubProvider())

        assert result.ok is True
        assert result.value is None
        assert self.state.is_loading is True
        self.resolver.resolve.assert_not_called()

    def test_retry_clears_denial(self):
        self.state.location_denied = True

        result = self.controller.retry_location(StubProvider(coordinates=Coordinates(1.0, 2.0)))

        assert result.ok
        assert self.state.location_denied is False

    def test_notifies_when_place_has_kilroys(self):
        self.repository.has_any_posts.return_value = True

        self.controller.initialize_location(StubProvider(coordinates=Coordinates(1.0, 2.0)))

        self.notifier.assert_called_once()

    def test_no_notification_for_empty_place(self):
        self.controller.initialize_location(StubProvider(coordinates=Coordinates(1.0, 2.0)))

        self.notifier.assert_not_called()

    def test_notification_failure_is_swallowed(self):
        self.repository.has_any_posts.side_effect = RuntimeError("database unreachable")

        result = self.controller.initialize_location(StubProvider(coordinates=Coordinates(1.0, 2.0)))

        assert result.ok
        assert self.state.place == PLACE

    # load_kilroys

    def test_load_requires_place(self):
        result = self.controller.load_kilroys()

        assert result.ok is False
        assert result.error.code == "no_place"

    def test_load_unverified_lists_community(self):
        self.state.place = PLACE
        self.state.circle = Circle.VERIFIED
        self.repository.list_posts.return_value = [make_kilroy()]

        result = self.controller.load_kilroys()

        assert result.ok and len(result.value) == 1
        self.repository.list_posts.assert_called_once_with(PLACE.place_id, circle=Circle.COMMUNITY)

    def test_load_verified_lists_verified(self):
        self.state.place = PLACE
        self.state.circle = Circle.VERIFIED
        self.state.is_verified_human = True
        self.repository.list_posts.return_value = []

        self.controller.load_kilroys()

        self.repository.list_posts.assert_called_once_with(PLACE.place_id, circle=Circle.VERIFIED)

    def test_load_failure_is_a_result(self):
        self.state.place = PLACE
        self.repository.list_posts.side_effect = RuntimeError("duckdb query exploded")

        result = self.controller.load_kilroys()

        assert result.ok is False
        assert result.error is not None

    # submit_kilroy

    def test_submit(self):
        self.state.place = PLACE
        kilroy = make_kilroy()
        self.repository.create_post.return_value = kilroy

        result = self.controller.submit_kilroy(b"raw", "image/png", "hi", Circle.COMMUNITY)

        assert result.ok and result.value == kilroy
        self.normalizer.normalize.assert_called_once_with(b"raw")
        self.repository.create_post.assert_called_once_with(PLACE, b"jpeg", "hi", Circle.COMMUNITY)

    def test_submit_unverified_verified_is_coerced(self):
        self.state.place = PLACE
        self.repository.create_post.return_value = make_kilroy()

        self.controller.submit_kilroy(b"raw", "image/jpeg", "hi", "verified")

        assert self.repository.create_post.call_args.args[3] is Circle.COMMUNITY

    def test_submit_verified_human_keeps_verified(self):
        self.state.place = PLACE
        self.state.is_verified_human = True
        self.repository.create_post.return_value = make_kilroy(Circle.VERIFIED)

        self.controller.submit_kilroy(b"raw", "image/jpeg", "hi", Circle.VERIFIED)

        assert self.repository.create_post.call_args.args[3] is Circle.VERIFIED

    def test_submit_defaults_to_state_circle(self):
        self.state.place = PLACE
        self.state.is_verified_human = True
        self.state.circle = Circle.VERIFIED
        self.repository.create_post.return_value = make_kilroy(Circle.VERIFIED)

        self.controller.submit_kilroy(b"raw", "image/jpeg", None)

        assert self.repository.create_post.call_args.args[3] is Circle.VERIFIED

    def test_submit_rejects_non_image(self):
        self.state.place = PLACE

        result = self.controller.submit_kilroy(b"%PDF", "application/pdf", "hi")

        assert result.ok is False
        assert result.error.user_message == "Please select an image file"
        self.normalizer.normalize.assert_not_called()
        self.repository.create_post.assert_not_called()

    def test_submit_rejects_unknown_circle(self):
        self.state.place = PLACE

        result = self.controller.submit_kilroy(b"raw", "image/jpeg", "hi", "friends")

        assert result.ok is False
        assert result.error.code == "unknown_circle"

    def test_submit_requires_place(self):
        result = self.controller.submit_kilroy(b"raw", "image/jpeg", "hi")

        assert result.ok is False
        assert result.error.code == "no_place"

    @pytest.mark.parametrize(
        "failure",
        [
            ImageProcessingError("decode failed", code="image_decode_failed"),
            UploadError("create failed", code="kilroy_create_failed"),
            RuntimeError("boom"),
        ],
    )
    def test_submit_failures_become_failed_to_create(self, failure):
        self.state.place = PLACE
        if isinstance(failure, ImageProcessingError):
            self.normalizer.normalize.side_effect = failure
        else:
            self.repository.create_post.side_effect = failure

        result = self.controller.submit_kilroy(b"raw", "image/jpeg", "hi")

        assert result.ok is False
        assert result.error.category is ErrorCategory.UPLOAD
        assert result.error.user_message == "Failed to create. Please try again."
        assert result.error.retry_suggested is True

    # verify / change_circle

    def test_verify_success(self):
        self.verification.verify_human.return_value = True

        result = self.controller.verify()

        assert result.ok and result.value is True
        assert self.state.is_verified_human is True
        assert self.state.circle is Circle.VERIFIED

    def test_verify_failure_leaves_state(self):
        self.verification.verify_human.return_value = False

        result = self.controller.verify()

        assert result.value is False
        assert self.state.is_verified_human is False
        assert self.state.circle is Circle.COMMUNITY

    def test_verify_error_is_a_failed_result(self):
        self.verification.verify_human.side_effect = TypeError("provider bridge crashed")

        result = self.controller.verify()

        assert result.ok is False
        assert result.error is not None
        assert self.state.is_verified_human is False
        assert self.state.circle is Circle.COMMUNITY

    def test_change_to_verified_surfaces_verification_error(self):
        self.verification.verify_human.side_effect = RuntimeError("provider bridge crashed")

        result = self.controller.change_circle(Circle.VERIFIED)

        assert result.ok is False
        assert self.state.circle is Circle.COMMUNITY

    def test_change_to_verified_triggers_verification(self):
        self.verification.verify_human.return_value = True

        result = self.controller.change_circle("verified")

        self.verification.verify_human.assert_called_once()
        assert result.value is Circle.VERIFIED

    def test_change_to_verified_stays_when_verification_fails(self):
        self.verification.verify_human.return_value = False

        result = self.controller.change_circle(Circle.VERIFIED)

        assert result.value is Circle.COMMUNITY

    def test_change_when_verified_skips_challenge(self):
        self.state.is_verified_human = True

        self.controller.change_circle(Circle.VERIFIED)
        self.controller.change_circle("world")

        self.verification.verify_human.assert_not_called()
        assert self.state.circle is Circle.COMMUNITY

    def test_change_unknown_circle(self):
        result = self.controller.change_circle("friends")

        assert result.ok is False
