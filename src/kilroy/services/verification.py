"""
Human verification for the verified circle.

The challenge itself is run by an external identity provider. This module
only asks it for a result. When no provider is installed, for example
when running the app locally outside the host wallet, the viewer is treated
as verified so the verified circle can still be exercised.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from ..error_handling import VerificationError
from ..logging_config import get_logger, log_security_event, log_user_action

logger = get_logger(__name__)

DEFAULT_VERIFICATION_ACTION = "kilroy-verify"


class VerificationLevel(Enum):
    """Assurance levels the provider can be asked for."""

    ORB = "orb"
    DEVICE = "device"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome reported by the provider."""

    status: str
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.status == "success"


class VerificationProvider(Protocol):
    """External identity verification challenge."""

    def is_installed(self) -> bool: ...

    def verify(self, action: str, verification_level: VerificationLevel) -> VerificationResult: ...


class VerificationService:
    """Runs the verification challenge and applies the local bypass."""

    def __init__(
        self,
        provider: VerificationProvider | None = None,
        action: str = DEFAULT_VERIFICATION_ACTION,
        level: VerificationLevel = VerificationLevel.ORB,
    ) -> None:
        self.provider = provider
        self.action = action
        self.level = level

    def is_provider_installed(self) -> bool:
        """Whether a provider is present and reports itself installed. Lookup errors propagate."""
        if self.provider is None:
            return False
        return bool(self.provider.is_installed())

    def verify_human(self) -> bool:
        """
        Run the challenge.

        Returns:
            bool: True when the viewer is a verified human. Provider errors
            and non-success results count as not verified.
        """
        try:
            return self._run_challenge()
        except VerificationError:
            return False

    def _run_challenge(self) -> bool:
        provider = self.provider
        try:
            installed = self.is_provider_installed()
        except Exception as e:
            raise VerificationError(
                f"Verification provider lookup failed: {e}",
                code="verification_provider_unavailable",
                details={"action": self.action},
                original_exception=e,
            ) from e

        if provider is None or not installed:
            logger.warning(
                "verification_bypassed",
                reason="provider_not_installed",
                action=self.action,
            )
            log_security_event("verification_bypassed", action=self.action, level=self.level.value)
            return True

        try:
            result = provider.verify(self.action, self.level)
        except Exception as e:
            raise VerificationError(
                f"Verification challenge errored: {e}",
                details={"action": self.action, "level": self.level.value},
                original_exception=e,
            ) from e

        if result.is_success:
            log_user_action("verification_succeeded", verification_action=self.action, level=self.level.value)
            return True

        log_security_event("verification_rejected", action=self.action, status=result.status)
        return False


def create_verification_service(provider: VerificationProvider | None = None) -> VerificationService:
    """Build a verification service from configuration."""
    from ..config import get_verification_action, get_verification_level

    level_name = get_verification_level()
    try:
        level = VerificationLevel(level_name)
    except ValueError:
        logger.warning("verification_level_unknown", level=level_name, fallback=VerificationLevel.ORB.value)
        level = VerificationLevel.ORB

    return VerificationService(provider=provider, action=get_verification_action(), level=level)
