"""
Unit tests for human verification.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.kilroy.error_handling import VerificationError
from src.kilroy.services.verification import (
    VerificationLevel,
    VerificationResult,
    VerificationService,
    create_verification_service,
)


def make_provider(installed=True, result=None, error=None):
    provider = MagicMock()
    provider.is_installed.return_value = installed
    if error is not None:
        provider.verify.side_effect = error
    else:
        provider.verify.return_value = result or VerificationResult(status="success")
    return provider


class TestVerificationService:
    """Test cases for VerificationService."""

    def test_no_provider_bypasses_to_verified(self):
        assert VerificationService(provider=None).verify_human() is True

    def test_provider_not_installed_bypasses(self):
        provider = make_provider(installed=False)

        assert VerificationService(provider=provider).verify_human() is True
        provider.verify.assert_not_called()

    def test_success(self):
        provider = make_provider(result=VerificationResult(status="success", payload={"nullifier_hash": "0x1"}))
        service = VerificationService(provider=provider)

        assert service.verify_human() is True
        provider.verify.assert_called_once_with("kilroy-verify", VerificationLevel.ORB)

    def test_rejected(self):
        provider = make_provider(result=VerificationResult(status="error"))

        assert VerificationService(provider=provider).verify_human() is False

    def test_provider_exception_means_not_verified(self):
        provider = make_provider(error=RuntimeError("user closed the drawer"))

        assert VerificationService(provider=provider).verify_human() is False

    def test_challenge_error_is_a_verification_error(self):
        provider = make_provider(error=RuntimeError("user closed the drawer"))

        with pytest.raises(VerificationError) as exc_info:
            VerificationService(provider=provider)._run_challenge()

        assert exc_info.value.code == "verification_failed"

    def test_installed_check_failure_means_not_verified(self):
        provider = make_provider()
        provider.is_installed.side_effect = RuntimeError("bridge broken")

        with patch("src.kilroy.error_handling.log_security_event") as mock_event:
            assert VerificationService(provider=provider).verify_human() is False

        mock_event.assert_called_once_with("verification", code="verification_provider_unavailable")
        provider.verify.assert_not_called()

    def test_success_logs_user_action(self):
        provider = make_provider()

        with patch("src.kilroy.services.verification.log_user_action") as mock_action:
            assert VerificationService(provider=provider).verify_human() is True

        mock_action.assert_called_once_with("verification_succeeded", verification_action="kilroy-verify", level="orb")


class TestCreateVerificationService:
    def test_defaults(self):
        service = create_verification_service()

        assert service.action == "kilroy-verify"
        assert service.level is VerificationLevel.ORB
        assert service.provider is None

    def test_configured_level(self, monkeypatch):
        monkeypatch.setenv("VERIFICATION_LEVEL", "Device")
        monkeypatch.setenv("VERIFICATION_ACTION", "other-action")

        service = create_verification_service()

        assert service.level is VerificationLevel.DEVICE
        assert service.action == "other-action"

    def test_unknown_level_falls_back_to_orb(self, monkeypatch):
        monkeypatch.setenv("VERIFICATION_LEVEL", "retina")

        assert create_verification_service().level is VerificationLevel.ORB
