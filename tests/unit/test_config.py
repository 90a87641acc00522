"""
Unit tests for configuration management.
"""

from unittest.mock import MagicMock, patch

import pytest

from src.kilroy.config import (
    Config,
    get_database_path,
    get_gcs_bucket,
    get_places_api_key,
    get_places_http_timeout,
    get_project_id,
    get_public_base_url,
    get_verification_action,
    get_verification_level,
    is_development,
)


class TestConfig:
    """Test cases for Config class."""

    def test_get_from_environment(self, monkeypatch):
        monkeypatch.setenv("SOME_KEY", "value")
        assert Config().get("SOME_KEY") == "value"

    def test_default(self):
        assert Config().get("MISSING_KEY", "fallback") == "fallback"

    def test_cast_types(self, monkeypatch):
        monkeypatch.setenv("AN_INT", "42")
        monkeypatch.setenv("A_FLOAT", "2.5")
        monkeypatch.setenv("A_BOOL", "yes")
        config = Config()

        assert config.get("AN_INT", cast_type=int) == 42
        assert config.get("A_FLOAT", cast_type=float) == 2.5
        assert config.get("A_BOOL", cast_type=bool) is True

    def test_cast_failure_returns_default(self, monkeypatch):
        monkeypatch.setenv("AN_INT", "many")
        assert Config().get("AN_INT", 7, int) == 7

    def test_cache_and_clear(self, monkeypatch):
        config = Config()
        monkeypatch.setenv("CACHED", "one")
        assert config.get("CACHED") == "one"

        monkeypatch.setenv("CACHED", "two")
        assert config.get("CACHED") == "one"

        config.clear_cache()
        assert config.get("CACHED") == "two"

    def test_streamlit_secrets_fallback(self):
        secrets = MagicMock()
        secrets.get.return_value = "from-secrets"

        with patch("src.kilroy.config.st.secrets", secrets):
            assert Config().get("ONLY_IN_SECRETS") == "from-secrets"

    def test_get_required_missing(self):
        with pytest.raises(ValueError, match="Required configuration 'NOPE' not found"):
            Config().get_required("NOPE")

    def test_environments(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        assert Config().is_development() is False

        monkeypatch.setenv("ENVIRONMENT", "Local")
        assert Config().is_development() is True


class TestGetters:
    def test_test_environment_is_development(self):
        assert is_development() is True

    def test_required_values(self):
        assert get_project_id() == "test-project"
        assert get_gcs_bucket() == "test-kilroy-bucket"

    def test_public_base_url(self, monkeypatch):
        monkeypatch.setenv("GCS_PUBLIC_BASE_URL", "https://cdn.example.com")
        assert get_public_base_url() == "https://cdn.example.com"

    def test_places_api_key_optional(self):
        assert get_places_api_key() is None

    def test_places_api_key(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_PLACES_API_KEY", "abc")
        assert get_places_api_key() == "abc"

    def test_defaults(self):
        assert get_database_path() == "kilroy.duckdb"
        assert get_public_base_url() is None
        assert get_places_http_timeout() == 10.0
        assert get_verification_action() == "kilroy-verify"
        assert get_verification_level() == "orb"
