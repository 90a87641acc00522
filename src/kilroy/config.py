"""Configuration management for Kilroy.

Values come from environment variables first and Streamlit secrets as a
fallback, so the same code runs under `streamlit run` and in tests.
"""

import os
from typing import Any

import streamlit as st

from .logging_config import get_logger

logger = get_logger(__name__)

DEVELOPMENT_ENVIRONMENTS = ("development", "dev", "local", "test")


class Config:
    """Environment-first settings with a Streamlit secrets fallback."""

    def __init__(self):
        self._cache = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """Look up a setting.

        Args:
            key: Configuration key
            default: Returned when the key is unset or cannot be cast
            cast_type: str, int, float or bool

        Returns:
            The value cast to cast_type, or default
        """
        cache_key = f"{key}:{cast_type.__name__}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        value = os.getenv(key)
        if value is None:
            value = self._from_secrets(key)
        if value is None:
            value = default
        elif cast_type is bool and isinstance(value, str):
            value = value.lower() in ("true", "1", "yes", "on")
        elif cast_type is not str:
            try:
                value = cast_type(value)
            except (ValueError, TypeError) as e:
                logger.warning("config_cast_failed", key=key, cast_type=cast_type.__name__, error=str(e))
                value = default

        self._cache[cache_key] = value
        return value

    def _from_secrets(self, key: str) -> Any:
        try:
            return st.secrets.get(key)
        except Exception:  # nosec B110
            # No secrets.toml outside `streamlit run`
            return None

    def get_required(self, key: str, cast_type: type = str) -> Any:
        """Look up a setting that must be present.

        Raises:
            ValueError: If the key is unset
        """
        value = self.get(key, cast_type=cast_type)
        if value is None:
            raise ValueError(f"Required configuration '{key}' not found")
        return value

    def is_development(self) -> bool:
        return str(self.get("ENVIRONMENT", "development")).lower() in DEVELOPMENT_ENVIRONMENTS

    def clear_cache(self):
        self._cache.clear()


_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_env(key: str, default: Any = None, cast_type: type = str) -> Any:
    return get_config().get(key, default, cast_type)


def get_required_env(key: str, cast_type: type = str) -> Any:
    return get_config().get_required(key, cast_type)


def is_development() -> bool:
    """Development, local and test runs; anything else is treated as production."""
    return get_config().is_development()


def get_project_id() -> str:
    """Get Google Cloud project ID."""
    return str(get_required_env("GOOGLE_CLOUD_PROJECT"))


def get_gcs_bucket() -> str:
    """Get the GCS bucket that holds kilroy images."""
    return str(get_required_env("GCS_IMAGES_BUCKET"))


def get_public_base_url() -> str | None:
    """Get the optional base URL (e.g. a CDN) served instead of the bucket's public URL."""
    value = get_env("GCS_PUBLIC_BASE_URL")
    return str(value) if value else None


def get_places_api_key() -> str | None:
    """Get the Google Places/Geocoding API key, or None to run without one."""
    value = get_env("GOOGLE_PLACES_API_KEY")
    return str(value) if value else None


def get_places_http_timeout() -> float:
    """Get the timeout in seconds for Places/Geocoding HTTP calls."""
    return float(get_env("PLACES_HTTP_TIMEOUT", 10.0, float))


def get_database_path() -> str:
    """Get the DuckDB document store path."""
    return str(get_env("KILROY_DB_PATH", "kilroy.duckdb"))


def get_verification_action() -> str:
    """Get the action identifier passed to the verification challenge."""
    return str(get_env("VERIFICATION_ACTION", "kilroy-verify"))


def get_verification_level() -> str:
    """Get the required verification assurance level."""
    return str(get_env("VERIFICATION_LEVEL", "orb")).lower()
