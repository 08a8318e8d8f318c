"""Tests for pydantic-settings based environment configuration."""

from __future__ import annotations

import os
from unittest import mock

import pytest
from pydantic import ValidationError

from docref.env_settings import (
    AppEnvSettings,
    BuildEnvSettings,
    EnvSettings,
    clear_env_settings_cache,
    get_env_settings,
)


class TestBuildEnvSettings:
    """Tests for build-mode environment settings."""

    def test_default_values(self) -> None:
        """Test default values when no env vars set."""
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = BuildEnvSettings()
            assert settings.env == "development"
            assert settings.strict is None
            assert settings.repo_base_url == ""
            assert not settings.is_production
            assert settings.strict_default is False

    def test_production(self) -> None:
        """Production builds default to strict."""
        with mock.patch.dict(os.environ, {"DOCREF_ENV": "production"}, clear=True):
            settings = BuildEnvSettings()
            assert settings.is_production
            assert settings.strict_default is True

    @pytest.mark.parametrize(("raw", "expected"), [("prod", "production"), ("DEV", "development")])
    def test_aliases(self, raw: str, expected: str) -> None:
        """Short forms and case are normalized."""
        with mock.patch.dict(os.environ, {"DOCREF_ENV": raw}, clear=True):
            assert BuildEnvSettings().env == expected

    def test_invalid_env(self) -> None:
        """Unknown build modes are rejected."""
        with mock.patch.dict(os.environ, {"DOCREF_ENV": "staging"}, clear=True):
            with pytest.raises(ValidationError):
                BuildEnvSettings()

    def test_explicit_strict_wins(self) -> None:
        """DOCREF_STRICT overrides the build mode."""
        env = {"DOCREF_ENV": "production", "DOCREF_STRICT": "false"}
        with mock.patch.dict(os.environ, env, clear=True):
            assert BuildEnvSettings().strict_default is False
        with mock.patch.dict(os.environ, {"DOCREF_STRICT": "1"}, clear=True):
            assert BuildEnvSettings().strict_default is True

    def test_repo_url_validation(self) -> None:
        """Repository URL needs a scheme; trailing slash is stripped."""
        with mock.patch.dict(os.environ, {"DOCREF_REPO_BASE_URL": "example.com"}, clear=True):
            with pytest.raises(ValidationError):
                BuildEnvSettings()
        env = {"DOCREF_REPO_BASE_URL": "https://example.com/org/repo/"}
        with mock.patch.dict(os.environ, env, clear=True):
            assert BuildEnvSettings().repo_base_url == "https://example.com/org/repo"


class TestAppEnvSettings:
    """Tests for application environment settings."""

    def test_default_log_level(self) -> None:
        """Test default log level."""
        with mock.patch.dict(os.environ, {}, clear=True):
            assert AppEnvSettings().log_level == "INFO"

    def test_log_level_normalized(self) -> None:
        """Test log level is uppercased."""
        with mock.patch.dict(os.environ, {"LOG_LEVEL": "debug"}, clear=True):
            assert AppEnvSettings().log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        """Test invalid log level raises."""
        with mock.patch.dict(os.environ, {"LOG_LEVEL": "LOUD"}, clear=True):
            with pytest.raises(ValidationError):
                AppEnvSettings()


class TestEnvSettingsCache:
    """Tests for the cached accessor."""

    def test_cached(self) -> None:
        """Repeated calls return the same instance."""
        with mock.patch.dict(os.environ, {}, clear=True):
            assert get_env_settings() is get_env_settings()

    def test_clear_cache(self) -> None:
        """Clearing the cache picks up new environment values."""
        with mock.patch.dict(os.environ, {}, clear=True):
            assert get_env_settings().build.env == "development"
            os.environ["DOCREF_ENV"] = "production"
            assert get_env_settings().build.env == "development"
            clear_env_settings_cache()
            assert get_env_settings().build.env == "production"

    def test_combined(self) -> None:
        """EnvSettings nests build and app settings."""
        with mock.patch.dict(os.environ, {"LOG_LEVEL": "warning"}, clear=True):
            settings = EnvSettings()
            assert settings.app.log_level == "WARNING"
            assert settings.build.env == "development"
