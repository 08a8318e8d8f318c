"""Environment-based settings using pydantic-settings.

This module provides type-safe environment variable loading with validation.
Environment variables are loaded automatically; docref.yaml and CLI flags
take precedence where they set a value.

Usage:
    from docref.env_settings import get_env_settings

    env = get_env_settings()
    print(env.build.strict_default)

Environment Variables:
    Build:
        DOCREF_ENV - Build mode: "development" or "production" (default: "development")
        DOCREF_STRICT - Force strict mode on/off, over docref.yaml and build mode
        DOCREF_REPO_BASE_URL - Override repository base URL
        DOCREF_DEFAULT_BRANCH - Override repository default branch

    Application:
        LOG_LEVEL - Logging level (default: "INFO")

    Path Overrides (from platformdirs):
        DOCREF_LOG_DIR - Override log directory
"""

from __future__ import annotations

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

BUILD_MODES = {"development", "production"}


class BuildEnvSettings(BaseSettings):
    """Build-mode signal and repository overrides from environment variables.

    Reads from DOCREF_ENV, DOCREF_STRICT, DOCREF_REPO_BASE_URL,
    DOCREF_DEFAULT_BRANCH env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCREF_",
        extra="ignore",
    )

    env: str = Field(default="development", description="Build mode")
    strict: bool | None = Field(default=None, description="Explicit strict-mode override")
    repo_base_url: str = Field(default="", description="Repository base URL override")
    default_branch: str = Field(default="", description="Default branch override")

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Normalize build mode; accept common short forms."""
        value = v.strip().lower()
        aliases = {"dev": "development", "prod": "production"}
        value = aliases.get(value, value)
        if value not in BUILD_MODES:
            raise ValueError(f"DOCREF_ENV must be one of {sorted(BUILD_MODES)}, got: {v}")
        return value

    @field_validator("repo_base_url")
    @classmethod
    def validate_repo_base_url(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError(f"DOCREF_REPO_BASE_URL must start with http:// or https://, got: {v}")
        return v.rstrip("/") if v else v

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def strict_default(self) -> bool:
        """Strict mode implied by the environment.

        DOCREF_STRICT wins; otherwise production builds fail fast and
        development builds warn and continue.
        """
        if self.strict is not None:
            return self.strict
        return self.is_production


class AppEnvSettings(BaseSettings):
    """Application-level settings from environment variables.

    Reads from LOG_LEVEL env var.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got: {v}")
        return upper


class EnvSettings(BaseSettings):
    """Combined environment settings.

    Use get_env_settings() to get a cached instance.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
    )

    build: BuildEnvSettings = Field(default_factory=BuildEnvSettings)
    app: AppEnvSettings = Field(default_factory=AppEnvSettings)


@lru_cache(maxsize=1)
def get_env_settings() -> EnvSettings:
    """Get cached environment settings.

    Returns:
        EnvSettings instance with all environment-based configuration.
    """
    return EnvSettings()


def clear_env_settings_cache() -> None:
    """Clear the cached environment settings.

    Useful for testing to ensure fresh settings are loaded.
    """
    get_env_settings.cache_clear()
