"""
Pydantic schema for docref.yaml validation.

This validates the YAML structure at load time before converting to the
Settings dataclass.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_REPO_BASE_URL = "https://github.com/caas-team/GoKubeDownscaler"
DEFAULT_BRANCH = "main"


class MissingIdentifierPolicy(str, Enum):
    """What to do with content files that declare no globalReference."""

    ignore = "ignore"
    warn = "warn"
    error = "error"


class ConfigSchema(BaseModel):
    """Top-level docref.yaml structure."""

    model_config = ConfigDict(extra="forbid")

    content_root: str = "documentation"
    output_dir: str = "build/content"
    repo_base_url: str = DEFAULT_REPO_BASE_URL
    default_branch: str = DEFAULT_BRANCH
    # None: derived from DOCREF_ENV (production builds are strict)
    strict_mode: bool | None = None
    missing_identifier: MissingIdentifierPolicy = MissingIdentifierPolicy.warn
    repo_link_requires_path: bool = False
    extensions: list[str] = Field(default_factory=lambda: [".md", ".mdx"])
    workers: int = Field(default=4, ge=1, le=64)
    log_file: str | None = None

    @field_validator("content_root", "output_dir", "default_branch")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure required strings are non-empty."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @field_validator("repo_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URL has valid protocol."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"repo_base_url must start with http:// or https://, got: {v}")
        return v.rstrip("/")  # Normalize: remove trailing slash

    @field_validator("default_branch")
    @classmethod
    def validate_branch(cls, v: str) -> str:
        if " " in v:
            raise ValueError(f"default_branch must not contain spaces, got: {v!r}")
        return v.strip("/")

    @field_validator("extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        """Ensure extensions start with a dot."""
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension '{ext}' must start with a dot")
        return [ext.lower() for ext in v]
