"""Pydantic schemas for docref configuration."""

from docref.schemas.config import (
    DEFAULT_BRANCH,
    DEFAULT_REPO_BASE_URL,
    ConfigSchema,
    MissingIdentifierPolicy,
)

__all__ = [
    "ConfigSchema",
    "MissingIdentifierPolicy",
    "DEFAULT_BRANCH",
    "DEFAULT_REPO_BASE_URL",
]
