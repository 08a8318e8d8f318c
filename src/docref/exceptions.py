"""
docref exception hierarchy.

Provides typed exceptions for better error handling and clearer error messages.

Exception Hierarchy:
    DocrefError (base)
    ├── ConfigurationError - Config file issues, invalid settings
    ├── ContentError - Unreadable content files, malformed front matter
    ├── PhaseOrderError - Resolution attempted before registration finished
    └── ResolutionError - Link/identity problems (raised in strict mode only)
        ├── MissingReferenceError - ref: token names an unknown identifier
        ├── DuplicateIdentifierError - Two files claim the same identifier
        ├── SelfReferenceError - A file links to itself through ref:
        ├── MissingRepoPathError - Bare repo token when a path is required
        ├── MissingIdentifierError - File declares no identifier (policy=error)
        └── BuildAbortedError - Strict mode stopped the build on an issue
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from docref.models import ResolutionIssue


class DocrefError(Exception):
    """Base exception for all docref errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """
        Initialize docref exception.

        Args:
            message: Human-readable error message
            details: Optional structured error details for logging/debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(DocrefError):
    """Configuration file or settings error."""

    def __init__(
        self,
        message: str,
        *,
        config_file: Path | str | None = None,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if config_file:
            details["config_file"] = str(config_file)
        if field:
            details["field"] = field
        super().__init__(message, details=details)
        self.config_file = config_file
        self.field = field


# =============================================================================
# Content Errors
# =============================================================================


class ContentError(DocrefError):
    """Content file could not be read or parsed."""

    def __init__(
        self,
        message: str,
        *,
        source_file: Path | str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source_file:
            details["source_file"] = str(source_file)
        super().__init__(message, details=details)
        self.source_file = source_file


class PhaseOrderError(DocrefError):
    """Link resolution was attempted while identities were still being registered."""

    pass


# =============================================================================
# Resolution Errors
# =============================================================================


class ResolutionError(DocrefError):
    """A link token or identity declaration could not be honoured."""

    kind: str = "resolution"

    def __init__(
        self,
        message: str,
        *,
        source_file: Path | str | None = None,
        line: int | None = None,
        column: int | None = None,
        target: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if source_file:
            details["source_file"] = str(source_file)
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        if target:
            details["target"] = target
        super().__init__(message, details=details)
        self.source_file = source_file
        self.line = line
        self.column = column
        self.target = target


class MissingReferenceError(ResolutionError):
    """ref: token names an identifier nobody registered."""

    kind = "missing_reference"


class DuplicateIdentifierError(ResolutionError):
    """Two content files declare the same global identifier."""

    kind = "duplicate_identifier"

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        previous_file: Path | str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.get("details", {})
        if identifier:
            details["identifier"] = identifier
        if previous_file:
            details["previous_file"] = str(previous_file)
        kwargs["details"] = details
        super().__init__(message, **kwargs)
        self.identifier = identifier
        self.previous_file = previous_file


class SelfReferenceError(ResolutionError):
    """A file points at its own identity through a ref: token."""

    kind = "self_reference"


class MissingRepoPathError(ResolutionError):
    """Repository locator without a path while a path is required."""

    kind = "missing_repo_path"


class MissingIdentifierError(ResolutionError):
    """Content file declares no global identifier."""

    kind = "missing_identifier"


class BuildAbortedError(ResolutionError):
    """Strict mode aborted the build on the first reported issue."""

    kind = "build_aborted"

    def __init__(self, issue: ResolutionIssue) -> None:
        super().__init__(
            f"Build aborted: {issue.describe()}",
            source_file=issue.source_file,
            line=issue.line,
            column=issue.column,
            target=issue.target,
            details={"kind": issue.kind.value},
        )
        self.issue = issue


ERRORS_BY_KIND: dict[str, type[ResolutionError]] = {
    cls.kind: cls
    for cls in (
        MissingReferenceError,
        DuplicateIdentifierError,
        SelfReferenceError,
        MissingRepoPathError,
        MissingIdentifierError,
    )
}
