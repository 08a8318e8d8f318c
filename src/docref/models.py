"""Data models for docref."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from docref.exceptions import ERRORS_BY_KIND, ResolutionError

# Front-matter keys recognised by the registrar
IDENTIFIER_KEY = "globalReference"
TITLE_KEY = "title"


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class RegistrationRecord:
    """Binding of a global identifier to the page that declared it."""

    identifier: str
    canonical_path: str  # e.g. "/guides/getting-started"
    source_file: Path
    title: str | None = None
    generation: int = 0  # Build generation that wrote this record

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier,
            "canonical_path": self.canonical_path,
            "title": self.title,
            "source_file": str(self.source_file),
        }


# =============================================================================
# Identity (front matter)
# =============================================================================


@dataclass(frozen=True)
class DeclaredIdentity:
    """File declares a global identifier in its front matter."""

    identifier: str


@dataclass(frozen=True)
class UndeclaredIdentity:
    """File has no externally linkable identity."""


Identity = DeclaredIdentity | UndeclaredIdentity


def identity_from_metadata(metadata: dict[str, Any]) -> Identity:
    """Classify a front-matter block as declaring an identifier or not.

    Non-string values are stringified; blank values count as undeclared.
    """
    raw = metadata.get(IDENTIFIER_KEY)
    if raw is None:
        return UndeclaredIdentity()
    identifier = str(raw).strip()
    if not identifier:
        return UndeclaredIdentity()
    return DeclaredIdentity(identifier)


# =============================================================================
# Link tokens
# =============================================================================


@dataclass(frozen=True)
class GlobalRef:
    """``ref:<identifier>[#<anchor>]``"""

    identifier: str
    anchor: str | None = None


@dataclass(frozen=True)
class RepoLocator:
    """``repo`` or ``repo:<path>``"""

    path: str | None = None


@dataclass(frozen=True)
class PlainLink:
    """Any target that is not a docref token."""

    url: str


LinkToken = GlobalRef | RepoLocator | PlainLink


# =============================================================================
# Content
# =============================================================================


@dataclass
class LinkNode:
    """A markdown link found in a content file.

    ``span`` is the (start, end) offset of the link target inside the body,
    used to splice the rewritten target back into the text.
    """

    url: str
    text: str = ""
    title: str | None = None
    line: int | None = None
    column: int | None = None
    span: tuple[int, int] | None = None
    inert: bool = False  # Unresolved token, rendered escaped
    original_url: str = field(init=False, repr=False)
    original_title: str | None = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.original_url = self.url
        self.original_title = self.title

    @property
    def changed(self) -> bool:
        return self.inert or self.url != self.original_url or self.title != self.original_title


@dataclass
class ContentFile:
    """A parsed content file: front matter, body and its link nodes."""

    source_file: Path
    relative_path: Path
    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    raw_text: str = ""
    body_offset: int = 0  # Offset of body within raw_text
    links: list[LinkNode] = field(default_factory=list)


# =============================================================================
# Issues
# =============================================================================


class IssueKind(Enum):
    """Kinds of resolution problems reported through the error policy."""

    MISSING_REFERENCE = "missing_reference"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"
    SELF_REFERENCE = "self_reference"
    MISSING_REPO_PATH = "missing_repo_path"
    MISSING_IDENTIFIER = "missing_identifier"


@dataclass(frozen=True)
class ResolutionIssue:
    """A single problem with one token or one file."""

    kind: IssueKind
    message: str
    source_file: Path
    line: int | None = None
    column: int | None = None
    target: str | None = None
    related_file: Path | None = None  # e.g. the earlier declaration of a duplicate

    @property
    def location(self) -> str:
        loc = str(self.source_file)
        if self.line is not None:
            loc += f":{self.line}"
            if self.column is not None:
                loc += f":{self.column}"
        return loc

    def describe(self) -> str:
        return f"{self.location}: {self.message}"

    def to_exception(self) -> ResolutionError:
        """Build the typed exception matching this issue's kind."""
        error_cls = ERRORS_BY_KIND[self.kind.value]
        kwargs: dict[str, Any] = {
            "source_file": self.source_file,
            "line": self.line,
            "column": self.column,
            "target": self.target,
        }
        if self.kind is IssueKind.DUPLICATE_IDENTIFIER:
            kwargs["identifier"] = self.target
            kwargs["previous_file"] = self.related_file
        return error_cls(self.message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "source_file": str(self.source_file),
            "line": self.line,
            "column": self.column,
            "target": self.target,
            "related_file": str(self.related_file) if self.related_file else None,
        }
