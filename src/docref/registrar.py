"""Identity registrar (phase 1).

Runs once per content file during front-matter extraction. Derives the
file's canonical site path and records its declared global identifier.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import quote

from docref.exceptions import ContentError
from docref.models import (
    TITLE_KEY,
    DeclaredIdentity,
    IssueKind,
    RegistrationRecord,
    ResolutionIssue,
    UndeclaredIdentity,
    identity_from_metadata,
)
from docref.registry import ReferenceRegistry
from docref.reporting import ErrorReporter
from docref.schemas.config import MissingIdentifierPolicy

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".mdx")
INDEX_STEMS = ("index",)


def relative_location(location: Path | str, content_root: Path | str) -> PurePosixPath:
    """Strip the content-root prefix from a file location.

    Locations already relative to the root are returned as-is.
    """
    path = Path(location)
    root = Path(content_root)
    if path.is_absolute():
        try:
            path = path.relative_to(root if root.is_absolute() else root.resolve())
        except ValueError:
            raise ContentError(
                f"{path} is outside the content root {root}", source_file=path
            ) from None
    elif root.parts and path.parts[: len(root.parts)] == root.parts:
        path = Path(*path.parts[len(root.parts) :])
    return PurePosixPath(path.as_posix())


def canonical_path(location: Path | str, content_root: Path | str) -> str:
    """Derive the canonical site path for a content file.

    The markdown suffix is dropped, a trailing ``index`` collapses into its
    directory, and every segment is percent-encoded.

    Example:
        >>> canonical_path("docs/guides/a.md", "docs")
        '/guides/a'
        >>> canonical_path("docs/guides/index.mdx", "docs")
        '/guides'
        >>> canonical_path("docs/my notes/ä.md", "docs")
        '/my%20notes/%C3%A4'
    """
    rel = relative_location(location, content_root)
    if rel.suffix in MARKDOWN_SUFFIXES:
        rel = rel.with_suffix("")
    parts = [part for part in rel.parts if part not in ("", ".")]
    if parts and parts[-1] in INDEX_STEMS:
        parts = parts[:-1]
    return "/" + "/".join(quote(part, safe="") for part in parts)


class IdentityRegistrar:
    """Records each file's declared identifier in the shared registry."""

    def __init__(
        self,
        registry: ReferenceRegistry,
        reporter: ErrorReporter,
        content_root: Path | str,
        *,
        missing_identifier: MissingIdentifierPolicy = MissingIdentifierPolicy.warn,
    ) -> None:
        self.registry = registry
        self.reporter = reporter
        self.content_root = Path(content_root)
        self.missing_identifier = missing_identifier

    def register(self, metadata: dict[str, Any], location: Path | str) -> dict[str, Any]:
        """Register a file's identity and return its metadata unchanged.

        Args:
            metadata: Parsed front matter of the file
            location: File path, absolute or relative to the content root

        Returns:
            The metadata dict that was passed in
        """
        source_file = Path(location)
        path = canonical_path(location, self.content_root)
        identity = identity_from_metadata(metadata)

        match identity:
            case UndeclaredIdentity():
                self._undeclared(source_file, path)
            case DeclaredIdentity(identifier=identifier):
                title = metadata.get(TITLE_KEY)
                self._declared(
                    identifier,
                    path,
                    source_file,
                    str(title) if title is not None else None,
                )

        return metadata

    def _undeclared(self, source_file: Path, path: str) -> None:
        # The file may have carried an identifier in an earlier build.
        for stale in self.registry.remove_path(path):
            logger.info("Identifier %s no longer declared by %s", stale, source_file)

        if self.missing_identifier is MissingIdentifierPolicy.ignore:
            return
        if self.missing_identifier is MissingIdentifierPolicy.warn:
            logger.warning("%s declares no globalReference", source_file)
            return
        self.reporter.report(
            ResolutionIssue(
                kind=IssueKind.MISSING_IDENTIFIER,
                message="File declares no globalReference",
                source_file=source_file,
            )
        )

    def _declared(
        self,
        identifier: str,
        path: str,
        source_file: Path,
        title: str | None,
    ) -> None:
        existing = self.registry.get(identifier)
        if (
            existing is not None
            and existing.canonical_path != path
            and existing.generation == self.registry.generation
        ):
            # Newer registration wins so permissive builds can continue.
            self.reporter.report(
                ResolutionIssue(
                    kind=IssueKind.DUPLICATE_IDENTIFIER,
                    message=(
                        f"Identifier {identifier!r} is already declared by "
                        f"{existing.source_file} ({existing.canonical_path})"
                    ),
                    source_file=source_file,
                    target=identifier,
                    related_file=existing.source_file,
                )
            )
        elif existing is not None and existing.canonical_path != path:
            logger.info(
                "Identifier %s moved from %s to %s",
                identifier,
                existing.canonical_path,
                path,
            )

        self.registry.remove_path(path, keep=identifier)
        self.registry.put(
            RegistrationRecord(
                identifier=identifier,
                canonical_path=path,
                source_file=source_file,
                title=title,
            )
        )
