"""Build orchestration: registration phase, barrier, resolution phase.

A BuildContext is constructed once per build invocation and owns the
registry, the error reporter and the phase components. Running a build
on the same context again is an incremental rebuild: the registry opens a
new generation, files re-register, identities of deleted files are pruned.

Phase ordering:

    1. parse every content file (parallel) and register identities in
       sorted source order (single writer)
    2. registry.freeze()  <- barrier, no resolution before this point
    3. rewrite link tokens in every file (parallel, read-only registry)
    4. optionally write the rewritten files to the output directory
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docref.config import Settings
from docref.content import discover_content_files, read_content_file, write_content
from docref.exceptions import ContentError
from docref.models import ContentFile, ResolutionIssue
from docref.registrar import IdentityRegistrar
from docref.registry import ReferenceRegistry
from docref.reporting import ErrorReporter, FileReport
from docref.resolvers import GlobalReferenceResolver, LinkRewriter, RepoLocatorResolver

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """Build-scoped state shared by the registrar and the resolvers."""

    settings: Settings
    registry: ReferenceRegistry = field(default_factory=ReferenceRegistry)
    reporter: ErrorReporter = field(init=False)

    def __post_init__(self) -> None:
        self.reporter = ErrorReporter(strict=self.settings.strict_mode)

    @property
    def registrar(self) -> IdentityRegistrar:
        return IdentityRegistrar(
            self.registry,
            self.reporter,
            self.settings.content_root,
            missing_identifier=self.settings.missing_identifier,
        )

    @property
    def rewriter(self) -> LinkRewriter:
        return LinkRewriter(
            GlobalReferenceResolver(self.registry, self.reporter),
            RepoLocatorResolver(
                self.settings.repo_base_url,
                self.settings.default_branch,
                self.reporter,
                requires_path=self.settings.repo_link_requires_path,
            ),
        )


@dataclass
class BuildResult:
    """Outcome of one build run."""

    files: list[ContentFile] = field(default_factory=list)
    reports: list[FileReport] = field(default_factory=list)
    failed: list[tuple[Path, ContentError]] = field(default_factory=list)
    written: list[Path] = field(default_factory=list)
    issues: list[ResolutionIssue] = field(default_factory=list)

    @property
    def rewritten(self) -> int:
        return sum(report.rewritten for report in self.reports)

    @property
    def ok(self) -> bool:
        return not self.issues and not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": len(self.files),
            "rewritten": self.rewritten,
            "written": [str(p) for p in self.written],
            "failed": [{"source_file": str(p), "error": str(e)} for p, e in self.failed],
            "issues": [issue.to_dict() for issue in self.issues],
        }


# =============================================================================
# Phase 1: registration
# =============================================================================


def load_files(
    ctx: BuildContext,
    paths: Sequence[Path],
    result: BuildResult | None = None,
) -> list[ContentFile]:
    """Parse content files in parallel, keeping input order.

    Unreadable files are logged and collected in `result.failed`; in strict
    mode the first one aborts the build.
    """
    content_root = ctx.settings.content_root

    def load_one(path: Path) -> ContentFile | ContentError:
        try:
            return read_content_file(path, content_root)
        except ContentError as e:
            return e

    with ThreadPoolExecutor(max_workers=ctx.settings.workers) as executor:
        loaded = list(executor.map(load_one, paths))

    files: list[ContentFile] = []
    for path, item in zip(paths, loaded, strict=True):
        if isinstance(item, ContentError):
            if ctx.settings.strict_mode:
                raise item
            logger.error("Skipping %s: %s", path, item)
            if result is not None:
                result.failed.append((path, item))
            continue
        files.append(item)
    return files


def register_all(ctx: BuildContext, files: Iterable[ContentFile]) -> None:
    """Run the identity registrar over the whole corpus, then freeze.

    Registrations are applied in sorted source order so a duplicate
    identifier always resolves to the same winner.
    """
    ctx.registry.begin_generation()
    registrar = ctx.registrar
    for content in sorted(files, key=lambda c: str(c.source_file)):
        registrar.register(content.metadata, content.source_file)
    ctx.registry.prune_stale()
    ctx.registry.freeze()
    logger.info("Registered %d global identifier(s)", len(ctx.registry))


# =============================================================================
# Phase 2: resolution
# =============================================================================


def resolve_all(ctx: BuildContext, files: Sequence[ContentFile]) -> list[FileReport]:
    """Rewrite link tokens in all files. Requires a frozen registry."""
    rewriter = ctx.rewriter
    executor = ThreadPoolExecutor(max_workers=ctx.settings.workers)
    try:
        reports = list(executor.map(rewriter.rewrite, files))
    except BaseException:
        executor.shutdown(wait=True, cancel_futures=True)
        raise
    executor.shutdown(wait=True)
    return reports


# =============================================================================
# Full build
# =============================================================================


def run_build(
    ctx: BuildContext,
    paths: Sequence[Path] | None = None,
    *,
    write: bool = True,
) -> BuildResult:
    """Run both phases over the corpus and optionally write the output.

    Args:
        ctx: Build context (reuse it for incremental rebuilds)
        paths: Content files to process (default: discovered under content_root)
        write: Write rewritten files under settings.output_dir

    Returns:
        BuildResult with per-file reports and all collected issues

    Raises:
        BuildAbortedError: In strict mode, on the first reported issue
        ContentError: In strict mode, on the first unreadable file
    """
    settings = ctx.settings
    if paths is None:
        paths = discover_content_files(settings.content_root, settings.extensions)
    logger.info("Building %d content file(s) from %s", len(paths), settings.content_root)

    ctx.reporter.reset()
    result = BuildResult()
    result.files = load_files(ctx, paths, result)

    register_all(ctx, result.files)
    result.reports = resolve_all(ctx, result.files)

    if write:
        for content in result.files:
            result.written.append(write_content(content, settings.output_dir))
        logger.info("Wrote %d file(s) to %s", len(result.written), settings.output_dir)

    result.issues = ctx.reporter.issues
    logger.info(
        "Rewrote %d link(s), %d issue(s)",
        result.rewritten,
        len(result.issues),
    )
    return result
