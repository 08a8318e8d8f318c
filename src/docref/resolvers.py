"""Link-token resolvers (phase 2).

GlobalReferenceResolver rewrites ``ref:`` tokens against the frozen
registry. RepoLocatorResolver rewrites ``repo`` tokens against the
repository base URL and needs no registry. LinkRewriter dispatches every
link node of a file to the matching resolver.

Problems are handed to the ErrorReporter; an unresolved token stays in
place and is marked inert.
"""

from __future__ import annotations

import logging
from pathlib import Path

from docref.models import (
    ContentFile,
    GlobalRef,
    IssueKind,
    LinkNode,
    PlainLink,
    RepoLocator,
    ResolutionIssue,
)
from docref.registry import ReferenceRegistry
from docref.reporting import ErrorReporter, FileReport
from docref.tokens import parse_link_target

logger = logging.getLogger(__name__)


def _issue(
    kind: IssueKind, message: str, node: LinkNode, source_file: Path
) -> ResolutionIssue:
    return ResolutionIssue(
        kind=kind,
        message=message,
        source_file=source_file,
        line=node.line,
        column=node.column,
        target=node.original_url,
    )


class GlobalReferenceResolver:
    """Rewrites ``ref:<id>[#anchor]`` targets to registered canonical paths."""

    def __init__(self, registry: ReferenceRegistry, reporter: ErrorReporter) -> None:
        self.registry = registry
        self.reporter = reporter

    def resolve(self, node: LinkNode, token: GlobalRef, source_file: Path) -> bool:
        """Resolve one node in place.

        Returns:
            True if the node was rewritten
        """
        record = self.registry.lookup(token.identifier)

        if record is None:
            node.inert = True
            self.reporter.report(
                _issue(
                    IssueKind.MISSING_REFERENCE,
                    f"No document declares globalReference {token.identifier!r}",
                    node,
                    source_file,
                )
            )
            return False

        if record.source_file == source_file:
            node.inert = True
            self.reporter.report(
                _issue(
                    IssueKind.SELF_REFERENCE,
                    f"Document links to itself through ref:{token.identifier}",
                    node,
                    source_file,
                )
            )
            return False

        node.url = record.canonical_path
        if token.anchor:
            node.url += f"#{token.anchor}"
        if not node.title and record.title:
            node.title = record.title
        logger.debug("%s: ref:%s -> %s", source_file, token.identifier, node.url)
        return True


class RepoLocatorResolver:
    """Rewrites ``repo[:path]`` targets to repository URLs.

    Attributes:
        requires_path: Treat a bare ``repo`` token as an error instead of
            linking to the repository root
    """

    def __init__(
        self,
        repo_base_url: str,
        default_branch: str,
        reporter: ErrorReporter,
        *,
        requires_path: bool = False,
    ) -> None:
        self.repo_base_url = repo_base_url.rstrip("/")
        self.default_branch = default_branch.strip("/")
        self.reporter = reporter
        self.requires_path = requires_path

    def url_for(self, path: str | None) -> str:
        if path is None:
            return self.repo_base_url
        return f"{self.repo_base_url}/tree/{self.default_branch}/{path}"

    def resolve(self, node: LinkNode, token: RepoLocator, source_file: Path) -> bool:
        if token.path is None and self.requires_path:
            node.inert = True
            self.reporter.report(
                _issue(
                    IssueKind.MISSING_REPO_PATH,
                    "Repository link has no path (expected repo:<path>)",
                    node,
                    source_file,
                )
            )
            return False

        node.url = self.url_for(token.path)
        return True


class LinkRewriter:
    """Runs both resolvers over all link nodes of a content file."""

    def __init__(
        self,
        global_refs: GlobalReferenceResolver,
        repo_locator: RepoLocatorResolver,
    ) -> None:
        self.global_refs = global_refs
        self.repo_locator = repo_locator

    def rewrite(self, content: ContentFile) -> FileReport:
        """Rewrite the file's link nodes in place.

        Returns:
            FileReport with the number of rewritten links and the issues
            reported for this file
        """
        report = FileReport(source_file=content.source_file)
        for node in content.links:
            token = parse_link_target(node.url)
            match token:
                case PlainLink():
                    continue
                case GlobalRef():
                    rewritten = self.global_refs.resolve(node, token, content.source_file)
                case RepoLocator():
                    rewritten = self.repo_locator.resolve(node, token, content.source_file)
            if rewritten:
                report.rewritten += 1

        report.issues = self.global_refs.reporter.issues_for(content.source_file)
        return report
