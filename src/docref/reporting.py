"""Shared error-reporting policy for registration and resolution.

Registrar and resolvers never raise on a bad token or identity. They hand a
ResolutionIssue to the reporter, which either logs and collects it
(permissive mode) or stops the build (strict mode).
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from docref.exceptions import BuildAbortedError
from docref.models import IssueKind, ResolutionIssue

logger = logging.getLogger(__name__)


@dataclass
class FileReport:
    """Issues and rewrite counts collected for one content file."""

    source_file: Path
    issues: list[ResolutionIssue] = field(default_factory=list)
    rewritten: int = 0

    @property
    def ok(self) -> bool:
        return not self.issues


@dataclass
class ErrorReporter:
    """Applies the strict/permissive policy and aggregates issues per file.

    Attributes:
        strict: Abort the build on the first issue
    """

    strict: bool = False
    _issues: dict[Path, list[ResolutionIssue]] = field(
        default_factory=lambda: defaultdict(list), repr=False
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def report(self, issue: ResolutionIssue) -> None:
        """Record an issue.

        Raises:
            BuildAbortedError: In strict mode, always
        """
        with self._lock:
            self._issues[issue.source_file].append(issue)

        if self.strict:
            logger.error("%s", issue.describe())
            raise BuildAbortedError(issue) from issue.to_exception()

        logger.warning("%s", issue.describe())

    def issues_for(self, source_file: Path) -> list[ResolutionIssue]:
        return list(self._issues.get(source_file, []))

    @property
    def issues(self) -> list[ResolutionIssue]:
        """All issues, grouped by file in sorted file order."""
        return [issue for path in sorted(self._issues) for issue in self._issues[path]]

    @property
    def has_issues(self) -> bool:
        return any(self._issues.values())

    def counts(self) -> dict[IssueKind, int]:
        totals: dict[IssueKind, int] = defaultdict(int)
        for issue in self.issues:
            totals[issue.kind] += 1
        return dict(totals)

    def reset(self) -> None:
        with self._lock:
            self._issues.clear()

    def to_dict(self) -> dict[str, Any]:
        return {
            "strict": self.strict,
            "issue_count": len(self.issues),
            "counts": {kind.value: n for kind, n in self.counts().items()},
            "issues": [issue.to_dict() for issue in self.issues],
        }
