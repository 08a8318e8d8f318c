"""Tests for the docref exception hierarchy."""

from __future__ import annotations

from pathlib import Path

import pytest

from docref.exceptions import (
    ERRORS_BY_KIND,
    BuildAbortedError,
    ConfigurationError,
    ContentError,
    DocrefError,
    DuplicateIdentifierError,
    MissingIdentifierError,
    MissingReferenceError,
    MissingRepoPathError,
    PhaseOrderError,
    ResolutionError,
    SelfReferenceError,
)
from docref.models import IssueKind, ResolutionIssue


class TestDocrefError:
    """Tests for the base exception."""

    def test_message_and_details(self) -> None:
        """Message is the string form; details default to empty."""
        error = DocrefError("boom")
        assert str(error) == "boom"
        assert error.details == {}

    def test_details_kept(self) -> None:
        """Structured details are stored."""
        assert DocrefError("boom", details={"a": 1}).details == {"a": 1}

    @pytest.mark.parametrize(
        "cls",
        [ConfigurationError, ContentError, PhaseOrderError, ResolutionError, BuildAbortedError],
    )
    def test_subclasses(self, cls: type[DocrefError]) -> None:
        """Every docref error can be caught as DocrefError."""
        assert issubclass(cls, DocrefError)


class TestConfigurationError:
    """Tests for ConfigurationError."""

    def test_fields_in_details(self) -> None:
        """Config file and field are recorded."""
        error = ConfigurationError("bad", config_file=Path("docref.yaml"), field="workers")
        assert error.details == {"config_file": "docref.yaml", "field": "workers"}
        assert error.field == "workers"


class TestContentError:
    """Tests for ContentError."""

    def test_source_file(self) -> None:
        """Source file is recorded."""
        error = ContentError("unreadable", source_file=Path("a.md"))
        assert error.source_file == Path("a.md")
        assert error.details["source_file"] == "a.md"


class TestResolutionErrors:
    """Tests for resolution errors."""

    def test_location_details(self) -> None:
        """Location and target go into details."""
        error = MissingReferenceError(
            "missing", source_file="a.md", line=3, column=1, target="ref:x"
        )
        assert error.details == {"source_file": "a.md", "line": 3, "column": 1, "target": "ref:x"}

    def test_duplicate_details(self) -> None:
        """Duplicate errors name the identifier and the earlier file."""
        error = DuplicateIdentifierError(
            "dup", identifier="start", previous_file="a.md", source_file="b.md"
        )
        assert error.details["identifier"] == "start"
        assert error.details["previous_file"] == "a.md"
        assert error.details["source_file"] == "b.md"

    def test_kind_mapping_covers_issue_kinds(self) -> None:
        """Every issue kind has a typed exception."""
        assert set(ERRORS_BY_KIND) == {kind.value for kind in IssueKind}
        assert ERRORS_BY_KIND["self_reference"] is SelfReferenceError
        assert ERRORS_BY_KIND["missing_repo_path"] is MissingRepoPathError
        assert ERRORS_BY_KIND["missing_identifier"] is MissingIdentifierError

    def test_issue_to_exception(self) -> None:
        """Issues convert to their typed exception."""
        found = ResolutionIssue(IssueKind.SELF_REFERENCE, "self", Path("a.md"), 1, 2, "ref:a")
        error = found.to_exception()
        assert isinstance(error, SelfReferenceError)
        assert (error.line, error.column, error.target) == (1, 2, "ref:a")

    def test_build_aborted(self) -> None:
        """BuildAbortedError wraps the issue that stopped the build."""
        found = ResolutionIssue(IssueKind.MISSING_REFERENCE, "gone", Path("a.md"), 4, 7)
        error = BuildAbortedError(found)
        assert str(error) == "Build aborted: a.md:4:7: gone"
        assert error.issue is found
        assert isinstance(error, ResolutionError)

    def test_duplicate_issue_to_exception(self) -> None:
        """Duplicate issues carry the identifier and the earlier declaration."""
        found = ResolutionIssue(
            IssueKind.DUPLICATE_IDENTIFIER,
            "dup",
            Path("b.md"),
            target="start",
            related_file=Path("a.md"),
        )
        error = found.to_exception()
        assert isinstance(error, DuplicateIdentifierError)
        assert error.identifier == "start"
        assert error.details["previous_file"] == "a.md"
        assert found.to_dict()["related_file"] == "a.md"
