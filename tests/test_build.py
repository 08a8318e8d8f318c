"""End-to-end tests for the two-phase build."""

from __future__ import annotations

import random
from pathlib import Path

import pytest

from docref.build import BuildContext, register_all, resolve_all, run_build
from docref.content import discover_content_files, read_content_file
from docref.exceptions import BuildAbortedError, ContentError, PhaseOrderError
from docref.models import IssueKind
from docref.schemas.config import MissingIdentifierPolicy
from tests.conftest import REPO_URL, make_settings, write_doc


def snapshot(out: Path) -> dict[str, str]:
    """Map of relative path -> text for every file under out."""
    return {
        p.relative_to(out).as_posix(): p.read_text(encoding="utf-8")
        for p in sorted(out.rglob("*"))
        if p.is_file()
    }


@pytest.fixture
def site(docs: Path) -> Path:
    """A small site with forward references, anchors and repo links."""
    write_doc(
        docs,
        "index.md",
        "Start with [the guide](ref:zeta-guide#install) or [code](repo:cmd/main.go).\n",
        globalReference="home",
        title="Home",
    )
    write_doc(
        docs,
        "guides/zeta.md",
        "Back [home](ref:home 'Go home'). Source: [repo](repo).\n",
        globalReference="zeta-guide",
        title="Zeta Guide",
    )
    write_doc(docs, "notes/plain.md", "Just [a link](https://example.com).\n")
    return docs


class TestRunBuild:
    """Tests for run_build()."""

    def test_forward_reference_resolved(self, tmp_path: Path, site: Path) -> None:
        """A link to a file processed later resolves with anchor and title."""
        result = run_build(BuildContext(make_settings(tmp_path)))

        assert result.ok
        out = snapshot(tmp_path / "out")
        assert "[the guide](/guides/zeta#install \"Zeta Guide\")" in out["index.md"]
        assert f"[code]({REPO_URL}/tree/main/cmd/main.go)" in out["index.md"]
        assert '[home](/ "Go home")' in out["guides/zeta.md"]
        assert f"[repo]({REPO_URL})" in out["guides/zeta.md"]

    def test_untouched_file_is_byte_identical(self, tmp_path: Path, site: Path) -> None:
        """Files without tokens are copied unchanged."""
        run_build(BuildContext(make_settings(tmp_path)))
        original = (site / "notes" / "plain.md").read_bytes()
        assert (tmp_path / "out" / "notes" / "plain.md").read_bytes() == original

    def test_counts(self, tmp_path: Path, site: Path) -> None:
        """Result reports files, rewritten links and written files."""
        result = run_build(BuildContext(make_settings(tmp_path)))
        assert len(result.files) == 3
        assert result.rewritten == 4
        assert len(result.written) == 3
        assert result.to_dict()["rewritten"] == 4

    def test_no_write(self, tmp_path: Path, site: Path) -> None:
        """write=False resolves without touching the output directory."""
        result = run_build(BuildContext(make_settings(tmp_path)), write=False)
        assert result.rewritten == 4
        assert not (tmp_path / "out").exists()

    def test_order_independent(self, tmp_path: Path, site: Path) -> None:
        """Any processing order produces the same output."""
        paths = discover_content_files(site)
        expected = None
        for seed in range(5):
            shuffled = list(paths)
            random.Random(seed).shuffle(shuffled)
            out = tmp_path / f"out-{seed}"
            run_build(BuildContext(make_settings(tmp_path, output_dir=out)), shuffled)
            if expected is None:
                expected = snapshot(out)
            assert snapshot(out) == expected

    def test_worker_count_does_not_change_output(self, tmp_path: Path, site: Path) -> None:
        """Serial and parallel builds agree."""
        run_build(BuildContext(make_settings(tmp_path, output_dir=tmp_path / "a", workers=1)))
        run_build(BuildContext(make_settings(tmp_path, output_dir=tmp_path / "b", workers=8)))
        assert snapshot(tmp_path / "a") == snapshot(tmp_path / "b")

    def test_idempotent(self, tmp_path: Path, site: Path) -> None:
        """Building the output again changes nothing."""
        write_doc(site, "broken.md", "[x](ref:nope)\n", globalReference="broken")
        run_build(BuildContext(make_settings(tmp_path)))
        first = snapshot(tmp_path / "out")

        second_settings = make_settings(
            tmp_path, content_root=tmp_path / "out", output_dir=tmp_path / "again"
        )
        result = run_build(BuildContext(second_settings))

        assert result.rewritten == 0
        assert snapshot(tmp_path / "again") == first


class TestErrorPolicy:
    """Tests for permissive and strict builds."""

    def test_missing_reference_permissive(self, tmp_path: Path, site: Path) -> None:
        """Permissive builds finish, collect the issue and leave the token inert."""
        write_doc(site, "broken.md", "See [x](ref:does-not-exist).\n", globalReference="broken")

        result = run_build(BuildContext(make_settings(tmp_path)))

        assert not result.ok
        [issue] = result.issues
        assert issue.kind is IssueKind.MISSING_REFERENCE
        assert issue.line == 4  # after three front-matter lines
        assert issue.column == 5
        assert "[x]\\(ref:does-not-exist\\)" in snapshot(tmp_path / "out")["broken.md"]
        broken = next(r for r in result.reports if r.source_file.name == "broken.md")
        assert not broken.ok

    def test_missing_reference_strict(self, tmp_path: Path, site: Path) -> None:
        """Strict builds stop before writing anything."""
        write_doc(site, "broken.md", "See [x](ref:does-not-exist).\n", globalReference="broken")

        with pytest.raises(BuildAbortedError, match="does-not-exist"):
            run_build(BuildContext(make_settings(tmp_path, strict_mode=True)))

        assert not (tmp_path / "out").exists()

    def test_wrapped_link_text_strict(self, tmp_path: Path, site: Path) -> None:
        """Link text wrapped onto a second line is still checked."""
        write_doc(
            site,
            "broken.md",
            "See [the getting\nstarted guide](ref:does-not-exist) now.\n",
            globalReference="broken",
        )

        with pytest.raises(BuildAbortedError, match="does-not-exist"):
            run_build(BuildContext(make_settings(tmp_path, strict_mode=True)))

    def test_stray_backtick_does_not_hide_links(self, tmp_path: Path, site: Path) -> None:
        """Unpaired backticks in separate paragraphs do not form a code span."""
        write_doc(
            site,
            "broken.md",
            "Press the ` key.\n\nSee [guide](ref:does-not-exist).\n\nAnother ` here.\n",
            globalReference="broken",
        )

        with pytest.raises(BuildAbortedError, match="does-not-exist"):
            run_build(BuildContext(make_settings(tmp_path, strict_mode=True)))

    def test_self_reference(self, tmp_path: Path, docs: Path) -> None:
        """A file linking to its own identifier is reported and not rewritten."""
        write_doc(docs, "a.md", "[me](ref:start)\n", globalReference="start")

        result = run_build(BuildContext(make_settings(tmp_path)))

        assert [i.kind for i in result.issues] == [IssueKind.SELF_REFERENCE]
        assert "ref:start" in snapshot(tmp_path / "out")["a.md"]

    def test_duplicate_last_sorted_file_wins(self, tmp_path: Path, docs: Path) -> None:
        """Duplicates resolve to the same winner regardless of input order."""
        write_doc(docs, "a.md", "", globalReference="dup")
        write_doc(docs, "b.md", "", globalReference="dup")
        write_doc(docs, "c.md", "[d](ref:dup)\n", globalReference="c")
        paths = discover_content_files(docs)

        for order in (paths, list(reversed(paths))):
            ctx = BuildContext(make_settings(tmp_path))
            result = run_build(ctx, order, write=False)
            assert [i.kind for i in result.issues] == [IssueKind.DUPLICATE_IDENTIFIER]
            assert ctx.registry.lookup("dup").canonical_path == "/b"  # type: ignore[union-attr]

    def test_missing_identifier_error_policy(self, tmp_path: Path, docs: Path) -> None:
        """Files without an identifier can be made an issue."""
        write_doc(docs, "a.md", "no front matter\n")
        settings = make_settings(tmp_path, missing_identifier=MissingIdentifierPolicy.error)

        result = run_build(BuildContext(settings), write=False)

        assert [i.kind for i in result.issues] == [IssueKind.MISSING_IDENTIFIER]

    def test_bare_repo_requires_path(self, tmp_path: Path, site: Path) -> None:
        """The repo-path flag turns a bare repo token into an issue."""
        settings = make_settings(tmp_path, repo_link_requires_path=True)
        result = run_build(BuildContext(settings))
        assert [i.kind for i in result.issues] == [IssueKind.MISSING_REPO_PATH]

    def test_unreadable_file_permissive(self, tmp_path: Path, site: Path) -> None:
        """A file with broken front matter is skipped; the rest is built."""
        (site / "bad.md").write_text("---\ntitle: [oops\n---\n", encoding="utf-8")

        result = run_build(BuildContext(make_settings(tmp_path)))

        assert [p.name for p, _ in result.failed] == ["bad.md"]
        assert len(result.files) == 3
        assert not result.ok
        assert not (tmp_path / "out" / "bad.md").exists()

    def test_unreadable_file_strict(self, tmp_path: Path, site: Path) -> None:
        """Strict mode stops on an unreadable file."""
        (site / "bad.md").write_text("---\ntitle: [oops\n---\n", encoding="utf-8")
        with pytest.raises(ContentError):
            run_build(BuildContext(make_settings(tmp_path, strict_mode=True)))


class TestIncrementalRebuild:
    """Tests for running a build twice on the same context."""

    def test_moved_file_is_not_duplicate(self, tmp_path: Path, site: Path) -> None:
        """An identifier that moved between builds follows the file."""
        ctx = BuildContext(make_settings(tmp_path))
        run_build(ctx)

        (site / "guides" / "zeta.md").rename(site / "zeta.md")
        result = run_build(ctx)

        assert result.ok
        assert "(/zeta#install" in snapshot(tmp_path / "out")["index.md"]

    def test_deleted_file_identifier_pruned(self, tmp_path: Path, site: Path) -> None:
        """Identifiers of deleted files stop resolving."""
        ctx = BuildContext(make_settings(tmp_path))
        run_build(ctx)
        assert "zeta-guide" in ctx.registry

        (site / "guides" / "zeta.md").unlink()
        result = run_build(ctx, write=False)

        assert "zeta-guide" not in ctx.registry
        assert [i.kind for i in result.issues] == [IssueKind.MISSING_REFERENCE]

    def test_issues_reset_between_builds(self, tmp_path: Path, site: Path) -> None:
        """Fixed problems do not linger in the next result."""
        broken = write_doc(site, "broken.md", "[x](ref:later)\n", globalReference="broken")
        ctx = BuildContext(make_settings(tmp_path))
        assert not run_build(ctx, write=False).ok

        write_doc(site, "later.md", "", globalReference="later")
        assert broken.exists()
        assert run_build(ctx, write=False).ok


class TestPhases:
    """Tests for the individual phase functions."""

    def test_resolve_before_register_raises(self, tmp_path: Path, site: Path) -> None:
        """Resolution without a completed registration phase fails loudly."""
        ctx = BuildContext(make_settings(tmp_path))
        files = [read_content_file(p, site) for p in discover_content_files(site)]
        with pytest.raises(PhaseOrderError):
            resolve_all(ctx, files)

    def test_register_all_freezes(self, tmp_path: Path, site: Path) -> None:
        """Registration ends with the barrier."""
        ctx = BuildContext(make_settings(tmp_path))
        files = [read_content_file(p, site) for p in discover_content_files(site)]
        register_all(ctx, files)
        assert ctx.registry.frozen
        assert [r.identifier for r in ctx.registry.all()] == ["home", "zeta-guide"]
