"""Shared pytest fixtures and helpers for docref tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml

from docref.config import Settings
from docref.env_settings import clear_env_settings_cache
from docref.registry import ReferenceRegistry
from docref.reporting import ErrorReporter

REPO_URL = "https://example.com/org/repo"


def make_settings(root: Path, **overrides: Any) -> Settings:
    """Create Settings rooted at `root` for tests.

    Args:
        root: Temporary directory; content lives in root/docs
        **overrides: Settings fields to change

    Returns:
        Settings with a permissive, two-worker default
    """
    values: dict[str, Any] = {
        "content_root": root / "docs",
        "output_dir": root / "out",
        "repo_base_url": REPO_URL,
        "default_branch": "main",
        "strict_mode": False,
        "workers": 2,
    }
    values.update(overrides)
    return Settings(**values)


def write_doc(
    content_root: Path,
    relative: str,
    body: str = "",
    **front_matter: Any,
) -> Path:
    """Write a markdown file with optional front matter.

    Args:
        content_root: Directory the file is relative to
        relative: Path below the content root, e.g. "guides/a.md"
        body: Markdown body
        **front_matter: Front-matter keys (globalReference, title, ...)

    Returns:
        Path of the written file
    """
    path = content_root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    text = ""
    if front_matter:
        text = "---\n" + yaml.safe_dump(front_matter, sort_keys=True) + "---\n"
    path.write_text(text + body, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def fresh_env_settings() -> Iterator[None]:
    """Never share cached environment settings between tests."""
    clear_env_settings_cache()
    yield
    clear_env_settings_cache()


@pytest.fixture
def registry() -> ReferenceRegistry:
    """A registry opened for its first generation."""
    reg = ReferenceRegistry()
    reg.begin_generation()
    return reg


@pytest.fixture
def reporter() -> ErrorReporter:
    """A permissive error reporter."""
    return ErrorReporter(strict=False)


@pytest.fixture
def docs(tmp_path: Path) -> Path:
    """Empty content root at tmp_path/docs."""
    root = tmp_path / "docs"
    root.mkdir()
    return root
