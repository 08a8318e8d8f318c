"""Content file parsing and link rewriting.

A content file is a markdown document with an optional YAML front-matter
block. This module extracts the front matter (python-frontmatter), finds the
inline links in the body together with their line/column positions, and
renders the body back with rewritten link targets.

Links inside fenced code blocks and inline code spans are ignored. Images
are ignored too; only ``[text](target "title")`` links are link nodes.
"""

from __future__ import annotations

import bisect
import logging
import re
from collections.abc import Iterable
from pathlib import Path

import frontmatter
import yaml

from docref.exceptions import ContentError
from docref.models import ContentFile, LinkNode
from docref.registrar import relative_location

logger = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(
    r"\A(?:\ufeff)?---[ \t]*\r?\n(?:.*?\r?\n)?(?:---|\.\.\.)[ \t]*(?:\r?\n|\Z)",
    re.DOTALL,
)

# Inline link: [text](target "title"). One level of nested brackets in text;
# text may wrap across lines but not across a blank line.
LINK_RE = re.compile(
    r"(?<![!\\])\[(?P<text>(?:[^\[\]\n]|\n(?![ \t]*\r?\n)|\[[^\[\]\n]*\])*)\]"
    r"\((?P<dest>[ \t]*(?P<target><[^<>\n]*>|[^\s()<>]+)"
    r"(?:[ \t]+(?P<title>\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'))?[ \t]*)\)"
)

FENCE_RE = re.compile(r"^[ ]{0,3}(?P<fence>`{3,}|~{3,})", re.MULTILINE)
# Code spans end at a blank line; a stray backtick does not pair across paragraphs.
INLINE_CODE_RE = re.compile(
    r"(?P<ticks>`+)(?!`)(?:(?!\n[ \t]*\r?\n).)+?(?<!`)(?P=ticks)(?!`)", re.DOTALL
)


# =============================================================================
# Discovery
# =============================================================================


def discover_content_files(
    content_root: Path,
    extensions: Iterable[str] = (".md", ".mdx"),
) -> list[Path]:
    """Find all content files under the content root, sorted.

    Hidden directories and files (leading dot or underscore) are skipped.
    """
    if not content_root.is_dir():
        raise ContentError(
            f"Content root not found or not a directory: {content_root}",
            source_file=content_root,
        )
    suffixes = {ext.lower() for ext in extensions}
    files = []
    for path in content_root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in suffixes:
            continue
        rel_parts = path.relative_to(content_root).parts
        if any(part.startswith((".", "_")) for part in rel_parts):
            continue
        files.append(path)
    return sorted(files)


# =============================================================================
# Parsing
# =============================================================================


def _code_regions(text: str, start: int) -> list[tuple[int, int]]:
    """Offsets of fenced code blocks and inline code spans."""
    regions: list[tuple[int, int]] = []
    pos = start
    while True:
        opening = FENCE_RE.search(text, pos)
        if opening is None:
            break
        fence = opening.group("fence")
        closing_re = re.compile(
            rf"^[ ]{{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$", re.MULTILINE
        )
        line_end = text.find("\n", opening.end())
        if line_end == -1:
            regions.append((opening.start(), len(text)))
            break
        closing = closing_re.search(text, line_end + 1)
        end = closing.end() if closing else len(text)
        regions.append((opening.start(), end))
        pos = end

    fenced = list(regions)
    for match in INLINE_CODE_RE.finditer(text, start):
        if not _inside(match.start(), fenced):
            regions.append((match.start(), match.end()))
    return sorted(regions)


def _inside(offset: int, regions: list[tuple[int, int]]) -> bool:
    return any(start <= offset < end for start, end in regions)


def _unquote_title(raw: str | None) -> str | None:
    if raw is None:
        return None
    inner = raw[1:-1]
    return re.sub(r"\\(.)", r"\1", inner)


def extract_links(text: str, start: int = 0) -> list[LinkNode]:
    """Find inline markdown links in text, starting at offset `start`.

    Lines and columns are 1-based and refer to the full text.
    """
    line_starts = [0] + [m.end() for m in re.finditer(r"\n", text)]
    code = _code_regions(text, start)
    nodes: list[LinkNode] = []

    for match in LINK_RE.finditer(text, start):
        if _inside(match.start(), code):
            continue
        target = match.group("target")
        if target.startswith("<"):
            target = target[1:-1]
        line_index = bisect.bisect_right(line_starts, match.start()) - 1
        nodes.append(
            LinkNode(
                url=target,
                text=match.group("text"),
                title=_unquote_title(match.group("title")),
                line=line_index + 1,
                column=match.start() - line_starts[line_index] + 1,
                span=(match.start("dest") - 1, match.end()),
            )
        )
    return nodes


def parse_content(text: str, source_file: Path, relative_path: Path) -> ContentFile:
    """Parse raw file text into a ContentFile.

    Raises:
        ContentError: If the front matter is not valid YAML or not a mapping
    """
    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as e:
        raise ContentError(f"Invalid front matter: {e}", source_file=source_file) from e

    metadata = post.metadata
    if not isinstance(metadata, dict):
        raise ContentError("Front matter must be a mapping", source_file=source_file)

    fm_match = FRONT_MATTER_RE.match(text)
    body_offset = fm_match.end() if fm_match else 0

    return ContentFile(
        source_file=source_file,
        relative_path=relative_path,
        metadata=dict(metadata),
        body=text[body_offset:],
        raw_text=text,
        body_offset=body_offset,
        links=extract_links(text, body_offset),
    )


def read_content_file(path: Path, content_root: Path) -> ContentFile:
    """Read and parse a content file.

    Raises:
        ContentError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ContentError(f"Encoding error: {e}", source_file=path) from e
    except OSError as e:
        raise ContentError(f"Cannot read file: {e}", source_file=path) from e

    relative_path = Path(relative_location(path, content_root))
    content = parse_content(text, path, relative_path)
    logger.debug("Parsed %s (%d links)", relative_path, len(content.links))
    return content


# =============================================================================
# Rendering
# =============================================================================


def _quote_title(title: str) -> str:
    return '"' + title.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _render_destination(node: LinkNode, original: str) -> str:
    if node.inert:
        # Escaped parentheses keep the token visible as plain text.
        return "\\(" + original[1:-1] + "\\)"
    url = node.url
    if any(ch.isspace() for ch in url):
        url = f"<{url}>"
    if node.title:
        return f"({url} {_quote_title(node.title)})"
    return f"({url})"


def render(content: ContentFile) -> str:
    """Render the file text with every changed link node spliced in.

    Files without changed links come back byte-identical.
    """
    changed = [node for node in content.links if node.changed and node.span]
    if not changed:
        return content.raw_text

    parts: list[str] = []
    pos = 0
    for node in sorted(changed, key=lambda n: n.span[0]):  # type: ignore[index]
        start, end = node.span  # type: ignore[misc]
        parts.append(content.raw_text[pos:start])
        parts.append(_render_destination(node, content.raw_text[start:end]))
        pos = end
    parts.append(content.raw_text[pos:])
    return "".join(parts)


def write_content(content: ContentFile, output_dir: Path) -> Path:
    """Write the rendered file under output_dir, mirroring its relative path."""
    target = output_dir / content.relative_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render(content), encoding="utf-8")
    return target
