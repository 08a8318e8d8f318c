"""Link-target token grammar.

Recognises the two symbolic link shapes authors may use in a markdown link
target:

    ref:<identifier>            global reference
    ref:<identifier>#<anchor>   global reference to a section
    repo                        repository root
    repo:<relative/path>        file or directory in the repository

Anything else is a plain link and passes through untouched.
"""

from __future__ import annotations

import re

from docref.models import GlobalRef, LinkToken, PlainLink, RepoLocator

REF_PREFIX = "ref:"
REPO_PREFIX = "repo"

# A `)` always belongs to the enclosing markdown link, never to the token.
REF_RE = re.compile(r"ref:(?P<identifier>[^#\s()]+)(?:#(?P<anchor>[^\s()]*))?")
REPO_RE = re.compile(r"repo(?::(?P<path>[^\s()]*))?")


def _unwrap(raw: str) -> str:
    target = raw.strip()
    if target.startswith("<") and target.endswith(">"):
        target = target[1:-1].strip()
    return target


def _terminates(target: str, end: int) -> bool:
    """True if the match ending at `end` consumed the whole token."""
    rest = target[end:]
    return not rest or rest.startswith(")")


def parse_link_target(raw: str) -> LinkToken:
    """Parse a raw link target into a link token.

    Args:
        raw: Link target as written in the markdown source

    Returns:
        GlobalRef, RepoLocator, or PlainLink carrying the raw target unchanged

    Example:
        >>> parse_link_target("ref:start#step-2")
        GlobalRef(identifier='start', anchor='step-2')
        >>> parse_link_target("repo:pkg/thing.go")
        RepoLocator(path='pkg/thing.go')
    """
    target = _unwrap(raw)

    if target.startswith(REF_PREFIX):
        match = REF_RE.match(target)
        if match and _terminates(target, match.end()):
            return GlobalRef(
                identifier=match.group("identifier"),
                anchor=match.group("anchor") or None,
            )
        return PlainLink(raw)

    if target.startswith(REPO_PREFIX):
        match = REPO_RE.match(target)
        if match and _terminates(target, match.end()):
            path = (match.group("path") or "").lstrip("/")
            return RepoLocator(path=path or None)

    return PlainLink(raw)
