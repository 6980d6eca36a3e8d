"""Extract dependency references and enforcement intent from PR text.

Recognized references, most specific first:
- owner/repo#123 (any repository)
- repo#123 (same owner as the PR)
- #123 (same repository as the PR)

A span matched by a more specific pattern is never re-read by a looser
one, so "acme/widgets#3" does not also yield "<owner>/widgets#3".
"""

import re
from typing import Iterable

from prereq.models import ExtractedDeps, PRRef

# ASCII word boundaries: "café#3" still yields the bare #3
REF = re.compile(r"\b([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)#(\d+)\b", re.ASCII)
SAME_ORG = re.compile(r"\b([A-Za-z0-9_.-]+)#(\d+)\b", re.ASCII)
SAME_REPO = re.compile(r"\B#(\d+)\b", re.ASCII)
INTENT = re.compile(r"depends on|blocked by|requires|needs|prerequisite|merge first", re.IGNORECASE)

# Not valid GitHub owner or repository names
_DOT_NAMES = frozenset({".", ".."})


def _overlaps(span: tuple[int, int], consumed: Iterable[tuple[int, int]]) -> bool:
    start, end = span
    return any(start < c_end and c_start < end for c_start, c_end in consumed)


def has_intent(text: str | None) -> bool:
    """True if text contains an enforcement keyword (case-insensitive)."""
    return bool(text) and INTENT.search(text) is not None


def extract_deps(text: str | None, owner: str, repo: str) -> ExtractedDeps:
    """Return the set of referenced PRs in text and whether to enforce them.

    Args:
        text: PR title and body (may be empty or None)
        owner: Owner of the PR the text belongs to (resolves repo#N and #N)
        repo: Repository of the PR the text belongs to (resolves #N)

    Returns:
        ExtractedDeps with deduplicated references. Self references are
        kept; the cycle detector reports them.
    """
    if not text:
        return ExtractedDeps()

    found: dict[tuple[str, str, int], PRRef] = {}
    consumed: list[tuple[int, int]] = []

    def add(ref_owner: str, ref_repo: str, num: str, span: tuple[int, int]) -> None:
        consumed.append(span)
        n = int(num)
        if n <= 0 or ref_owner in _DOT_NAMES or ref_repo in _DOT_NAMES:
            return
        key = (ref_owner, ref_repo, n)
        if key not in found:
            found[key] = PRRef(owner=ref_owner, repo=ref_repo, num=n)

    for m in REF.finditer(text):
        add(m.group(1), m.group(2), m.group(3), m.span())
    for m in SAME_ORG.finditer(text):
        if not _overlaps(m.span(), consumed):
            add(owner, m.group(1), m.group(2), m.span())
    for m in SAME_REPO.finditer(text):
        if not _overlaps(m.span(), consumed):
            add(owner, repo, m.group(1), m.span())

    return ExtractedDeps(deps=frozenset(found.values()), enforce=has_intent(text))
