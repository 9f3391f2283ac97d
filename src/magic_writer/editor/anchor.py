"""Locate literal text fragments inside live editor markup."""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from markupsafe import escape

# Overlay spans never nest, so the non-greedy body stops at their own close tag.
OVERLAY_SPAN_RE = re.compile(
    r'<span class="(suggestion-underline|grammar-error)" id="([^"]*)"[^>]*>(.*?)</span>',
    re.DOTALL,
)
TAG_RE = re.compile(r"<[^>]*>")
ENTITY_RE = re.compile(r"&#?\w+;")


@dataclass(frozen=True)
class Anchor:
    """Half-open ``[start, end)`` span of a match within the markup."""

    start: int
    end: int


def _protected_regions(markup: str) -> list[tuple[int, int]]:
    """Spans that must not be matched: existing overlays and any other tag."""
    regions = [m.span() for m in OVERLAY_SPAN_RE.finditer(markup)]
    regions.extend(m.span() for m in TAG_RE.finditer(markup))
    regions.sort()
    return regions


def _overlaps(start: int, end: int, regions: list[tuple[int, int]]) -> bool:
    for r_start, r_end in regions:
        if r_start >= end:
            break
        if start < r_end:
            return True
    return False


def _splits_entity(start: int, end: int, entities: list[tuple[int, int]]) -> bool:
    """True when either end of the match falls strictly inside an entity."""
    return any(e_start < pos < e_end for e_start, e_end in entities for pos in (start, end))


def _candidates(match_text: str) -> list[str]:
    """The fragment as typed, and as it may appear escaped in markup."""
    candidates = [match_text]
    for escaped in (html.escape(match_text, quote=False), str(escape(match_text))):
        if escaped not in candidates:
            candidates.append(escaped)
    return candidates


def find_anchor(markup: str, match_text: str) -> Anchor | None:
    """Find the first occurrence of ``match_text`` not already inside markup.

    Returns None when the fragment is empty or every occurrence is either
    missing, enclosed by an existing overlay span, or cuts through a character
    entity such as ``&lt;``. With duplicates, the leftmost free occurrence wins.
    """
    if not match_text:
        return None

    regions = _protected_regions(markup)
    entities = [m.span() for m in ENTITY_RE.finditer(markup)]
    best: Anchor | None = None
    for needle in _candidates(match_text):
        pattern = re.compile(re.escape(needle))
        pos = 0
        while True:
            m = pattern.search(markup, pos)
            if m is None:
                break
            if best is not None and m.start() >= best.start:
                break
            if not _overlaps(m.start(), m.end(), regions) and not _splits_entity(
                m.start(), m.end(), entities
            ):
                best = Anchor(m.start(), m.end())
                break
            pos = m.start() + 1
    return best
