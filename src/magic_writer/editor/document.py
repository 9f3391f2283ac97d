"""The editor document: a markup string with a revision counter."""

from __future__ import annotations

import html
import re

from magic_writer.editor.anchor import TAG_RE
from magic_writer.editor.overlay import strip_overlays

_LINE_BREAK_RE = re.compile(r"<br\s*/?>|</(?:p|div|h[1-6]|li|blockquote|pre)>", re.IGNORECASE)


def markup_to_plain(markup: str) -> str:
    """Drop overlays and tags, keeping entities; block ends become newlines."""
    plain = strip_overlays(markup)
    plain = _LINE_BREAK_RE.sub("\n", plain)
    return TAG_RE.sub("", plain)


class Document:
    """Authoritative editor content.

    Mutated only by the reconciliation and rewrite controllers; every
    mutation bumps ``revision`` so captured selections can detect staleness.
    """

    def __init__(self, content: str = ""):
        self._content = content
        self.revision = 0

    @property
    def content(self) -> str:
        return self._content

    def set_content(self, content: str) -> None:
        if content == self._content:
            return
        self._content = content
        self.revision += 1

    @property
    def plain_markup(self) -> str:
        """Plain-text projection still in markup form (entities kept)."""
        return markup_to_plain(self._content)

    @property
    def text(self) -> str:
        """Human-readable text, as sent to the text service."""
        return html.unescape(self.plain_markup)

    def __repr__(self) -> str:
        return f"Document(revision={self.revision}, chars={len(self._content)})"
