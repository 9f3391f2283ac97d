"""Rewrite a captured selection of the document in place."""

from __future__ import annotations

import html
import logging
from collections.abc import Mapping

from markupsafe import escape

from magic_writer.clients.text_service import TextService
from magic_writer.editor.activity import ActivityTracker, AiMode
from magic_writer.editor.anchor import OVERLAY_SPAN_RE, find_anchor
from magic_writer.editor.document import Document, markup_to_plain
from magic_writer.editor.overlay import strip_overlays
from magic_writer.editor.store import EditSetStore
from magic_writer.models.selection import AnchorPoint, SelectionState

logger = logging.getLogger(__name__)


def _inside_tag(markup: str, pos: int) -> bool:
    return markup.rfind("<", 0, pos) > markup.rfind(">", 0, pos)


def _widen_to_overlays(markup: str, start: int, end: int) -> tuple[int, int]:
    """Grow ``[start, end)`` to cover every overlay span it partly overlaps."""
    for m in OVERLAY_SPAN_RE.finditer(markup):
        if m.start() < end and start < m.end():
            start, end = min(start, m.start()), max(end, m.end())
    return start, end


class SelectionRewriteController:
    """Single-shot selection rewriting.

    A captured SelectionState is consumed by the next ``rewrite`` call,
    whether or not the rewrite succeeds. A selection captured at an older
    document revision is discarded without calling the service.
    """

    def __init__(
        self,
        service: TextService,
        document: Document,
        store: EditSetStore,
        activity: ActivityTracker | None = None,
    ):
        self.service = service
        self.document = document
        self.store = store
        self.activity = activity or ActivityTracker()
        self._pending: SelectionState | None = None

    @property
    def pending(self) -> SelectionState | None:
        return self._pending

    def discard_selection(self) -> None:
        self._pending = None

    def capture_selection(
        self,
        start: int,
        end: int,
        rect: Mapping[str, float] | None = None,
        scroll: tuple[float, float] = (0.0, 0.0),
    ) -> SelectionState | None:
        """Capture the markup range ``[start, end)`` as the pending selection.

        ``rect`` is the selection's bounding box (``top``, ``left``,
        ``width``); the toolbar is anchored at its top edge, centred.
        A range cutting into an overlay grows to cover the whole overlay, and
        surrounding whitespace is left out. Collapsed, blank or tag-splitting
        ranges clear the pending selection.
        """
        self._pending = None
        markup = self.document.content
        start, end = sorted((start, end))
        start, end = max(start, 0), min(end, len(markup))
        if start >= end:
            return None
        start, end = _widen_to_overlays(markup, start, end)
        if _inside_tag(markup, start) or _inside_tag(markup, end):
            logger.warning("Selection [%d, %d) splits a tag, ignoring", start, end)
            return None

        # Only the trimmed interior is replaced, so surrounding spaces survive.
        while start < end and markup[start].isspace():
            start += 1
        while end > start and markup[end - 1].isspace():
            end -= 1
        text = html.unescape(markup_to_plain(markup[start:end])).strip()
        if not text:
            return None

        anchor_point = None
        if rect is not None:
            scroll_x, scroll_y = scroll
            anchor_point = AnchorPoint(
                top=rect["top"] + scroll_y,
                left=rect["left"] + scroll_x + rect.get("width", 0.0) / 2,
            )
        self._pending = SelectionState(
            text=text,
            start=start,
            end=end,
            revision=self.document.revision,
            anchor_point=anchor_point,
        )
        return self._pending

    def select_text(self, fragment: str) -> SelectionState | None:
        """Capture the first occurrence of ``fragment`` outside any tag."""
        anchor = find_anchor(strip_overlays(self.document.content), fragment)
        if anchor is None:
            self._pending = None
            return None
        if not self.store.is_empty:
            # Offsets were computed without overlays; drop them so they line up.
            self.store.clear_all()
            self.document.set_content(strip_overlays(self.document.content))
        return self.capture_selection(anchor.start, anchor.end)

    async def rewrite(self, instruction: str, selection: SelectionState | None = None) -> str | None:
        """Replace the selected range with the service's rewrite of it.

        Returns the inserted text, or None when nothing changed: no
        selection, a stale one, or a rewrite that fell back to the original.
        """
        selection = selection or self._pending
        self._pending = None
        if selection is None or not instruction.strip():
            return None
        if selection.revision != self.document.revision:
            logger.warning(
                "Selection captured at revision %d, document is at %d; discarding",
                selection.revision,
                self.document.revision,
            )
            return None

        ticket = self.activity.start(AiMode.REWRITE, selection.text)
        try:
            rewritten = await self.service.rewrite_span(selection.text, instruction)
        except Exception:
            logger.exception("Rewrite request failed")
            rewritten = selection.text
        finally:
            self.activity.finish(ticket)

        if rewritten == selection.text:
            return None
        if selection.revision != self.document.revision:
            logger.warning("Document changed during rewrite; discarding result")
            return None

        markup = self.document.content
        spliced = markup[: selection.start] + str(escape(rewritten)) + markup[selection.end :]
        self.store.clear_all()
        self.document.set_content(strip_overlays(spliced))
        return rewritten
