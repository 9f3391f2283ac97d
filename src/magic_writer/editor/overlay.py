"""Render pending edits as inline overlay spans over document text."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from markupsafe import Markup

from magic_writer.editor.anchor import OVERLAY_SPAN_RE, find_anchor
from magic_writer.models.edits import EditKind, GrammarError, PendingEdit, StyleSuggestion

logger = logging.getLogger(__name__)

_OVERLAY_TEMPLATE = Markup('<span class="{}" id="{}" title="{}">{}</span>')


def overlay_tag(edit: PendingEdit, inner: str) -> str:
    """Wrap ``inner`` markup in the overlay span for ``edit``.

    ``inner`` is taken as markup; class, id and title are escaped.
    """
    return str(
        _OVERLAY_TEMPLATE.format(edit.kind.css_class, edit.dom_id, edit.tooltip, Markup(inner))
    )


def render_overlays(
    text: str,
    grammar_errors: Iterable[GrammarError],
    style_suggestions: Iterable[StyleSuggestion],
) -> str:
    """Annotate ``text`` with one overlay per matchable edit.

    Grammar errors are applied before style suggestions on the same working
    string. Edits whose fragment cannot be anchored are left out. With no
    edits at all the text is returned untouched.
    """
    edits = [*grammar_errors, *style_suggestions]
    if not edits:
        return text

    markup = text
    for edit in edits:
        anchor = find_anchor(markup, edit.match_text)
        if anchor is None:
            logger.debug("No anchor for %s %s: %r", edit.kind.value, edit.id, edit.match_text)
            continue
        markup = (
            markup[: anchor.start]
            + overlay_tag(edit, markup[anchor.start : anchor.end])
            + markup[anchor.end :]
        )
    return markup


def strip_overlays(markup: str) -> str:
    """Remove every overlay span, keeping the text it wrapped."""
    return OVERLAY_SPAN_RE.sub(lambda m: m.group(3), markup)


def parse_overlay_target(css_class: str, element_id: str) -> tuple[EditKind, str] | None:
    """Map a clicked element's class and id to ``(kind, edit_id)``."""
    classes = css_class.split()
    # Grammar is checked first so an element never resolves against both sets.
    for kind in (EditKind.GRAMMAR, EditKind.STYLE):
        if kind.css_class in classes and element_id.startswith(kind.id_prefix):
            return kind, element_id[len(kind.id_prefix):]
    return None
