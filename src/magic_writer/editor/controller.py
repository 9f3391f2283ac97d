"""Reconcile text service edits with the live editor document."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence

import markdown
from markupsafe import escape

from magic_writer.clients.text_service import DRAFT_ERROR_TEXT, TextService
from magic_writer.config import EditorConfig
from magic_writer.editor.activity import ActivityTracker, AiMode, RequestTicket
from magic_writer.editor.anchor import OVERLAY_SPAN_RE
from magic_writer.editor.debounce import Debouncer
from magic_writer.editor.document import Document
from magic_writer.editor.overlay import parse_overlay_target, render_overlays, strip_overlays
from magic_writer.editor.rewrite import SelectionRewriteController
from magic_writer.editor.store import EditSetStore
from magic_writer.models.attachments import AttachedFile
from magic_writer.models.edits import EditKind, GrammarError, PendingEdit, StyleSuggestion

logger = logging.getLogger(__name__)

ConfirmFn = Callable[[PendingEdit], bool]


class ReconciliationController:
    """Drives the edit loop between the document, the edit sets and the service.

    User edits invalidate both edit sets and re-arm the grammar debounce.
    Responses are applied only while they are the newest of their kind and
    the document text still equals the text they were computed against.
    """

    def __init__(
        self,
        service: TextService,
        document: Document | None = None,
        config: EditorConfig | None = None,
    ):
        self.service = service
        self.document = document or Document()
        self.config = config or EditorConfig()
        self.store = EditSetStore()
        self.activity = ActivityTracker()
        self.rewriter = SelectionRewriteController(service, self.document, self.store, self.activity)
        self._grammar_timer = Debouncer(self.config.grammar_debounce_seconds, self.check_grammar)

    @property
    def content(self) -> str:
        """Current document markup, overlays included."""
        return self.document.content

    @property
    def active_modes(self) -> frozenset[AiMode]:
        return self.activity.active_modes

    # --- Document events ---

    def on_user_edit(self, markup: str) -> None:
        """Take a direct user edit: drop stale edits and restart the grammar timer."""
        self.store.clear_all()
        self.rewriter.discard_selection()
        self.document.set_content(strip_overlays(markup))
        self._grammar_timer.trigger()

    def refresh(self) -> str:
        """Re-render overlays for the pending edits onto the document."""
        if self.store.is_empty:
            markup = strip_overlays(self.document.content)
        else:
            markup = render_overlays(
                self.document.plain_markup,
                self.store.grammar_errors,
                self.store.style_suggestions,
            )
        self.document.set_content(markup)
        return markup

    # --- Service round trips ---

    async def _request(self, ticket: RequestTicket, call: Awaitable, fallback) -> tuple[object, bool]:
        """Await ``call``; return its result (or ``fallback``) and whether it is current."""
        try:
            result = await call
        except Exception:
            logger.exception("%s request failed", ticket.mode.value)
            result = fallback
        finally:
            current = self.activity.finish(ticket)
        return result, current

    def _is_fresh(self, ticket: RequestTicket, current: bool) -> bool:
        if not current:
            logger.debug("Discarding %s response #%d: superseded", ticket.mode.value, ticket.sequence)
            return False
        if self.document.text != ticket.text:
            logger.debug("Discarding %s response #%d: text changed", ticket.mode.value, ticket.sequence)
            return False
        return True

    async def generate(self, prompt: str, files: Sequence[AttachedFile] = ()) -> str:
        """Replace the whole document with a freshly generated draft."""
        self._grammar_timer.cancel()
        self.store.clear_all()
        self.rewriter.discard_selection()
        self.document.set_content(self.config.generating_placeholder)

        ticket = self.activity.start(AiMode.GENERATE, prompt)
        draft, current = await self._request(
            ticket, self.service.generate_draft(prompt, files), DRAFT_ERROR_TEXT
        )
        if not current:
            logger.debug("Discarding draft #%d: superseded", ticket.sequence)
            return self.document.content
        self.store.clear_all()
        self.document.set_content(markdown.markdown(draft))
        return self.document.content

    async def check_grammar(self) -> tuple[GrammarError, ...]:
        """Run a grammar check over the current text and overlay the errors."""
        text = self.document.text
        if len(text.strip()) < self.config.grammar_min_chars:
            return ()
        ticket = self.activity.start(AiMode.GRAMMAR, text)
        errors, current = await self._request(ticket, self.service.check_grammar(text), [])
        if not self._is_fresh(ticket, current):
            return ()
        self.store.replace_grammar_errors(errors)
        self.refresh()
        return self.store.grammar_errors

    async def request_suggestions(self) -> tuple[StyleSuggestion, ...]:
        """Fetch style suggestions for the current text and overlay them."""
        text = self.document.text
        if len(text.strip()) < self.config.suggest_min_chars:
            return ()
        ticket = self.activity.start(AiMode.SUGGEST, text)
        suggestions, current = await self._request(ticket, self.service.suggest_style(text), [])
        if not self._is_fresh(ticket, current):
            return ()
        self.store.replace_style_suggestions(suggestions)
        self.refresh()
        return self.store.style_suggestions

    async def rewrite_selection(self, instruction: str) -> str | None:
        return await self.rewriter.rewrite(instruction)

    # --- Resolution ---

    def resolve(self, edit_id: str, accept: bool, kind: EditKind | None = None) -> bool:
        """Apply (accept) or discard (reject) a pending edit.

        The edit's overlay is replaced by the replacement text or by the text
        it wrapped. An edit that never rendered just leaves its set.
        """
        edit = self.store.get(edit_id, kind)
        if edit is None:
            return False

        content = self.document.content
        for m in OVERLAY_SPAN_RE.finditer(content):
            if m.group(2) == edit.dom_id:
                replacement = str(escape(edit.replacement_text)) if accept else m.group(3)
                content = content[: m.start()] + replacement + content[m.end() :]
                break
        else:
            logger.debug("%s %s has no overlay, removing only", edit.kind.value, edit.id)

        self.store.remove(edit)
        self.document.set_content(content)
        self.refresh()
        return True

    def on_overlay_click(self, css_class: str, element_id: str, confirm: ConfirmFn) -> bool | None:
        """Resolve the edit behind a clicked overlay after asking ``confirm``.

        Returns True if accepted, False if rejected, None if the element is
        not a pending overlay.
        """
        target = parse_overlay_target(css_class, element_id)
        if target is None:
            return None
        kind, edit_id = target
        edit = self.store.get(edit_id, kind)
        if edit is None:
            return None
        accepted = bool(confirm(edit))
        self.resolve(edit_id, accepted, kind)
        return accepted

    # --- Lifecycle ---

    async def flush_grammar_check(self) -> None:
        """Run a debounced grammar check now, if one is armed."""
        await self._grammar_timer.flush()

    async def wait_idle(self) -> None:
        """Wait until debounced grammar checks that already started are done."""
        await self._grammar_timer.wait()

    async def aclose(self) -> None:
        self._grammar_timer.cancel()
        await self._grammar_timer.wait()
