"""Holds the pending style suggestions and grammar errors."""

from __future__ import annotations

from collections.abc import Iterable

from magic_writer.models.edits import EditKind, GrammarError, PendingEdit, StyleSuggestion, new_edit_id


class EditSetStore:
    """Two independent ordered edit sets sharing one id namespace.

    Inbound edits always get fresh ids, so an id is unique across both sets
    until the edit is resolved or the sets are cleared.
    """

    def __init__(self):
        self._style: list[StyleSuggestion] = []
        self._grammar: list[GrammarError] = []

    @property
    def style_suggestions(self) -> tuple[StyleSuggestion, ...]:
        return tuple(self._style)

    @property
    def grammar_errors(self) -> tuple[GrammarError, ...]:
        return tuple(self._grammar)

    @property
    def is_empty(self) -> bool:
        return not self._style and not self._grammar

    def __len__(self) -> int:
        return len(self._style) + len(self._grammar)

    @staticmethod
    def _ingest(edits: Iterable[PendingEdit]) -> list:
        return [edit.model_copy(update={"id": new_edit_id()}) for edit in edits]

    def replace_style_suggestions(self, edits: Iterable[StyleSuggestion]) -> tuple[StyleSuggestion, ...]:
        self._style = self._ingest(edits)
        return self.style_suggestions

    def replace_grammar_errors(self, edits: Iterable[GrammarError]) -> tuple[GrammarError, ...]:
        self._grammar = self._ingest(edits)
        return self.grammar_errors

    def remove_style_suggestion(self, edit_id: str) -> StyleSuggestion | None:
        for i, edit in enumerate(self._style):
            if edit.id == edit_id:
                return self._style.pop(i)
        return None

    def remove_grammar_error(self, edit_id: str) -> GrammarError | None:
        for i, edit in enumerate(self._grammar):
            if edit.id == edit_id:
                return self._grammar.pop(i)
        return None

    def remove(self, edit: PendingEdit) -> PendingEdit | None:
        if edit.kind is EditKind.GRAMMAR:
            return self.remove_grammar_error(edit.id)
        return self.remove_style_suggestion(edit.id)

    def get(self, edit_id: str, kind: EditKind | None = None) -> PendingEdit | None:
        """Look up an edit by id, optionally within one set only."""
        if kind in (None, EditKind.GRAMMAR):
            for edit in self._grammar:
                if edit.id == edit_id:
                    return edit
        if kind in (None, EditKind.STYLE):
            for edit in self._style:
                if edit.id == edit_id:
                    return edit
        return None

    def clear_all(self) -> None:
        self._style.clear()
        self._grammar.clear()
