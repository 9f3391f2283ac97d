"""Data models for the writing assistant."""

from magic_writer.models.attachments import AttachedFile
from magic_writer.models.edits import (
    EditKind,
    GrammarError,
    GrammarErrorPayload,
    PendingEdit,
    StyleSuggestion,
    StyleSuggestionPayload,
    new_edit_id,
)
from magic_writer.models.selection import AnchorPoint, SelectionState

__all__ = [
    "AnchorPoint",
    "AttachedFile",
    "EditKind",
    "GrammarError",
    "GrammarErrorPayload",
    "PendingEdit",
    "SelectionState",
    "StyleSuggestion",
    "StyleSuggestionPayload",
    "new_edit_id",
]
