"""Pydantic models for pending edits proposed by the text service."""

from __future__ import annotations

import uuid
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


def new_edit_id() -> str:
    """Return a fresh, process-unique edit identifier."""
    return uuid.uuid4().hex


class EditKind(str, Enum):
    STYLE = "style"
    GRAMMAR = "grammar"

    @property
    def css_class(self) -> str:
        return "suggestion-underline" if self is EditKind.STYLE else "grammar-error"

    @property
    def id_prefix(self) -> str:
        return "suggestion-" if self is EditKind.STYLE else "grammar-"


class PendingEdit(BaseModel):
    """A proposed text change anchored to a literal fragment of the document."""

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[EditKind]

    id: str = Field(default_factory=new_edit_id)
    match_text: str
    replacement_text: str
    annotation: str = ""

    @property
    def dom_id(self) -> str:
        return f"{self.kind.id_prefix}{self.id}"

    @property
    def tooltip(self) -> str:
        return self.annotation


class StyleSuggestion(PendingEdit):
    """Stylistic rewrite of a phrase: match_text is the original phrase."""

    kind: ClassVar[EditKind] = EditKind.STYLE

    @property
    def tooltip(self) -> str:
        return self.annotation or f"Suggested change: {self.replacement_text}"


class GrammarError(PendingEdit):
    """Spelling or grammar error; annotation carries the explanation."""

    kind: ClassVar[EditKind] = EditKind.GRAMMAR

    @property
    def tooltip(self) -> str:
        if self.annotation:
            return f"{self.annotation}. Correction: {self.replacement_text}"
        return f"Correction: {self.replacement_text}"


# --- Wire payloads (structured service output, no ids) ---


class StyleSuggestionPayload(BaseModel):
    originalText: str = Field(
        description="The exact, original phrase or sentence from the text to be replaced."
    )
    suggestedText: str = Field(description="The improved version of the text.")

    def to_edit(self) -> StyleSuggestion:
        return StyleSuggestion(
            match_text=self.originalText,
            replacement_text=self.suggestedText,
            annotation=f"Suggested change: {self.suggestedText}",
        )


class GrammarErrorPayload(BaseModel):
    errorText: str = Field(
        description="The exact word or phrase from the text that contains an error."
    )
    correction: str = Field(description="The corrected version of the word or phrase.")
    explanation: str = Field(
        description=(
            "A brief, clear explanation of the error "
            "(e.g., 'Spelling mistake', 'Subject-verb agreement')."
        )
    )

    def to_edit(self) -> GrammarError:
        return GrammarError(
            match_text=self.errorText,
            replacement_text=self.correction,
            annotation=self.explanation,
        )
