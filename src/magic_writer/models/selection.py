"""Captured text selection used by the rewrite flow."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class AnchorPoint(BaseModel):
    """Page position for the floating rewrite toolbar."""

    model_config = ConfigDict(frozen=True)

    top: float
    left: float


class SelectionState(BaseModel):
    """A live selection: its text and the markup range it covers.

    Valid only for the document revision it was captured at.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    start: int
    end: int
    revision: int
    anchor_point: AnchorPoint | None = None
