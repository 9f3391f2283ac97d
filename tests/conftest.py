"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from magic_writer.clients.llm_client import LLMClient, LLMResponse
from magic_writer.clients.text_service import TextService
from magic_writer.config import EditorConfig
from magic_writer.editor.controller import ReconciliationController
from magic_writer.editor.document import Document
from magic_writer.models.edits import GrammarError, StyleSuggestion


@pytest.fixture
def sample_text() -> str:
    return (
        "Teh cat sat on the mat. It was a very good day for the cat, "
        "and it's owner was happy too."
    )


@pytest.fixture
def sample_grammar_errors() -> list[GrammarError]:
    return [
        GrammarError(match_text="Teh", replacement_text="The", annotation="Spelling"),
        GrammarError(match_text="it's owner", replacement_text="its owner", annotation="Possessive"),
    ]


@pytest.fixture
def sample_style_suggestions() -> list[StyleSuggestion]:
    return [
        StyleSuggestion(match_text="a very good day", replacement_text="a wonderful day"),
    ]


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="Draft text.", input_tokens=100, output_tokens=50)
    )
    client.generate_structured = AsyncMock(return_value={})
    return client


@pytest.fixture
def mock_text_service() -> TextService:
    """Create a mock text service with empty results."""
    service = AsyncMock(spec=TextService)
    service.generate_draft = AsyncMock(return_value="Draft text.")
    service.rewrite_span = AsyncMock(side_effect=lambda text, instruction: text)
    service.suggest_style = AsyncMock(return_value=[])
    service.check_grammar = AsyncMock(return_value=[])
    return service


@pytest.fixture
def editor_config() -> EditorConfig:
    return EditorConfig(grammar_debounce_seconds=0.01)


@pytest.fixture
def controller(mock_text_service, editor_config, sample_text) -> ReconciliationController:
    return ReconciliationController(mock_text_service, Document(sample_text), editor_config)
