"""Text-generation operations used by the editor controllers."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, ValidationError

from magic_writer.clients.llm_client import LLMClient
from magic_writer.config import LLMConfig
from magic_writer.models.attachments import AttachedFile
from magic_writer.models.edits import (
    GrammarError,
    GrammarErrorPayload,
    StyleSuggestion,
    StyleSuggestionPayload,
)

logger = logging.getLogger(__name__)

DRAFT_ERROR_TEXT = "An error occurred while generating text. Please try again."

DRAFT_SYSTEM = (
    "You are a world-class writer and a creative thought partner. Write compelling, "
    "clear, and engaging content based on the user's request."
)

REWRITE_PROMPT = """\
Rewrite the following text based on the instruction provided.

**Instruction:** {instruction}

**Original Text:**
---
{text}
---

**Rewritten Text:**"""

SUGGEST_PROMPT = """\
Analyze the following text for clarity, conciseness, and impact. Provide suggestions \
to improve it. For each suggestion, identify the exact original text to be replaced and \
provide the improved version. Focus on high-impact changes. Return an empty list if no \
suggestions are found.

**Text to Analyze:**
---
{text}
---"""

GRAMMAR_PROMPT = """\
You are an expert proofreader. Analyze the following text for spelling and grammatical \
errors. For each error you find, provide the exact incorrect text, the corrected version, \
and a brief explanation of the error. Return an empty list if no errors are found.

**Text to Analyze:**
---
{text}
---"""


def _list_schema(key: str, item: type[BaseModel]) -> dict:
    """Tool input schema: an object holding one array of ``item``."""
    return {
        "type": "object",
        "properties": {key: {"type": "array", "items": item.model_json_schema()}},
        "required": [key],
    }


def parse_payloads(data, payload_cls: type[BaseModel], keys: Sequence[str]) -> list:
    """Validate a structured response into payload objects.

    Accepts a bare list or a dict wrapping one under any of ``keys``.
    Anything else is treated as an empty result; invalid items are skipped.
    """
    if isinstance(data, dict):
        for key in keys:
            if key in data and isinstance(data[key], list):
                data = data[key]
                break
        else:
            logger.warning("Structured response has none of %s, ignoring", list(keys))
            return []

    if not isinstance(data, list):
        logger.warning("Structured response is not a list, ignoring")
        return []

    result = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            result.append(payload_cls.model_validate(item))
        except ValidationError:
            logger.debug("Skipping invalid %s item: %r", payload_cls.__name__, item)
    return result


class TextService:
    """Drafting, rewriting, style suggestions and grammar checks.

    Every operation recovers from service failures locally: callers never
    see an exception, only the documented fallback value.
    """

    def __init__(
        self,
        llm: LLMClient,
        config: LLMConfig | None = None,
        suggest_min_chars: int = 50,
        grammar_min_chars: int = 10,
    ):
        self.llm = llm
        self.config = config or LLMConfig()
        self.suggest_min_chars = suggest_min_chars
        self.grammar_min_chars = grammar_min_chars

    async def generate_draft(self, prompt: str, files: Sequence[AttachedFile] = ()) -> str:
        """Write a document from a free-text prompt and optional attachments."""
        try:
            response = await self.llm.generate(
                prompt=prompt,
                system=DRAFT_SYSTEM,
                model=self.config.draft_model,
                temperature=0.7,
                attachments=files,
            )
        except Exception:
            logger.exception("Draft generation failed")
            return DRAFT_ERROR_TEXT
        return response.text

    async def rewrite_span(self, text: str, instruction: str) -> str:
        """Rewrite ``text`` following ``instruction``; original text on failure."""
        if not text.strip() or not instruction.strip():
            return text
        try:
            response = await self.llm.generate(
                prompt=REWRITE_PROMPT.format(instruction=instruction, text=text),
                model=self.config.rewrite_model,
                temperature=0.3,
            )
        except Exception:
            logger.exception("Rewrite failed")
            return text
        rewritten = response.text.strip()
        return rewritten or text

    async def suggest_style(self, text: str) -> list[StyleSuggestion]:
        if len(text.strip()) < self.suggest_min_chars:
            return []
        try:
            data = await self.llm.generate_structured(
                SUGGEST_PROMPT.format(text=text),
                tool_name="style_suggestions",
                schema=_list_schema("suggestions", StyleSuggestionPayload),
                model=self.config.suggest_model,
            )
        except Exception:
            logger.exception("Style suggestion call failed")
            return []
        payloads = parse_payloads(data, StyleSuggestionPayload, ("suggestions", "items"))
        return [p.to_edit() for p in payloads]

    async def check_grammar(self, text: str) -> list[GrammarError]:
        if len(text.strip()) < self.grammar_min_chars:
            return []
        try:
            data = await self.llm.generate_structured(
                GRAMMAR_PROMPT.format(text=text),
                tool_name="grammar_errors",
                schema=_list_schema("errors", GrammarErrorPayload),
                model=self.config.grammar_model,
            )
        except Exception:
            logger.exception("Grammar check call failed")
            return []
        payloads = parse_payloads(data, GrammarErrorPayload, ("errors", "items"))
        return [p.to_edit() for p in payloads]
