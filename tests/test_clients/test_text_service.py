"""Tests for TextService and its structured-response parsing."""

from __future__ import annotations

import pytest

from magic_writer.clients.llm_client import LLMResponse
from magic_writer.clients.text_service import DRAFT_ERROR_TEXT, TextService, parse_payloads
from magic_writer.errors import MalformedResponseError, ServiceUnavailableError
from magic_writer.models.attachments import AttachedFile
from magic_writer.models.edits import GrammarError, GrammarErrorPayload, StyleSuggestion

LONG_TEXT = "This is a sentence that is long enough to be sent for style suggestions, surely."


class TestParsePayloads:
    def test_bare_list(self):
        data = [{"errorText": "Teh", "correction": "The", "explanation": "Spelling"}]
        result = parse_payloads(data, GrammarErrorPayload, ("errors",))
        assert len(result) == 1
        assert result[0].correction == "The"

    def test_dict_wrapper(self):
        data = {"errors": [{"errorText": "Teh", "correction": "The", "explanation": "Spelling"}]}
        result = parse_payloads(data, GrammarErrorPayload, ("errors", "items"))
        assert len(result) == 1

    def test_dict_without_known_key_is_empty(self):
        assert parse_payloads({"other": []}, GrammarErrorPayload, ("errors",)) == []

    def test_non_list_is_empty(self):
        assert parse_payloads("nonsense", GrammarErrorPayload, ("errors",)) == []
        assert parse_payloads(None, GrammarErrorPayload, ("errors",)) == []

    def test_invalid_items_are_skipped(self):
        data = [
            {"errorText": "Teh", "correction": "The", "explanation": "Spelling"},
            {"errorText": "missing fields"},
            "not a dict",
        ]
        result = parse_payloads(data, GrammarErrorPayload, ("errors",))
        assert [p.errorText for p in result] == ["Teh"]


class TestGenerateDraft:
    async def test_returns_generated_text(self, mock_llm_client):
        service = TextService(mock_llm_client)
        result = await service.generate_draft("Write a poem")
        assert result == "Draft text."

    async def test_passes_attachments(self, mock_llm_client):
        service = TextService(mock_llm_client)
        files = [AttachedFile(name="a.png", mime_type="image/png", data="AAAA")]
        await service.generate_draft("Describe this", files)
        assert mock_llm_client.generate.call_args.kwargs["attachments"] == files

    async def test_failure_returns_apology(self, mock_llm_client):
        mock_llm_client.generate.side_effect = ServiceUnavailableError("down")
        service = TextService(mock_llm_client)
        assert await service.generate_draft("Write a poem") == DRAFT_ERROR_TEXT


class TestRewriteSpan:
    async def test_returns_stripped_rewrite(self, mock_llm_client):
        mock_llm_client.generate.return_value = LLMResponse(
            text="  The feline rested.\n", input_tokens=1, output_tokens=1
        )
        service = TextService(mock_llm_client)
        assert await service.rewrite_span("The cat sat.", "make it fancy") == "The feline rested."
        prompt = mock_llm_client.generate.call_args.kwargs["prompt"]
        assert "make it fancy" in prompt
        assert "The cat sat." in prompt

    async def test_failure_returns_original(self, mock_llm_client):
        mock_llm_client.generate.side_effect = ServiceUnavailableError("down")
        service = TextService(mock_llm_client)
        assert await service.rewrite_span("The cat sat.", "shorter") == "The cat sat."

    async def test_blank_instruction_skips_call(self, mock_llm_client):
        service = TextService(mock_llm_client)
        assert await service.rewrite_span("The cat sat.", "  ") == "The cat sat."
        mock_llm_client.generate.assert_not_called()


class TestSuggestStyle:
    async def test_parses_suggestions(self, mock_llm_client):
        mock_llm_client.generate_structured.return_value = {
            "suggestions": [{"originalText": "long enough", "suggestedText": "sufficiently long"}]
        }
        service = TextService(mock_llm_client)
        result = await service.suggest_style(LONG_TEXT)

        assert len(result) == 1
        assert isinstance(result[0], StyleSuggestion)
        assert result[0].match_text == "long enough"
        kwargs = mock_llm_client.generate_structured.call_args.kwargs
        assert kwargs["tool_name"] == "style_suggestions"
        assert kwargs["schema"]["properties"]["suggestions"]["type"] == "array"

    async def test_short_text_skips_call(self, mock_llm_client):
        service = TextService(mock_llm_client)
        assert await service.suggest_style("Too short.") == []
        mock_llm_client.generate_structured.assert_not_called()

    async def test_malformed_response_is_empty(self, mock_llm_client):
        mock_llm_client.generate_structured.side_effect = MalformedResponseError("no tool call")
        service = TextService(mock_llm_client)
        assert await service.suggest_style(LONG_TEXT) == []


class TestCheckGrammar:
    async def test_parses_errors(self, mock_llm_client):
        mock_llm_client.generate_structured.return_value = {
            "errors": [{"errorText": "Teh", "correction": "The", "explanation": "Spelling"}]
        }
        service = TextService(mock_llm_client)
        result = await service.check_grammar("Teh cat sat.")

        assert len(result) == 1
        assert isinstance(result[0], GrammarError)
        assert result[0].annotation == "Spelling"

    @pytest.mark.parametrize("text", ["", "Teh cat", "   short   "])
    async def test_short_text_skips_call(self, mock_llm_client, text):
        service = TextService(mock_llm_client)
        assert await service.check_grammar(text) == []
        mock_llm_client.generate_structured.assert_not_called()

    async def test_service_failure_is_empty(self, mock_llm_client):
        mock_llm_client.generate_structured.side_effect = ServiceUnavailableError("timeout")
        service = TextService(mock_llm_client)
        assert await service.check_grammar("Teh cat sat on the mat.") == []

    async def test_wrong_shape_is_empty(self, mock_llm_client):
        mock_llm_client.generate_structured.return_value = {"errors": "none"}
        service = TextService(mock_llm_client)
        assert await service.check_grammar("Teh cat sat on the mat.") == []
