"""Tests for JSON extraction utility."""

import pytest

from magic_writer.utils.json_parser import extract_json


class TestExtractJson:
    def test_direct_json(self):
        result = extract_json('{"errors": []}')
        assert result == {"errors": []}

    def test_direct_array(self):
        result = extract_json('[{"errorText": "Teh"}]')
        assert result == [{"errorText": "Teh"}]

    def test_fenced_code_block(self):
        text = '```json\n{"suggestions": [{"originalText": "a", "suggestedText": "b"}]}\n```'
        result = extract_json(text)
        assert result["suggestions"][0]["suggestedText"] == "b"

    def test_embedded_object(self):
        text = 'Here are the errors: {"errors": [1, 2]} as requested.'
        result = extract_json(text)
        assert result == {"errors": [1, 2]}

    def test_embedded_array(self):
        text = 'Result:\n[{"a": 1}, {"b": 2}]\nDone.'
        result = extract_json(text)
        assert result == [{"a": 1}, {"b": 2}]

    def test_invalid_json_raises(self):
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("no json here at all")

    def test_empty_string_raises(self):
        with pytest.raises(ValueError):
            extract_json("")
