"""Provider text parsing tests: fence stripping and strict JSON decoding."""

import pytest

from noesis.core.errors import ErrorCategory, ResponseParseError
from noesis.core.parse_json import parse_json_payload, strip_code_fence


def test_plain_json_unchanged():
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


def test_fence_with_language_tag_stripped():
    assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_fence_without_language_tag_stripped():
    assert strip_code_fence("```\n[1, 2]\n```") == "[1, 2]"


def test_parse_object():
    assert parse_json_payload('{"topic": "X"}') == {"topic": "X"}


def test_parse_fenced_array():
    text = '```json\n[{"title": "A", "description": "a", "subtopics": []}]\n```'
    assert parse_json_payload(text)[0]["title"] == "A"


def test_invalid_json_raises_parse_error():
    with pytest.raises(ResponseParseError) as exc:
        parse_json_payload("Sure! Here is your tree: {oops")
    assert exc.value.category == ErrorCategory.PARSE
    assert "not valid JSON" in exc.value.user_message


def test_prose_around_json_is_not_salvaged():
    with pytest.raises(ResponseParseError):
        parse_json_payload('Here you go:\n{"topic": "X"}')
