"""Anthropic Tree Provider tests: mock API responses, verify parsing and error mapping.

Invariants:
    - generate_tree returns a KnowledgeTree built from the JSON object
    - expand_node returns a tuple of KnowledgeNodes built from the JSON array
    - Empty text -> ProviderError; non-JSON / wrong shape -> ResponseParseError

Design Decisions:
    - Mock at the create_message boundary (no real API calls)
    - Prompt builders tested directly (pure functions, no mock needed)
"""

import json

import pytest

from noesis.config import Settings
from noesis.core.errors import AnthropicAPIError, ProviderError, ResponseParseError
from noesis.services.system_prompt import (
    SYSTEM_INSTRUCTION,
    build_expand_prompt,
    build_generate_prompt,
)
from noesis.services.tree_provider import (
    AnthropicTreeProvider,
    build_tree_provider,
    parse_children_text,
    parse_tree_text,
)
from tests.services.mock_anthropic import (
    MockAnthropicClient,
    empty_response,
    text_response,
)

_TREE_JSON = json.dumps({
    "topic": "X",
    "description": "d",
    "subtopics": [
        {"title": "A", "description": "a", "subtopics": []},
        {"title": "B", "description": "b", "subtopics": []},
    ],
})

_CHILDREN_JSON = json.dumps([
    {"title": "A1", "description": "first\nsecond", "subtopics": []},
    {"title": "A2", "description": "", "subtopics": []},
])


# -- Prompts (pure) ------------------------------------------------------------


def test_generate_prompt_names_topic():
    assert build_generate_prompt("Jazz") == 'Generate a knowledge tree for the topic: "Jazz"'


def test_expand_prompt_names_root_and_node():
    prompt = build_expand_prompt("Jazz", "Bebop")
    assert '"Jazz"' in prompt
    assert '"Bebop"' in prompt


def test_system_instruction_describes_node_shape():
    for key in ('"title"', '"description"', '"subtopics"', '"topic"'):
        assert key in SYSTEM_INSTRUCTION


# -- Parsing (pure) ------------------------------------------------------------


def test_parse_tree_text_fenced():
    tree = parse_tree_text(f"```json\n{_TREE_JSON}\n```")
    assert tree.topic == "X"
    assert [s.title for s in tree.subtopics] == ["A", "B"]


def test_parse_tree_text_missing_topic_is_parse_error():
    with pytest.raises(ResponseParseError):
        parse_tree_text('{"description": "d", "subtopics": []}')


def test_parse_children_rejects_object():
    with pytest.raises(ResponseParseError):
        parse_children_text(_TREE_JSON)


def test_parse_children_rejects_blank_title():
    with pytest.raises(ResponseParseError):
        parse_children_text('[{"title": "  ", "description": "", "subtopics": []}]')


def test_parse_children_defaults_missing_fields():
    children = parse_children_text('[{"title": "Only"}]')
    assert children[0].description == ""
    assert children[0].subtopics == ()


# -- Provider ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_generate_tree_sends_prompt_and_parses():
    client = MockAnthropicClient([text_response(_TREE_JSON)])
    provider = AnthropicTreeProvider(client, model="test-model", max_tokens=123)

    tree = await provider.generate_tree("X")

    assert tree.topic == "X"
    call = client.calls[0]
    assert call["model"] == "test-model"
    assert call["max_tokens"] == 123
    assert call["system"] == SYSTEM_INSTRUCTION
    assert call["messages"][0]["content"] == build_generate_prompt("X")


@pytest.mark.asyncio
async def test_expand_node_returns_children():
    client = MockAnthropicClient([text_response(_CHILDREN_JSON)])
    provider = AnthropicTreeProvider(client, model="m")

    children = await provider.expand_node("X", "A")

    assert [c.title for c in children] == ["A1", "A2"]
    assert children[0].description == "first\nsecond"
    assert client.calls[0]["messages"][0]["content"] == build_expand_prompt("X", "A")


@pytest.mark.asyncio
async def test_empty_response_is_provider_error():
    provider = AnthropicTreeProvider(MockAnthropicClient([empty_response()]), model="m")
    with pytest.raises(ProviderError) as exc:
        await provider.generate_tree("X")
    assert exc.value.code == "EMPTY_RESPONSE"


@pytest.mark.asyncio
async def test_non_json_response_is_parse_error():
    client = MockAnthropicClient([text_response("I cannot do that.")])
    provider = AnthropicTreeProvider(client, model="m")
    with pytest.raises(ResponseParseError):
        await provider.expand_node("X", "A")


@pytest.mark.asyncio
async def test_api_error_propagates_as_provider_error():
    client = MockAnthropicClient([AnthropicAPIError("down", "connection_error")])
    provider = AnthropicTreeProvider(client, model="m")
    with pytest.raises(ProviderError):
        await provider.expand_node("X", "A")


def test_build_tree_provider_from_settings():
    settings = Settings(
        anthropic_api_key="sk-ant-test", anthropic_model="custom",
        anthropic_max_tokens=999, anthropic_max_retries=2,
    )
    provider = build_tree_provider(settings)
    assert provider.model == "custom"
    assert provider.max_tokens == 999
    assert provider.client.max_retries == 2
