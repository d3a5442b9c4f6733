"""Anthropic Tree Provider: the TreeContentProvider backed by the Anthropic Messages API.

Invariants:
    - One API call per request; no retry at this layer (client policy only)
    - Missing/empty response text -> ProviderError
    - Text that is not JSON after fence stripping -> ResponseParseError
    - JSON of the wrong shape (object vs array, missing title/topic) -> ResponseParseError
    - Returned values are core dataclasses; pydantic payloads never leak out

Design Decisions:
    - Shape validated with pydantic at the boundary, then converted to frozen
      core types via knowledge_tree.node_from_dict / tree_from_dict
"""

import logging

from pydantic import ValidationError

from noesis.config import Settings
from noesis.core.errors import ErrorContext, ProviderError, ResponseParseError
from noesis.core.knowledge_tree import (
    KnowledgeNode,
    KnowledgeTree,
    node_from_dict,
    tree_from_dict,
)
from noesis.core.parse_json import parse_json_payload
from noesis.infrastructure.anthropic_client import ResilientAnthropicClient
from noesis.schemas.tree import ChildrenPayload, TreePayload
from noesis.services.system_prompt import (
    SYSTEM_INSTRUCTION,
    build_expand_prompt,
    build_generate_prompt,
)

logger = logging.getLogger(__name__)


def _response_text(response: object) -> str:
    """Concatenate text blocks of a Messages API response."""
    content = getattr(response, "content", None) or []
    parts = [
        b.text for b in content
        if getattr(b, "type", None) == "text" and getattr(b, "text", None)
    ]
    return "\n".join(parts)


def parse_tree_text(text: str) -> KnowledgeTree:
    """Parse an initial-generation response into a KnowledgeTree."""
    data = parse_json_payload(text)
    try:
        payload = TreePayload.model_validate(data)
    except ValidationError as e:
        raise ResponseParseError(
            f"Tree response has unexpected shape: {e.error_count()} error(s)",
            context=ErrorContext(debug_info={"errors": e.errors()}),
        ) from e
    return tree_from_dict(payload.model_dump())


def parse_children_text(text: str) -> tuple[KnowledgeNode, ...]:
    """Parse an expansion response (a JSON array of nodes)."""
    data = parse_json_payload(text)
    try:
        payloads = ChildrenPayload.validate_python(data)
    except ValidationError as e:
        raise ResponseParseError(
            f"Expansion response has unexpected shape: {e.error_count()} error(s)",
            context=ErrorContext(debug_info={"errors": e.errors()}),
        ) from e
    return tuple(node_from_dict(p.model_dump()) for p in payloads)


class AnthropicTreeProvider:
    """Generates and expands knowledge trees through a ResilientAnthropicClient."""

    def __init__(
        self,
        anthropic_client: ResilientAnthropicClient,
        model: str,
        max_tokens: int = 8_000,
    ) -> None:
        self.client = anthropic_client
        self.model = model
        self.max_tokens = max_tokens

    async def generate_tree(self, topic: str) -> KnowledgeTree:
        text = await self._complete(build_generate_prompt(topic), ErrorContext())
        tree = parse_tree_text(text)
        logger.info(
            "Generated tree for topic %r (%d subtopics)", topic, len(tree.subtopics),
        )
        return tree

    async def expand_node(
        self, root_topic: str, node_title: str,
    ) -> tuple[KnowledgeNode, ...]:
        context = ErrorContext(node_title=node_title)
        text = await self._complete(
            build_expand_prompt(root_topic, node_title), context,
        )
        children = parse_children_text(text)
        logger.info(
            "Expanded node into %d children", len(children),
            extra={"node_title": node_title},
        )
        return children

    async def _complete(self, prompt: str, context: ErrorContext) -> str:
        response = await self.client.create_message(
            model=self.model,
            max_tokens=self.max_tokens,
            system=SYSTEM_INSTRUCTION,
            messages=[{"role": "user", "content": prompt}],
            context=context,
        )
        text = _response_text(response)
        if not text.strip():
            raise ProviderError(
                "No response text received from AI",
                code="EMPTY_RESPONSE",
                context=context,
            )
        return text


def build_tree_provider(settings: Settings) -> AnthropicTreeProvider:
    """Wire the provider from application settings."""
    client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    return AnthropicTreeProvider(
        client,
        model=settings.anthropic_model,
        max_tokens=settings.anthropic_max_tokens,
    )
