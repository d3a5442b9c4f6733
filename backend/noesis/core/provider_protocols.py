"""Boundary Protocols: contract between the interaction controller and content providers.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Implementations raise ProviderError or ResponseParseError, nothing else

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async in Protocol: implementations do IO; core functions never await them
"""

from typing import Protocol

from noesis.core.knowledge_tree import KnowledgeNode, KnowledgeTree


class TreeContentProvider(Protocol):
    """Generates a fresh tree for a topic, or the children of one node."""

    async def generate_tree(self, topic: str) -> KnowledgeTree: ...

    async def expand_node(
        self, root_topic: str, node_title: str,
    ) -> tuple[KnowledgeNode, ...]: ...
