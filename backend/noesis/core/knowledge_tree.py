"""Knowledge Tree: immutable hierarchical knowledge content.

Invariants:
    - KnowledgeNode and KnowledgeTree are frozen; subtopics is always a tuple
    - The root is structurally a KnowledgeNode titled with the tree's topic
    - An empty subtopics tuple means "leaf or not yet expanded" (indistinguishable)
    - is_loading is transient: never read from nor written to the wire format

Design Decisions:
    - Frozen dataclasses over dicts: versions can share subtrees by reference
      and no caller can mutate a previous snapshot
    - Wire conversion lives here (dict in, dict out); shape validation of raw
      provider payloads happens at the boundary in schemas/
"""

from dataclasses import dataclass, field

from noesis.core.domain_types import ExpansionState


@dataclass(frozen=True)
class KnowledgeNode:
    """One topic in the tree: title, free-text description, ordered children."""
    title: str
    description: str = ""
    subtopics: tuple["KnowledgeNode", ...] = field(default_factory=tuple)
    is_loading: bool = False

    @property
    def has_children(self) -> bool:
        return len(self.subtopics) > 0


@dataclass(frozen=True)
class KnowledgeTree:
    """Root wrapper: topic is the root node's display title."""
    topic: str
    description: str = ""
    subtopics: tuple[KnowledgeNode, ...] = field(default_factory=tuple)
    is_loading: bool = False

    def as_node(self) -> KnowledgeNode:
        """View the root as a KnowledgeNode titled `topic`."""
        return KnowledgeNode(
            title=self.topic,
            description=self.description,
            subtopics=self.subtopics,
            is_loading=self.is_loading,
        )

    @classmethod
    def from_root(cls, root: KnowledgeNode) -> "KnowledgeTree":
        """Rebuild the wrapper from an (updated) root node."""
        return cls(
            topic=root.title,
            description=root.description,
            subtopics=root.subtopics,
            is_loading=root.is_loading,
        )


# ─── Expansion state ─────────────────────────────────────────────

def expansion_state(node: KnowledgeNode) -> ExpansionState:
    """Derive the node's lifecycle state from its fields."""
    if node.is_loading:
        return ExpansionState.LOADING
    if node.has_children:
        return ExpansionState.EXPANDED
    return ExpansionState.COLLAPSED


def can_expand(node: KnowledgeNode) -> bool:
    """Only collapsed, non-loading nodes may trigger an expansion request."""
    return expansion_state(node) == ExpansionState.COLLAPSED


def description_paragraphs(description: str) -> list[str]:
    """Split a description on newlines, dropping blank paragraphs."""
    if not description:
        return []
    return [p for p in description.split("\n") if p.strip()]


# ─── Wire conversion ─────────────────────────────────────────────

def node_from_dict(data: dict) -> KnowledgeNode:
    """Build a KnowledgeNode (recursively) from the provider's node shape."""
    return KnowledgeNode(
        title=data["title"],
        description=data.get("description") or "",
        subtopics=tuple(node_from_dict(s) for s in data.get("subtopics") or ()),
    )


def tree_from_dict(data: dict) -> KnowledgeTree:
    """Build a KnowledgeTree from the provider's {topic, description, subtopics} shape."""
    return KnowledgeTree(
        topic=data["topic"],
        description=data.get("description") or "",
        subtopics=tuple(node_from_dict(s) for s in data.get("subtopics") or ()),
    )


def node_to_dict(node: KnowledgeNode) -> dict:
    return {
        "title": node.title,
        "description": node.description,
        "subtopics": [node_to_dict(s) for s in node.subtopics],
    }


def tree_to_dict(tree: KnowledgeTree) -> dict:
    return {
        "topic": tree.topic,
        "description": tree.description,
        "subtopics": [node_to_dict(s) for s in tree.subtopics],
    }
