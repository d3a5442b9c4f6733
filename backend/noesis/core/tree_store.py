"""Tree Store: path-addressed immutable updates with structural sharing.

Invariants:
    - apply_at never mutates its input; untouched subtrees keep referential identity
    - Only the spine from the root to the target node is reallocated
    - An out-of-bounds index anywhere along the path returns the input tree object
      unchanged (identity), never raises
    - The empty path addresses the root

Design Decisions:
    - Updaters are plain callables KnowledgeNode -> KnowledgeNode so the shell can
      compose them; the three canonical ones are built by factories below
    - Identity of the returned tree is the no-op signal: callers compare with `is`
"""

from collections.abc import Callable, Sequence
from dataclasses import replace

from noesis.core.knowledge_tree import KnowledgeNode, KnowledgeTree

NodeUpdater = Callable[[KnowledgeNode], KnowledgeNode]


def _update_subtopics(
    nodes: tuple[KnowledgeNode, ...],
    path: Sequence[int],
    updater: NodeUpdater,
) -> tuple[KnowledgeNode, ...]:
    """Rebuild only the slot at path[0]; return `nodes` itself when stale."""
    index = path[0]
    if index < 0 or index >= len(nodes):
        return nodes

    target = nodes[index]
    if len(path) == 1:
        updated = updater(target)
    else:
        children = _update_subtopics(target.subtopics, path[1:], updater)
        if children is target.subtopics:
            return nodes
        updated = replace(target, subtopics=children)

    return nodes[:index] + (updated,) + nodes[index + 1:]


def apply_at(
    tree: KnowledgeTree,
    index_path: Sequence[int],
    updater: NodeUpdater,
) -> KnowledgeTree:
    """Apply `updater` to the node at `index_path`, returning a new tree version."""
    if not index_path:
        return KnowledgeTree.from_root(updater(tree.as_node()))

    subtopics = _update_subtopics(tree.subtopics, index_path, updater)
    if subtopics is tree.subtopics:
        return tree
    return replace(tree, subtopics=subtopics)


def node_at(
    tree: KnowledgeTree | None, index_path: Sequence[int],
) -> KnowledgeNode | None:
    """Look up the node at `index_path`; None when the tree or path is stale."""
    if tree is None:
        return None
    node = tree.as_node()
    for index in index_path:
        if index < 0 or index >= len(node.subtopics):
            return None
        node = node.subtopics[index]
    return node


# ─── Canonical updaters ──────────────────────────────────────────

def mark_loading(node: KnowledgeNode) -> KnowledgeNode:
    """Flag an expansion request as outstanding for this node."""
    return replace(node, is_loading=True)


def clear_loading(node: KnowledgeNode) -> KnowledgeNode:
    """Clear the loading flag only (failed expansion). Children are preserved."""
    return replace(node, is_loading=False)


def replace_subtopics(children: Sequence[KnowledgeNode]) -> NodeUpdater:
    """Build an updater that installs `children` and clears the loading flag."""
    new_children = tuple(children)

    def _updater(node: KnowledgeNode) -> KnowledgeNode:
        return replace(node, subtopics=new_children, is_loading=False)

    return _updater
