"""Tree Store tests: pure tests for path-addressed immutable updates.

Tests cover:
    - Only the target node and its ancestors' subtopic tuples are rebuilt
    - Sibling subtrees keep referential identity
    - Out-of-bounds paths return the input tree object (no-op)
    - Root addressing via the empty path
    - Canonical updaters: mark_loading, replace_subtopics, clear_loading
    - node_at lookup
"""

from noesis.core.knowledge_tree import KnowledgeNode, KnowledgeTree
from noesis.core.tree_store import (
    apply_at,
    clear_loading,
    mark_loading,
    node_at,
    replace_subtopics,
)


def _tree() -> KnowledgeTree:
    a1 = KnowledgeNode("A1", "a1")
    a2 = KnowledgeNode("A2", "a2")
    a = KnowledgeNode("A", "a", (a1, a2))
    b = KnowledgeNode("B", "b")
    c = KnowledgeNode("C", "c", (KnowledgeNode("C1", "c1"),))
    return KnowledgeTree("Root", "r", (a, b, c))


# --- Structural sharing -------------------------------------------------------

def test_apply_at_top_level_rebuilds_only_target():
    tree = _tree()
    updated = apply_at(tree, [1], mark_loading)

    assert updated is not tree
    assert updated.subtopics[1].is_loading is True
    assert updated.subtopics[0] is tree.subtopics[0]
    assert updated.subtopics[2] is tree.subtopics[2]


def test_apply_at_deep_path_shares_siblings():
    tree = _tree()
    updated = apply_at(tree, [0, 1], mark_loading)

    assert updated.subtopics[0].subtopics[1].is_loading is True
    # Spine reallocated
    assert updated.subtopics[0] is not tree.subtopics[0]
    # Sibling of target and siblings of ancestors reused
    assert updated.subtopics[0].subtopics[0] is tree.subtopics[0].subtopics[0]
    assert updated.subtopics[1] is tree.subtopics[1]
    assert updated.subtopics[2] is tree.subtopics[2]


def test_apply_at_does_not_mutate_previous_snapshot():
    tree = _tree()
    apply_at(tree, [0, 0], mark_loading)
    assert tree.subtopics[0].subtopics[0].is_loading is False


def test_apply_at_keeps_root_fields():
    tree = _tree()
    updated = apply_at(tree, [2], mark_loading)
    assert updated.topic == "Root"
    assert updated.description == "r"


# --- Stale paths --------------------------------------------------------------

def test_apply_at_out_of_bounds_top_level_returns_same_tree():
    tree = _tree()
    assert apply_at(tree, [3], mark_loading) is tree


def test_apply_at_out_of_bounds_deep_returns_same_tree():
    tree = _tree()
    assert apply_at(tree, [0, 5], mark_loading) is tree
    assert apply_at(tree, [1, 0], mark_loading) is tree
    assert apply_at(tree, [0, 0, 0], mark_loading) is tree


def test_apply_at_negative_index_is_noop():
    tree = _tree()
    assert apply_at(tree, [-1], mark_loading) is tree


def test_apply_at_noop_result_deep_equals_input():
    tree = _tree()
    assert apply_at(tree, [9, 9], mark_loading) == tree


# --- Root ---------------------------------------------------------------------

def test_empty_path_addresses_root():
    tree = KnowledgeTree("Root", "r")
    updated = apply_at(tree, [], mark_loading)
    assert updated.is_loading is True
    assert updated.topic == "Root"


def test_replace_root_children_via_empty_path():
    tree = KnowledgeTree("Root", "r")
    child = KnowledgeNode("X", "x")
    updated = apply_at(tree, (), replace_subtopics([child]))
    assert updated.subtopics == (child,)


# --- Updaters -----------------------------------------------------------------

def test_replace_subtopics_sets_children_and_clears_loading():
    tree = apply_at(_tree(), [1], mark_loading)
    children = [KnowledgeNode("B1", "b1"), KnowledgeNode("B2", "b2")]
    updated = apply_at(tree, [1], replace_subtopics(children))

    b = updated.subtopics[1]
    assert [c.title for c in b.subtopics] == ["B1", "B2"]
    assert isinstance(b.subtopics, tuple)
    assert b.is_loading is False


def test_clear_loading_preserves_children():
    tree = apply_at(_tree(), [0], mark_loading)
    updated = apply_at(tree, [0], clear_loading)
    assert updated.subtopics[0].is_loading is False
    assert updated.subtopics[0].subtopics == tree.subtopics[0].subtopics


def test_clear_loading_is_idempotent_in_value():
    tree = _tree()
    updated = apply_at(tree, [1], clear_loading)
    assert updated == tree


# --- node_at ------------------------------------------------------------------

def test_node_at_finds_nested_node():
    assert node_at(_tree(), (0, 1)).title == "A2"


def test_node_at_empty_path_is_root_view():
    root = node_at(_tree(), ())
    assert root.title == "Root"
    assert len(root.subtopics) == 3


def test_node_at_stale_path_returns_none():
    assert node_at(_tree(), (4,)) is None
    assert node_at(_tree(), (1, 0)) is None


def test_node_at_without_tree_returns_none():
    assert node_at(None, (0,)) is None
