"""Layout Engine: deterministic 2D positioning of a knowledge tree snapshot.

Invariants:
    - layout() is pure: identical (tree, viewport_height, zoom) give bit-identical output
    - x depends on depth only: x = depth * LEVEL_SPACING + PADDING
    - Leaves take y from a running counter seeded at PADDING, stepping
      NODE_HEIGHT + VERTICAL_SPACING, in depth-first left-to-right order
    - Internal node y = midpoint of its FIRST and LAST child's y (post-order)
    - After layout every y is shifted so root.y == viewport_height / (2 * zoom)
    - Exactly one edge per (parent, child) pair; the root has no incoming edge
    - Nodes are emitted in post-order (children before parent, root last)

Design Decisions:
    - Two passes: measure raw y per index path, then build frozen PositionedNodes
      with the centering offset already applied (no post-hoc mutation)
    - Parent relation is the parent's index path, passed down the traversal,
      instead of an object back-pointer
    - Full relayout on every change: O(nodes), trees are a few hundred nodes
"""

from dataclasses import dataclass, field

from noesis.core.domain_types import (
    HIT_WIDTH,
    LEVEL_SPACING,
    NODE_HEIGHT,
    NODE_RADIUS,
    PADDING,
    PATH_SEPARATOR,
    VERTICAL_SPACING,
    IndexPath,
)
from noesis.core.knowledge_tree import KnowledgeNode, KnowledgeTree


@dataclass(frozen=True)
class PositionedNode:
    """A node placed on the canvas. Derived per layout pass, never persisted."""
    title: str
    description: str
    subtopics: tuple[KnowledgeNode, ...]
    is_loading: bool
    x: float
    y: float
    depth: int
    path: str
    index_path: IndexPath
    parent_index_path: IndexPath | None = None
    children: tuple["PositionedNode", ...] = field(default_factory=tuple)

    @property
    def key(self) -> IndexPath:
        """Canonical identity key. `path` is for display only (titles may collide)."""
        return self.index_path

    @property
    def can_expand(self) -> bool:
        return not self.subtopics and not self.is_loading

    def contains(self, canvas_x: float, canvas_y: float) -> bool:
        """Whether a canvas-space point falls inside this node's hit box."""
        return (
            self.x - NODE_RADIUS <= canvas_x <= self.x + HIT_WIDTH
            and abs(canvas_y - self.y) <= NODE_HEIGHT / 2
        )


@dataclass(frozen=True)
class PositionedEdge:
    """A parent -> child connection with both endpoints' coordinates."""
    source_path: str
    target_path: str
    source_index_path: IndexPath
    target_index_path: IndexPath
    source_x: float
    source_y: float
    target_x: float
    target_y: float


@dataclass(frozen=True)
class EdgeCurve:
    """Cubic Bezier with horizontal tangents at both ends."""
    start: tuple[float, float]
    control1: tuple[float, float]
    control2: tuple[float, float]
    end: tuple[float, float]

    def svg_path(self) -> str:
        (sx, sy), (c1x, c1y) = self.start, self.control1
        (c2x, c2y), (ex, ey) = self.control2, self.end
        return f"M {sx} {sy} C {c1x} {c1y}, {c2x} {c2y}, {ex} {ey}"


@dataclass(frozen=True)
class TreeLayout:
    """Flat positioned nodes (post-order) and edges for one render pass."""
    nodes: tuple[PositionedNode, ...] = ()
    edges: tuple[PositionedEdge, ...] = ()

    @property
    def root(self) -> PositionedNode | None:
        return self.nodes[-1] if self.nodes else None

    def find(self, index_path: IndexPath) -> PositionedNode | None:
        for node in self.nodes:
            if node.index_path == index_path:
                return node
        return None


EMPTY_LAYOUT = TreeLayout()


def node_x(depth: int) -> float:
    return depth * LEVEL_SPACING + PADDING


def edge_curve(edge: PositionedEdge) -> EdgeCurve:
    """Control points derived from endpoints and LEVEL_SPACING only."""
    half = LEVEL_SPACING / 2
    return EdgeCurve(
        start=(edge.source_x + NODE_RADIUS, edge.source_y),
        control1=(edge.source_x + half, edge.source_y),
        control2=(edge.target_x - half, edge.target_y),
        end=(edge.target_x - NODE_RADIUS, edge.target_y),
    )


# ─── Pass 1: vertical measurement ────────────────────────────────

def _measure(
    node: KnowledgeNode,
    index_path: IndexPath,
    raw_y: dict[IndexPath, float],
    counter: list[float],
) -> float:
    """Post-order: assign leaves from the counter, center parents on first/last child."""
    if not node.subtopics:
        y = counter[0]
        counter[0] += NODE_HEIGHT + VERTICAL_SPACING
    else:
        child_ys = [
            _measure(child, index_path + (i,), raw_y, counter)
            for i, child in enumerate(node.subtopics)
        ]
        first, last = child_ys[0], child_ys[-1]
        y = first + (last - first) / 2
    raw_y[index_path] = y
    return y


# ─── Pass 2: positioned nodes and edges ──────────────────────────

def _build(
    node: KnowledgeNode,
    depth: int,
    index_path: IndexPath,
    parent: tuple[str, IndexPath, float, float] | None,
    raw_y: dict[IndexPath, float],
    offset: float,
    nodes: list[PositionedNode],
    edges: list[PositionedEdge],
) -> PositionedNode:
    parent_path = parent[0] if parent else ""
    path = f"{parent_path}{PATH_SEPARATOR}{node.title}" if parent else node.title
    x = node_x(depth)
    y = raw_y[index_path] + offset

    children = tuple(
        _build(
            child, depth + 1, index_path + (i,), (path, index_path, x, y),
            raw_y, offset, nodes, edges,
        )
        for i, child in enumerate(node.subtopics)
    )

    positioned = PositionedNode(
        title=node.title,
        description=node.description,
        subtopics=node.subtopics,
        is_loading=node.is_loading,
        x=x,
        y=y,
        depth=depth,
        path=path,
        index_path=index_path,
        parent_index_path=parent[1] if parent else None,
        children=children,
    )
    nodes.append(positioned)
    if parent:
        edges.append(PositionedEdge(
            source_path=parent[0],
            target_path=path,
            source_index_path=parent[1],
            target_index_path=index_path,
            source_x=parent[2],
            source_y=parent[3],
            target_x=x,
            target_y=y,
        ))
    return positioned


def layout(
    tree: KnowledgeTree | None, viewport_height: float, zoom: float,
) -> TreeLayout:
    """Lay out the whole tree and center the root in the visible viewport."""
    if zoom <= 0:
        raise ValueError(f"zoom must be positive, got {zoom}")
    if viewport_height < 0:
        raise ValueError(f"viewport_height must be non-negative, got {viewport_height}")
    if tree is None:
        return EMPTY_LAYOUT

    root = tree.as_node()
    raw_y: dict[IndexPath, float] = {}
    root_y = _measure(root, (), raw_y, [PADDING])
    offset = viewport_height / (2 * zoom) - root_y

    nodes: list[PositionedNode] = []
    edges: list[PositionedEdge] = []
    _build(root, 0, (), None, raw_y, offset, nodes, edges)
    return TreeLayout(nodes=tuple(nodes), edges=tuple(edges))


def hit_test(
    tree_layout: TreeLayout, canvas_x: float, canvas_y: float,
) -> PositionedNode | None:
    """Return the node whose hit box contains the canvas point, if any."""
    for node in tree_layout.nodes:
        if node.contains(canvas_x, canvas_y):
            return node
    return None
