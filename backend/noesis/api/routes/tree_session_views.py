"""Tree Session Views: render a TreeSession into the SessionView response model.

Invariants:
    - Nodes, edges and details come from the same current_layout() call
    - Index paths are emitted as lists (JSON arrays), never tuples
"""

from noesis.core.layout import PositionedEdge, PositionedNode, edge_curve
from noesis.schemas.tree_session import (
    EdgeOut,
    NodeDetailsOut,
    PositionedNodeOut,
    SessionView,
    ViewTransformOut,
)
from noesis.services.tree_session import TreeSession


def _node_out(node: PositionedNode) -> PositionedNodeOut:
    return PositionedNodeOut(
        title=node.title,
        description=node.description,
        path=node.path,
        index_path=list(node.index_path),
        x=node.x,
        y=node.y,
        depth=node.depth,
        is_loading=node.is_loading,
        can_expand=node.can_expand,
    )


def _edge_out(edge: PositionedEdge) -> EdgeOut:
    return EdgeOut(
        source_path=edge.source_path,
        target_path=edge.target_path,
        source_index_path=list(edge.source_index_path),
        target_index_path=list(edge.target_index_path),
        d=edge_curve(edge).svg_path(),
    )


def build_session_view(session: TreeSession) -> SessionView:
    """Snapshot everything the presentation layer renders."""
    tree_layout = session.current_layout()
    details = session.details()
    return SessionView(
        id=session.id,
        topic=session.tree.topic if session.tree else None,
        is_generating=session.is_generating,
        error=session.error,
        viewport_height=session.viewport_height,
        view=ViewTransformOut(
            x=session.view.x, y=session.view.y, k=session.view.k,
        ),
        selected=list(session.selected) if session.selected is not None else None,
        hovered=list(session.hovered) if session.hovered is not None else None,
        details=(
            NodeDetailsOut(
                title=details.title, path=details.path,
                paragraphs=details.paragraphs,
            )
            if details else None
        ),
        nodes=[_node_out(n) for n in tree_layout.nodes],
        edges=[_edge_out(e) for e in tree_layout.edges],
    )
