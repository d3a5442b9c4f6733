"""Tree Sessions: create/read/delete sessions and drive their interaction controller.

Invariants:
    - TreeSession is per-session, in-memory (module-level dict), never persisted
    - Unknown session ids -> 404 with the structured error envelope
    - Expansion requests return immediately (202); the provider call runs as a
      task owned by the TreeSession
    - Provider failures are NOT HTTP errors: they surface in SessionView.error
    - Overlapping generate calls on one session -> 409 (first one wins)

Design Decisions:
    - _tree_sessions as module-level dict: single-process uvicorn, session-scoped state
    - Provider injected via Depends(get_tree_provider) so tests override it
"""

import logging
from functools import lru_cache
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from noesis.api.routes.tree_session_views import build_session_view
from noesis.config import get_settings
from noesis.core.errors import ConcurrencyError, ErrorContext, ResourceNotFoundError
from noesis.core.provider_protocols import TreeContentProvider
from noesis.schemas.tree_session import (
    ExpandResponse,
    GenerateRequest,
    NodeTarget,
    OptionalNodeTarget,
    PanRequest,
    SessionView,
    TreeSessionCreated,
    ViewportRequest,
    ZoomRequest,
)
from noesis.services.tree_provider import build_tree_provider
from noesis.services.tree_session import TreeSession

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tree-sessions", tags=["tree-sessions"])

_tree_sessions: dict[UUID, TreeSession] = {}


@lru_cache
def get_tree_provider() -> TreeContentProvider:
    return build_tree_provider(get_settings())


def get_tree_session_or_404(session_id: UUID) -> TreeSession:
    session = _tree_sessions.get(session_id)
    if session is None:
        raise ResourceNotFoundError(
            "TreeSession", str(session_id),
            context=ErrorContext(session_id=str(session_id)),
        )
    return session


def close_all_sessions() -> None:
    """Cancel in-flight work for every session (application shutdown)."""
    for session in _tree_sessions.values():
        session.close()
    _tree_sessions.clear()


@router.post(
    "", response_model=TreeSessionCreated,
    status_code=status.HTTP_201_CREATED,
)
async def create_tree_session(
    provider: TreeContentProvider = Depends(get_tree_provider),
):
    """Create an empty tree session."""
    session = TreeSession(
        provider, viewport_height=get_settings().default_viewport_height,
    )
    _tree_sessions[session.id] = session
    logger.info("Tree session created", extra={"session_id": str(session.id)})
    return TreeSessionCreated(id=session.id)


@router.get("/{session_id}", response_model=SessionView)
async def get_tree_session(session_id: UUID):
    return build_session_view(get_tree_session_or_404(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tree_session(session_id: UUID):
    session = get_tree_session_or_404(session_id)
    session.close()
    _tree_sessions.pop(session_id, None)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/generate", response_model=SessionView)
async def generate_tree(session_id: UUID, body: GenerateRequest):
    """Generate a new tree for the topic; failures surface in `error`.

    A second generate while one is in flight is rejected with 409.
    """
    session = get_tree_session_or_404(session_id)
    if session.is_generating:
        raise ConcurrencyError(
            "A tree is already being generated for this session",
            context=ErrorContext(session_id=str(session_id)),
        )
    await session.generate(body.topic)
    return build_session_view(session)


@router.post(
    "/{session_id}/expand", response_model=ExpandResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def expand_node(session_id: UUID, body: NodeTarget):
    """Click a node: select it and start an expansion when it is collapsed."""
    session = get_tree_session_or_404(session_id)
    task = session.click_node(body.index_path)
    return ExpandResponse(status="loading" if task else "ignored")


@router.post("/{session_id}/select", response_model=SessionView)
async def select_node(session_id: UUID, body: OptionalNodeTarget):
    session = get_tree_session_or_404(session_id)
    session.select(body.index_path)
    return build_session_view(session)


@router.post("/{session_id}/hover", response_model=SessionView)
async def hover_node(session_id: UUID, body: OptionalNodeTarget):
    session = get_tree_session_or_404(session_id)
    session.hover(body.index_path)
    return build_session_view(session)


@router.put("/{session_id}/viewport", response_model=SessionView)
async def set_viewport(session_id: UUID, body: ViewportRequest):
    session = get_tree_session_or_404(session_id)
    session.set_viewport_height(body.height)
    return build_session_view(session)


@router.post("/{session_id}/view/pan", response_model=SessionView)
async def pan_view(session_id: UUID, body: PanRequest):
    session = get_tree_session_or_404(session_id)
    session.pan_by(body.dx, body.dy)
    return build_session_view(session)


@router.post("/{session_id}/view/zoom", response_model=SessionView)
async def zoom_view(session_id: UUID, body: ZoomRequest):
    session = get_tree_session_or_404(session_id)
    session.wheel(body.cursor_x, body.cursor_y, body.delta_y)
    return build_session_view(session)


@router.post("/{session_id}/view/reset", response_model=SessionView)
async def reset_view(session_id: UUID):
    session = get_tree_session_or_404(session_id)
    session.reset_view()
    return build_session_view(session)
