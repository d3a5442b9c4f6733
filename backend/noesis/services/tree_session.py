"""Tree Session: interaction controller for one user's knowledge tree.

Invariants:
    - TreeSession is the ONLY writer of its tree snapshot and view transform
    - At most one in-flight expansion per node: the node's is_loading flag is set
      synchronously before the provider call is scheduled, and loading nodes
      never re-trigger
    - Expansion results are applied by index path against the CURRENT tree at
      resolution time; a stale path is a logged no-op
    - Provider/parse failures never corrupt the tree: generation leaves it unset,
      expansion clears only the loading flag (node stays re-expandable)
    - pointer_up always ends panning and disarms a pending long-press timer
    - At most one initial generation in flight; overlapping requests are ignored

Design Decisions:
    - Expansions run as asyncio tasks so callers (UI events, HTTP routes) return
      immediately; wait_for_expansions() lets tests and shutdown join them
    - Selection/hover stored as index paths (structural key), resolved against
      the current layout on read
    - Layout memoized on (tree identity, viewport height, zoom)
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID, uuid4

from noesis.core.domain_types import (
    DEFAULT_VIEWPORT_HEIGHT,
    LONG_PRESS_SECONDS,
    ROOT_PATH,
    IndexPath,
)
from noesis.core.errors import NoesisError
from noesis.core.knowledge_tree import KnowledgeTree, can_expand, description_paragraphs
from noesis.core.layout import EMPTY_LAYOUT, PositionedNode, TreeLayout, hit_test, layout
from noesis.core.provider_protocols import TreeContentProvider
from noesis.core.tree_store import (
    NodeUpdater,
    apply_at,
    clear_loading,
    mark_loading,
    node_at,
    replace_subtopics,
)
from noesis.core.view_transform import (
    IDLE_GESTURE,
    ViewTransform,
    continue_pan,
    end_pan,
    pan,
    screen_to_canvas,
    start_pan,
    zoom_at,
)

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred."


@dataclass(frozen=True)
class NodeDetails:
    """Sidebar content for the hovered (else selected) node."""
    title: str
    path: str
    paragraphs: list[str]


class TreeSession:
    """Owns one tree snapshot, one view transform, and the expansion lifecycle."""

    def __init__(
        self,
        provider: TreeContentProvider,
        session_id: UUID | None = None,
        viewport_height: float = DEFAULT_VIEWPORT_HEIGHT,
    ) -> None:
        self.id = session_id or uuid4()
        self.provider = provider
        self.tree: KnowledgeTree | None = None
        self.view = ViewTransform()
        self.viewport_height = viewport_height
        self.selected: IndexPath | None = None
        self.hovered: IndexPath | None = None
        self.error: str | None = None
        self.is_generating = False

        self._gesture = IDLE_GESTURE
        self._long_press: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._layout_tree: KnowledgeTree | None = None
        self._layout_params: tuple[float, float] | None = None
        self._layout: TreeLayout = EMPTY_LAYOUT

    # ─── Initial generation ──────────────────────────────────────

    async def generate(self, topic: str) -> bool:
        """Replace the whole tree with a freshly generated one. Returns success.

        Ignored (False) for a blank topic or while another generation is in
        flight, so a slower earlier request can never overwrite a newer tree.
        """
        topic = topic.strip()
        if not topic or self.is_generating:
            return False

        self.error = None
        self.is_generating = True
        self.tree = None
        self.selected = None
        self.hovered = None
        self.view = ViewTransform()
        try:
            tree = await self.provider.generate_tree(topic)
        except Exception as e:
            self._surface_error(e)
            return False
        finally:
            self.is_generating = False

        self.tree = tree
        self.selected = ROOT_PATH
        logger.info(
            "Tree generated (%d top-level subtopics)", len(tree.subtopics),
            extra={"session_id": str(self.id)},
        )
        return True

    # ─── Expansion lifecycle ─────────────────────────────────────

    def request_expansion(self, index_path: Sequence[int]) -> asyncio.Task | None:
        """Mark the node loading and schedule its expansion; None when suppressed."""
        path = tuple(index_path)
        node = node_at(self.tree, path)
        if self.tree is None or node is None or not can_expand(node):
            return None

        self.error = None
        self._apply(path, mark_loading)
        task = asyncio.create_task(self._expand(path, self.tree.topic, node.title))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _expand(
        self, index_path: IndexPath, root_topic: str, node_title: str,
    ) -> bool:
        try:
            children = await self.provider.expand_node(root_topic, node_title)
        except Exception as e:
            self._surface_error(e, index_path)
            self._apply(index_path, clear_loading)
            return False

        self._apply(index_path, replace_subtopics(children))
        logger.info(
            "Node expanded (%d children)", len(children),
            extra={
                "session_id": str(self.id),
                "index_path": index_path,
                "node_title": node_title,
            },
        )
        return True

    def _apply(self, index_path: IndexPath, updater: NodeUpdater) -> bool:
        """Path-addressed update of the current snapshot; stale paths are no-ops."""
        if self.tree is not None:
            updated = apply_at(self.tree, index_path, updater)
            if updated is not self.tree:
                self.tree = updated
                return True
        logger.debug(
            "Stale index path, update ignored",
            extra={"session_id": str(self.id), "index_path": index_path},
        )
        return False

    def _surface_error(
        self, error: Exception, index_path: IndexPath | None = None,
    ) -> None:
        extra = {"session_id": str(self.id), "index_path": index_path}
        if isinstance(error, NoesisError):
            self.error = error.user_message
            logger.warning(
                f"Provider request failed: {error.message}",
                extra={**extra, "error_code": error.code},
            )
        else:
            self.error = UNKNOWN_ERROR_MESSAGE
            logger.error(
                f"Unexpected provider failure: {error}", exc_info=True, extra=extra,
            )

    async def wait_for_expansions(self) -> None:
        """Join every in-flight expansion task."""
        while pending := [t for t in self._tasks if not t.done()]:
            await asyncio.gather(*pending, return_exceptions=True)

    @property
    def pending_expansions(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    # ─── Selection & hover ───────────────────────────────────────

    def select(self, index_path: Sequence[int] | None) -> None:
        self.selected = tuple(index_path) if index_path is not None else None

    def hover(self, index_path: Sequence[int] | None) -> None:
        self.hovered = tuple(index_path) if index_path is not None else None

    def leave(self) -> None:
        self.hovered = None

    def click_node(self, index_path: Sequence[int]) -> asyncio.Task | None:
        """Select the node, then expand it when it is collapsed and idle."""
        self.select(index_path)
        return self.request_expansion(index_path)

    def node_at_screen(self, screen_x: float, screen_y: float) -> PositionedNode | None:
        canvas_x, canvas_y = screen_to_canvas(self.view, screen_x, screen_y)
        return hit_test(self.current_layout(), canvas_x, canvas_y)

    def click_at(self, screen_x: float, screen_y: float) -> asyncio.Task | None:
        node = self.node_at_screen(screen_x, screen_y)
        if node is None:
            return None
        return self.click_node(node.index_path)

    def details(self) -> NodeDetails | None:
        key = self.hovered if self.hovered is not None else self.selected
        if key is None:
            return None
        node = self.current_layout().find(key)
        if node is None:
            return None
        return NodeDetails(
            title=node.title,
            path=node.path,
            paragraphs=description_paragraphs(node.description),
        )

    # ─── View transform ──────────────────────────────────────────

    @property
    def is_panning(self) -> bool:
        return self._gesture.active

    def pointer_down(self, screen_x: float, screen_y: float) -> None:
        """Arm the long-press timer; presses on a node never start a pan."""
        self._disarm_long_press()
        if self.node_at_screen(screen_x, screen_y) is not None:
            return
        loop = asyncio.get_running_loop()
        self._long_press = loop.call_later(
            LONG_PRESS_SECONDS, self._begin_pan, screen_x, screen_y,
        )

    def _begin_pan(self, screen_x: float, screen_y: float) -> None:
        self._long_press = None
        self._gesture = start_pan(screen_x, screen_y)

    def pointer_move(self, screen_x: float, screen_y: float) -> None:
        self._gesture, self.view = continue_pan(
            self._gesture, self.view, screen_x, screen_y,
        )

    def pointer_up(self) -> None:
        self._disarm_long_press()
        self._gesture = end_pan()

    def _disarm_long_press(self) -> None:
        if self._long_press is not None:
            self._long_press.cancel()
            self._long_press = None

    def pan_by(self, dx: float, dy: float) -> None:
        self.view = pan(self.view, dx, dy)

    def wheel(self, cursor_x: float, cursor_y: float, delta_y: float) -> None:
        self.view = zoom_at(self.view, cursor_x, cursor_y, delta_y)

    def reset_view(self) -> None:
        self.view = ViewTransform()

    def set_viewport_height(self, height: float) -> None:
        if height < 0:
            raise ValueError(f"viewport height must be non-negative, got {height}")
        self.viewport_height = height

    # ─── Layout ──────────────────────────────────────────────────

    def current_layout(self) -> TreeLayout:
        """Layout of the current snapshot, recomputed only when its inputs change."""
        params = (self.viewport_height, self.view.k)
        if self._layout_tree is not self.tree or self._layout_params != params:
            self._layout = layout(self.tree, self.viewport_height, self.view.k)
            self._layout_tree = self.tree
            self._layout_params = params
        return self._layout

    # ─── Teardown ────────────────────────────────────────────────

    def close(self) -> None:
        """Disarm timers and cancel in-flight expansions."""
        self._disarm_long_press()
        self._gesture = end_pan()
        for task in list(self._tasks):
            task.cancel()
