"""View Transform: pan/zoom state {x, y, k} and the pan gesture, as pure functions.

Invariants:
    - View transform is independent of tree state; layout only reads k
    - k is always clamped to [ZOOM_MIN, ZOOM_MAX]
    - Anchored zoom keeps the canvas point under the cursor fixed:
      new_t = cursor - (cursor - old_t) * (new_k / old_k)
    - An inactive PanGesture never moves the view

Design Decisions:
    - Frozen dataclasses + functions returning new values: the shell owns the
      single current view and replaces it wholesale
    - Long-press timing is NOT here (it needs a clock); the shell arms the timer
"""

from dataclasses import dataclass, replace

from noesis.core.domain_types import WHEEL_ZOOM_FACTOR, ZOOM_MAX, ZOOM_MIN


@dataclass(frozen=True)
class ViewTransform:
    """Canvas translation (x, y) and scale k."""
    x: float = 0.0
    y: float = 0.0
    k: float = 1.0


@dataclass(frozen=True)
class PanGesture:
    active: bool = False
    last_x: float = 0.0
    last_y: float = 0.0


IDLE_GESTURE = PanGesture()


def clamp_zoom(k: float) -> float:
    return max(ZOOM_MIN, min(ZOOM_MAX, k))


def pan(view: ViewTransform, dx: float, dy: float) -> ViewTransform:
    return replace(view, x=view.x + dx, y=view.y + dy)


def zoom_at(
    view: ViewTransform, cursor_x: float, cursor_y: float, delta_y: float,
) -> ViewTransform:
    """Apply a wheel delta, anchored at the cursor (viewport coordinates)."""
    new_k = clamp_zoom(view.k - delta_y * WHEEL_ZOOM_FACTOR)
    ratio = new_k / view.k
    return ViewTransform(
        x=cursor_x - (cursor_x - view.x) * ratio,
        y=cursor_y - (cursor_y - view.y) * ratio,
        k=new_k,
    )


def screen_to_canvas(
    view: ViewTransform, screen_x: float, screen_y: float,
) -> tuple[float, float]:
    return (screen_x - view.x) / view.k, (screen_y - view.y) / view.k


def canvas_to_screen(
    view: ViewTransform, canvas_x: float, canvas_y: float,
) -> tuple[float, float]:
    return canvas_x * view.k + view.x, canvas_y * view.k + view.y


# ─── Pan gesture ─────────────────────────────────────────────────

def start_pan(x: float, y: float) -> PanGesture:
    return PanGesture(active=True, last_x=x, last_y=y)


def continue_pan(
    gesture: PanGesture, view: ViewTransform, x: float, y: float,
) -> tuple[PanGesture, ViewTransform]:
    """Move the view by the cursor delta since the last pointer event."""
    if not gesture.active:
        return gesture, view
    moved = pan(view, x - gesture.last_x, y - gesture.last_y)
    return PanGesture(active=True, last_x=x, last_y=y), moved


def end_pan() -> PanGesture:
    return IDLE_GESTURE
