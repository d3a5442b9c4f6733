"""Domain Types: identity types, expansion states and geometry constants.

Invariants:
    - IndexPath is a tuple of zero-based child indices; the empty tuple is the root
    - All valid expansion states encoded as an Enum, no raw string matching
    - Layout constants are the single source of truth for layout, hit targets and edges

Design Decisions:
    - Type alias over wrapper class: index paths are hashed and sliced constantly
    - str Enums serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

TreeSessionId = NewType("TreeSessionId", UUID)

IndexPath = tuple[int, ...]

ROOT_PATH: IndexPath = ()

# Separator for the human-readable ancestry chain "Root > A > B"
PATH_SEPARATOR = " > "


# ─── Enums ───────────────────────────────────────────────────────

class ExpansionState(str, Enum):
    """Per-node expansion lifecycle: COLLAPSED -> LOADING -> EXPANDED."""
    COLLAPSED = "collapsed"
    LOADING = "loading"
    EXPANDED = "expanded"


# ─── Layout Constants ────────────────────────────────────────────

LEVEL_SPACING: float = 220
VERTICAL_SPACING: float = 30
NODE_HEIGHT: float = 40
NODE_RADIUS: float = 7
PADDING: float = 50

# Width of a node's clickable box, measured from its center (circle + label)
HIT_WIDTH: float = 160


# ─── View Transform Constants ────────────────────────────────────

ZOOM_MIN: float = 0.1
ZOOM_MAX: float = 5.0
WHEEL_ZOOM_FACTOR: float = 0.001
LONG_PRESS_SECONDS: float = 0.2
DEFAULT_VIEWPORT_HEIGHT: float = 800
