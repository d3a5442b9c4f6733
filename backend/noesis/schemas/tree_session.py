"""Tree Session Schemas: request/response models for the tree session API.

Invariants:
    - GenerateRequest.topic: 1-500 chars, stripped, non-empty
    - Index paths are lists of non-negative ints (empty list = root)
    - SessionView is rendered from one consistent layout pass

Design Decisions:
    - Responses carry both `path` (display) and `index_path` (identity key)
    - Edge SVG path precomputed server-side: the client only draws
"""

from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

IndexPathField = list[Annotated[int, Field(ge=0)]]


class GenerateRequest(BaseModel):
    """Initial tree generation for a topic."""
    topic: str = Field(min_length=1, max_length=500)

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("topic cannot be empty or whitespace")
        return v


class NodeTarget(BaseModel):
    """A node addressed by index path (expand)."""
    index_path: IndexPathField


class OptionalNodeTarget(BaseModel):
    """A node addressed by index path, or null to clear (select/hover)."""
    index_path: IndexPathField | None = None


class ViewportRequest(BaseModel):
    height: float = Field(ge=0)


class PanRequest(BaseModel):
    dx: float
    dy: float


class ZoomRequest(BaseModel):
    cursor_x: float
    cursor_y: float
    delta_y: float


class ExpandResponse(BaseModel):
    status: str  # "loading" | "ignored"


class TreeSessionCreated(BaseModel):
    id: UUID


class PositionedNodeOut(BaseModel):
    title: str
    description: str
    path: str
    index_path: list[int]
    x: float
    y: float
    depth: int
    is_loading: bool
    can_expand: bool


class EdgeOut(BaseModel):
    source_path: str
    target_path: str
    source_index_path: list[int]
    target_index_path: list[int]
    d: str


class ViewTransformOut(BaseModel):
    x: float
    y: float
    k: float


class NodeDetailsOut(BaseModel):
    title: str
    path: str
    paragraphs: list[str]


class SessionView(BaseModel):
    """Everything the presentation layer needs for one render."""
    id: UUID
    topic: str | None = None
    is_generating: bool = False
    error: str | None = None
    viewport_height: float
    view: ViewTransformOut
    selected: list[int] | None = None
    hovered: list[int] | None = None
    details: NodeDetailsOut | None = None
    nodes: list[PositionedNodeOut] = []
    edges: list[EdgeOut] = []
