"""Tree Payload Schemas: provider wire contract for generated trees and expansions.

Invariants:
    - Node shape: {title: non-empty str, description: str, subtopics: [node, ...]}
    - Initial generation shape: {topic: non-empty str (stripped), description, subtopics}
    - Missing description/subtopics default to empty; unknown keys are ignored
"""

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


class NodePayload(BaseModel):
    """One node as returned by the provider."""
    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    description: str = ""
    subtopics: list["NodePayload"] = []

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title cannot be empty or whitespace")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def null_description(cls, v):
        return "" if v is None else v

    @field_validator("subtopics", mode="before")
    @classmethod
    def null_subtopics(cls, v):
        return [] if v is None else v


NodePayload.model_rebuild()


class TreePayload(BaseModel):
    """Initial generation payload: the root object."""
    model_config = ConfigDict(extra="ignore")

    topic: str = Field(min_length=1)
    description: str = ""
    subtopics: list[NodePayload] = []

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("topic cannot be empty or whitespace")
        return v

    @field_validator("description", mode="before")
    @classmethod
    def null_description(cls, v):
        return "" if v is None else v

    @field_validator("subtopics", mode="before")
    @classmethod
    def null_subtopics(cls, v):
        return [] if v is None else v


ChildrenPayload = TypeAdapter(list[NodePayload])
