"""Data models for source documents and parsed resource trees."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RawDocument(BaseModel):
    """A document handle listed by a source adapter (metadata only)."""

    id: str
    path: str
    content_type: str = "text/plain"
    metadata: dict[str, Any] = Field(default_factory=dict)


class RawContent(BaseModel):
    """Raw content fetched for one document handle."""

    content: str | bytes
    content_type: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        if isinstance(self.content, bytes):
            return self.content.decode("utf-8")
        return self.content


class ResourceMetadata(BaseModel):
    """Well-known resource fields plus an opaque side channel."""

    model_config = ConfigDict(validate_assignment=True)

    content: str | None = None
    description: str | None = None
    heading_level: int | None = None
    source_id: str | None = None
    unlocks: list[str] | None = None
    # None inherits the owning skill's scopes; an empty list means unrestricted.
    scopes: list[str] | None = None
    resource_type: str | None = None
    quality_score: int | None = None
    last_updated: str | None = None
    file_name: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class ResourceNode(BaseModel):
    """A node in a document's structural tree."""

    id: str
    name: str
    path: str
    metadata: ResourceMetadata = Field(default_factory=ResourceMetadata)
    children: list["ResourceNode"] = Field(default_factory=list)


class FlatResource(BaseModel):
    """A resource node detached from its tree, ready for indexing."""

    id: str
    name: str
    path: str
    content: str
    description: str | None = None
    child_count: int = 0
    metadata: ResourceMetadata = Field(default_factory=ResourceMetadata)
