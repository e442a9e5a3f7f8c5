"""Data models for indexed documents and search hits."""

from pydantic import BaseModel, Field


class IndexedDocument(BaseModel):
    """The unit stored in the search index."""

    id: str
    uri: str
    domain: str
    path: str
    source_id: str
    name: str
    content: str
    description: str
    scopes: list[str] = Field(default_factory=list)
    is_unrestricted: bool = False
    content_size: int = 0
    child_count: int = 0
    resource_type: str = "resource"
    path_segment: str = ""
    quality_score: int = 50
    unlocks: list[str] = Field(default_factory=list)
    indexed_at: int = 0  # epoch milliseconds
    generation: str = ""


class ResourceHit(BaseModel):
    """A scored search result."""

    uri: str
    domain: str
    name: str
    description: str = ""
    resource_type: str = "resource"
    content_size: int = 0
    child_count: int = 0
    relevance: float = 0.0
    segment: str | None = None


class SourceFreshness(BaseModel):
    """Derived freshness of one source's indexed documents."""

    source_id: str
    age_ms: int
    document_count: int

    def is_fresh(self, ttl_ms: int) -> bool:
        return self.age_ms < ttl_ms


class UpsertResult(BaseModel):
    """Per-batch outcome of an upsert call."""

    success: int = 0
    failed: int = 0
    errors: list[str] = Field(default_factory=list)


class IndexStats(BaseModel):
    """Aggregate counts for operators."""

    total_documents: int = 0
    by_domain: dict[str, int] = Field(default_factory=dict)
    by_source: dict[str, int] = Field(default_factory=dict)
