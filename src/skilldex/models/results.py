"""Data models for invocation, discovery and lifecycle results."""

from typing import Any, Literal

from pydantic import BaseModel, Field

ErrorCode = Literal[
    "PERMISSION_DENIED",
    "INVALID_INPUT",
    "ROUTE_NOT_FOUND",
    "EXECUTION_ERROR",
    "FETCH_ERROR",
]


class Suggestion(BaseModel):
    """Informational hint about a useful next call."""

    tool: str  # "skill:tool"
    prose: str
    params: dict[str, Any] | None = None


class ToolResult(BaseModel):
    """Content returned by a skill tool."""

    content: str
    structured: Any = None
    suggestions: list[Suggestion] = Field(default_factory=list)


class ErrorInfo(BaseModel):
    """A caller-visible error. Never raised, always returned."""

    code: ErrorCode
    message: str
    details: Any = None


class RouteResult(BaseModel):
    """Outcome of dispatching one identifier."""

    success: bool
    data: Any = None
    error: ErrorInfo | None = None

    @classmethod
    def ok(cls, data: Any) -> "RouteResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, code: ErrorCode, message: str, details: Any = None) -> "RouteResult":
        return cls(success=False, error=ErrorInfo(code=code, message=message, details=details))


class ItemResult(BaseModel):
    """One entry of a batch invoke response."""

    route: str
    success: bool
    data: Any = None
    structured: Any = None
    suggestions: list[Suggestion] | None = None
    error: ErrorInfo | None = None


class BatchSummary(BaseModel):
    total: int
    success: int
    failed: int


class BatchResult(BaseModel):
    """Per-item results plus counts. Partial failure is still a result."""

    results: list[ItemResult]
    summary: BatchSummary


class SearchSegment(BaseModel):
    """A named, filtered, capped slice of a discovery query."""

    name: str
    filter: str
    limit: int | None = None  # None uses SKILLDEX_DEFAULT_SEGMENT_LIMIT
    priority: int = 0
    description: str | None = None


class SearchConfig(BaseModel):
    """Per-skill search tuning."""

    query_by: str | None = None
    weights: str | None = None
    segments: list[SearchSegment] = Field(default_factory=list)


class DiscoveryEntry(BaseModel):
    route: str
    description: str = ""
    type: Literal["skill", "instruction", "template", "tool", "resource"] = "resource"
    segment: str | None = None
    parameters: str | None = None
    permissions: list[str] | None = None


class DomainRoutes(BaseModel):
    entries: list[DiscoveryEntry]
    count: int
    more_available: int | None = None


class DomainDiscovery(BaseModel):
    description: str = ""
    routes: DomainRoutes


class DiscoveryResponse(BaseModel):
    """Discovery results keyed by domain, in registration order."""

    query: str
    domains: dict[str, DomainDiscovery] = Field(default_factory=dict)


class RestartResult(BaseModel):
    success: bool
    route_count: int
    duration_ms: int
    error: str | None = None


class RebuildResult(BaseModel):
    success: bool
    routes_rebuilt: int = 0
    by_domain: dict[str, int] = Field(default_factory=dict)
    error: str | None = None


class RefreshResult(BaseModel):
    success: bool
    resource_count: int = 0
    message: str


class StaleSweepResult(BaseModel):
    checked: int = 0
    refreshed: int = 0
    failed: int = 0


class SourceStatus(BaseModel):
    """Operator view of one configured source."""

    source_id: str
    domain: str
    source_name: str
    is_local: bool
    ttl_seconds: int
    age_seconds: float | None = None
    document_count: int = 0
    fresh: bool = False
