"""Models package."""

from skilldex.models.index import (
    IndexedDocument,
    IndexStats,
    ResourceHit,
    SourceFreshness,
    UpsertResult,
)
from skilldex.models.resource import (
    FlatResource,
    RawContent,
    RawDocument,
    ResourceMetadata,
    ResourceNode,
)
from skilldex.models.results import (
    BatchResult,
    BatchSummary,
    DiscoveryEntry,
    DiscoveryResponse,
    DomainDiscovery,
    DomainRoutes,
    ErrorInfo,
    ItemResult,
    RebuildResult,
    RefreshResult,
    RestartResult,
    RouteResult,
    SearchConfig,
    SearchSegment,
    SourceStatus,
    StaleSweepResult,
    Suggestion,
    ToolResult,
)

__all__ = [
    "BatchResult",
    "BatchSummary",
    "DiscoveryEntry",
    "DiscoveryResponse",
    "DomainDiscovery",
    "DomainRoutes",
    "ErrorInfo",
    "FlatResource",
    "IndexStats",
    "IndexedDocument",
    "ItemResult",
    "RawContent",
    "RawDocument",
    "RebuildResult",
    "RefreshResult",
    "ResourceHit",
    "ResourceMetadata",
    "ResourceNode",
    "RestartResult",
    "RouteResult",
    "SearchConfig",
    "SearchSegment",
    "SourceFreshness",
    "SourceStatus",
    "StaleSweepResult",
    "Suggestion",
    "ToolResult",
    "UpsertResult",
]
