"""Priority-ordered segmented resource search."""

import structlog

from skilldex.config import get_settings
from skilldex.index.store import ResourceStore
from skilldex.models.index import ResourceHit
from skilldex.models.results import SearchConfig, SearchSegment
from skilldex.observability import SEGMENT_FAILURES

logger = structlog.get_logger()

DEFAULT_SEGMENTS = [
    SearchSegment(
        name="templates",
        filter="resource_type:=template",
        limit=10,
        priority=1,
        description="Pre-built operations that return rendered results",
    ),
    SearchSegment(
        name="instructions",
        filter="resource_type:=instruction",
        limit=10,
        priority=2,
        description="Workflow guidance that unlocks tools",
    ),
    SearchSegment(
        name="resources",
        filter="resource_type:=resource",
        limit=15,
        priority=3,
        description="Knowledge resources",
    ),
]


async def search_segments(
    store: ResourceStore,
    query: str,
    domain: str,
    config: SearchConfig | None = None,
    scopes: list[str] | None = None,
    default_limit: int | None = None,
) -> list[ResourceHit]:
    """
    Query each segment in ascending priority and concatenate the hits.

    Segments run one after another so cheaper, higher-priority slices are
    answered first. A failing segment is logged and skipped. A URI already
    returned by an earlier segment is not repeated. Segments without a
    limit use default_limit (default: SKILLDEX_DEFAULT_SEGMENT_LIMIT).
    """
    config = config or SearchConfig()
    if default_limit is None:
        default_limit = get_settings().default_segment_limit
    segments = sorted(config.segments or DEFAULT_SEGMENTS, key=lambda s: s.priority)

    hits: list[ResourceHit] = []
    seen: set[str] = set()
    for segment in segments:
        try:
            segment_hits = await store.search_resources(
                query,
                domain=domain,
                limit=segment.limit if segment.limit is not None else default_limit,
                mode="semantic",
                query_by=config.query_by,
                weights=config.weights,
                filter_by=segment.filter,
                scopes=scopes,
            )
        except Exception as e:
            SEGMENT_FAILURES.labels(domain=domain).inc()
            logger.warning("segment_search_failed", domain=domain, segment=segment.name, error=str(e))
            continue

        for hit in segment_hits:
            if hit.uri in seen:
                continue
            seen.add(hit.uri)
            hits.append(hit.model_copy(update={"segment": segment.name}))

    return hits
