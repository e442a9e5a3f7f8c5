"""Health and metrics API routes."""

import structlog
from fastapi import APIRouter, Depends, Response

from skilldex.api.deps import get_hub, get_sessions
from skilldex.api.schemas import HealthResponseSchema
from skilldex.api.sessions import SessionStore
from skilldex.exceptions import SearchIndexError
from skilldex.hub import KnowledgeHub
from skilldex.observability import get_metrics

logger = structlog.get_logger()

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponseSchema)
async def health_check(
    hub: KnowledgeHub = Depends(get_hub),
    sessions: SessionStore = Depends(get_sessions),
):
    """
    Health check endpoint.

    Reports registry sizes and the indexed document count; an unreachable
    index degrades the status.
    """
    status = "healthy"
    indexed = 0
    try:
        indexed = (await hub.store.get_stats()).total_documents
    except SearchIndexError as e:
        logger.warning("health_index_unavailable", error=str(e))
        status = "degraded"

    return HealthResponseSchema(
        status=status,
        skills=len(hub.skills),
        routes=len(hub.routes),
        indexed_documents=indexed,
        sessions=sessions.stats,
    )


@router.get("/metrics")
async def metrics():
    """Get Prometheus metrics."""
    data, content_type = get_metrics()
    return Response(content=data, media_type=content_type)
