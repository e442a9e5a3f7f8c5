"""Operator API routes."""

from fastapi import APIRouter, Depends

from skilldex.api.deps import get_hub, get_sessions
from skilldex.api.sessions import SessionStore
from skilldex.hub import KnowledgeHub
from skilldex.models.results import (
    RefreshResult,
    RestartResult,
    SourceStatus,
    StaleSweepResult,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/restart", response_model=RestartResult)
async def restart(
    hub: KnowledgeHub = Depends(get_hub),
    sessions: SessionStore = Depends(get_sessions),
):
    """Rebuild registries and resync sources."""
    result = await hub.lifecycle.restart()
    # Unlocks may reference capabilities that no longer exist
    sessions.invalidate()
    return result


@router.post("/wipe", response_model=RestartResult)
async def wipe(
    hub: KnowledgeHub = Depends(get_hub),
    sessions: SessionStore = Depends(get_sessions),
):
    """Drop the index and rebuild everything from sources."""
    result = await hub.lifecycle.wipe_index_and_rebuild()
    sessions.invalidate()
    return result


@router.post("/sources/{source_id}/refresh", response_model=RefreshResult)
async def refresh_source(source_id: str, hub: KnowledgeHub = Depends(get_hub)):
    return await hub.lifecycle.refresh_source(source_id)


@router.post("/refresh-stale", response_model=StaleSweepResult)
async def refresh_stale(hub: KnowledgeHub = Depends(get_hub)):
    return await hub.lifecycle.refresh_stale_sources()


@router.get("/sources", response_model=list[SourceStatus])
async def list_sources(hub: KnowledgeHub = Depends(get_hub)):
    """Freshness of every configured source."""
    return await hub.lifecycle.source_stats()
