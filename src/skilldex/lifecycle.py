"""Operator actions: restart, wipe, single-source refresh, stale sweep."""

import time
from typing import TYPE_CHECKING

import structlog

from skilldex.models.results import (
    RebuildResult,
    RefreshResult,
    RestartResult,
    SourceStatus,
    StaleSweepResult,
)

if TYPE_CHECKING:
    from skilldex.hub import KnowledgeHub

logger = structlog.get_logger()


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


class LifecycleService:
    """
    Lifecycle operations built from the hub's primitives.

    Every operation reports failure in its result instead of raising.
    """

    def __init__(self, hub: "KnowledgeHub"):
        self.hub = hub

    async def restart(self) -> RestartResult:
        """Rebuild registries from configuration and resync sources."""
        start = time.perf_counter()
        logger.info("restart_started")
        try:
            await self.hub.restart()
        except Exception as e:
            logger.error("restart_failed", error=str(e))
            return RestartResult(
                success=False,
                route_count=len(self.hub.routes),
                duration_ms=_elapsed_ms(start),
                error=str(e),
            )
        return RestartResult(
            success=True, route_count=len(self.hub.routes), duration_ms=_elapsed_ms(start)
        )

    async def wipe_index_and_rebuild(self) -> RestartResult:
        """Drop every indexed document, then restart; every source refetches."""
        start = time.perf_counter()
        logger.info("wipe_started")
        try:
            await self.hub.store.clear_all()
            await self.hub.restart()
        except Exception as e:
            logger.error("wipe_failed", error=str(e))
            return RestartResult(
                success=False,
                route_count=len(self.hub.routes),
                duration_ms=_elapsed_ms(start),
                error=str(e),
            )

        duration = _elapsed_ms(start)
        logger.info("wipe_complete", duration_ms=duration, route_count=len(self.hub.routes))
        return RestartResult(success=True, route_count=len(self.hub.routes), duration_ms=duration)

    async def rebuild_from_index(self) -> RebuildResult:
        """Restart (fresh sources are reused) and report routes per domain."""
        result = await self.restart()
        if not result.success:
            return RebuildResult(success=False, error=result.error)

        by_domain: dict[str, int] = {}
        for capability in self.hub.routes.all():
            by_domain[capability.domain] = by_domain.get(capability.domain, 0) + 1
        return RebuildResult(
            success=True, routes_rebuilt=len(self.hub.routes), by_domain=by_domain
        )

    async def refresh_source(self, source_id: str) -> RefreshResult:
        """Refetch one source regardless of freshness."""
        info = self.hub.skills.find_source(source_id)
        if info is None:
            return RefreshResult(success=False, message=f"Source not found: {source_id}")

        skill = self.hub.skills.get(info.domain)
        try:
            outcome = await self.hub.sync.fetch_and_index(skill, info)
        except Exception as e:
            logger.error("refresh_failed", source_id=source_id, error=str(e))
            return RefreshResult(success=False, message=str(e) or "Unknown error")

        if outcome.resource_count == 0:
            return RefreshResult(success=True, message="No resources found")
        return RefreshResult(
            success=True,
            resource_count=outcome.resource_count,
            message=f"Refreshed {outcome.resource_count} resources",
        )

    async def refresh_stale_sources(self) -> StaleSweepResult:
        """Refresh every remote source whose content is older than its ttl."""
        stats = StaleSweepResult()
        for info in self.hub.skills.all_sources():
            # Local sources refetch on every restart
            if info.is_local:
                continue

            stats.checked += 1
            try:
                freshness = await self.hub.store.get_source_freshness(info.source_id)
            except Exception as e:
                logger.error("freshness_check_failed", source_id=info.source_id, error=str(e))
                stats.failed += 1
                continue

            if freshness is not None and freshness.is_fresh(info.ttl_seconds * 1000):
                continue

            logger.info(
                "refreshing_stale_source",
                source_id=info.source_id,
                domain=info.domain,
                age_minutes=round(freshness.age_ms / 60000) if freshness else None,
                ttl_minutes=round(info.ttl_seconds / 60),
            )
            result = await self.refresh_source(info.source_id)
            if result.success:
                stats.refreshed += 1
            else:
                stats.failed += 1

        return stats

    async def source_stats(self) -> list[SourceStatus]:
        """Freshness of every configured source."""
        statuses = []
        for info in self.hub.skills.all_sources():
            freshness = await self.hub.store.get_source_freshness(info.source_id)
            statuses.append(
                SourceStatus(
                    source_id=info.source_id,
                    domain=info.domain,
                    source_name=info.source_name,
                    is_local=info.is_local,
                    ttl_seconds=info.ttl_seconds,
                    age_seconds=freshness.age_ms / 1000 if freshness else None,
                    document_count=freshness.document_count if freshness else 0,
                    fresh=bool(freshness and freshness.is_fresh(info.ttl_seconds * 1000)),
                )
            )
        return statuses
