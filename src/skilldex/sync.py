"""Freshness-driven synchronization of configured sources into the index."""

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Literal

import structlog

from skilldex.config import Settings, get_settings
from skilldex.exceptions import IndexingError
from skilldex.index.documents import build_documents
from skilldex.index.store import ResourceStore
from skilldex.ingestion.pipeline import ContentPipeline
from skilldex.observability import SYNC_LATENCY, SYNC_SOURCES
from skilldex.registry.skills import Skill, SkillRegistry, SourceInfo, source_info

logger = structlog.get_logger()

Outcome = Literal["fresh", "fetched", "failed"]


@dataclass
class SourceSyncResult:
    """Outcome of synchronizing one source."""

    source_id: str
    domain: str
    outcome: Outcome
    resource_count: int = 0
    documents_indexed: int = 0
    documents_removed: int = 0
    error: str | None = None


@dataclass
class SyncReport:
    """Aggregate report of an initialization pass."""

    fresh: int = 0
    fetched: int = 0
    failed: int = 0
    duration_seconds: float = 0.0
    sources: list[SourceSyncResult] = field(default_factory=list)

    def add(self, result: SourceSyncResult):
        self.sources.append(result)
        if result.outcome == "fresh":
            self.fresh += 1
        elif result.outcome == "fetched":
            self.fetched += 1
        else:
            self.failed += 1


@dataclass
class FetchOutcome:
    resource_count: int = 0
    documents_indexed: int = 0
    documents_removed: int = 0


class SyncOrchestrator:
    """
    Decides per source whether indexed content can be reused.

    Local sources are always refetched. Remote sources are refetched only
    when their oldest indexed document is at least ttl old, or when they
    have no indexed documents at all.
    """

    def __init__(self, store: ResourceStore, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    async def initialize(self, skills: SkillRegistry) -> SyncReport:
        """
        Synchronize every configured pipeline of every enabled skill.

        Sources run concurrently, at most sync_concurrency at a time, and a
        failing source never affects the others.
        """
        start = time.perf_counter()
        semaphore = asyncio.Semaphore(self.settings.sync_concurrency)

        async def bounded(skill: Skill, info: SourceInfo) -> SourceSyncResult:
            async with semaphore:
                return await self.sync_source(skill, info)

        jobs = [
            bounded(skill, source_info(skill, pipeline, self.settings))
            for skill in skills.enabled()
            for pipeline in skill.resources
        ]
        report = SyncReport()
        for result in await asyncio.gather(*jobs):
            report.add(result)
            SYNC_SOURCES.labels(outcome=result.outcome).inc()

        report.duration_seconds = time.perf_counter() - start
        SYNC_LATENCY.observe(report.duration_seconds)
        logger.info(
            "initialization_complete",
            skills=len(skills.enabled()),
            tools=len(skills.all_tools()),
            fresh=report.fresh,
            fetched=report.fetched,
            failed=report.failed,
            duration=f"{report.duration_seconds:.2f}s",
        )
        return report

    async def sync_source(self, skill: Skill, info: SourceInfo) -> SourceSyncResult:
        """Synchronize one source, converting any failure into a result."""
        try:
            if not info.is_local:
                freshness = await self.store.get_source_freshness(info.source_id)
                if freshness and freshness.is_fresh(info.ttl_seconds * 1000):
                    logger.info(
                        "source_fresh",
                        source_id=info.source_id,
                        age_minutes=round(freshness.age_ms / 60000),
                    )
                    return SourceSyncResult(info.source_id, skill.name, "fresh")

            outcome = await self.fetch_and_index(skill, info)
            return SourceSyncResult(
                info.source_id,
                skill.name,
                "fetched",
                resource_count=outcome.resource_count,
                documents_indexed=outcome.documents_indexed,
                documents_removed=outcome.documents_removed,
            )
        except Exception as e:
            logger.error(
                "source_sync_failed",
                skill=skill.name,
                source=info.source_name,
                source_id=info.source_id,
                error=str(e),
            )
            return SourceSyncResult(info.source_id, skill.name, "failed", error=str(e))

    async def fetch_and_index(self, skill: Skill, info: SourceInfo) -> FetchOutcome:
        """
        Run the pipeline and swap the source's documents to a new generation.

        New documents are written first; only then are the source's documents
        from other generations deleted. An empty fetch changes nothing.

        Raises:
            PipelineError: If the source cannot list its documents
            IndexingError: If no document of the new generation was written
        """
        pipeline = ContentPipeline.from_config(info.pipeline)
        resources = await pipeline.fetch_resources()
        if not resources:
            logger.info("source_empty", source_id=info.source_id)
            return FetchOutcome()

        generation = uuid.uuid4().hex
        documents = build_documents(
            domain=skill.name,
            source_id=info.source_id,
            resources=resources,
            inherited_scopes=skill.required_scopes + info.pipeline.scopes,
            generation=generation,
            settings=self.settings,
        )

        result = await self.store.index_documents(documents)
        if result.success == 0:
            raise IndexingError(
                f"No documents indexed for {info.source_id}; previous generation kept"
            )

        removed = await self.store.delete_stale_generations(info.source_id, generation)
        logger.info(
            "source_indexed",
            source_id=info.source_id,
            skill=skill.name,
            resources=len(resources),
            documents=result.success,
            failed=result.failed,
            removed=removed,
        )
        return FetchOutcome(
            resource_count=len(resources),
            documents_indexed=result.success,
            documents_removed=removed,
        )
