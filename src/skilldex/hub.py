"""KnowledgeHub: owns the registries, the index store and the sync loop."""

from dataclasses import dataclass
from typing import Any, Callable, Sequence

import structlog

from skilldex.config import Settings, get_settings
from skilldex.context import Caller, ToolContext
from skilldex.dispatch import RunItem, dispatch, run_batch
from skilldex.index import ResourceStore, SearchIndex, create_index
from skilldex.lifecycle import LifecycleService
from skilldex.models.results import BatchResult, DiscoveryResponse, RouteResult
from skilldex.registry import (
    Capability,
    Instruction,
    RouteRegistry,
    Skill,
    SkillRegistry,
    instruction_to_routes,
    skill_routes,
)
from skilldex.search import execute_search
from skilldex.sync import SyncOrchestrator, SyncReport

logger = structlog.get_logger()

SkillConfig = Sequence[Skill] | Callable[[], Sequence[Skill]]
RouteConfig = Sequence[Capability | Instruction] | Callable[[], Sequence[Capability | Instruction]]


def _resolve(config):
    return list(config() if callable(config) else config)


@dataclass(frozen=True)
class RegistryGeneration:
    """Registries built together and published with one assignment."""

    skills: SkillRegistry
    routes: RouteRegistry


class KnowledgeHub:
    """
    Entry point tying discovery, dispatch and synchronization together.

    Static configuration may be given as lists or as callables returning
    lists; callables are re-evaluated on every restart.
    """

    def __init__(
        self,
        skills: SkillConfig = (),
        routes: RouteConfig = (),
        index: SearchIndex | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self._skill_config = skills
        self._route_config = routes
        self.store = ResourceStore(index or create_index(self.settings))
        self.sync = SyncOrchestrator(self.store, self.settings)
        self._generation = self.build_registries()
        self.lifecycle = LifecycleService(self)

    @property
    def skills(self) -> SkillRegistry:
        return self._generation.skills

    @property
    def routes(self) -> RouteRegistry:
        return self._generation.routes

    def build_registries(self) -> RegistryGeneration:
        """Build fresh registries from static configuration."""
        skills = SkillRegistry(_resolve(self._skill_config), settings=self.settings)

        capabilities: list[Capability] = []
        for skill in skills.enabled():
            capabilities.extend(skill_routes(skill))
        for item in _resolve(self._route_config):
            if isinstance(item, Instruction):
                capabilities.extend(instruction_to_routes(item))
            else:
                capabilities.append(item)

        routes = RouteRegistry()
        routes.register_all(capabilities)
        return RegistryGeneration(skills=skills, routes=routes)

    def publish(self):
        """Swap in a fully built registry generation."""
        self._generation = self.build_registries()

    async def initialize(self) -> SyncReport:
        """Synchronize every configured source."""
        return await self.sync.initialize(self.skills)

    async def restart(self) -> SyncReport:
        self.publish()
        return await self.initialize()

    def context(
        self,
        user_id: str | None = None,
        scopes: list[str] | None = None,
        request_id: str | None = None,
        unlocked: set[str] | None = None,
    ) -> ToolContext:
        """Build a per-call context."""
        ctx = ToolContext(
            hub=self,
            user=Caller(id=user_id) if user_id else None,
            scopes=list(scopes or []),
            unlocked=unlocked if unlocked is not None else set(),
        )
        if request_id:
            ctx.request_id = request_id
        return ctx

    async def ask(
        self,
        query: str,
        ctx: ToolContext,
        domain: str | None = None,
        per_domain: int | None = None,
    ) -> DiscoveryResponse:
        return await execute_search(
            ctx, query, domain=domain, per_domain=per_domain or self.settings.default_per_domain
        )

    async def run(self, items: list[RunItem], ctx: ToolContext) -> BatchResult:
        return await run_batch(items, ctx)

    async def dispatch(self, identifier: str, params: Any, ctx: ToolContext) -> RouteResult:
        return await dispatch(identifier, params, ctx)

    def snapshot(self) -> dict:
        return {
            "skills": self.skills.snapshot(),
            "tool_count": len(self.skills.all_tools()),
            "route_count": len(self.routes),
        }

    async def close(self):
        await self.store.index.close()
