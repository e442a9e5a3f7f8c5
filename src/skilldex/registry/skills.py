"""Skills: named groups of tools plus optional knowledge pipelines."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

import structlog
from pydantic import BaseModel

from skilldex.config import Settings, get_settings
from skilldex.context import SkillContext, ToolContext
from skilldex.formatting import OutputFormatter, format_schema_for_agent
from skilldex.ingestion.pipeline import PipelineConfig, generate_source_id
from skilldex.models.results import SearchConfig, ToolResult
from skilldex.registry.capability import (
    Capability,
    Freshness,
    SuggestionSchema,
    SuggestionTarget,
)

logger = structlog.get_logger()

InstructionSource = str | Callable[[SkillContext], Awaitable[str]]


@dataclass
class SkillTool:
    """A tool within a skill, invoked as "skill:tool"."""

    name: str
    description: str
    execute: Callable[[Any, ToolContext], Awaitable[ToolResult]]
    input_schema: type[BaseModel] | None = None
    output_schema: type[BaseModel] | None = None
    required_scopes: list[str] = field(default_factory=list)
    freshness: Freshness = "unknown"
    output_formatter: OutputFormatter | None = None
    connections: list[SuggestionTarget] = field(default_factory=list)


def create_tool(
    name: str,
    description: str,
    execute: Callable[[Any, ToolContext], Awaitable[ToolResult | str]],
    input_schema: type[BaseModel] | None = None,
    suggestions: SuggestionSchema | None = None,
    required_scopes: list[str] | None = None,
    freshness: Freshness = "unknown",
    output_formatter: OutputFormatter | None = None,
) -> SkillTool:
    """
    Build a tool whose results carry declarative suggestions.

    `execute` may return plain text or a ToolResult; suggestions are
    resolved against the validated params and the result's structured data.
    """

    async def run(params: Any, ctx: ToolContext) -> ToolResult:
        output = await execute(params, ctx)
        result = output if isinstance(output, ToolResult) else ToolResult(content=str(output))
        if suggestions is not None:
            result.suggestions = suggestions.resolve(params, result.structured)
        return result

    return SkillTool(
        name=name,
        description=description,
        execute=run,
        input_schema=input_schema,
        required_scopes=list(required_scopes or []),
        freshness=freshness,
        output_formatter=output_formatter,
        connections=suggestions.targets if suggestions else [],
    )


@dataclass
class Skill:
    """
    A capability container.

    The instruction is the skill's teaching text: a string, or an async
    callable that renders it for a caller.
    """

    name: str
    description: str
    instruction: InstructionSource
    tools: list[SkillTool] = field(default_factory=list)
    slug: str = ""
    version: str | None = None
    resources: list[PipelineConfig] = field(default_factory=list)
    search_config: SearchConfig | None = None
    required_scopes: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    icon: str | None = None
    tags: list[str] = field(default_factory=list)
    enabled: bool = True

    def __post_init__(self):
        if not self.slug:
            self.slug = self.name

    def get_tool(self, name: str) -> SkillTool | None:
        return next((t for t in self.tools if t.name == name), None)


@dataclass
class ToolRef:
    skill: Skill
    tool: SkillTool

    @property
    def identifier(self) -> str:
        return f"{self.skill.name}:{self.tool.name}"


@dataclass
class SourceInfo:
    """A configured pipeline located by its source id."""

    source_id: str
    domain: str
    pipeline: PipelineConfig
    is_local: bool
    ttl_seconds: int

    @property
    def source_name(self) -> str:
        return self.pipeline.source.name


def source_info(skill: Skill, pipeline: PipelineConfig, settings: Settings | None = None) -> SourceInfo:
    settings = settings or get_settings()
    return SourceInfo(
        source_id=generate_source_id(pipeline.source.name, pipeline.base_path),
        domain=skill.name,
        pipeline=pipeline,
        is_local=pipeline.source.name.startswith(settings.local_source_prefix),
        ttl_seconds=(
            pipeline.cache_ttl_seconds
            if pipeline.cache_ttl_seconds is not None
            else settings.default_cache_ttl_seconds
        ),
    )


async def render_instruction(skill: Skill, ctx: ToolContext) -> str:
    """The skill's instruction followed by a listing of its tools."""
    if callable(skill.instruction):
        instruction = await skill.instruction(
            SkillContext(hub=ctx.hub, user=ctx.user, scopes=ctx.scopes)
        )
    else:
        instruction = skill.instruction

    listing = []
    for tool in skill.tools:
        line = f"- **{skill.name}:{tool.name}**: {tool.description}"
        params = format_schema_for_agent(tool.input_schema)
        if params:
            line += f"\n  *{params}*"
        listing.append(line)

    if not listing:
        return instruction
    return f"{instruction}\n\n## Tools\n\n" + "\n".join(listing)


def skill_routes(skill: Skill) -> list[Capability]:
    """Capabilities for a skill: its instruction, then one per tool."""

    async def read_instruction(params: Any, ctx: ToolContext) -> str:
        return await render_instruction(skill, ctx)

    routes = [
        Capability(
            route=skill.name,
            description=skill.description,
            execute=read_instruction,
            kind="instruction",
            required_scopes=list(skill.required_scopes),
            freshness="static",
        )
    ]
    for tool in skill.tools:
        routes.append(
            Capability(
                route=f"{skill.name}:{tool.name}",
                description=tool.description,
                execute=tool.execute,
                kind="tool",
                input_schema=tool.input_schema,
                output_schema=tool.output_schema,
                required_scopes=list(dict.fromkeys(skill.required_scopes + tool.required_scopes)),
                output_formatter=tool.output_formatter,
                freshness=tool.freshness,
            )
        )
    return routes


class SkillRegistry:
    """
    Skills keyed by name.

    Re-registering a name replaces the previous skill and is logged.
    """

    def __init__(self, skills: list[Skill] | None = None, settings: Settings | None = None):
        self.settings = settings
        self._skills: dict[str, Skill] = {}
        if skills:
            self.register_all(skills)

    def register(self, skill: Skill):
        if skill.name in self._skills:
            logger.warning("skill_replaced", skill=skill.name)
        self._skills[skill.name] = skill

    def register_all(self, skills: list[Skill]):
        for skill in skills:
            self.register(skill)
        logger.info("skills_registered", count=len(skills), total=len(self._skills))

    def get(self, name: str) -> Skill | None:
        return self._skills.get(name)

    def has(self, name: str) -> bool:
        return name in self._skills

    def remove(self, name: str) -> bool:
        return self._skills.pop(name, None) is not None

    def all(self) -> list[Skill]:
        return list(self._skills.values())

    def enabled(self) -> list[Skill]:
        return [s for s in self._skills.values() if s.enabled]

    def all_tools(self) -> list[ToolRef]:
        return [ToolRef(skill=s, tool=t) for s in self.enabled() for t in s.tools]

    def resolve_tool(self, identifier: str) -> ToolRef | None:
        """Resolve "skill:tool" to the tool and its skill."""
        skill_name, sep, tool_name = identifier.partition(":")
        if not sep:
            return None
        skill = self.get(skill_name)
        if skill is None or not skill.enabled:
            return None
        tool = skill.get_tool(tool_name)
        return ToolRef(skill=skill, tool=tool) if tool else None

    def all_sources(self) -> list[SourceInfo]:
        return [source_info(s, p, self.settings) for s in self.enabled() for p in s.resources]

    def find_source(self, source_id: str) -> SourceInfo | None:
        return next((s for s in self.all_sources() if s.source_id == source_id), None)

    def snapshot(self) -> list[dict]:
        """JSON-friendly summary for operators."""
        return [
            {
                "name": s.name,
                "slug": s.slug,
                "version": s.version,
                "description": s.description,
                "tools": [t.name for t in s.tools],
                "sources": [source_info(s, p, self.settings).source_id for p in s.resources],
                "required_scopes": s.required_scopes,
                "enabled": s.enabled,
            }
            for s in self._skills.values()
        ]

    def __len__(self) -> int:
        return len(self._skills)
