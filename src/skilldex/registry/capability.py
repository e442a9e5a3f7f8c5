"""Capability descriptors: executable routes, instructions and suggestions."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Literal

from pydantic import BaseModel

from skilldex.context import ToolContext
from skilldex.exceptions import ConfigurationError
from skilldex.formatting import OutputFormatter
from skilldex.models.results import Suggestion

Kind = Literal["tool", "instruction", "template", "resource"]
Freshness = Literal["live", "static", "unknown"]
ExecuteFn = Callable[[Any, ToolContext], Awaitable[Any]]


@dataclass
class Capability:
    """
    One invocable unit, keyed by its route.

    Skill tools are registered as "skill:tool", skill instructions as
    "skill", and standalone routes under "domain://name".
    """

    route: str
    description: str
    execute: ExecuteFn
    kind: Kind = "tool"
    input_schema: type[BaseModel] | None = None
    output_schema: type[BaseModel] | None = None
    required_scopes: list[str] = field(default_factory=list)
    unlocks: list[str] = field(default_factory=list)
    output_formatter: OutputFormatter | None = None
    freshness: Freshness = "unknown"

    @property
    def domain(self) -> str:
        if "://" in self.route:
            return self.route.split("://", 1)[0]
        return self.route.split(":", 1)[0]


@dataclass
class Instruction:
    """
    Workflow guidance that reveals tools once it has been read.

    The tools are hidden from discovery until the instruction executes in
    the current exchange.
    """

    route: str
    description: str
    content: str | Callable[[ToolContext], Awaitable[str]]
    tools: list[Capability] = field(default_factory=list)
    required_scopes: list[str] = field(default_factory=list)


def instruction_to_routes(instruction: Instruction) -> list[Capability]:
    """The instruction capability followed by the tools it unlocks."""

    async def execute(params: Any, ctx: ToolContext) -> str:
        if callable(instruction.content):
            return await instruction.content(ctx)
        return instruction.content

    route = Capability(
        route=instruction.route,
        description=instruction.description,
        execute=execute,
        kind="instruction",
        required_scopes=list(instruction.required_scopes),
        unlocks=[tool.route for tool in instruction.tools],
        freshness="static",
    )
    return [route, *instruction.tools]


# ===== Suggestions =====


@dataclass
class SuggestionRule:
    """
    One suggestion. Exactly one of `always` or `when` must be set.

    `prose` and `params` may be callables of (input, result).
    """

    tool: str
    prose: str | Callable[[Any, Any], str]
    params: dict[str, Any] | Callable[[Any, Any], dict[str, Any]] | None = None
    always: bool = False
    when: Callable[[Any], bool] | None = None

    def __post_init__(self):
        if self.always == (self.when is not None):
            raise ConfigurationError(
                f"Suggestion for {self.tool} needs exactly one of always=True or when="
            )


@dataclass
class SuggestionTarget:
    tool: str
    conditional: bool


@dataclass
class SuggestionSchema:
    rules: list[SuggestionRule]

    @property
    def targets(self) -> list[SuggestionTarget]:
        return [SuggestionTarget(tool=r.tool, conditional=not r.always) for r in self.rules]

    def resolve(self, params: Any, result: Any) -> list[Suggestion]:
        """Evaluate rules in definition order."""
        suggestions = []
        for rule in self.rules:
            if not (rule.always or rule.when(result)):
                continue
            prose = rule.prose(params, result) if callable(rule.prose) else rule.prose
            extra = rule.params(params, result) if callable(rule.params) else rule.params
            suggestions.append(Suggestion(tool=rule.tool, prose=prose, params=extra))
        return suggestions


def define_suggestions(rules: dict[str, SuggestionRule]) -> SuggestionSchema:
    return SuggestionSchema(rules=list(rules.values()))
