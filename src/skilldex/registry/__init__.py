"""Capability registries."""

from skilldex.registry.capability import (
    Capability,
    Instruction,
    SuggestionRule,
    SuggestionSchema,
    SuggestionTarget,
    define_suggestions,
    instruction_to_routes,
)
from skilldex.registry.routes import RouteRegistry
from skilldex.registry.skills import (
    Skill,
    SkillRegistry,
    SkillTool,
    SourceInfo,
    ToolRef,
    create_tool,
    render_instruction,
    skill_routes,
)

__all__ = [
    "Capability",
    "Instruction",
    "RouteRegistry",
    "Skill",
    "SkillRegistry",
    "SkillTool",
    "SourceInfo",
    "SuggestionRule",
    "SuggestionSchema",
    "SuggestionTarget",
    "ToolRef",
    "create_tool",
    "define_suggestions",
    "instruction_to_routes",
    "render_instruction",
    "skill_routes",
]
