"""SKILL.md interop: a YAML front-matter block followed by the instruction."""

import yaml

from skilldex.formatting.schema import format_schema_for_agent
from skilldex.ingestion.formats.markdown import parse_front_matter
from skilldex.registry.skills import Skill

DYNAMIC_INSTRUCTION = "<!-- Dynamic instruction (generated at runtime) -->"


def _as_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


def skill_to_markdown(skill: Skill) -> str:
    """
    Serialize a skill to SKILL.md.

    Dynamic instructions cannot be serialized and are replaced by a
    placeholder comment. Tools are listed with their parameters.
    """
    header = {"name": skill.name, "slug": skill.slug}
    if skill.version:
        header["version"] = skill.version
    header["description"] = skill.description
    if skill.tags:
        header["tags"] = skill.tags
    if skill.triggers:
        header["triggers"] = skill.triggers
    if skill.required_scopes:
        header["requires"] = skill.required_scopes
    if skill.icon:
        header["icon"] = skill.icon

    instruction = skill.instruction if isinstance(skill.instruction, str) else DYNAMIC_INSTRUCTION
    parts = [
        "---",
        yaml.safe_dump(header, sort_keys=False, default_flow_style=None, allow_unicode=True).rstrip(),
        "---",
        "",
        instruction,
        "",
    ]

    if skill.tools:
        parts.extend(["## Tools", ""])
        for tool in skill.tools:
            parts.append(f"- **{tool.name}**: {tool.description}")
            params = format_schema_for_agent(tool.input_schema)
            if params:
                parts.append(f"  Parameters: {params}")
        parts.append("")

    return "\n".join(parts)


def skill_from_markdown(markdown: str) -> Skill:
    """
    Build a skill from SKILL.md.

    Tools are code and cannot be imported; the result has none.
    """
    front_matter, body = parse_front_matter(markdown)
    extra = front_matter.extra if front_matter else {}
    description = front_matter.description if front_matter else None

    name = str(extra.get("name") or "unnamed")
    version = extra.get("version")
    return Skill(
        name=name,
        slug=str(extra.get("slug") or name),
        version=str(version) if version is not None else None,
        description=description or "",
        instruction=body.strip(),
        tools=[],
        required_scopes=_as_list(extra.get("requires")),
        triggers=_as_list(extra.get("triggers")),
        tags=_as_list(extra.get("tags")),
        icon=extra.get("icon"),
    )
