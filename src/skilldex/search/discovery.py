"""Discovery: skill summaries merged with segmented resource hits."""

import time

import structlog

from skilldex.context import ToolContext
from skilldex.formatting import format_schema_for_agent
from skilldex.models.results import (
    DiscoveryEntry,
    DiscoveryResponse,
    DomainDiscovery,
    DomainRoutes,
)
from skilldex.observability import ASK_LATENCY, ASK_REQUESTS
from skilldex.registry.skills import Skill
from skilldex.search.segments import search_segments

logger = structlog.get_logger()


def skill_summary(skill: Skill, ctx: ToolContext, gated: set[str]) -> DiscoveryEntry:
    """
    One always-surfaced entry per skill: its description plus a compact
    listing of the tools the caller can see right now.
    """
    listing = []
    for tool in skill.tools:
        route = f"{skill.name}:{tool.name}"
        if route in gated and route not in ctx.unlocked:
            continue
        if not ctx.has_scopes(tool.required_scopes):
            continue
        params = format_schema_for_agent(tool.input_schema)
        listing.append(f"{route} - {tool.description}" + (f" ({params})" if params else ""))

    description = skill.description
    if listing:
        description += " | Tools: " + "; ".join(listing)
    return DiscoveryEntry(route=skill.name, description=description, type="skill")


def route_entries(domain: str, ctx: ToolContext, gated: set[str]) -> list[DiscoveryEntry]:
    """Standalone instructions and templates of a domain; tools stay hidden until unlocked."""
    entries = []
    for capability in ctx.hub.routes.visible(ctx):
        if "://" not in capability.route or capability.domain != domain:
            continue
        if capability.kind == "tool" and not (
            capability.route in gated and capability.route in ctx.unlocked
        ):
            continue

        entry = DiscoveryEntry(
            route=capability.route,
            description=capability.description,
            type=capability.kind,
            permissions=capability.required_scopes or None,
        )
        if capability.kind in ("template", "tool"):
            entry.parameters = format_schema_for_agent(capability.input_schema)
        entries.append(entry)
    return entries


async def execute_search(
    ctx: ToolContext,
    query: str,
    domain: str | None = None,
    per_domain: int = 10,
) -> DiscoveryResponse:
    """
    Run a discovery query.

    Never fails: skills the caller cannot see are skipped and failing
    segments contribute nothing.

    Args:
        ctx: Per-call context
        query: Free-text query
        domain: Restrict to one skill
        per_domain: Cap on resource hits per skill

    Returns:
        DiscoveryResponse keyed by skill name
    """
    start = time.perf_counter()
    logger.info(
        "ask_called",
        query=query,
        domain=domain,
        per_domain=per_domain,
        user_id=ctx.user.id if ctx.user else None,
        request_id=ctx.request_id,
    )

    hub = ctx.hub
    skills = hub.skills.enabled()
    if domain:
        skills = [s for s in skills if s.name == domain]
    gated = hub.routes.gated_routes()

    response = DiscoveryResponse(query=query)
    for skill in skills:
        if not ctx.has_scopes(skill.required_scopes):
            continue

        fixed = [skill_summary(skill, ctx, gated), *route_entries(skill.name, ctx, gated)]
        hits = await search_segments(
            hub.store,
            query,
            skill.name,
            skill.search_config,
            ctx.scopes,
            default_limit=hub.settings.default_segment_limit,
        )
        resources = [
            DiscoveryEntry(
                route=hit.uri,
                description=hit.description or "",
                type="instruction" if hit.resource_type == "instruction" else "resource",
                segment=hit.segment,
            )
            for hit in hits
        ]

        kept = resources[:per_domain]
        entries = fixed + kept
        response.domains[skill.name] = DomainDiscovery(
            description=skill.description,
            routes=DomainRoutes(
                entries=entries,
                count=len(entries),
                more_available=(len(resources) - len(kept)) or None,
            ),
        )

    ASK_REQUESTS.labels(status="success").inc()
    ASK_LATENCY.observe(time.perf_counter() - start)
    logger.info("ask_complete", query=query, matching_domains=len(response.domains))
    return response


def format_search_response(response: DiscoveryResponse) -> str:
    """Render a discovery response as markdown."""
    if not response.domains:
        return "No matching routes found."

    parts = []
    for name, domain in response.domains.items():
        parts.append(f"## {name}")
        if domain.description:
            parts.append(f"*{domain.description}*")
        parts.append("")

        for entry in domain.routes.entries:
            parts.append(f"- **`{entry.route}`**: {entry.description}")
            if entry.parameters:
                parts.append(f"  *{entry.parameters}*")
        if domain.routes.more_available:
            parts.append(f"  - *{domain.routes.more_available} more available*")
        parts.append("")

    return "\n".join(parts)
