"""Dispatch of one identifier to a capability or an indexed resource."""

import time
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from skilldex.context import ToolContext
from skilldex.exceptions import SearchIndexError
from skilldex.formatting import apply_output_formatter, format_schema_for_agent
from skilldex.models.results import RouteResult, ToolResult
from skilldex.registry.capability import Capability

logger = structlog.get_logger()

MAX_DETAILED_PATHS = 10


def summarize_validation_errors(errors: list[dict]) -> list[dict] | dict:
    """
    Full error list for small failures, a summary when more than ten field
    paths failed.
    """
    by_path: dict[str, list[dict]] = {}
    for error in errors:
        path = ".".join(str(p) for p in error.get("loc", ())) or "root"
        by_path.setdefault(path, []).append(error)

    if len(by_path) <= MAX_DETAILED_PATHS:
        return errors

    counts: dict[str, int] = {}
    for error in errors:
        loc = error.get("loc", ())
        root = str(loc[0]) if loc else "root"
        counts[root] = counts.get(root, 0) + 1

    return {
        "summary": f"Validation failed for {len(by_path)} fields across {len(errors)} errors",
        "error_counts": counts,
        "sample_errors": errors[:3],
        "hint": "Fix the listed fields and retry.",
    }


def _unlocked_tools(routes: list[str], ctx: ToolContext) -> list[dict]:
    """Descriptions of unlocked capabilities the caller may use."""
    tools = []
    for route in routes:
        capability = ctx.hub.routes.get(route)
        if capability is None or not ctx.has_scopes(capability.required_scopes):
            continue

        entry: dict[str, Any] = {
            "route": capability.route,
            "description": capability.description,
            "freshness": capability.freshness,
        }
        parameters = format_schema_for_agent(capability.input_schema)
        if parameters:
            entry["parameters"] = parameters
        if capability.required_scopes:
            entry["permissions"] = capability.required_scopes
        tools.append(entry)

    ctx.unlocked.update(t["route"] for t in tools)
    return tools


def _with_tools(data: Any, tools: list[dict]) -> Any:
    if not tools:
        return data
    if isinstance(data, ToolResult):
        return ToolResult(
            content=data.content,
            structured=_attach_tools(data.structured, tools, "data"),
            suggestions=data.suggestions,
        )
    return _attach_tools(data, tools, "content")


def _attach_tools(value: Any, tools: list[dict], key: str) -> dict:
    if value is None:
        return {"tools": tools}
    if isinstance(value, dict):
        return {**value, "tools": tools}
    return {key: value, "tools": tools}


async def fetch_resource(identifier: str, ctx: ToolContext) -> RouteResult:
    """Serve a resource straight from the index."""
    try:
        document = await ctx.hub.store.get_document_by_uri(identifier)
    except SearchIndexError as e:
        logger.error("resource_fetch_failed", route=identifier, error=str(e))
        return RouteResult.fail("FETCH_ERROR", str(e) or "Failed to fetch from index")

    if document is None:
        return RouteResult.fail("ROUTE_NOT_FOUND", f"Route not found: {identifier}")

    logger.debug("resource_served", route=identifier, content_size=document.content_size)
    data = {
        "uri": document.uri,
        "domain": document.domain,
        "name": document.name,
        "type": document.resource_type,
        "content": document.content,
        "content_size": document.content_size,
        "child_count": document.child_count,
    }
    if document.resource_type == "instruction" and document.unlocks:
        data = _with_tools(data, _unlocked_tools(document.unlocks, ctx))
    return RouteResult.ok(data)


def _validate_output(capability: Capability, output: Any) -> Any:
    schema = capability.output_schema
    if isinstance(output, schema):
        return output.model_dump(mode="json")
    if isinstance(output, BaseModel):
        output = output.model_dump()
    return schema.model_validate(output).model_dump(mode="json")


def _format(capability: Capability, data: Any) -> Any:
    """Apply the output formatter; fall back to the raw data on failure."""
    try:
        if isinstance(data, ToolResult):
            if data.structured is None:
                return data
            return data.model_copy(
                update={"content": apply_output_formatter(data.structured, capability.output_formatter)}
            )
        return apply_output_formatter(data, capability.output_formatter)
    except Exception as e:
        logger.warning("output_formatter_failed", route=capability.route, error=str(e))
        return data


async def dispatch(identifier: str, params: Any, ctx: ToolContext) -> RouteResult:
    """
    Resolve, authorize, validate and execute one identifier.

    Caller errors come back as failed results; this never raises.

    Args:
        identifier: Route ("skill", "skill:tool", "domain://name") or a
            resource URI
        params: Parameters for the capability's input schema
        ctx: Per-call context

    Returns:
        RouteResult with data or an error code
    """
    capability = ctx.hub.routes.get(identifier)
    if capability is None:
        return await fetch_resource(identifier, ctx)

    missing = ctx.missing_scopes(capability.required_scopes)
    if missing:
        logger.info("permission_denied", route=identifier, missing=missing, request_id=ctx.request_id)
        return RouteResult.fail(
            "PERMISSION_DENIED",
            f"Missing required permissions: {', '.join(capability.required_scopes)}",
        )

    if capability.input_schema is not None:
        try:
            params = capability.input_schema.model_validate(params or {})
        except ValidationError as e:
            errors = e.errors(include_url=False, include_context=False)
            logger.info("input_validation_failed", route=identifier, error_count=len(errors))
            return RouteResult.fail(
                "INVALID_INPUT",
                "Input validation failed",
                summarize_validation_errors(errors),
            )

    if identifier in ctx.call_stack:
        return RouteResult.fail(
            "EXECUTION_ERROR",
            f"Recursive invocation: {' -> '.join([*ctx.call_stack, identifier])}",
        )

    ctx.call_stack.append(identifier)
    start = time.perf_counter()
    try:
        output = await capability.execute(params, ctx)
    except Exception as e:
        logger.error("route_execution_failed", route=identifier, error=str(e), exc_info=True)
        return RouteResult.fail("EXECUTION_ERROR", str(e) or "Route execution failed")
    finally:
        ctx.call_stack.pop()

    logger.debug(
        "route_executed",
        route=identifier,
        request_id=ctx.request_id,
        duration_ms=round((time.perf_counter() - start) * 1000, 1),
    )

    if capability.output_schema is not None:
        try:
            output = _validate_output(capability, output)
        except ValidationError as e:
            # Full detail stays server-side
            errors = e.errors(include_url=False)
            logger.error(
                "output_validation_failed",
                route=identifier,
                error_count=len(errors),
                errors=summarize_validation_errors(errors),
            )
            return RouteResult.fail(
                "EXECUTION_ERROR",
                "Route returned invalid output",
                {"error_count": len(errors)},
            )

    if capability.output_formatter is not None:
        output = _format(capability, output)

    if capability.kind == "instruction" and capability.unlocks:
        output = _with_tools(output, _unlocked_tools(capability.unlocks, ctx))

    return RouteResult.ok(output)
