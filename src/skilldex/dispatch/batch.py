"""Concurrent batch invocation."""

import asyncio
import time
from typing import Any

import structlog
from pydantic import BaseModel, Field

from skilldex.context import ToolContext
from skilldex.dispatch.router import dispatch
from skilldex.models.results import BatchResult, BatchSummary, ErrorInfo, ItemResult, ToolResult
from skilldex.observability import RUN_ITEMS, RUN_LATENCY

logger = structlog.get_logger()


class RunItem(BaseModel):
    """One (identifier, parameters) pair of a batch."""

    route: str = Field(..., min_length=1, description='Identifier, e.g. "skill:tool"')
    params: dict[str, Any] | None = None


def _to_item(route: str, outcome) -> ItemResult:
    if not outcome.success:
        return ItemResult(route=route, success=False, error=outcome.error)

    data = outcome.data
    if isinstance(data, ToolResult):
        return ItemResult(
            route=route,
            success=True,
            data=data.content,
            structured=data.structured,
            suggestions=data.suggestions or None,
        )
    return ItemResult(route=route, success=True, data=data)


async def _run_one(item: RunItem, ctx: ToolContext) -> ItemResult:
    try:
        outcome = await dispatch(item.route, item.params or {}, ctx.for_item())
        result = _to_item(item.route, outcome)
    except Exception as e:
        logger.error("batch_item_failed", route=item.route, error=str(e))
        result = ItemResult(
            route=item.route,
            success=False,
            error=ErrorInfo(code="EXECUTION_ERROR", message=str(e) or "Unknown error"),
        )

    RUN_ITEMS.labels(status="success" if result.success else "failed").inc()
    return result


async def run_batch(items: list[RunItem], ctx: ToolContext) -> BatchResult:
    """
    Execute every item concurrently and join on all of them.

    A failing item never affects its siblings; the batch itself always
    succeeds with per-item status.
    """
    start = time.perf_counter()
    logger.info(
        "run_called",
        count=len(items),
        routes=[i.route for i in items],
        user_id=ctx.user.id if ctx.user else None,
        request_id=ctx.request_id,
    )

    results = await asyncio.gather(*(_run_one(item, ctx) for item in items))

    succeeded = sum(1 for r in results if r.success)
    RUN_LATENCY.observe(time.perf_counter() - start)
    logger.info("run_complete", total=len(results), success=succeeded, failed=len(results) - succeeded)

    return BatchResult(
        results=list(results),
        summary=BatchSummary(total=len(results), success=succeeded, failed=len(results) - succeeded),
    )
