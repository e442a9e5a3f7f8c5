"""Batch invocation API route."""

from fastapi import APIRouter, Depends

from skilldex.api.deps import get_context
from skilldex.api.schemas import RunRequestSchema
from skilldex.context import ToolContext
from skilldex.models.results import BatchResult

router = APIRouter(prefix="/run", tags=["invoke"])


@router.post("", response_model=BatchResult)
async def run(request: RunRequestSchema, ctx: ToolContext = Depends(get_context)):
    """
    Invoke one or more routes concurrently.

    Per-item failures are reported in the results; the request itself
    succeeds.
    """
    return await ctx.hub.run(request.routes, ctx)
