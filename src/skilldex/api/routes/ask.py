"""Discovery API route."""

import time

from fastapi import APIRouter, Depends

from skilldex.api.deps import get_context
from skilldex.api.schemas import AskRequestSchema, AskResponseSchema
from skilldex.context import ToolContext
from skilldex.search import format_search_response

router = APIRouter(prefix="/ask", tags=["discovery"])


@router.post("", response_model=AskResponseSchema)
async def ask(request: AskRequestSchema, ctx: ToolContext = Depends(get_context)):
    """
    Search skills, routes and indexed resources.

    Returns results grouped by domain, both structured and as markdown.
    """
    start = time.perf_counter()
    response = await ctx.hub.ask(
        request.query, ctx, domain=request.domain, per_domain=request.per_domain
    )
    return AskResponseSchema(
        query=response.query,
        domains=response.domains,
        text=format_search_response(response),
        latency_ms=(time.perf_counter() - start) * 1000,
    )
