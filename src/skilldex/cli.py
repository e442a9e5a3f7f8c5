"""Command-line interface for Skilldex."""

import argparse
import asyncio
import json
import sys

import structlog
import uvicorn

from skilldex.bootstrap import create_hub
from skilldex.config import get_settings
from skilldex.dispatch import RunItem
from skilldex.exceptions import ConfigurationError
from skilldex.hub import KnowledgeHub
from skilldex.observability import configure_logging
from skilldex.search import format_search_response

logger = structlog.get_logger()


def _print_json(data):
    print(json.dumps(data, indent=2, default=str))


async def _with_hub(action, initialize: bool = False):
    hub = create_hub(get_settings())
    try:
        if initialize:
            await hub.initialize()
        return await action(hub)
    finally:
        await hub.close()


def cmd_serve(args):
    """Start the API server."""
    settings = get_settings()
    host = args.host or settings.host
    port = args.port or settings.port

    logger.info("starting_server", host=host, port=port)

    uvicorn.run(
        "skilldex.api.app:app",
        host=host,
        port=port,
        reload=args.reload,
    )


def cmd_sync(args):
    """Synchronize every configured source."""

    async def action(hub: KnowledgeHub):
        return await hub.initialize()

    report = asyncio.run(_with_hub(action))
    for source in report.sources:
        print(f"{source.outcome:8} {source.source_id} ({source.resource_count} resources)")
        if source.error:
            print(f"         {source.error}")
    print(f"\n fresh={report.fresh} fetched={report.fetched} failed={report.failed}")
    return 1 if report.failed else 0


def cmd_refresh(args):
    """Refetch one source regardless of freshness."""

    async def action(hub: KnowledgeHub):
        return await hub.lifecycle.refresh_source(args.source_id)

    result = asyncio.run(_with_hub(action))
    print(result.message)
    return 0 if result.success else 1


def cmd_refresh_stale(args):
    """Refetch every remote source older than its ttl."""

    async def action(hub: KnowledgeHub):
        return await hub.lifecycle.refresh_stale_sources()

    _print_json(asyncio.run(_with_hub(action)).model_dump())
    return 0


def cmd_wipe(args):
    """Drop the index and rebuild everything."""

    async def action(hub: KnowledgeHub):
        return await hub.lifecycle.wipe_index_and_rebuild()

    result = asyncio.run(_with_hub(action))
    _print_json(result.model_dump())
    return 0 if result.success else 1


def cmd_sources(args):
    """Show freshness of configured sources."""

    async def action(hub: KnowledgeHub):
        return await hub.lifecycle.source_stats()

    statuses = asyncio.run(_with_hub(action))
    if not statuses:
        print("No sources configured.")
        return 0

    for s in statuses:
        age = f"{s.age_seconds / 60:.0f}m" if s.age_seconds is not None else "-"
        state = "fresh" if s.fresh else "stale"
        local = " (local)" if s.is_local else ""
        print(f"{s.source_id}{local}")
        print(f"    {s.domain} | {state} | age {age} | ttl {s.ttl_seconds // 60}m | docs {s.document_count}")
    return 0


def _context(hub: KnowledgeHub, args):
    scopes = [s.strip() for s in (args.scopes or "").split(",") if s.strip()]
    return hub.context(user_id=args.user, scopes=scopes)


def cmd_ask(args):
    """Run a discovery query."""

    async def action(hub: KnowledgeHub):
        return await hub.ask(
            args.query, _context(hub, args), domain=args.domain, per_domain=args.per_domain
        )

    response = asyncio.run(_with_hub(action, initialize=True))
    print(format_search_response(response))
    return 0


def cmd_run(args):
    """Invoke one route."""
    try:
        params = json.loads(args.params) if args.params else None
    except json.JSONDecodeError as e:
        logger.error("invalid_params", error=str(e))
        return 2

    async def action(hub: KnowledgeHub):
        batch = await hub.run([RunItem(route=args.identifier, params=params)], _context(hub, args))
        return batch.results[0]

    item = asyncio.run(_with_hub(action, initialize=True))
    if item.success:
        print(item.data if isinstance(item.data, str) else json.dumps(item.data, indent=2, default=str))
        return 0

    print(f"{item.error.code}: {item.error.message}", file=sys.stderr)
    if item.error.details:
        print(json.dumps(item.error.details, indent=2, default=str), file=sys.stderr)
    return 1


def main(argv: list[str] | None = None):
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        prog="skilldex",
        description="Discovery and invocation of agent skills, tools and resources",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", type=str, help="Host to bind to")
    serve_parser.add_argument("--port", type=int, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    # sync command
    sync_parser = subparsers.add_parser("sync", help="Synchronize configured sources")
    sync_parser.set_defaults(func=cmd_sync)

    # refresh command
    refresh_parser = subparsers.add_parser("refresh", help="Refetch one source")
    refresh_parser.add_argument("source_id", help="Source identifier")
    refresh_parser.set_defaults(func=cmd_refresh)

    # refresh-stale command
    stale_parser = subparsers.add_parser("refresh-stale", help="Refetch stale remote sources")
    stale_parser.set_defaults(func=cmd_refresh_stale)

    # wipe command
    wipe_parser = subparsers.add_parser("wipe", help="Drop the index and rebuild")
    wipe_parser.set_defaults(func=cmd_wipe)

    # sources command
    sources_parser = subparsers.add_parser("sources", help="Show source freshness")
    sources_parser.set_defaults(func=cmd_sources)

    # ask command
    ask_parser = subparsers.add_parser("ask", help="Run a discovery query")
    ask_parser.add_argument("query", help="Search query")
    ask_parser.add_argument("--domain", "-d", help="Restrict to one skill")
    ask_parser.add_argument("--per-domain", "-k", type=int, help="Resources per domain")
    ask_parser.set_defaults(func=cmd_ask)

    # run command
    run_parser = subparsers.add_parser("run", help="Invoke a route")
    run_parser.add_argument("identifier", help="Route identifier, e.g. skill:tool")
    run_parser.add_argument("--params", "-p", help="JSON parameters")
    run_parser.set_defaults(func=cmd_run)

    for sub in (ask_parser, run_parser):
        sub.add_argument("--user", "-u", help="Caller id")
        sub.add_argument("--scopes", "-s", help="Comma-separated scopes")

    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    try:
        code = args.func(args)
    except ConfigurationError as e:
        logger.error("configuration_error", error=str(e))
        code = 2
    sys.exit(code or 0)


if __name__ == "__main__":
    main()
