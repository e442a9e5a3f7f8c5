"""Route registry: capabilities keyed by route."""

import structlog

from skilldex.context import ToolContext
from skilldex.registry.capability import Capability

logger = structlog.get_logger()


class RouteRegistry:
    """
    Maps routes to capabilities.

    Registration overwrites silently; batch registration logs a summary.
    """

    def __init__(self):
        self._routes: dict[str, Capability] = {}

    def register(self, capability: Capability):
        self._routes[capability.route] = capability

    def register_all(self, capabilities: list[Capability]):
        before = len(self._routes)
        for capability in capabilities:
            self.register(capability)
        added = len(self._routes) - before
        logger.info(
            "routes_registered",
            total=len(capabilities),
            added=added,
            replaced=len(capabilities) - added,
        )

    def get(self, route: str) -> Capability | None:
        return self._routes.get(route)

    def all(self) -> list[Capability]:
        return list(self._routes.values())

    def visible(self, ctx: ToolContext) -> list[Capability]:
        """Capabilities whose required scopes the caller holds."""
        return [c for c in self._routes.values() if ctx.has_scopes(c.required_scopes)]

    def gated_routes(self) -> set[str]:
        """Routes revealed only by executing an instruction."""
        return {
            route
            for c in self._routes.values()
            if c.kind == "instruction"
            for route in c.unlocks
        }

    def __len__(self) -> int:
        return len(self._routes)
