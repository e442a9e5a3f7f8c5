"""Per-call context handed to capabilities."""

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from skilldex.hub import KnowledgeHub


@dataclass
class Caller:
    id: str
    email: str | None = None


@dataclass
class ToolContext:
    """
    Caller identity, held scopes and correlation id for one call.

    `unlocked` collects the capabilities revealed by instructions executed
    during the current exchange; it is shared by every item of a batch.
    """

    hub: "KnowledgeHub"
    user: Caller | None = None
    scopes: list[str] = field(default_factory=list)
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = field(default_factory=time.time)
    unlocked: set[str] = field(default_factory=set)
    call_stack: list[str] = field(default_factory=list)

    def missing_scopes(self, required: list[str] | None) -> list[str]:
        return [s for s in (required or []) if s not in self.scopes]

    def has_scopes(self, required: list[str] | None) -> bool:
        return not self.missing_scopes(required)

    def for_item(self) -> "ToolContext":
        """Copy for one batch item: own call stack, shared unlock set."""
        return replace(self, call_stack=list(self.call_stack))


@dataclass
class SkillContext:
    """Context passed to dynamic skill instructions."""

    hub: "KnowledgeHub"
    user: Caller | None = None
    scopes: list[str] = field(default_factory=list)
