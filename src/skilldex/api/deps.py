"""Request dependencies: the hub, the session store and the call context."""

from fastapi import Depends, Header, HTTPException

from skilldex.api.sessions import SessionStore
from skilldex.context import ToolContext
from skilldex.hub import KnowledgeHub

# Set by the app lifespan
_hub: KnowledgeHub | None = None
_sessions: SessionStore | None = None


def get_hub() -> KnowledgeHub:
    """Dependency to get the hub."""
    if _hub is None:
        raise HTTPException(status_code=503, detail="Hub not initialized")
    return _hub


def set_hub(hub: KnowledgeHub | None):
    """Set the hub instance."""
    global _hub
    _hub = hub


def get_sessions() -> SessionStore:
    """Dependency to get the session store."""
    global _sessions
    if _sessions is None:
        _sessions = SessionStore()
    return _sessions


def set_sessions(sessions: SessionStore | None):
    global _sessions
    _sessions = sessions


def parse_scopes(header: str | None) -> list[str]:
    return [s.strip() for s in (header or "").split(",") if s.strip()]


def get_context(
    hub: KnowledgeHub = Depends(get_hub),
    sessions: SessionStore = Depends(get_sessions),
    x_user_id: str | None = Header(default=None),
    x_scopes: str | None = Header(default=None),
    x_request_id: str | None = Header(default=None),
    x_session_id: str | None = Header(default=None),
) -> ToolContext:
    """
    Build the per-call context from request headers.

    Without a session id every request starts with nothing unlocked.
    """
    return hub.context(
        user_id=x_user_id,
        scopes=parse_scopes(x_scopes),
        request_id=x_request_id,
        unlocked=sessions.get(x_session_id) if x_session_id else None,
    )
