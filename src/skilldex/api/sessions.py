"""LRU/TTL store for per-session unlock state."""

import time
from collections import OrderedDict
from dataclasses import dataclass, field

from skilldex.config import get_settings


@dataclass
class SessionEntry:
    """Capability identifiers unlocked during one exchange."""

    unlocked: set[str] = field(default_factory=set)
    touched_at: float = field(default_factory=time.time)


class SessionStore:
    """
    Unlock sets keyed by session id.

    Features:
    - Size-limited with LRU eviction
    - TTL-based expiration, measured from last use
    """

    def __init__(self, max_size: int | None = None, ttl_seconds: int | None = None):
        """
        Initialize the session store.

        Args:
            max_size: Maximum number of sessions kept
            ttl_seconds: Idle time after which a session is forgotten
        """
        settings = get_settings()
        self.max_size = max_size or settings.session_cache_size
        self.ttl_seconds = ttl_seconds or settings.session_ttl_seconds

        self._sessions: OrderedDict[str, SessionEntry] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get(self, session_id: str) -> set[str]:
        """
        Return the unlock set for a session, creating it when absent.

        The returned set is live: mutations are visible to later calls.
        """
        entry = self._sessions.get(session_id)
        if entry is not None and time.time() - entry.touched_at > self.ttl_seconds:
            del self._sessions[session_id]
            entry = None

        if entry is None:
            self._misses += 1
            while len(self._sessions) >= self.max_size:
                self._sessions.popitem(last=False)
            entry = SessionEntry()
            self._sessions[session_id] = entry
        else:
            self._hits += 1
            self._sessions.move_to_end(session_id)

        entry.touched_at = time.time()
        return entry.unlocked

    def invalidate(self):
        """Forget every session."""
        self._sessions.clear()

    @property
    def size(self) -> int:
        return len(self._sessions)

    @property
    def stats(self) -> dict:
        return {
            "size": self.size,
            "max_size": self.max_size,
            "hits": self._hits,
            "misses": self._misses,
        }
