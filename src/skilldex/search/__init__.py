"""Discovery search package."""

from skilldex.search.discovery import execute_search, format_search_response, skill_summary
from skilldex.search.segments import DEFAULT_SEGMENTS, search_segments

__all__ = [
    "DEFAULT_SEGMENTS",
    "execute_search",
    "format_search_response",
    "search_segments",
    "skill_summary",
]
