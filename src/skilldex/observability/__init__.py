"""Observability package."""

from skilldex.observability.logging import configure_logging
from skilldex.observability.metrics import (
    ASK_LATENCY,
    ASK_REQUESTS,
    INDEXED_DOCUMENTS,
    RUN_ITEMS,
    RUN_LATENCY,
    SEGMENT_FAILURES,
    SYNC_LATENCY,
    SYNC_SOURCES,
    get_metrics,
)

__all__ = [
    "ASK_LATENCY",
    "ASK_REQUESTS",
    "INDEXED_DOCUMENTS",
    "RUN_ITEMS",
    "RUN_LATENCY",
    "SEGMENT_FAILURES",
    "SYNC_LATENCY",
    "SYNC_SOURCES",
    "configure_logging",
    "get_metrics",
]
