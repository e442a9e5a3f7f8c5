"""Dispatch package."""

from skilldex.dispatch.batch import RunItem, run_batch
from skilldex.dispatch.router import dispatch, fetch_resource, summarize_validation_errors

__all__ = [
    "RunItem",
    "dispatch",
    "fetch_resource",
    "run_batch",
    "summarize_validation_errors",
]
