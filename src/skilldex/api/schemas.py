"""API Pydantic schemas for request/response validation."""

from pydantic import BaseModel, Field

from skilldex.dispatch import RunItem
from skilldex.models.results import DomainDiscovery


# ===== Ask =====

class AskRequestSchema(BaseModel):
    """Discovery request schema."""

    query: str = Field(..., min_length=1, max_length=500)
    domain: str | None = None
    per_domain: int | None = Field(default=None, ge=1, le=50)


class AskResponseSchema(BaseModel):
    """Discovery response: structured domains plus rendered markdown."""

    query: str
    domains: dict[str, DomainDiscovery]
    text: str
    latency_ms: float


# ===== Run =====

class RunRequestSchema(BaseModel):
    """Batch invocation request schema."""

    routes: list[RunItem] = Field(..., min_length=1)


# ===== Health =====

class HealthResponseSchema(BaseModel):
    """Health check response schema."""

    status: str
    skills: int = 0
    routes: int = 0
    indexed_documents: int = 0
    sessions: dict = Field(default_factory=dict)
