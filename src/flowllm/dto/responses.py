"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class QueryResponse(BaseModel):
    """Response DTO for a gateway query."""

    text: str = Field(..., description="Answer, rate-limit advisory or upstream error text")
    is_cached: bool = Field(..., description="Whether the answer was served from cache")
    latency_ms: float = Field(..., description="Time taken to answer in milliseconds", ge=0.0)
    cost_saved: float = Field(..., description="Cost credited for this query", ge=0.0)
    total_cost_saved: float = Field(
        ...,
        description="Running total credited since the process started",
        ge=0.0,
    )


class StatsResponse(BaseModel):
    """Response DTO for gateway statistics."""

    total_entries: int = Field(..., description="Total number of cached entries", ge=0)
    strategy: str = Field(..., description="Active similarity strategy: 'vector' or 'lexical'")
    threshold: float = Field(
        ...,
        description="Threshold of the active strategy (match must score strictly above)",
        ge=0.0,
        le=1.0,
    )
    embedding_fallback: str = Field(..., description="Policy for queries without a vector")
    embedder_state: str | None = Field(None, description="Embedding model lifecycle state")
    total_cost_saved: float = Field(..., description="Running total of cost saved", ge=0.0)
    performance: dict[str, Any] = Field(default_factory=dict, description="Performance counters")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    cache_healthy: bool = Field(..., description="Whether the cache store is usable")
    embedding_healthy: bool | None = Field(
        None,
        description="Whether the embedding model is loaded (None when unused or not loaded yet)",
    )
