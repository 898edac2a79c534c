"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request DTO for answering a query through the gateway."""

    query: str = Field(..., description="The user query", min_length=1)
