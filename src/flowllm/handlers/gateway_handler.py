"""HTTP handlers for gateway operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import logging

from fastapi import HTTPException, status

from flowllm.dto import HealthCheckResponse, QueryRequest, QueryResponse, StatsResponse
from flowllm.embeddings import EmbedderState
from flowllm.services import GatewayService

logger = logging.getLogger(__name__)


class GatewayHandler:
    """HTTP handlers for gateway operations.

    This handler delegates business logic to GatewayService
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses
    """

    def __init__(self, gateway: GatewayService) -> None:
        """Initialize the gateway handler.

        Args:
            gateway: The gateway service for business logic (required).
        """
        self._gateway = gateway

    async def handle_query(self, request: QueryRequest) -> QueryResponse:
        """Handle POST /query requests.

        Args:
            request: The query request DTO

        Returns:
            QueryResponse with the answer and cache accounting

        Raises:
            HTTPException: 400 for an empty query, 500 for anything unexpected
        """
        try:
            reply = await self._gateway.handle(request.query)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=str(e),
            ) from e
        except Exception as e:
            logger.exception("Query failed")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to answer query: {e}",
            ) from e

        return QueryResponse(
            text=reply.text,
            is_cached=reply.is_cached,
            latency_ms=reply.latency_ms,
            cost_saved=reply.cost_saved,
            total_cost_saved=self._gateway.total_cost_saved,
        )

    async def get_stats(self) -> StatsResponse:
        """Handle GET /stats requests.

        Returns:
            StatsResponse with cache and performance statistics

        Raises:
            HTTPException: If an error occurs while fetching stats
        """
        try:
            stats = self._gateway.get_stats()
            cache_stats = stats["cache"]

            return StatsResponse(
                total_entries=cache_stats.get("total_entries", 0),
                strategy=cache_stats.get("strategy", ""),
                threshold=cache_stats.get("threshold", 0.0),
                embedding_fallback=cache_stats.get("embedding_fallback", ""),
                embedder_state=stats["embedder"]["state"],
                total_cost_saved=stats["total_cost_saved"],
                performance=stats["performance"],
            )

        except Exception as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Failed to get stats: {e}",
            ) from e

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        The service stays available without embeddings, so a failed model
        load reports "degraded" rather than an error status.
        """
        try:
            self._gateway.cache.count()
            cache_healthy = True
        except Exception:
            logger.exception("Cache store health check failed")
            cache_healthy = False

        embedding_healthy = None
        embedder = self._gateway.embedder
        if self._gateway.cache.policy.uses_embeddings and embedder is not None:
            if embedder.state is EmbedderState.READY:
                embedding_healthy = True
            elif embedder.state is EmbedderState.FAILED:
                embedding_healthy = False

        healthy = cache_healthy and embedding_healthy is not False
        return HealthCheckResponse(
            status="healthy" if healthy else "degraded",
            cache_healthy=cache_healthy,
            embedding_healthy=embedding_healthy,
        )
