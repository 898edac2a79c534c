from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowllm.api.dependencies import HandlerDep, make_lifespan
from flowllm.config import configure_logging, settings
from flowllm.dto import HealthCheckResponse, QueryRequest, QueryResponse, StatsResponse
from flowllm.services import GatewayService


def create_app(gateway: GatewayService | None = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        gateway: Prebuilt gateway to serve. If None, one is built from settings
            at startup.
    """
    app = FastAPI(
        title="FlowLLM Gateway",
        description="Semantic caching proxy in front of a text-generation backend",
        version="0.1.0",
        lifespan=make_lifespan(gateway),
    )

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": "FlowLLM Gateway",
            "version": "0.1.0",
            "description": "Semantic caching proxy in front of a text-generation backend",
            "endpoints": {
                "query": "/query",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.post("/query", response_model=QueryResponse)
    async def query(request: QueryRequest, handler: HandlerDep) -> QueryResponse:
        """Answer a query from the semantic cache or the upstream model."""
        return await handler.handle_query(request)

    @app.get("/stats", response_model=StatsResponse)
    async def stats(handler: HandlerDep) -> StatsResponse:
        """Get cache and performance statistics."""
        return await handler.get_stats()

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run(
        "flowllm.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
