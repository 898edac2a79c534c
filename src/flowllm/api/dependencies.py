"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - The gateway is built from settings unless one is injected (tests)
"""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from flowllm.config import Settings, settings
from flowllm.embeddings import get_embedder_handle
from flowllm.handlers import GatewayHandler
from flowllm.repositories import InMemoryCacheRepository, OllamaTextGenerator
from flowllm.services import CachePolicy, CacheService, GatewayService

logger = logging.getLogger(__name__)


def get_handler(request: Request) -> GatewayHandler:
    """Dependency injection for GatewayHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "gateway_handler", None)
    if handler is None:
        raise RuntimeError("GatewayHandler not initialized. Check lifespan setup.")
    return handler


def build_gateway(config: Settings | None = None) -> GatewayService:
    """Wire the gateway from settings.

    1. Cache policy and in-memory repository
    2. Embedder handle (vector strategy only; the model loads on first query)
    3. Upstream text generator
    """
    config = config or settings
    policy = CachePolicy.from_settings(config)
    cache = CacheService.create(
        repository=InMemoryCacheRepository.create(),
        policy=policy,
    )
    embedder = get_embedder_handle() if policy.uses_embeddings else None
    generator = OllamaTextGenerator.create(
        model_name=config.generation_model,
        base_url=config.ollama_base_url,
    )
    return GatewayService.create(cache=cache, generator=generator, embedder=embedder)


def make_lifespan(
    gateway: GatewayService | None = None,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build the lifespan context manager for the FastAPI app.

    Args:
        gateway: Prebuilt gateway. If None, one is built from settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        service = gateway or build_gateway()
        app.state.gateway = service
        app.state.gateway_handler = GatewayHandler(gateway=service)

        policy = service.cache.policy
        logger.info("Gateway initialized")
        logger.info("Strategy: %s (threshold %.2f)", policy.strategy, policy.threshold)
        if service.embedder is not None:
            logger.info("Embedding model: %s (loads on first query)", service.embedder.model_name)

        yield

        close = getattr(service.generator, "close", None)
        if close is not None:
            await close()
        if service.embedder is not None:
            await service.embedder.close()
        del app.state.gateway_handler
        del app.state.gateway
        logger.info("Gateway shut down")

    return lifespan


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[GatewayHandler, Depends(get_handler)]
