"""Process-wide embedding model handle.

The embedding model is expensive to load, so it is loaded lazily, once,
and shared. EmbedderHandle wraps any EmbeddingProvider with an explicit
lifecycle:

    UNINITIALIZED -> LOADING -> READY
                             -> FAILED

Concurrent first callers share a single in-flight load task. A failed
load is not retried; the handle stays usable and every embed() returns
None, which the gateway treats as "no vector available".
"""

import asyncio
import logging
import threading
from enum import Enum
from functools import lru_cache

from flowllm.config import Settings, settings
from flowllm.protocols import EmbeddingProvider

logger = logging.getLogger(__name__)


class EmbedderState(str, Enum):
    """Lifecycle states of the embedding model."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class EmbedderHandle:
    """Lazy, single-flight owner of an embedding provider.

    Example:
        ```python
        handle = EmbedderHandle(LocalEmbeddingProvider.create())
        await handle.ensure_loaded()
        vector = await handle.embed("Hello")  # None if the model failed to load
        ```
    """

    def __init__(self, provider: EmbeddingProvider | None) -> None:
        """Initialize the handle.

        Args:
            provider: Embedding backend, or None to run without embeddings.
        """
        self._provider = provider
        self._state = EmbedderState.UNINITIALIZED
        self._load_task: asyncio.Task | None = None
        self._dimension: int | None = None
        self._error: str | None = None
        self._lock = threading.Lock()

    @property
    def state(self) -> EmbedderState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is EmbedderState.READY

    @property
    def model_name(self) -> str | None:
        return self._provider.model_name if self._provider is not None else None

    @property
    def dimension(self) -> int | None:
        """Vector dimension, fixed for the process lifetime once known."""
        return self._dimension

    @property
    def error(self) -> str | None:
        """Why the load failed, if it did."""
        return self._error

    async def ensure_loaded(self) -> EmbedderState:
        """Load the model once and return the resulting state.

        Safe to call concurrently: only the first caller starts the load,
        the others await the same task. Never raises for load errors.

        Returns:
            EmbedderState.READY or EmbedderState.FAILED
        """
        if self._state in (EmbedderState.READY, EmbedderState.FAILED):
            return self._state

        with self._lock:
            if self._state is EmbedderState.UNINITIALIZED:
                self._state = EmbedderState.LOADING
                self._load_task = asyncio.ensure_future(self._load())
            task = self._load_task

        if task is not None:
            # A cancelled caller must not cancel the shared load
            await asyncio.shield(task)
        return self._state

    async def _load(self) -> None:
        if self._provider is None:
            self._error = "no embedding backend configured"
            self._state = EmbedderState.FAILED
            logger.warning("No embedding backend configured, running without embeddings")
            return

        logger.debug("Embedder %s: loading", self._provider.model_name)
        try:
            await self._provider.load()
        except Exception as e:
            self._error = str(e)
            self._state = EmbedderState.FAILED
            logger.warning(
                "Embedding model %s failed to load, continuing without embeddings: %s",
                self._provider.model_name,
                e,
            )
            return

        self._dimension = self._provider.dimension
        self._state = EmbedderState.READY
        logger.info(
            "Embedding model %s ready (dimension=%s)",
            self._provider.model_name,
            self._dimension,
        )

    async def embed(self, text: str) -> list[float] | None:
        """Embed a text, or return None when no vector can be produced.

        Returns None unless the handle is READY, and also when the provider
        raises or returns a vector of the wrong dimension.
        """
        if self._state is not EmbedderState.READY or self._provider is None:
            return None

        try:
            raw = await self._provider.encode(text)
        except Exception as e:
            logger.warning("Embedding failed, treating query as unembedded: %s", e)
            return None

        vector = [float(x) for x in raw]
        if self._dimension is None:
            self._dimension = len(vector)
        elif len(vector) != self._dimension:
            logger.warning(
                "Embedding has %d dims, expected %d; ignoring it",
                len(vector),
                self._dimension,
            )
            return None
        return vector

    async def close(self) -> None:
        """Release the provider's resources, if it holds any."""
        close = getattr(self._provider, "close", None)
        if close is not None:
            await close()


def create_embedding_provider(config: Settings | None = None) -> EmbeddingProvider | None:
    """Build the embedding provider selected by EMBEDDING_BACKEND.

    Args:
        config: Settings to read. Defaults to the global settings.

    Returns:
        The provider, or None for the "none" backend
    """
    config = config or settings

    if config.embedding_backend == "ollama":
        from flowllm.repositories import OllamaEmbeddingProvider

        return OllamaEmbeddingProvider.create(
            model_name=config.embedding_model,
            base_url=config.ollama_base_url,
        )

    if config.embedding_backend == "local":
        from flowllm.repositories.local_embedding_provider import LocalEmbeddingProvider

        return LocalEmbeddingProvider.create(model_name=config.embedding_model)

    return None


@lru_cache
def get_embedder_handle() -> EmbedderHandle:
    """Get the process-wide embedder handle."""
    return EmbedderHandle(create_embedding_provider())


def reset_embedder_handle() -> None:
    """Forget the process-wide handle (tests only)."""
    get_embedder_handle.cache_clear()
