"""FlowLLM - semantic response cache in front of a text-generation backend.

This package provides a layered architecture:

Layers:
    - protocols: Interface contracts (CacheStore, EmbeddingProvider, TextGenerator)
    - repositories: Concrete collaborators (in-memory store, Ollama clients)
    - services: Business logic (CachePolicy, CacheService, GatewayService)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from flowllm.api.dependencies import build_gateway

    gateway = build_gateway()
    reply = await gateway.handle("What is the capital of France?")
    ```

For HTTP API:
    ```python
    from flowllm.api.app import app
    ```
"""

from flowllm.config import get_settings, settings
from flowllm.dto import QueryRequest, QueryResponse
from flowllm.embeddings import EmbedderHandle, EmbedderState, get_embedder_handle
from flowllm.entities import (
    CacheEntryEntity,
    CacheMatchEntity,
    GatewayReply,
    GenerationResult,
    GenerationSource,
)
from flowllm.handlers import GatewayHandler
from flowllm.protocols import CacheStore, EmbeddingProvider, SimilarityScorer, TextGenerator
from flowllm.repositories import (
    InMemoryCacheRepository,
    OllamaEmbeddingProvider,
    OllamaTextGenerator,
)
from flowllm.services import CachePolicy, CacheService, GatewayService
from flowllm.similarity import cosine_similarity, edit_distance, lexical_similarity

__all__ = [
    # Configuration
    "settings",
    "get_settings",
    # Protocols (interfaces)
    "CacheStore",
    "EmbeddingProvider",
    "SimilarityScorer",
    "TextGenerator",
    # Similarity
    "cosine_similarity",
    "edit_distance",
    "lexical_similarity",
    # Embedder lifecycle
    "EmbedderHandle",
    "EmbedderState",
    "get_embedder_handle",
    # Services (business logic)
    "CachePolicy",
    "CacheService",
    "GatewayService",
    # Handlers (HTTP)
    "GatewayHandler",
    # Repositories
    "InMemoryCacheRepository",
    "OllamaEmbeddingProvider",
    "OllamaTextGenerator",
    # Entities (domain models)
    "CacheEntryEntity",
    "CacheMatchEntity",
    "GatewayReply",
    "GenerationResult",
    "GenerationSource",
    # DTOs (API contracts)
    "QueryRequest",
    "QueryResponse",
]
