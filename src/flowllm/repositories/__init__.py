"""Repository layer for data access.

This layer holds the concrete collaborators behind the protocol interfaces:
the in-memory cache store, the embedding providers and the upstream
text-generation client.

LocalEmbeddingProvider is not re-exported here so that importing the
package does not pull in sentence-transformers; import it from
``flowllm.repositories.local_embedding_provider`` when needed.
"""

from flowllm.protocols import CacheStore, EmbeddingProvider, TextGenerator

from .memory_repository import InMemoryCacheRepository
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .ollama_text_generator import OllamaTextGenerator

__all__ = [
    "CacheStore",
    "EmbeddingProvider",
    "TextGenerator",
    "InMemoryCacheRepository",
    "OllamaEmbeddingProvider",
    "OllamaTextGenerator",
]
