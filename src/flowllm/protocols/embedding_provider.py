"""Embedding provider protocol.

Defines the interface for any embedding backend that can convert text to
a fixed-length vector. The backend is chosen at startup from configuration.

Implementations:
- sentence-transformers (local, default)
- Ollama embeddings (HTTP)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services."""

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    @property
    def dimension(self) -> int | None:
        """Return the vector dimension, or None until the model is loaded."""
        ...

    async def load(self) -> None:
        """Load the model or verify the backend is reachable.

        Called at most once per process by EmbedderHandle.

        Raises:
            Exception: Any error means the backend is unusable
        """
        ...

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats
        """
        ...
