"""Local sentence-transformers embedding provider.

This is the default embedding provider, using sentence-transformers
models running locally. No API calls required.
"""

import asyncio
import logging
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from flowllm.config import settings

logger = logging.getLogger(__name__)


class LocalEmbeddingProvider:
    """Local sentence-transformers implementation of EmbeddingProvider.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    Default model: all-MiniLM-L6-v2 (384 dimensions). Model construction
    and inference are blocking, so both run in a worker thread.
    """

    def __init__(self, model_name: str | None = None) -> None:
        """Initialize the local embedding provider.

        Args:
            model_name: Name of the sentence-transformers model.
                       Defaults to settings.embedding_model.
        """
        self._model_name = model_name or settings.embedding_model
        self._model: SentenceTransformer | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, model_name: str | None = None) -> "LocalEmbeddingProvider":
        """Factory method to create LocalEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.

        Returns:
            Configured LocalEmbeddingProvider
        """
        return cls(model_name=model_name)

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    @property
    def dimension(self) -> int | None:
        """Get the embedding vector dimension (None until loaded)."""
        return self._dimension

    def _load_model(self) -> SentenceTransformer:
        logger.info("Loading embedding model: %s", self._model_name)
        start_time = time.time()
        model = SentenceTransformer(self._model_name)
        logger.info("Model loaded in %.2fs", time.time() - start_time)
        return model

    async def load(self) -> None:
        """Load the sentence-transformers model in a worker thread."""
        model = await asyncio.to_thread(self._load_model)
        self._dimension = model.get_sentence_embedding_dimension()
        self._model = model

    def _encode(self, text: str) -> list[float]:
        if self._model is None:
            raise RuntimeError(f"Embedding model {self._model_name} is not loaded")
        embedding = self._model.encode(
            text,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        # Handle both single string (returns array) and list input
        if isinstance(embedding, np.ndarray):
            if embedding.ndim == 1:
                return embedding.tolist()
            return embedding[0].tolist()
        return list(embedding)

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            RuntimeError: If load() has not completed
        """
        return await asyncio.to_thread(self._encode, text)
