"""Ollama-based embedding provider.

Uses Ollama's local API to generate embeddings. Ollama serves models locally
without requiring HuggingFace authentication or downloading models manually.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull all-minilm`
    - Ollama running: `ollama serve` (usually runs automatically)

Models available:
- all-minilm (22M params, 384 dims)
- nomic-embed-text (137M params, 768 dims)
- embeddinggemma (308M params, 768 dims)
- mxbai-embed-large (335M params, 1024 dims)
"""

import logging

import httpx

from flowllm.config import settings

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider:
    """Ollama-based implementation of EmbeddingProvider protocol.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    The API endpoint is http://localhost:11434/api/embed by default.

    Example:
        ```python
        provider = OllamaEmbeddingProvider.create(model_name="all-minilm")
        await provider.load()
        embedding = await provider.encode("Hello, world!")
        print(len(embedding))  # 384
        ```
    """

    # Known model dimensions (for common models)
    MODEL_DIMENSIONS = {
        "all-minilm": 384,
        "all-minilm:l6-v2": 384,
        "nomic-embed-text": 768,
        "embeddinggemma": 768,
        "embeddinggemma:300m": 768,
        "mxbai-embed-large": 1024,
    }

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model.
                       Defaults to settings.embedding_model.
            base_url: Ollama API base URL.
                     Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds.
            client: Preconfigured async client (mainly for tests).
        """
        self._model_name = model_name or settings.embedding_model
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout
        self._dimension: int | None = self.MODEL_DIMENSIONS.get(self._model_name)
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaEmbeddingProvider":
        """Factory method to create OllamaEmbeddingProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            base_url: Ollama API URL. If None, uses settings.

        Returns:
            Configured OllamaEmbeddingProvider
        """
        return cls(model_name=model_name, base_url=base_url)

    @property
    def dimension(self) -> int | None:
        """Get the embedding vector dimension.

        Known models report their dimension up front. Unknown models report
        None until load() has measured it.
        """
        return self._dimension

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    async def load(self) -> None:
        """Verify Ollama serves the model by embedding a probe text.

        Raises:
            RuntimeError: If Ollama is unreachable or the model is missing
        """
        probe = await self.encode("test")
        self._dimension = len(probe)
        logger.info("Ollama embedding model %s ready (%d dims)", self._model_name, len(probe))

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            RuntimeError: If Ollama API request fails
            ValueError: If response format is invalid
        """
        url = f"{self._base_url}/api/embed"
        payload = {
            "model": self._model_name,
            "input": text,
        }

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if "connection refused" in str(e).lower():
                error_msg += "\n  -> Is Ollama running? Try: ollama serve"
            elif "not found" in str(e).lower():
                error_msg += f"\n  -> Model not found. Try: ollama pull {self._model_name}"
            raise RuntimeError(error_msg) from e

        # Ollama returns {"embeddings": [[...]]} for single input
        if data.get("embeddings"):
            return data["embeddings"][0]

        # Fallback: try "embedding" (singular)
        if "embedding" in data:
            return data["embedding"]

        raise ValueError(f"Unexpected response format: {data}")

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
