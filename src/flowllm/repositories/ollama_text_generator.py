"""Ollama-based text-generation client.

Calls Ollama's `/api/generate` endpoint with streaming disabled. Upstream
failures never raise out of generate(); they are reported through the
result's source tag:

- HTTP 429 -> GenerationSource.RATE_LIMITED
- any other HTTP or transport error -> GenerationSource.ERROR (text carries the error)
"""

import logging
import time

import httpx

from flowllm.config import settings
from flowllm.entities import GenerationResult, GenerationSource

logger = logging.getLogger(__name__)


class OllamaTextGenerator:
    """Ollama implementation of the TextGenerator protocol.

    Example:
        ```python
        generator = OllamaTextGenerator.create(model_name="llama3.2")
        result = await generator.generate("What is Redis?", "Be concise.")
        print(result.source, result.latency_ms)
        ```
    """

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the text generator.

        Args:
            model_name: Ollama model. Defaults to settings.generation_model.
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds. Defaults to settings.generation_timeout.
            client: Preconfigured async client (mainly for tests).
        """
        self._model_name = model_name or settings.generation_model
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout or settings.generation_timeout
        self._client = client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaTextGenerator":
        """Factory method to create OllamaTextGenerator with defaults."""
        return cls(model_name=model_name, base_url=base_url)

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, prompt: str, system_instruction: str) -> GenerationResult:
        """Generate a reply for a prompt.

        Args:
            prompt: The user query
            system_instruction: Sent as Ollama's `system` field

        Returns:
            GenerationResult tagged ok, rate-limited or error
        """
        url = f"{self._base_url}/api/generate"
        payload = {
            "model": self._model_name,
            "prompt": prompt,
            "system": system_instruction,
            "stream": False,
        }

        start_time = time.perf_counter()
        try:
            response = await self.client.post(url, json=payload)
            if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
                logger.warning("Upstream rate limited (model=%s)", self._model_name)
                return GenerationResult(
                    text=response.text,
                    latency_ms=_elapsed_ms(start_time),
                    source=GenerationSource.RATE_LIMITED,
                )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning("Upstream generation failed: %s", e)
            return GenerationResult(
                text=f"Error: {e}",
                latency_ms=_elapsed_ms(start_time),
                source=GenerationSource.ERROR,
            )
        except ValueError as e:
            # Body was not JSON
            logger.warning("Upstream returned an unreadable body: %s", e)
            return GenerationResult(
                text=f"Error: invalid response from upstream: {e}",
                latency_ms=_elapsed_ms(start_time),
                source=GenerationSource.ERROR,
            )

        if not isinstance(data, dict) or not isinstance(data.get("response"), str):
            logger.warning("Upstream returned an unexpected payload: %r", data)
            return GenerationResult(
                text=f"Error: unexpected response format: {data}",
                latency_ms=_elapsed_ms(start_time),
                source=GenerationSource.ERROR,
            )

        return GenerationResult(
            text=data["response"],
            latency_ms=_elapsed_ms(start_time),
            source=GenerationSource.OK,
        )

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _elapsed_ms(start_time: float) -> float:
    return (time.perf_counter() - start_time) * 1000
