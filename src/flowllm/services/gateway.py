"""Gateway orchestration: one call per user query.

Each query moves through

    Received -> Embedding -> Lookup -> CacheHit | CacheMiss -> Settled

Embedding is skipped under the lexical strategy. A hit serves the stored
answer after a short fixed delay and credits a fixed cost; a miss calls
the upstream generator and, if the policy allows, caches the answer.
"""

import asyncio
import logging
import time

from flowllm.config import settings
from flowllm.embeddings import EmbedderHandle
from flowllm.entities import GatewayReply, GenerationSource
from flowllm.models import PerformanceMetrics
from flowllm.protocols import TextGenerator
from flowllm.services.cache_service import CacheService

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "The AI service is receiving too many requests right now. "
    "Please wait a moment and try again."
)


class GatewayService:
    """Serves queries from the semantic cache or the upstream generator.

    The running total of saved cost lives on the instance; the API keeps a
    single instance for the process lifetime.

    Example:
        ```python
        gateway = GatewayService.create(
            cache=CacheService.create(InMemoryCacheRepository.create()),
            generator=OllamaTextGenerator.create(),
            embedder=get_embedder_handle(),
        )
        reply = await gateway.handle("Who won the game?")
        ```
    """

    def __init__(
        self,
        cache: CacheService,
        generator: TextGenerator,
        embedder: EmbedderHandle | None = None,
        system_instruction: str | None = None,
        cost_per_query: float | None = None,
        cache_hit_delay_ms: int | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            cache: Cache service holding the store and policy (required).
            generator: Upstream text-generation client (required).
            embedder: Embedder handle, required for the vector strategy.
            system_instruction: System prompt for upstream calls. Defaults to settings.
            cost_per_query: Cost credited per cache hit. Defaults to settings.
            cache_hit_delay_ms: Delay before serving a hit. Defaults to settings.
        """
        if cache.policy.uses_embeddings and embedder is None:
            raise ValueError("The vector strategy requires an embedder handle")

        self._cache = cache
        self._generator = generator
        self._embedder = embedder
        self._system_instruction = system_instruction or settings.system_instruction
        self._cost_per_query = (
            settings.cost_per_query if cost_per_query is None else cost_per_query
        )
        self._hit_delay_ms = (
            settings.cache_hit_delay_ms if cache_hit_delay_ms is None else cache_hit_delay_ms
        )
        self._total_cost_saved = 0.0
        self._metrics = PerformanceMetrics()

    @classmethod
    def create(
        cls,
        cache: CacheService,
        generator: TextGenerator,
        embedder: EmbedderHandle | None = None,
    ) -> "GatewayService":
        """Factory method to create GatewayService with settings defaults."""
        return cls(cache=cache, generator=generator, embedder=embedder)

    async def handle(self, query: str) -> GatewayReply:
        """Answer one query from the cache or upstream.

        Args:
            query: The user query

        Returns:
            GatewayReply with text, cache flag, latency and cost credited

        Raises:
            ValueError: If the query is empty or whitespace
        """
        if not query or not query.strip():
            raise ValueError("Query must not be empty")

        start_time = time.perf_counter()
        logger.debug("Received query: %r", query[:50])

        vector = None
        if self._cache.policy.uses_embeddings:
            vector = await self._embed(query)

        match = self._cache.lookup(query, vector)
        lookup_time_ms = (time.perf_counter() - start_time) * 1000

        if self._cache.policy.should_serve(match):
            logger.info(
                "Cache hit (%s score=%.3f): %r", match.strategy, match.score, query[:50]
            )
            if self._hit_delay_ms:
                await asyncio.sleep(self._hit_delay_ms / 1000)

            self._total_cost_saved += self._cost_per_query
            self._metrics.record_hit(lookup_time_ms, self._cost_per_query)
            return GatewayReply(
                text=match.response,
                is_cached=True,
                latency_ms=(time.perf_counter() - start_time) * 1000,
                cost_saved=self._cost_per_query,
            )

        logger.info("Cache miss, calling upstream: %r", query[:50])
        self._metrics.record_miss(lookup_time_ms)

        result = await self._generator.generate(query, self._system_instruction)
        self._metrics.record_upstream_call(result.latency_ms, result.source)

        if result.source is GenerationSource.RATE_LIMITED:
            text = RATE_LIMIT_MESSAGE
        else:
            text = result.text

        if self._cache.policy.should_populate(result, vector):
            self._cache.insert(query, result.text, vector)
        else:
            logger.debug("Not caching %s result for %r", result.source.value, query[:50])

        return GatewayReply(
            text=text,
            is_cached=False,
            latency_ms=result.latency_ms,
            cost_saved=0.0,
        )

    async def _embed(self, query: str) -> list[float] | None:
        await self._embedder.ensure_loaded()
        vector = await self._embedder.embed(query)
        if vector is None:
            logger.debug("No vector for query %r", query[:50])
        return vector

    def get_stats(self) -> dict:
        """Get gateway statistics.

        Returns:
            Dictionary with cache, embedder and performance stats
        """
        return {
            "cache": self._cache.get_stats(),
            "embedder": {
                "state": self._embedder.state.value if self._embedder else None,
                "model": self._embedder.model_name if self._embedder else None,
                "dimension": self._embedder.dimension if self._embedder else None,
            },
            "performance": self._metrics.to_dict(),
            "total_cost_saved": self._total_cost_saved,
        }

    @property
    def total_cost_saved(self) -> float:
        """Running total credited by cache hits since process start."""
        return self._total_cost_saved

    @property
    def metrics(self) -> PerformanceMetrics:
        return self._metrics

    @property
    def cache(self) -> CacheService:
        return self._cache

    @property
    def embedder(self) -> EmbedderHandle | None:
        return self._embedder

    @property
    def generator(self) -> TextGenerator:
        return self._generator
