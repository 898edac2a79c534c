"""Cache service for lookup and insertion.

Lookup is a linear scan over a snapshot of the store: O(n * d) for n
entries of dimension d. An approximate nearest-neighbour index is the
first thing to add if the store grows large; it would sit behind the
CacheStore protocol without changing lookup's contract.
"""

import logging

from flowllm.entities import CacheEntryEntity, CacheMatchEntity
from flowllm.protocols import CacheStore, SimilarityScorer
from flowllm.services.cache_policy import CachePolicy

logger = logging.getLogger(__name__)


class CacheService:
    """Semantic lookup and insertion over a CacheStore.

    Example:
        ```python
        cache = CacheService.create(
            repository=InMemoryCacheRepository.create(),
            policy=CachePolicy(strategy="lexical", lexical_threshold=0.8),
        )
        cache.insert("What is the capital of France?", "Paris.")
        match = cache.lookup("what is the capital of france")
        ```
    """

    def __init__(self, repository: CacheStore, policy: CachePolicy | None = None) -> None:
        """Initialize the cache service.

        Args:
            repository: Cache storage backend (required).
            policy: Scoring and population policy. Defaults to settings.
        """
        self._repository = repository
        self._policy = policy or CachePolicy.from_settings()
        self._lexical = self._policy.lexical_scorer()
        self._vector = self._policy.vector_scorer()

    @classmethod
    def create(
        cls,
        repository: CacheStore,
        policy: CachePolicy | None = None,
    ) -> "CacheService":
        """Factory method to create CacheService with the configured policy."""
        return cls(repository=repository, policy=policy)

    def lookup(
        self,
        query: str,
        query_vector: list[float] | None = None,
    ) -> CacheMatchEntity | None:
        """Find the best cached entry for a query.

        Each entry is scored by the vector scorer when both the query and
        the entry carry vectors, otherwise by the lexical scorer if the
        policy allows it, otherwise skipped. Entries that are not comparable
        are skipped too. Only scores strictly above the scorer's threshold
        count; among those the running best is replaced only on strict
        improvement, so the earliest entry wins ties.

        Cosine and edit-distance scores are never compared with each other.
        The best vector match is kept apart from the best lexical match, and
        a lexical match is returned only when no vector match qualified.

        Args:
            query: The query text
            query_vector: The query embedding, if one was obtained

        Returns:
            The best match, or None if nothing cleared its threshold
        """
        best: dict[str, CacheMatchEntity] = {}

        scorer: SimilarityScorer
        for entry in self._repository.snapshot():
            if query_vector is not None and entry.vector is not None:
                scorer = self._vector
            elif self._policy.allows_lexical:
                scorer = self._lexical
            else:
                continue

            score = scorer.score(query, query_vector, entry)
            if score is None:
                logger.debug("Skipping incomparable entry %r", entry.key[:50])
                continue

            if score <= scorer.threshold:
                continue

            current = best.get(scorer.name)
            if current is None or score > current.score:
                best[scorer.name] = CacheMatchEntity(entry=entry, score=score, strategy=scorer.name)

        return best.get(self._vector.name) or best.get(self._lexical.name)

    def insert(
        self,
        query: str,
        response: str,
        vector: list[float] | None = None,
    ) -> CacheEntryEntity:
        """Append a query-response pair to the cache.

        Args:
            query: The original query text (the entry key)
            response: The answer to serve on future hits
            vector: The query embedding, or None for a lexical entry

        Returns:
            The stored entry
        """
        entry = CacheEntryEntity(
            key=query,
            response=response,
            vector=tuple(vector) if vector is not None else None,
        )
        self._repository.insert(entry)
        return entry

    def count(self) -> int:
        """Number of stored entries."""
        return self._repository.count_all()

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Repository stats plus the active strategy and thresholds
        """
        stats = self._repository.get_stats()
        stats["strategy"] = self._policy.strategy
        stats["threshold"] = self._policy.threshold
        stats["lexical_threshold"] = self._policy.lexical_threshold
        stats["vector_threshold"] = self._policy.vector_threshold
        stats["embedding_fallback"] = self._policy.embedding_fallback
        return stats

    @property
    def policy(self) -> CachePolicy:
        return self._policy

    @property
    def repository(self) -> CacheStore:
        """Get the underlying repository (for testing)."""
        return self._repository
