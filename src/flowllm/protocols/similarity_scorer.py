"""Similarity scorer protocol."""

from typing import Protocol, runtime_checkable

from flowllm.entities import CacheEntryEntity


@runtime_checkable
class SimilarityScorer(Protocol):
    """Scores a query against a stored entry.

    Scores are bounded, higher means more similar. A score of None means
    the pair is not comparable (e.g. missing or malformed vectors) and the
    entry must be skipped.
    """

    @property
    def name(self) -> str:
        ...

    @property
    def threshold(self) -> float:
        """A match must score strictly above this value."""
        ...

    def score(
        self,
        query: str,
        query_vector: list[float] | None,
        entry: CacheEntryEntity,
    ) -> float | None:
        ...
