"""Cache match domain entity."""

from dataclasses import dataclass

from .cache_entry import CacheEntryEntity


@dataclass(frozen=True)
class CacheMatchEntity:
    """Domain entity for a lookup result.

    Attributes:
        entry: The best matching cache entry
        score: Similarity score (higher = more similar, 1.0 = identical)
        strategy: Name of the scorer that produced the score ("lexical" or "vector")
    """

    entry: CacheEntryEntity
    score: float
    strategy: str

    @property
    def response(self) -> str:
        return self.entry.response
