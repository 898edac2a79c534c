"""In-memory implementation of CacheStore.

Entries live for the lifetime of the process. There is no eviction and no
TTL: the store only grows.
"""

import logging
import threading

from flowllm.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


class InMemoryCacheRepository:
    """Append-only list of frozen entries guarded by a lock.

    This class satisfies the CacheStore protocol through structural
    typing - no explicit inheritance needed.

    Inserts append under the lock, so none are lost under concurrency.
    Readers take a tuple snapshot under the same lock and scan it without
    holding it; entries are immutable, so a snapshot never shows a
    partially written entry.
    """

    def __init__(self) -> None:
        """Initialize an empty repository."""
        self._entries: list[CacheEntryEntity] = []
        self._dimension: int | None = None
        self._lock = threading.Lock()

    @classmethod
    def create(cls) -> "InMemoryCacheRepository":
        """Factory method to create an empty InMemoryCacheRepository."""
        return cls()

    @property
    def dimension(self) -> int | None:
        """Vector dimension fixed by the first vector-bearing entry."""
        return self._dimension

    def insert(self, entry: CacheEntryEntity) -> None:
        """Append an entry.

        Args:
            entry: The entry to append

        Raises:
            ValueError: If the entry's vector length differs from the store's dimension
        """
        with self._lock:
            if entry.vector is not None:
                if self._dimension is None:
                    self._dimension = len(entry.vector)
                elif len(entry.vector) != self._dimension:
                    raise ValueError(
                        f"Vector dimension mismatch: store holds {self._dimension}-d "
                        f"vectors, got {len(entry.vector)}"
                    )
            self._entries.append(entry)
            size = len(self._entries)

        logger.debug("Stored cache entry %r (size=%d)", entry.key[:50], size)

    def snapshot(self) -> tuple[CacheEntryEntity, ...]:
        """Return all entries in insertion order."""
        with self._lock:
            return tuple(self._entries)

    def count_all(self) -> int:
        """Count total entries in the cache."""
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with total, vector-bearing and lexical-only entry counts
        """
        entries = self.snapshot()
        with_vectors = sum(1 for entry in entries if entry.vector is not None)
        return {
            "backend": "memory",
            "total_entries": len(entries),
            "vector_entries": with_vectors,
            "lexical_entries": len(entries) - with_vectors,
            "dimension": self._dimension,
        }
