"""Cache storage protocol.

Defines the interface for the append-only store of query/response pairs.
Lookup is a linear scan over a snapshot, so the store only needs to hand
out a consistent view of its entries. A vector database with an
approximate nearest-neighbour index could replace the scan without
changing this contract.
"""

from typing import Protocol, runtime_checkable

from flowllm.entities import CacheEntryEntity


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache storage backends.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed.
    """

    def insert(self, entry: CacheEntryEntity) -> None:
        """Append an entry. Never overwrites or deduplicates.

        Args:
            entry: The entry to append

        Raises:
            ValueError: If the entry's vector dimension differs from the
                dimension already fixed by earlier entries
        """
        ...

    def snapshot(self) -> tuple[CacheEntryEntity, ...]:
        """Return all entries in insertion order.

        The returned tuple is a consistent view: concurrent inserts are
        either fully visible or not visible at all.
        """
        ...

    def count_all(self) -> int:
        """Count total entries in the cache."""
        ...

    @property
    def dimension(self) -> int | None:
        """Vector dimension fixed by the first vector-bearing entry, if any."""
        ...

    def get_stats(self) -> dict:
        """Get repository statistics.

        Returns:
            Dictionary with stats (implementation-specific)
        """
        ...
