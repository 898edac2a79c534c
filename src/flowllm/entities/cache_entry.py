"""Cache entry domain entity."""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a cached query-response pair.

    Entries are immutable once written. Two entries may share the same key;
    both are kept and both are scanned on lookup.

    Attributes:
        key: The original query text
        response: The cached upstream response
        vector: The embedding of the query, or None for lexically stored entries
        created_at: When this entry was created (Unix timestamp)
    """

    key: str
    response: str
    vector: tuple[float, ...] | None = None
    created_at: float = field(default_factory=time.time)
