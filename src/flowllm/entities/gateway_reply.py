"""Gateway reply domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayReply:
    """What the gateway returns for one query.

    Attributes:
        text: Text shown to the user (answer, advisory or error text)
        is_cached: True when served from the cache
        latency_ms: Time taken to settle the query
        cost_saved: Cost credited for this query (0 on a miss)
    """

    text: str
    is_cached: bool
    latency_ms: float
    cost_saved: float = 0.0
