"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> GatewayService -> CacheService -> Repository
    (HTTP)  -> (Orchestration) -> (Lookup)     -> (Data Access)
"""

from .cache_policy import CachePolicy
from .cache_service import CacheService
from .gateway import RATE_LIMIT_MESSAGE, GatewayService

__all__ = [
    "CachePolicy",
    "CacheService",
    "GatewayService",
    "RATE_LIMIT_MESSAGE",
]
