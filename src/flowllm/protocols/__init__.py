"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (local model -> Ollama, in-memory -> vector DB)
- Unit testing with fake implementations
- Keeping the cache core free of any model-loading mechanism
"""

from .cache_store import CacheStore
from .embedding_provider import EmbeddingProvider
from .similarity_scorer import SimilarityScorer
from .text_generator import TextGenerator

__all__ = [
    "CacheStore",
    "EmbeddingProvider",
    "SimilarityScorer",
    "TextGenerator",
]
