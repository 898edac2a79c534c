"""Cache policy: which scorer applies, and when to serve or populate."""

from dataclasses import dataclass

from flowllm.config import Settings, settings
from flowllm.entities import CacheMatchEntity, GenerationResult
from flowllm.similarity import LexicalScorer, VectorScorer


@dataclass(frozen=True)
class CachePolicy:
    """One configurable policy for every deployment.

    Attributes:
        strategy: "vector" or "lexical"; only one is active per deployment
        lexical_threshold: Lexical matches must score strictly above this
        vector_threshold: Vector matches must score strictly above this
        embedding_fallback: Vector strategy only. "skip" treats a query
            without an embedding as an unconditional miss and does not cache
            its answer; "lexical" matches it against stored keys and caches
            the answer without a vector.
    """

    strategy: str = "vector"
    lexical_threshold: float = 0.80
    vector_threshold: float = 0.85
    embedding_fallback: str = "skip"

    def __post_init__(self) -> None:
        if self.strategy not in ("vector", "lexical"):
            raise ValueError(f"Unknown similarity strategy: {self.strategy!r}")
        if self.embedding_fallback not in ("skip", "lexical"):
            raise ValueError(f"Unknown embedding fallback: {self.embedding_fallback!r}")
        for name, value in (
            ("lexical_threshold", self.lexical_threshold),
            ("vector_threshold", self.vector_threshold),
        ):
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "CachePolicy":
        """Build the policy from application settings."""
        config = config or settings
        return cls(
            strategy=config.similarity_strategy,
            lexical_threshold=config.lexical_threshold,
            vector_threshold=config.vector_threshold,
            embedding_fallback=config.embedding_fallback,
        )

    @property
    def uses_embeddings(self) -> bool:
        return self.strategy == "vector"

    @property
    def allows_lexical(self) -> bool:
        """Whether entries may be scored on their key text."""
        return self.strategy == "lexical" or self.embedding_fallback == "lexical"

    @property
    def threshold(self) -> float:
        """Threshold of the active strategy."""
        return self.vector_threshold if self.uses_embeddings else self.lexical_threshold

    def lexical_scorer(self) -> LexicalScorer:
        return LexicalScorer(self.lexical_threshold)

    def vector_scorer(self) -> VectorScorer:
        return VectorScorer(self.vector_threshold)

    def should_serve(self, match: CacheMatchEntity | None) -> bool:
        """A lookup result is served only if it cleared its threshold."""
        return match is not None

    def should_populate(self, result: GenerationResult, vector: list[float] | None) -> bool:
        """Decide whether an upstream result goes into the cache.

        Rate-limited and error results are never cached. Under the vector
        strategy an answer without a vector is cached only with the lexical
        fallback.
        """
        if not result.is_answer:
            return False
        if not self.uses_embeddings or vector is not None:
            return True
        return self.embedding_fallback == "lexical"
