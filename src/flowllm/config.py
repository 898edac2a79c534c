import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

STRATEGIES = ("vector", "lexical")
EMBEDDING_FALLBACKS = ("skip", "lexical")
EMBEDDING_BACKENDS = ("local", "ollama", "none")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Similarity
    similarity_strategy: str = os.getenv("SIMILARITY_STRATEGY", "vector").lower()
    lexical_threshold: float = float(os.getenv("LEXICAL_THRESHOLD", "0.80"))
    vector_threshold: float = float(os.getenv("VECTOR_THRESHOLD", "0.85"))
    # What to do when the vector strategy has no query vector: "skip" or "lexical"
    embedding_fallback: str = os.getenv("EMBEDDING_FALLBACK", "skip").lower()

    # Embedding
    embedding_backend: str = os.getenv("EMBEDDING_BACKEND", "local").lower()
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "all-MiniLM-L6-v2")  # 384 dims

    # Ollama (embeddings and generation)
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    generation_model: str = os.getenv("GENERATION_MODEL", "llama3.2")
    generation_timeout: float = float(os.getenv("GENERATION_TIMEOUT", "60"))
    system_instruction: str = os.getenv(
        "SYSTEM_INSTRUCTION", "You are a helpful AI assistant. Be concise."
    )

    # Cache hit accounting
    cache_hit_delay_ms: int = int(os.getenv("CACHE_HIT_DELAY_MS", "100"))
    cost_per_query: float = float(os.getenv("COST_PER_QUERY", "0.002"))

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "false").lower() == "true"

    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def uses_embeddings(self) -> bool:
        """Check if the configured strategy needs an embedding model.

        Returns:
            True for the vector strategy, False otherwise
        """
        return self.similarity_strategy == "vector"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.similarity_strategy not in STRATEGIES:
            raise ValueError(
                f"SIMILARITY_STRATEGY must be one of {list(STRATEGIES)}, "
                f"got {self.similarity_strategy!r}"
            )

        if self.embedding_fallback not in EMBEDDING_FALLBACKS:
            raise ValueError(
                f"EMBEDDING_FALLBACK must be one of {list(EMBEDDING_FALLBACKS)}, "
                f"got {self.embedding_fallback!r}"
            )

        if self.embedding_backend not in EMBEDDING_BACKENDS:
            raise ValueError(
                f"EMBEDDING_BACKEND must be one of {list(EMBEDDING_BACKENDS)}, "
                f"got {self.embedding_backend!r}"
            )

        for name, value in (
            ("LEXICAL_THRESHOLD", self.lexical_threshold),
            ("VECTOR_THRESHOLD", self.vector_threshold),
        ):
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

        if self.cache_hit_delay_ms < 0:
            raise ValueError("CACHE_HIT_DELAY_MS must not be negative")

        if self.cost_per_query < 0:
            raise ValueError("COST_PER_QUERY must not be negative")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
