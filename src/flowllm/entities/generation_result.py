"""Upstream text-generation result entity."""

from dataclasses import dataclass
from enum import Enum


class GenerationSource(str, Enum):
    """Outcome tag reported by the text-generation client."""

    OK = "ok"
    RATE_LIMITED = "rate-limited"
    ERROR = "error"


@dataclass(frozen=True)
class GenerationResult:
    """Result of one upstream generation call.

    Attributes:
        text: Generated text, or the raw error text when source is ERROR
        latency_ms: Wall-clock duration of the upstream call
        source: Outcome of the call
    """

    text: str
    latency_ms: float
    source: GenerationSource = GenerationSource.OK

    @property
    def is_answer(self) -> bool:
        return self.source is GenerationSource.OK
