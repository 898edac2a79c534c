"""Similarity scoring between a query and cached entries.

Two strategies are available:

- Lexical: normalized Levenshtein similarity over lower-cased strings.
  Cheap, but only sees surface text.
- Vector: cosine similarity between embeddings. Captures meaning, so
  "who won the game" and "tell me the match result" score high.
"""

from collections.abc import Sequence

import numpy as np

from flowllm.entities import CacheEntryEntity


def edit_distance(s1: str, s2: str) -> int:
    """Minimum number of single-character edits turning s1 into s2.

    Uses one DP row of length len(s2) + 1.
    """
    previous = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1, start=1):
        current = [i]
        for j, c2 in enumerate(s2, start=1):
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + (c1 != c2),  # substitution
                )
            )
        previous = current
    return previous[-1]


def lexical_similarity(s1: str, s2: str) -> float:
    """Case-insensitive normalized edit similarity in [0, 1].

    Two empty strings are identical (1.0).
    """
    s1, s2 = s1.lower(), s2.lower()
    longer, shorter = (s1, s2) if len(s1) >= len(s2) else (s2, s1)
    max_len = len(longer)
    if max_len == 0:
        return 1.0
    return (max_len - edit_distance(longer, shorter)) / max_len


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float | None:
    """Cosine of the angle between two vectors.

    Returns None when the similarity is undefined: different lengths,
    empty vectors, or a zero (or non-finite) magnitude.
    """
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.ndim != 1 or va.shape != vb.shape or va.size == 0:
        return None

    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0 or not np.isfinite(norm):
        return None

    score = float(np.dot(va, vb) / norm)
    # Clamp float noise so cos(v, v) never exceeds 1.0
    return max(-1.0, min(1.0, score))


class LexicalScorer:
    """Scores the query text against the entry key."""

    name = "lexical"

    def __init__(self, threshold: float) -> None:
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def score(
        self,
        query: str,
        query_vector: list[float] | None,
        entry: CacheEntryEntity,
    ) -> float | None:
        return lexical_similarity(query, entry.key)


class VectorScorer:
    """Scores the query embedding against the entry embedding."""

    name = "vector"

    def __init__(self, threshold: float) -> None:
        self._threshold = threshold

    @property
    def threshold(self) -> float:
        return self._threshold

    def score(
        self,
        query: str,
        query_vector: list[float] | None,
        entry: CacheEntryEntity,
    ) -> float | None:
        if query_vector is None or entry.vector is None:
            return None
        return cosine_similarity(query_vector, entry.vector)
