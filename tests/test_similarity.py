"""
Tests for the lexical and vector similarity scorers.
"""

import pytest

from flowllm.entities import CacheEntryEntity
from flowllm.protocols import SimilarityScorer
from flowllm.similarity import (
    LexicalScorer,
    VectorScorer,
    cosine_similarity,
    edit_distance,
    lexical_similarity,
)

WORDS = ["", "a", "kitten", "sitting", "Saturday", "Sunday", "flaw", "lawn", "cache"]


@pytest.mark.parametrize(
    ("s1", "s2", "expected"),
    [
        ("", "", 0),
        ("", "abc", 3),
        ("kitten", "sitting", 3),
        ("Saturday", "Sunday", 3),
        ("flaw", "lawn", 2),
        ("same", "same", 0),
    ],
)
def test_edit_distance_known_values(s1, s2, expected):
    assert edit_distance(s1, s2) == expected


def test_edit_distance_is_symmetric():
    for a in WORDS:
        for b in WORDS:
            assert edit_distance(a, b) == edit_distance(b, a)


def test_edit_distance_triangle_inequality():
    for a in WORDS:
        for b in WORDS:
            for c in WORDS:
                assert edit_distance(a, c) <= edit_distance(a, b) + edit_distance(b, c)


@pytest.mark.parametrize("text", ["Hello", "What is the capital of France?", "", "ÄÖÜ"])
def test_lexical_similarity_is_reflexive(text):
    assert lexical_similarity(text, text) == 1.0


def test_lexical_similarity_ignores_case():
    assert lexical_similarity("HELLO World", "hello world") == 1.0


def test_lexical_similarity_both_empty():
    assert lexical_similarity("", "") == 1.0


def test_lexical_similarity_one_empty():
    assert lexical_similarity("", "abc") == 0.0


def test_lexical_similarity_normalizes_by_longer_length():
    # 30 vs 29 chars after lower-casing, one deletion apart
    score = lexical_similarity("What is the capital of France?", "what is the capital of france")
    assert score == pytest.approx(29 / 30)


def test_lexical_similarity_surface_text_only():
    assert lexical_similarity("who won the game", "tell me the match result") < 0.8


def test_cosine_similarity_of_vector_with_itself():
    for v in ([1.0, 2.0, 3.0], [0.5, -0.25], [1e-3] * 384):
        assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_similarity_orthogonal_and_opposite():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_cosine_similarity_is_scale_invariant():
    assert cosine_similarity([1.0, 2.0], [10.0, 20.0]) == pytest.approx(1.0)


@pytest.mark.parametrize(
    ("a", "b"),
    [
        ([0.0, 0.0], [1.0, 0.0]),
        ([1.0, 0.0], [0.0, 0.0]),
        ([1.0, 0.0], [1.0, 0.0, 0.0]),
        ([], []),
        ([float("nan"), 1.0], [1.0, 1.0]),
    ],
)
def test_cosine_similarity_undefined_inputs(a, b):
    assert cosine_similarity(a, b) is None


def test_lexical_scorer_scores_against_key():
    scorer = LexicalScorer(threshold=0.8)
    entry = CacheEntryEntity(key="Hello", response="Hi!")

    assert scorer.name == "lexical"
    assert scorer.threshold == 0.8
    assert scorer.score("hello", None, entry) == 1.0


def test_vector_scorer_needs_both_vectors():
    scorer = VectorScorer(threshold=0.9)
    with_vector = CacheEntryEntity(key="a", response="x", vector=(1.0, 0.0))
    without_vector = CacheEntryEntity(key="a", response="x")

    assert scorer.score("a", None, with_vector) is None
    assert scorer.score("a", [1.0, 0.0], without_vector) is None
    assert scorer.score("a", [1.0, 0.0], with_vector) == pytest.approx(1.0)


def test_scorers_satisfy_protocol():
    assert isinstance(LexicalScorer(0.8), SimilarityScorer)
    assert isinstance(VectorScorer(0.9), SimilarityScorer)
