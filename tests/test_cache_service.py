"""
Tests for cache lookup and insertion.
"""

import pytest
from fakes import unit_vector

from flowllm.repositories import InMemoryCacheRepository
from flowllm.services import CachePolicy, CacheService

QUERY_VECTOR = [1.0, 0.0]


def test_empty_store_never_matches(lexical_cache, vector_cache):
    assert lexical_cache.lookup("Hello") is None
    assert vector_cache.lookup("Hello", QUERY_VECTOR) is None


def test_lexical_hit_for_case_and_punctuation_variant(lexical_cache):
    lexical_cache.insert("What is the capital of France?", "Paris.")

    match = lexical_cache.lookup("what is the capital of france")

    assert match is not None
    assert match.response == "Paris."
    assert match.strategy == "lexical"
    assert match.score > 0.80


def test_lexical_miss_for_different_question(lexical_cache):
    lexical_cache.insert("What is the capital of France?", "Paris.")

    assert lexical_cache.lookup("How tall is Mount Everest?") is None


def test_lexical_threshold_is_strict():
    cache = CacheService(
        InMemoryCacheRepository(),
        CachePolicy(strategy="lexical", lexical_threshold=0.8),
    )
    # One substitution in five characters: exactly 0.8
    cache.insert("abcde", "stored")

    assert cache.lookup("abcdx") is None


@pytest.mark.parametrize(("cosine", "is_hit"), [(0.92, True), (0.89, False)])
def test_vector_threshold(vector_cache, cosine, is_hit):
    vector_cache.insert("stored question", "stored answer", unit_vector(cosine))

    match = vector_cache.lookup("new question", QUERY_VECTOR)

    assert (match is not None) is is_hit


def test_vector_lookup_returns_best_not_first_above_threshold():
    cache = CacheService(
        InMemoryCacheRepository(),
        CachePolicy(strategy="vector", vector_threshold=0.85),
    )
    cache.insert("close", "0.86 answer", unit_vector(0.86))
    cache.insert("closer", "0.91 answer", unit_vector(0.91))

    match = cache.lookup("query", QUERY_VECTOR)

    assert match.response == "0.91 answer"
    assert match.score == pytest.approx(0.91)
    assert match.strategy == "vector"


def test_ties_go_to_first_inserted(vector_cache):
    vector_cache.insert("same", "first", unit_vector(0.95))
    vector_cache.insert("same", "second", unit_vector(0.95))

    assert vector_cache.lookup("query", QUERY_VECTOR).response == "first"


def test_vector_strategy_matches_meaning_not_text(vector_cache):
    vector_cache.insert("who won the game", "The home team won.", unit_vector(0.97))

    match = vector_cache.lookup("tell me the match result", QUERY_VECTOR)

    assert match is not None
    assert match.response == "The home team won."


def test_vector_strategy_without_query_vector_misses_under_skip(vector_cache):
    vector_cache.insert("Hello", "Hi!", unit_vector(1.0))

    assert vector_cache.lookup("Hello", None) is None


def test_vector_strategy_with_lexical_fallback_matches_keys():
    cache = CacheService(
        InMemoryCacheRepository(),
        CachePolicy(strategy="vector", vector_threshold=0.9, embedding_fallback="lexical"),
    )
    cache.insert("Hello there", "vector entry", unit_vector(0.5))
    cache.insert("What is the capital of France?", "lexical entry")

    # No query vector: every entry is compared on its key
    assert cache.lookup("hello there", None).response == "vector entry"
    # With a query vector, vectorless entries still fall back to their key
    match = cache.lookup("what is the capital of france", QUERY_VECTOR)
    assert match.response == "lexical entry"
    assert match.strategy == "lexical"


def test_vector_match_wins_over_higher_lexical_score():
    cache = CacheService(
        InMemoryCacheRepository(),
        CachePolicy(
            strategy="vector",
            lexical_threshold=0.8,
            vector_threshold=0.9,
            embedding_fallback="lexical",
        ),
    )
    cache.insert("What is the capital of France?", "lexical entry")
    cache.insert("Which city is France governed from?", "vector entry", unit_vector(0.92))

    # Lexical score is 1.0, cosine only 0.92; the scales are not compared
    match = cache.lookup("What is the capital of France?", QUERY_VECTOR)

    assert match.response == "vector entry"
    assert match.strategy == "vector"


def test_incomparable_entries_are_skipped():
    repository = InMemoryCacheRepository()
    cache = CacheService(repository, CachePolicy(strategy="vector", vector_threshold=0.9))
    cache.insert("zero", "zero answer", [0.0, 0.0])
    cache.insert("good", "good answer", unit_vector(0.99))

    assert cache.lookup("query", QUERY_VECTOR).response == "good answer"
    # A malformed query vector compares with nothing but does not raise
    assert cache.lookup("query", [1.0, 0.0, 0.0]) is None


def test_lookup_is_idempotent(lexical_cache):
    lexical_cache.insert("What is the capital of France?", "Paris.")

    first = lexical_cache.lookup("what is the capital of france")
    second = lexical_cache.lookup("what is the capital of france")

    assert first == second
    assert lexical_cache.count() == 1


def test_insertion_never_lowers_best_score(lexical_cache):
    query = "how do I reset my password"
    lexical_cache.insert("how do I reset my password?", "Use the reset link.")
    before = lexical_cache.lookup(query).score

    for key in ["how do I reset my pass", "reset password", "how do I reset my password"]:
        lexical_cache.insert(key, "another answer")
        after = lexical_cache.lookup(query).score
        assert after >= before
        before = after


def test_insert_never_deduplicates(lexical_cache):
    lexical_cache.insert("Hello", "one")
    lexical_cache.insert("Hello", "two")

    assert lexical_cache.count() == 2
    assert lexical_cache.lookup("Hello").response == "one"


def test_get_stats_reports_policy(vector_cache):
    vector_cache.insert("a", "x", unit_vector(0.5))

    stats = vector_cache.get_stats()

    assert stats["total_entries"] == 1
    assert stats["strategy"] == "vector"
    assert stats["threshold"] == 0.90
    assert stats["embedding_fallback"] == "skip"
