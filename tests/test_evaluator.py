"""
Tests for threshold evaluation.
"""

import pytest
from fakes import FakeEmbeddingProvider, unit_vector

from flowllm.embeddings import EmbedderHandle
from flowllm.evaluator import CacheEvaluator, EvalResult, QueryPair

LEXICAL_PAIRS = [
    QueryPair("what is the capital of france", "What is the capital of France?", True),
    QueryPair("How do I reset my password", "How do I reset my password?", True),
    QueryPair("Who won the game?", "Tell me the match result", False),
]


@pytest.mark.asyncio
async def test_lexical_evaluation_counts_outcomes():
    evaluator = CacheEvaluator(strategy="lexical")

    result = await evaluator.evaluate_threshold(0.8, LEXICAL_PAIRS)

    assert result.total_queries == 3
    assert result.true_positives == 2
    assert result.true_negatives == 1
    assert result.precision == 1.0
    assert result.recall == 1.0
    assert result.f1_score == 1.0


@pytest.mark.asyncio
async def test_sweep_and_optimal_threshold():
    evaluator = CacheEvaluator(strategy="lexical")

    results = await evaluator.sweep_thresholds(LEXICAL_PAIRS, 0.5, 0.99, steps=3)
    threshold, best = evaluator.find_optimal_threshold("f1_score")

    assert len(results) == 3
    assert best.f1_score == max(r.f1_score for r in results)
    assert threshold == best.threshold


@pytest.mark.asyncio
async def test_vector_evaluation_uses_embeddings():
    provider = FakeEmbeddingProvider(
        vectors={
            "cached": [1.0, 0.0],
            "similar": unit_vector(0.95),
            "unrelated": unit_vector(0.30),
        }
    )
    evaluator = CacheEvaluator(strategy="vector", embedder=EmbedderHandle(provider))
    pairs = [
        QueryPair("similar", "cached", True),
        QueryPair("unrelated", "cached", False),
    ]

    result = await evaluator.evaluate_threshold(0.9, pairs)

    assert result.true_positives == 1
    assert result.true_negatives == 1
    assert provider.load_calls == 1


def test_find_optimal_threshold_requires_results():
    with pytest.raises(ValueError):
        CacheEvaluator().find_optimal_threshold()


def test_vector_evaluation_requires_embedder():
    with pytest.raises(ValueError):
        CacheEvaluator(strategy="vector")


def test_empty_result_metrics():
    result = EvalResult(threshold=0.8)

    assert result.hit_rate == 0.0
    assert result.f1_score == 0.0
    assert result.to_dict()["threshold"] == 0.8
