#!/usr/bin/env python3
"""
Demo script for the FlowLLM gateway.

Sends a few queries through the gateway built from settings (Ollama for
generation, the configured embedding backend for vectors), then sweeps the
lexical threshold over a small labeled set.
"""

import asyncio

from flowllm.api.dependencies import build_gateway
from flowllm.config import configure_logging
from flowllm.evaluator import CacheEvaluator, QueryPair


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_gateway() -> None:
    """Ask near-duplicate questions and show which ones hit the cache."""
    print_section("Gateway")

    gateway = build_gateway()
    queries = [
        "What is the capital of France?",
        "what is the capital of france",
        "Tell me France's capital city",
        "Who won the game last night?",
        "Tell me the match result from last night",
    ]

    for query in queries:
        reply = await gateway.handle(query)
        label = "CACHE HIT" if reply.is_cached else "Live API"
        print(f"\n  Query: {query}")
        print(f"  {label} ({reply.latency_ms:.0f}ms)")
        print(f"  Response: {reply.text[:100]}")

    print(f"\n  Total saved: ${gateway.total_cost_saved:.4f}")


async def demo_threshold_tuning() -> None:
    """Sweep the lexical threshold over labeled pairs."""
    print_section("Lexical Threshold Tuning")

    test_queries = [
        # Should match (same question)
        QueryPair("what is the capital of france", "What is the capital of France?", True),
        QueryPair("How do I reset my password", "How do I reset my password?", True),
        QueryPair("Explain semantic caching", "Explain semantic caches", True),
        # Should not match
        QueryPair("What is the capital of Spain?", "What is the capital of France?", False),
        QueryPair("Who won the game?", "Tell me the match result", False),
    ]

    evaluator = CacheEvaluator(strategy="lexical")
    results = await evaluator.sweep_thresholds(test_queries)

    print(f"{'Threshold':<12} {'Hit Rate':<12} {'Precision':<12} {'Recall':<12} {'F1':<12}")
    print("-" * 60)
    for result in results:
        print(
            f"{result.threshold:<12.2f} "
            f"{result.hit_rate:<12.2%} "
            f"{result.precision:<12.2%} "
            f"{result.recall:<12.2%} "
            f"{result.f1_score:<12.2%}"
        )

    threshold, best = evaluator.find_optimal_threshold("f1_score")
    print(f"\nBest F1: {threshold:.2f} ({best.f1_score:.2%})")


async def main() -> None:
    """Run all demos."""
    configure_logging()
    await demo_threshold_tuning()

    try:
        await demo_gateway()
    except Exception as e:
        print(f"\nError: {e}")
        print("\nMake sure Ollama is running:")
        print("  ollama serve")


if __name__ == "__main__":
    asyncio.run(main())
