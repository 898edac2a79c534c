"""
Tests for the embedder handle lifecycle.
"""

import asyncio

import pytest
from fakes import FakeEmbeddingProvider

from flowllm.config import Settings
from flowllm.embeddings import (
    EmbedderHandle,
    EmbedderState,
    create_embedding_provider,
    get_embedder_handle,
    reset_embedder_handle,
)
from flowllm.repositories import OllamaEmbeddingProvider


@pytest.mark.asyncio
async def test_starts_uninitialized_and_does_not_embed():
    handle = EmbedderHandle(FakeEmbeddingProvider())

    assert handle.state is EmbedderState.UNINITIALIZED
    assert await handle.embed("Hello") is None


@pytest.mark.asyncio
async def test_ensure_loaded_reaches_ready():
    provider = FakeEmbeddingProvider(vectors={"Hello": [1.0, 0.0]})
    handle = EmbedderHandle(provider)

    assert await handle.ensure_loaded() is EmbedderState.READY
    assert handle.is_ready
    assert handle.dimension == 2
    assert await handle.embed("Hello") == [1.0, 0.0]


@pytest.mark.asyncio
async def test_concurrent_first_calls_load_once():
    provider = FakeEmbeddingProvider(load_delay=0.05)
    handle = EmbedderHandle(provider)

    states = await asyncio.gather(*(handle.ensure_loaded() for _ in range(20)))

    assert provider.load_calls == 1
    assert all(state is EmbedderState.READY for state in states)


@pytest.mark.asyncio
async def test_state_is_loading_while_load_in_flight():
    provider = FakeEmbeddingProvider(load_delay=0.05)
    handle = EmbedderHandle(provider)

    task = asyncio.ensure_future(handle.ensure_loaded())
    await asyncio.sleep(0)
    assert handle.state is EmbedderState.LOADING
    assert await handle.embed("Hello") is None

    await task
    assert handle.state is EmbedderState.READY


@pytest.mark.asyncio
async def test_later_calls_reuse_loaded_model():
    provider = FakeEmbeddingProvider()
    handle = EmbedderHandle(provider)

    await handle.ensure_loaded()
    await handle.ensure_loaded()
    await handle.ensure_loaded()

    assert provider.load_calls == 1


@pytest.mark.asyncio
async def test_failed_load_is_not_retried():
    provider = FakeEmbeddingProvider(fail_load=True)
    handle = EmbedderHandle(provider)

    states = await asyncio.gather(*(handle.ensure_loaded() for _ in range(5)))
    assert all(state is EmbedderState.FAILED for state in states)
    assert "model download failed" in handle.error

    assert await handle.ensure_loaded() is EmbedderState.FAILED
    assert await handle.embed("Hello") is None
    assert provider.load_calls == 1
    assert provider.encode_calls == 0


@pytest.mark.asyncio
async def test_no_provider_degrades_to_failed():
    handle = EmbedderHandle(None)

    assert await handle.ensure_loaded() is EmbedderState.FAILED
    assert handle.model_name is None
    assert await handle.embed("Hello") is None


@pytest.mark.asyncio
async def test_encode_error_returns_none():
    provider = FakeEmbeddingProvider(fail_on={"boom"})
    handle = EmbedderHandle(provider)
    await handle.ensure_loaded()

    assert await handle.embed("boom") is None
    assert await handle.embed("fine") == [0.0, 1.0]
    assert handle.state is EmbedderState.READY


@pytest.mark.asyncio
async def test_wrong_dimension_vector_is_ignored():
    provider = FakeEmbeddingProvider(vectors={"odd": [1.0, 0.0, 0.0]})
    handle = EmbedderHandle(provider)
    await handle.ensure_loaded()

    assert await handle.embed("odd") is None


def test_create_embedding_provider_by_backend():
    assert create_embedding_provider(Settings(embedding_backend="none")) is None

    provider = create_embedding_provider(
        Settings(embedding_backend="ollama", embedding_model="all-minilm")
    )
    assert isinstance(provider, OllamaEmbeddingProvider)
    assert provider.dimension == 384


def test_get_embedder_handle_is_process_wide():
    reset_embedder_handle()
    try:
        assert get_embedder_handle() is get_embedder_handle()
    finally:
        reset_embedder_handle()


@pytest.mark.asyncio
async def test_close_releases_provider_and_tolerates_none():
    provider = FakeEmbeddingProvider()
    await EmbedderHandle(provider).close()
    assert provider.closed is True

    await EmbedderHandle(None).close()
