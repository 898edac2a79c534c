"""Shared fixtures."""

import pytest

from flowllm.repositories import InMemoryCacheRepository
from flowllm.services import CachePolicy, CacheService


@pytest.fixture
def repository():
    return InMemoryCacheRepository()


@pytest.fixture
def lexical_cache(repository):
    return CacheService(repository, CachePolicy(strategy="lexical", lexical_threshold=0.80))


@pytest.fixture
def vector_cache(repository):
    return CacheService(repository, CachePolicy(strategy="vector", vector_threshold=0.90))
