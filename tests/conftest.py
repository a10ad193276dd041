import sys
from pathlib import Path

# Make the proverbs package importable without installing it
root_dir = Path(__file__).parent.parent
sys.path.insert(0, str(root_dir))

import pytest

from proverbs.embedding import EmbeddingProvider
from proverbs.shared.config import AppConfig
from proverbs.shared.exceptions import ProviderError
from proverbs.storage import InMemoryVectorStore

TEST_DIM = 8


def unit(index: int, dim: int = TEST_DIM):
    """Basis vector e_index."""
    values = [0.0] * dim
    values[index] = 1.0
    return values


class ScriptedEmbedder(EmbeddingProvider):
    """Embedding provider driven by a script.

    Texts listed in `failures` raise ProviderError; texts in `vectors` get
    that vector; everything else gets a constant vector.
    """

    def __init__(self, dimension=TEST_DIM, vectors=None, failures=(), error=None):
        self.dimension = dimension
        self.vectors = dict(vectors or {})
        self.failures = set(failures)
        self.error = error
        self.calls = []

    @property
    def model_name(self) -> str:
        return "scripted"

    def embed(self, text):
        self.calls.append(text)
        if text in self.failures:
            raise self.error or ProviderError(f"provider failed for {text!r}")
        return list(self.vectors.get(text, [0.5] * self.dimension))


@pytest.fixture
def config():
    """Small-dimension config for fast tests"""
    return AppConfig(
        embedding_provider="fake",
        embedding_dim=TEST_DIM,
        jwt_secret_key="test-secret-key-for-testing-only",
        ingest_max_workers=4,
        text_search_limit=20,
        max_result_limit=50,
        similar_top_k=10,
    )


@pytest.fixture
def store():
    return InMemoryVectorStore()


@pytest.fixture
def embedder():
    return ScriptedEmbedder()


@pytest.fixture
def make_embedder():
    """Factory for ScriptedEmbedder with custom behaviour"""
    return ScriptedEmbedder


@pytest.fixture
def vec():
    """Basis vector helper"""
    return unit
