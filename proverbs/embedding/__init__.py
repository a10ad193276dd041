"""Embedding layer: text -> fixed-dimension vector."""

from .base import EmbeddingProvider
from .factory import EmbeddingProviderFactory
from .fake import FakeEmbeddingProvider
from .openai import OpenAIEmbeddingProvider

__all__ = [
    "EmbeddingProvider",
    "EmbeddingProviderFactory",
    "FakeEmbeddingProvider",
    "OpenAIEmbeddingProvider",
]
