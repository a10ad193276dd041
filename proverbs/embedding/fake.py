"""Deterministic offline embedding provider.

Useful for local development without an API key: the same text always maps
to the same unit vector, so re-ingestion is reproducible. The vectors carry
no meaning; similarity between different texts is arbitrary.
"""

import hashlib
import math
import random

from proverbs.shared.config import EMBEDDING_DIM
from proverbs.shared.exceptions import ProviderError
from proverbs.shared.vectors import Vector

from .base import EmbeddingProvider


class FakeEmbeddingProvider(EmbeddingProvider):
    """Hash-seeded unit vectors."""

    def __init__(self, dimension: int = EMBEDDING_DIM) -> None:
        self.dimension = dimension

    @property
    def model_name(self) -> str:
        return "fake"

    def embed(self, text: str) -> Vector:
        if not text or not text.strip():
            raise ProviderError("Cannot embed empty text")

        seed = int.from_bytes(hashlib.sha256(text.encode("utf-8")).digest()[:8], "big")
        rng = random.Random(seed)
        values = [rng.gauss(0.0, 1.0) for _ in range(self.dimension)]
        norm = math.sqrt(sum(v * v for v in values)) or 1.0
        return [v / norm for v in values]


__all__ = ["FakeEmbeddingProvider"]
