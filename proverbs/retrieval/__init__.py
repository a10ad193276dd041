"""Retrieval layer: text search, similarity search and vector updates."""

from .dto import SimilarityHit, VectorUpdate, clamp_limit
from .engine import RetrievalEngine

__all__ = ["SimilarityHit", "VectorUpdate", "clamp_limit", "RetrievalEngine"]
