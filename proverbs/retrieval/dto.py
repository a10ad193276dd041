"""Retrieval layer Data Transfer Objects."""

from dataclasses import dataclass
from typing import Any, List, Tuple

from proverbs.domain import Item


@dataclass
class SimilarityHit:
    """Result from vector similarity search.

    Attributes:
        item: Matching verse
        score: 1 - cosine distance (higher is more similar)
    """

    item: Item
    score: float


# (id, vector) as supplied by the caller, not yet validated
VectorUpdate = Tuple[Any, Any]


def clamp_limit(requested: Any, default: int, maximum: int) -> int:
    """Apply the default and the server-side cap to a caller's limit."""
    if requested is None:
        return min(default, maximum)
    if isinstance(requested, bool) or not isinstance(requested, int):
        return min(default, maximum)
    return max(1, min(requested, maximum))


__all__ = ["SimilarityHit", "VectorUpdate", "clamp_limit"]
