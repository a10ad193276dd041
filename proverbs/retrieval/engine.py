"""Retrieval engine: text search, similarity search and direct vector writes.

Input is validated completely before the first store call. Bulk vector
updates are all-or-nothing.
"""

from typing import List, Optional, Sequence

from loguru import logger

from proverbs.domain import Item, validate_item_id
from proverbs.shared.config import AppConfig
from proverbs.shared.exceptions import NotFoundError, SharedError, StoreError, ValidationError
from proverbs.shared.vectors import Vector, validate_vector
from proverbs.storage import VectorStore

from .dto import SimilarityHit, VectorUpdate, clamp_limit


class RetrievalEngine:
    """Query and vector-mutation front end over a VectorStore.

    Example:
        >>> engine = RetrievalEngine(store, config)
        >>> engine.search_text("wisdom", limit=5)
        >>> engine.search_similar(query_vector, k=3)
    """

    def __init__(self, store: VectorStore, config: AppConfig) -> None:
        self.store = store
        self.config = config

    def search_text(self, query: Optional[str], limit: Optional[int] = None) -> List[Item]:
        """Case-insensitive substring search.

        An empty or missing query matches nothing (it is not "match all").
        Results are ordered by (chapter, verse) and capped server-side.
        """
        if not query or not query.strip():
            return []
        limit = clamp_limit(limit, self.config.text_search_limit, self.config.max_result_limit)
        return self.store.search_text_like(query, limit)

    def search_similar(self, query_vector: Sequence[float], k: Optional[int] = None) -> List[SimilarityHit]:
        """Nearest embedded verses by cosine distance.

        Raises:
            ValidationError: If the vector length is not the embedding dimension
        """
        vector = validate_vector(query_vector, self.config.embedding_dim)
        k = clamp_limit(k, self.config.similar_top_k, self.config.max_result_limit)
        return [
            SimilarityHit(item=item, score=1.0 - distance)
            for item, distance in self.store.k_nearest(vector, k)
        ]

    def set_vector(self, item_id: int, vector: Sequence[float]) -> int:
        """Replace one verse's vector.

        Returns:
            The item id

        Raises:
            ValidationError: Bad id or vector
            NotFoundError: No verse with this id
        """
        item_id = validate_item_id(item_id)
        values = validate_vector(vector, self.config.embedding_dim)
        if not self.store.set_vector(item_id, values):
            raise NotFoundError(f"Proverb {item_id} not found")
        return item_id

    def set_vectors_bulk(self, updates: Sequence[VectorUpdate]) -> int:
        """Apply many vector updates atomically.

        Every pair is validated before the transaction opens. An unknown id
        discovered inside the transaction raises ValidationError and rolls
        back all earlier writes of the request.

        Returns:
            Number of updated verses
        """
        if updates is None or isinstance(updates, (str, bytes)):
            raise ValidationError("Invalid format. Expected { updates: [{ id, vector }] }")

        prepared: List[tuple] = []
        for position, update in enumerate(updates):
            try:
                item_id, vector = update
            except (TypeError, ValueError):
                raise ValidationError(f"Invalid update at position {position}")
            try:
                prepared.append(
                    (validate_item_id(item_id), validate_vector(vector, self.config.embedding_dim))
                )
            except ValidationError as e:
                raise ValidationError(f"Invalid update for id {item_id}: {e}") from e

        if not prepared:
            return 0

        try:
            with self.store.transaction() as tx:
                for item_id, values in prepared:
                    if not tx.set_vector(item_id, values):
                        raise ValidationError(f"Invalid update for id {item_id}: proverb not found")
        except SharedError:
            raise
        except Exception as e:
            logger.exception("Bulk vector update failed")
            raise StoreError("Bulk vector update failed") from e

        logger.info(f"Bulk vector update applied to {len(prepared)} proverbs")
        return len(prepared)

    def get_vector(self, item_id: int) -> Optional[Vector]:
        item = self.store.get_by_id(validate_item_id(item_id))
        if item is None:
            raise NotFoundError(f"Proverb {item_id} not found")
        return item.vector


__all__ = ["RetrievalEngine"]
