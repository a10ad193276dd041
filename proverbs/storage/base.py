"""VectorStore abstract interface.

Implement this interface to back the ingestion pipeline and retrieval engine
with another storage engine:

    from proverbs.storage import PgVectorStore

    store = PgVectorStore(pool, table_name="proverbs")
    engine = RetrievalEngine(store, config)

Implementations own the vector encoding and keep their ANN index consistent
with vector writes. Callers only ever pass lists of floats that were already
length-checked.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List, Optional, Sequence, Tuple

from proverbs.domain import Item, StoreStats


class StoreTransaction(ABC):
    """Handle for writes that share one store-level transaction."""

    @abstractmethod
    def set_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        """Set an item's vector inside the transaction.

        Returns:
            False if no item has this id
        """
        pass


class VectorStore(ABC):
    """Durable item store with an ANN index over fixed-dimension vectors.

    Every method raises StoreError on connection or engine failure.
    """

    @abstractmethod
    def upsert_by_key(
        self,
        group_key: int,
        ordinal: int,
        text: str,
        vector: Optional[Sequence[float]] = None,
    ) -> Item:
        """Insert, or overwrite the item occupying (group_key, ordinal).

        On conflict the text is replaced. The vector is replaced only when one
        is supplied.
        """
        pass

    @abstractmethod
    def get_by_id(self, item_id: int) -> Optional[Item]:
        pass

    @abstractmethod
    def list_by_group(self, group_key: Optional[int] = None) -> List[Item]:
        """List items of one group ordered by ordinal, or all items by (group, ordinal)."""
        pass

    @abstractmethod
    def list_groups(self) -> List[int]:
        """Distinct group keys in ascending order."""
        pass

    @abstractmethod
    def list_missing_vectors(self, group_key: Optional[int] = None) -> List[Item]:
        """Items without a vector, ordered by (group, ordinal)."""
        pass

    @abstractmethod
    def update_item(
        self,
        item_id: int,
        group_key: Optional[int] = None,
        ordinal: Optional[int] = None,
        text: Optional[str] = None,
        vector: Optional[Sequence[float]] = None,
    ) -> Optional[Item]:
        """Apply a partial edit. Fields left as None are unchanged.

        The stored vector is kept unless a new one is given. Moving
        onto an occupied (group_key, ordinal) raises StoreError.

        Returns:
            The updated item, or None if the id is unknown
        """
        pass

    @abstractmethod
    def delete_by_id(self, item_id: int) -> bool:
        pass

    @abstractmethod
    def set_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        """Set an item's vector in its own unit of work.

        Returns:
            False if no item has this id
        """
        pass

    @abstractmethod
    def search_text_like(self, substring: str, limit: int) -> List[Item]:
        """Case-insensitive substring match, ordered by (group, ordinal).

        The substring is matched literally; LIKE wildcards are escaped by the
        implementation.
        """
        pass

    @abstractmethod
    def k_nearest(self, vector: Sequence[float], k: int) -> List[Tuple[Item, float]]:
        """Embedded items nearest to `vector` by cosine distance, ascending."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Scoped transaction yielding a StoreTransaction.

        Commits when the block exits normally, rolls back every write made
        through the handle when it raises.
        """
        pass

    @abstractmethod
    def stats(self) -> StoreStats:
        pass

    def close(self) -> None:
        """Release resources held by the store."""
        pass

    @property
    def backend_name(self) -> str:
        return type(self).__name__


__all__ = ["VectorStore", "StoreTransaction"]
