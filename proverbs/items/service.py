"""Single-verse management on top of a VectorStore."""

from typing import List, Optional, Sequence

from loguru import logger

from proverbs.domain import (
    Item,
    StoreStats,
    validate_group_key,
    validate_item_id,
    validate_ordinal,
    validate_text,
)
from proverbs.shared.config import AppConfig
from proverbs.shared.exceptions import NotFoundError
from proverbs.shared.vectors import validate_vector
from proverbs.storage import VectorStore


class ItemService:
    """Validated create/read/update/delete for verses.

    All checks run before the store is touched.
    """

    def __init__(self, store: VectorStore, config: AppConfig) -> None:
        self.store = store
        self.config = config

    def _chapter(self, group_key) -> int:
        return validate_group_key(group_key, self.config.min_chapter, self.config.max_chapter)

    def _vector(self, vector) -> Optional[List[float]]:
        if vector is None:
            return None
        return validate_vector(vector, self.config.embedding_dim)

    def get_item(self, item_id: int) -> Item:
        item_id = validate_item_id(item_id)
        item = self.store.get_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Proverb {item_id} not found")
        return item

    def list_items(self, group_key: Optional[int] = None) -> List[Item]:
        if group_key is not None:
            group_key = self._chapter(group_key)
        return self.store.list_by_group(group_key)

    def list_groups(self) -> List[int]:
        return self.store.list_groups()

    def upsert_item(
        self,
        group_key: int,
        ordinal: int,
        text: str,
        vector: Optional[Sequence[float]] = None,
    ) -> Item:
        group_key = self._chapter(group_key)
        ordinal = validate_ordinal(ordinal)
        text = validate_text(text)
        values = self._vector(vector)

        item = self.store.upsert_by_key(group_key, ordinal, text, values)
        logger.info(f"Upserted proverb {item.id} at {group_key}:{ordinal}")
        return item

    def update_item(
        self,
        item_id: int,
        group_key: Optional[int] = None,
        ordinal: Optional[int] = None,
        text: Optional[str] = None,
        vector: Optional[Sequence[float]] = None,
    ) -> Item:
        """Partial edit; raises NotFoundError for an unknown id."""
        item_id = validate_item_id(item_id)
        if group_key is not None:
            group_key = self._chapter(group_key)
        if ordinal is not None:
            ordinal = validate_ordinal(ordinal)
        if text is not None:
            text = validate_text(text)
        values = self._vector(vector)

        item = self.store.update_item(item_id, group_key, ordinal, text, values)
        if item is None:
            raise NotFoundError(f"Proverb {item_id} not found")
        logger.info(f"Updated proverb {item_id}")
        return item

    def delete_item(self, item_id: int) -> int:
        item_id = validate_item_id(item_id)
        if not self.store.delete_by_id(item_id):
            raise NotFoundError(f"Proverb {item_id} not found")
        logger.info(f"Deleted proverb {item_id}")
        return item_id

    def stats(self) -> StoreStats:
        return self.store.stats()


__all__ = ["ItemService"]
