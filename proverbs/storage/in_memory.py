"""In-memory VectorStore.

For development and tests. Data is lost when the process exits; use
PgVectorStore in production. Similarity search is an exact cosine scan,
which is the result an ANN index approximates.
"""

import itertools
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from proverbs.domain import Item, StoreStats
from proverbs.shared.exceptions import StoreError
from proverbs.shared.vectors import cosine_distance

from .base import StoreTransaction, VectorStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _InMemoryTransaction(StoreTransaction):
    def __init__(self, store: "InMemoryVectorStore"):
        self._store = store

    def set_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        return self._store._write_vector(item_id, vector)


class InMemoryVectorStore(VectorStore):
    """Dictionary-backed VectorStore.

    Features:
        - Thread-safe (one re-entrant lock around every operation)
        - Transactions snapshot the tables and restore them on error
        - Returned items are copies; mutating them never touches the store

    Example:
        store = InMemoryVectorStore()
        item = store.upsert_by_key(1, 1, "The proverbs of Solomon")
        store.set_vector(item.id, [0.1] * 1536)
    """

    def __init__(self):
        self._items: Dict[int, Item] = {}
        self._keys: Dict[Tuple[int, int], int] = {}
        self._ids = itertools.count(1)
        self._lock = RLock()

    @staticmethod
    def _copy(item: Item) -> Item:
        return replace(item, vector=list(item.vector) if item.vector is not None else None)

    def _sorted(self, items) -> List[Item]:
        return [self._copy(i) for i in sorted(items, key=lambda i: (i.group_key, i.ordinal))]

    def upsert_by_key(
        self,
        group_key: int,
        ordinal: int,
        text: str,
        vector: Optional[Sequence[float]] = None,
    ) -> Item:
        with self._lock:
            now = _now()
            existing_id = self._keys.get((group_key, ordinal))
            if existing_id is None:
                item = Item(
                    id=next(self._ids),
                    group_key=group_key,
                    ordinal=ordinal,
                    text=text,
                    vector=list(vector) if vector is not None else None,
                    created_at=now,
                    updated_at=now,
                )
                self._items[item.id] = item
                self._keys[item.key] = item.id
                return self._copy(item)

            item = self._items[existing_id]
            if vector is not None:
                item.vector = list(vector)
            item.text = text
            item.updated_at = now
            return self._copy(item)

    def get_by_id(self, item_id: int) -> Optional[Item]:
        with self._lock:
            item = self._items.get(item_id)
            return self._copy(item) if item is not None else None

    def list_by_group(self, group_key: Optional[int] = None) -> List[Item]:
        with self._lock:
            items = self._items.values()
            if group_key is not None:
                items = [i for i in items if i.group_key == group_key]
            return self._sorted(items)

    def list_groups(self) -> List[int]:
        with self._lock:
            return sorted({i.group_key for i in self._items.values()})

    def list_missing_vectors(self, group_key: Optional[int] = None) -> List[Item]:
        with self._lock:
            items = [
                i for i in self._items.values()
                if i.vector is None and (group_key is None or i.group_key == group_key)
            ]
            return self._sorted(items)

    def update_item(
        self,
        item_id: int,
        group_key: Optional[int] = None,
        ordinal: Optional[int] = None,
        text: Optional[str] = None,
        vector: Optional[Sequence[float]] = None,
    ) -> Optional[Item]:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                return None

            new_key = (
                group_key if group_key is not None else item.group_key,
                ordinal if ordinal is not None else item.ordinal,
            )
            if new_key != item.key:
                holder = self._keys.get(new_key)
                if holder is not None and holder != item_id:
                    raise StoreError(
                        f"Duplicate key: chapter {new_key[0]} verse {new_key[1]} already exists"
                    )
                del self._keys[item.key]
                self._keys[new_key] = item_id
                item.group_key, item.ordinal = new_key

            if vector is not None:
                item.vector = list(vector)
            if text is not None:
                item.text = text
            item.updated_at = _now()
            return self._copy(item)

    def delete_by_id(self, item_id: int) -> bool:
        with self._lock:
            item = self._items.pop(item_id, None)
            if item is None:
                return False
            del self._keys[item.key]
            return True

    def _write_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        item = self._items.get(item_id)
        if item is None:
            return False
        item.vector = list(vector)
        item.updated_at = _now()
        return True

    def set_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        with self._lock:
            return self._write_vector(item_id, vector)

    def search_text_like(self, substring: str, limit: int) -> List[Item]:
        needle = substring.lower()
        with self._lock:
            matches = [i for i in self._items.values() if needle in i.text.lower()]
            return self._sorted(matches)[:limit]

    def k_nearest(self, vector: Sequence[float], k: int) -> List[Tuple[Item, float]]:
        with self._lock:
            scored = [
                (item, cosine_distance(vector, item.vector))
                for item in sorted(self._items.values(), key=lambda i: i.id)
                if item.vector is not None
            ]
            scored.sort(key=lambda pair: pair[1])
            return [(self._copy(item), distance) for item, distance in scored[:k]]

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        with self._lock:
            snapshot = {item_id: self._copy(item) for item_id, item in self._items.items()}
            keys = dict(self._keys)
            try:
                yield _InMemoryTransaction(self)
            except BaseException:
                self._items = snapshot
                self._keys = keys
                raise

    def stats(self) -> StoreStats:
        with self._lock:
            return StoreStats(
                items=len(self._items),
                embedded=sum(1 for i in self._items.values() if i.vector is not None),
                groups=len({i.group_key for i in self._items.values()}),
            )

    @property
    def backend_name(self) -> str:
        return "memory"


__all__ = ["InMemoryVectorStore"]
