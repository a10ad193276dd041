"""Domain entities."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass
class Item:
    """A stored verse.

    Attributes:
        id: Store-assigned identifier (immutable)
        group_key: Chapter number; with `ordinal` forms the natural key
        ordinal: Verse number within the chapter (1-based)
        text: Verse text (non-empty)
        vector: Embedding, or None when not yet embedded
        created_at: Creation timestamp
        updated_at: Refreshed on every mutation
    """

    id: int
    group_key: int
    ordinal: int
    text: str
    vector: Optional[List[float]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_vector(self) -> bool:
        return self.vector is not None

    @property
    def key(self) -> tuple:
        return (self.group_key, self.ordinal)


@dataclass
class StoreStats:
    """Item counts for the admin dashboard."""

    items: int
    embedded: int
    groups: int
