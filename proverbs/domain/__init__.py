"""Domain layer for the proverbs store.

Pure entities and field checks with no infrastructure dependencies.

Rules:
- MUST NOT import DB drivers, HTTP clients, or config loading
- MAY import shared exceptions
"""

from .entities import Item, StoreStats
from .validation import validate_group_key, validate_item_id, validate_ordinal, validate_text

__all__ = [
    "Item",
    "StoreStats",
    "validate_group_key",
    "validate_item_id",
    "validate_ordinal",
    "validate_text",
]
