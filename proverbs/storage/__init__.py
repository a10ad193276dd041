"""Storage layer: VectorStore interface and its implementations."""

from .base import StoreTransaction, VectorStore
from .in_memory import InMemoryVectorStore
from .postgres import PgVectorStore
from .factory import build_store
from .schema import DbSchemaManager
from .seed import SAMPLE_PROVERBS, seed_store

__all__ = [
    "VectorStore",
    "StoreTransaction",
    "InMemoryVectorStore",
    "PgVectorStore",
    "DbSchemaManager",
    "build_store",
    "SAMPLE_PROVERBS",
    "seed_store",
]
