"""Builds the configured VectorStore."""

from loguru import logger

from proverbs.shared.config import AppConfig
from proverbs.shared.db_pool import create_pool

from .base import VectorStore
from .in_memory import InMemoryVectorStore
from .postgres import PgVectorStore


def build_store(config: AppConfig) -> VectorStore:
    """PgVectorStore when a connection string is configured, in-memory otherwise."""
    if config.uses_database:
        return PgVectorStore(create_pool(config), table_name=config.table_name)
    logger.warning("PG_CONN not set - using the in-memory store (data is lost on exit)")
    return InMemoryVectorStore()


__all__ = ["build_store"]
