"""Shared utilities and configuration for the proverbs store.

Note: db_pool is NOT re-exported here to keep pool construction explicit.
Use `from proverbs.shared.db_pool import create_pool, close_pool` directly.
"""

from .config import EMBEDDING_DIM, AppConfig, load_config
from .exceptions import (
    ConfigurationError,
    DatabaseNotConfiguredError,
    NotFoundError,
    ProviderError,
    SharedError,
    StoreError,
    ValidationError,
)
from .vectors import Vector, cosine_distance, format_vector_literal, parse_vector_literal, validate_vector

__all__ = [
    "AppConfig",
    "EMBEDDING_DIM",
    "load_config",
    "SharedError",
    "ConfigurationError",
    "DatabaseNotConfiguredError",
    "ValidationError",
    "NotFoundError",
    "ProviderError",
    "StoreError",
    "Vector",
    "validate_vector",
    "format_vector_literal",
    "parse_vector_literal",
    "cosine_distance",
]
