"""Postgres connection pool construction.

The pool is created once per process by whoever assembles the services
(API lifespan or CLI) and handed to the store; it is never a module global.
"""

import psycopg_pool
from loguru import logger

from .config import AppConfig
from .exceptions import DatabaseNotConfiguredError


def create_pool(config: AppConfig) -> psycopg_pool.ConnectionPool:
    """Open a connection pool for the configured database.

    Args:
        config: Application configuration with `pg_conn`

    Returns:
        Opened ConnectionPool

    Raises:
        DatabaseNotConfiguredError: If no connection string is configured
    """
    if not config.pg_conn:
        raise DatabaseNotConfiguredError(
            "Database not configured. Set PG_CONN environment variable."
        )

    logger.info(
        f"Opening Postgres pool (min={config.pg_pool_min_size}, max={config.pg_pool_max_size})"
    )
    return psycopg_pool.ConnectionPool(
        config.pg_conn,
        min_size=config.pg_pool_min_size,
        max_size=config.pg_pool_max_size,
        open=True,
    )


def close_pool(pool: psycopg_pool.ConnectionPool) -> None:
    """Close the pool, releasing every connection."""
    logger.info("Closing Postgres pool")
    pool.close()


__all__ = ["create_pool", "close_pool"]
