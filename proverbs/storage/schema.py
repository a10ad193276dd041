"""Database schema management for the pgvector store.

All statements are idempotent (`IF NOT EXISTS`), so `migrate()` can run on
every deploy.
"""

import psycopg_pool
from loguru import logger

from proverbs.shared.config import EMBEDDING_DIM


class DbSchemaManager:
    """Creates the pgvector extension, the verse table and its indexes.

    Example:
        >>> manager = DbSchemaManager(pool, table_name="proverbs")
        >>> manager.migrate()
    """

    def __init__(
        self,
        pool: psycopg_pool.ConnectionPool,
        table_name: str = "proverbs",
        embedding_dim: int = EMBEDDING_DIM,
        ivfflat_lists: int = 100,
    ) -> None:
        self._pool = pool
        self.table_name = table_name
        self.embedding_dim = embedding_dim
        self.ivfflat_lists = ivfflat_lists

    def _execute(self, sql: str) -> None:
        with self._pool.connection() as conn:
            conn.execute(sql)

    def ensure_extension_vector(self) -> None:
        self._execute("CREATE EXTENSION IF NOT EXISTS vector")

    def ensure_table(self) -> None:
        self._execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.table_name} (
                id SERIAL PRIMARY KEY,
                chapter INTEGER NOT NULL,
                verse INTEGER NOT NULL,
                text TEXT NOT NULL,
                vector vector({self.embedding_dim}),
                created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(chapter, verse)
            )
            """
        )

    def ensure_indexes(self) -> None:
        """Create the ANN index (ivfflat, cosine) and the chapter index."""
        self._execute(
            f"""
            CREATE INDEX IF NOT EXISTS {self.table_name}_vector_idx
            ON {self.table_name}
            USING ivfflat (vector vector_cosine_ops)
            WITH (lists = {int(self.ivfflat_lists)})
            """
        )
        self._execute(
            f"CREATE INDEX IF NOT EXISTS {self.table_name}_chapter_idx "
            f"ON {self.table_name}(chapter)"
        )

    def migrate(self) -> None:
        """Apply the full schema."""
        logger.info(f"Ensuring schema for table '{self.table_name}'...")
        self.ensure_extension_vector()
        self.ensure_table()
        self.ensure_indexes()
        logger.info("Schema ready")


__all__ = ["DbSchemaManager"]
