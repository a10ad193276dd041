"""pgvector-backed VectorStore.

Verses live in one table keyed by a serial id with UNIQUE(chapter, verse).
Vectors travel as pgvector text literals (`[0.1,0.2,...]`); encoding and
decoding happen only in this module.

Every operation borrows a connection from the pool for its own duration
(`with pool.connection()`), so the connection is returned on success,
validation failure and database error alike.
"""

from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence, Tuple

import psycopg
import psycopg_pool
from loguru import logger

from proverbs.domain import Item, StoreStats
from proverbs.shared.exceptions import StoreError
from proverbs.shared.vectors import format_vector_literal, parse_vector_literal

from .base import StoreTransaction, VectorStore

_COLUMNS = "id, chapter, verse, text, vector::text, created_at, updated_at"


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_item(row) -> Item:
    item_id, chapter, verse, text, vector, created_at, updated_at = row[:7]
    return Item(
        id=item_id,
        group_key=chapter,
        ordinal=verse,
        text=text,
        vector=parse_vector_literal(vector),
        created_at=created_at,
        updated_at=updated_at,
    )


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except psycopg.Error as e:
        logger.error(f"{operation} failed: {type(e).__name__}: {e}")
        raise StoreError(f"{operation} failed") from e
    except psycopg_pool.PoolTimeout as e:
        logger.error(f"{operation} failed: connection pool exhausted")
        raise StoreError(f"{operation} failed: no database connection available") from e


class _PgTransaction(StoreTransaction):
    def __init__(self, conn: psycopg.Connection, table_name: str):
        self._conn = conn
        self._table = table_name

    def set_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        with self._conn.cursor() as cur:
            cur.execute(
                f"UPDATE {self._table} SET vector = %s::vector, updated_at = NOW() "
                f"WHERE id = %s RETURNING id",
                (format_vector_literal(vector), item_id),
            )
            return cur.fetchone() is not None


class PgVectorStore(VectorStore):
    """Postgres + pgvector implementation of VectorStore.

    The schema (table, ivfflat cosine index) is created by DbSchemaManager;
    this class only reads and writes rows.

    Example:
        >>> pool = create_pool(config)
        >>> store = PgVectorStore(pool, table_name=config.table_name)
        >>> store.search_text_like("wisdom", 20)
    """

    def __init__(self, pool: psycopg_pool.ConnectionPool, table_name: str = "proverbs") -> None:
        self._pool = pool
        self.table_name = table_name

    def _fetch_items(self, operation: str, sql: str, params: tuple = ()) -> List[Item]:
        with _translate_errors(operation):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
        return [_row_to_item(row) for row in rows]

    def _fetch_one(self, operation: str, sql: str, params: tuple) -> Optional[Item]:
        with _translate_errors(operation):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    row = cur.fetchone()
        return _row_to_item(row) if row else None

    def upsert_by_key(
        self,
        group_key: int,
        ordinal: int,
        text: str,
        vector: Optional[Sequence[float]] = None,
    ) -> Item:
        t = self.table_name
        sql = f"""
        INSERT INTO {t} (chapter, verse, text, vector)
        VALUES (%s, %s, %s, %s::vector)
        ON CONFLICT (chapter, verse) DO UPDATE SET
            text = EXCLUDED.text,
            vector = COALESCE(EXCLUDED.vector, {t}.vector),
            updated_at = NOW()
        RETURNING {_COLUMNS}
        """
        literal = format_vector_literal(vector) if vector is not None else None
        item = self._fetch_one("Upsert", sql, (group_key, ordinal, text, literal))
        if item is None:
            raise StoreError("Upsert returned no row")
        return item

    def get_by_id(self, item_id: int) -> Optional[Item]:
        return self._fetch_one(
            "Lookup", f"SELECT {_COLUMNS} FROM {self.table_name} WHERE id = %s", (item_id,)
        )

    def list_by_group(self, group_key: Optional[int] = None) -> List[Item]:
        if group_key is not None:
            return self._fetch_items(
                "List",
                f"SELECT {_COLUMNS} FROM {self.table_name} WHERE chapter = %s ORDER BY verse",
                (group_key,),
            )
        return self._fetch_items(
            "List", f"SELECT {_COLUMNS} FROM {self.table_name} ORDER BY chapter, verse"
        )

    def list_groups(self) -> List[int]:
        with _translate_errors("List chapters"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(f"SELECT DISTINCT chapter FROM {self.table_name} ORDER BY chapter")
                    return [row[0] for row in cur.fetchall()]

    def list_missing_vectors(self, group_key: Optional[int] = None) -> List[Item]:
        where = "vector IS NULL"
        params: tuple = ()
        if group_key is not None:
            where += " AND chapter = %s"
            params = (group_key,)
        return self._fetch_items(
            "List missing vectors",
            f"SELECT {_COLUMNS} FROM {self.table_name} WHERE {where} ORDER BY chapter, verse",
            params,
        )

    def update_item(
        self,
        item_id: int,
        group_key: Optional[int] = None,
        ordinal: Optional[int] = None,
        text: Optional[str] = None,
        vector: Optional[Sequence[float]] = None,
    ) -> Optional[Item]:
        literal = format_vector_literal(vector) if vector is not None else None
        sql = f"""
        UPDATE {self.table_name} SET
            chapter = COALESCE(%s, chapter),
            verse = COALESCE(%s, verse),
            text = COALESCE(%s, text),
            vector = COALESCE(%s::vector, vector),
            updated_at = NOW()
        WHERE id = %s
        RETURNING {_COLUMNS}
        """
        params = (group_key, ordinal, text, literal, item_id)
        try:
            return self._fetch_one("Update", sql, params)
        except StoreError as e:
            if isinstance(e.__cause__, psycopg.errors.UniqueViolation):
                raise StoreError(
                    f"Duplicate key: chapter/verse already exists for update of id {item_id}"
                ) from e.__cause__
            raise

    def delete_by_id(self, item_id: int) -> bool:
        with _translate_errors("Delete"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"DELETE FROM {self.table_name} WHERE id = %s RETURNING id", (item_id,)
                    )
                    return cur.fetchone() is not None

    def set_vector(self, item_id: int, vector: Sequence[float]) -> bool:
        with _translate_errors("Vector update"):
            with self._pool.connection() as conn:
                return _PgTransaction(conn, self.table_name).set_vector(item_id, vector)

    def search_text_like(self, substring: str, limit: int) -> List[Item]:
        sql = f"""
        SELECT {_COLUMNS} FROM {self.table_name}
        WHERE text ILIKE %s ESCAPE '\\'
        ORDER BY chapter, verse
        LIMIT %s
        """
        return self._fetch_items("Text search", sql, (f"%{_escape_like(substring)}%", limit))

    def k_nearest(self, vector: Sequence[float], k: int) -> List[Tuple[Item, float]]:
        literal = format_vector_literal(vector)
        sql = f"""
        SELECT {_COLUMNS}, vector <=> %s::vector AS distance
        FROM {self.table_name}
        WHERE vector IS NOT NULL
        ORDER BY vector <=> %s::vector
        LIMIT %s
        """
        with _translate_errors("Similarity search"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (literal, literal, k))
                    rows = cur.fetchall()
        return [(_row_to_item(row), float(row[7])) for row in rows]

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        with _translate_errors("Transaction"):
            with self._pool.connection() as conn:
                with conn.transaction():
                    yield _PgTransaction(conn, self.table_name)

    def stats(self) -> StoreStats:
        sql = f"""
        SELECT COUNT(*), COUNT(vector), COUNT(DISTINCT chapter) FROM {self.table_name}
        """
        with _translate_errors("Stats"):
            with self._pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql)
                    items, embedded, groups = cur.fetchone()
        return StoreStats(items=items, embedded=embedded, groups=groups)

    def close(self) -> None:
        self._pool.close()

    @property
    def backend_name(self) -> str:
        return "postgres"


__all__ = ["PgVectorStore"]
