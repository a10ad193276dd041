"""Tests for the pgvector store and schema manager against a mocked pool."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import psycopg
import pytest

from proverbs.shared.exceptions import StoreError
from proverbs.storage import DbSchemaManager, PgVectorStore

NOW = datetime(2024, 1, 1, tzinfo=timezone.utc)


def row(item_id=1, chapter=3, verse=5, text="Trust in the LORD", vector="[1,0]", *extra):
    return (item_id, chapter, verse, text, vector, NOW, NOW) + extra


@pytest.fixture
def mock_cursor():
    return MagicMock()


@pytest.fixture
def mock_conn(mock_cursor):
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value = mock_cursor
    return conn


@pytest.fixture
def mock_pool(mock_conn):
    pool = MagicMock()
    pool.connection.return_value.__enter__.return_value = mock_conn
    return pool


@pytest.fixture
def pg_store(mock_pool):
    return PgVectorStore(mock_pool, table_name="proverbs")


def executed(cursor):
    sql, params = cursor.execute.call_args[0]
    return " ".join(sql.split()), params


class TestPgVectorStore:
    def test_upsert_with_vector(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = row(vector="[1,0]")

        item = pg_store.upsert_by_key(3, 5, "Trust in the LORD", [1.0, 0.0])

        sql, params = executed(mock_cursor)
        assert "ON CONFLICT (chapter, verse) DO UPDATE" in sql
        assert "vector = COALESCE(EXCLUDED.vector, proverbs.vector)" in sql
        assert params == (3, 5, "Trust in the LORD", "[1.0,0.0]")
        assert item.id == 1
        assert item.key == (3, 5)
        assert item.vector == [1.0, 0.0]

    def test_upsert_without_vector(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = row(vector=None)

        item = pg_store.upsert_by_key(3, 5, "Trust in the LORD")

        _, params = executed(mock_cursor)
        assert params[3] is None
        assert item.vector is None

    def test_get_by_id_missing(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = None
        assert pg_store.get_by_id(99) is None

    def test_list_by_group(self, pg_store, mock_cursor):
        mock_cursor.fetchall.return_value = [row(1, 3, 5), row(2, 3, 6, "In all thy ways", None)]

        items = pg_store.list_by_group(3)

        sql, params = executed(mock_cursor)
        assert "WHERE chapter = %s ORDER BY verse" in sql
        assert params == (3,)
        assert [i.ordinal for i in items] == [5, 6]

    def test_search_escapes_wildcards(self, pg_store, mock_cursor):
        mock_cursor.fetchall.return_value = []

        pg_store.search_text_like("50%_off", 20)

        sql, params = executed(mock_cursor)
        assert "ILIKE %s ESCAPE" in sql
        assert "ORDER BY chapter, verse" in sql
        assert params == ("%50\\%\\_off%", 20)

    def test_k_nearest(self, pg_store, mock_cursor):
        mock_cursor.fetchall.return_value = [row(7, 1, 1, "a", "[1,0]", 0.05), row(8, 1, 2, "b", "[0,1]", 0.3)]

        results = pg_store.k_nearest([1.0, 0.0], 2)

        sql, params = executed(mock_cursor)
        assert "vector <=> %s::vector" in sql
        assert "WHERE vector IS NOT NULL" in sql
        assert params == ("[1.0,0.0]", "[1.0,0.0]", 2)
        assert [(item.id, distance) for item, distance in results] == [(7, 0.05), (8, 0.3)]

    def test_set_vector_unknown_id(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = None
        assert pg_store.set_vector(42, [0.0, 1.0]) is False

    def test_delete(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = (4,)
        assert pg_store.delete_by_id(4) is True

    def test_stats(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = (10, 4, 6)
        stats = pg_store.stats()
        assert (stats.items, stats.embedded, stats.groups) == (10, 4, 6)

    def test_database_error_becomes_store_error(self, pg_store, mock_cursor):
        mock_cursor.execute.side_effect = psycopg.OperationalError("connection lost")
        with pytest.raises(StoreError):
            pg_store.search_text_like("wisdom", 20)

    def test_update_duplicate_key(self, pg_store, mock_cursor):
        mock_cursor.execute.side_effect = psycopg.errors.UniqueViolation("duplicate key")
        with pytest.raises(StoreError) as exc_info:
            pg_store.update_item(3, ordinal=1)
        assert "Duplicate key" in str(exc_info.value)

    def test_update_params(self, pg_store, mock_cursor):
        mock_cursor.fetchone.return_value = row(text="new", vector=None)

        item = pg_store.update_item(1, text="new")

        sql, params = executed(mock_cursor)
        assert "vector = COALESCE(%s::vector, vector)" in sql
        assert params == (None, None, "new", None, 1)
        assert item.text == "new"

    def test_transaction_uses_one_connection(self, pg_store, mock_conn, mock_cursor, mock_pool):
        mock_cursor.fetchone.side_effect = [(1,), (2,)]

        with pg_store.transaction() as tx:
            assert tx.set_vector(1, [1.0, 0.0]) is True
            assert tx.set_vector(2, [0.0, 1.0]) is True

        mock_pool.connection.assert_called_once()
        mock_conn.transaction.assert_called_once()
        assert mock_cursor.execute.call_count == 2

    def test_close(self, pg_store, mock_pool):
        pg_store.close()
        mock_pool.close.assert_called_once()


class TestDbSchemaManager:
    def test_migrate(self, mock_pool, mock_conn):
        DbSchemaManager(mock_pool, table_name="proverbs", embedding_dim=8, ivfflat_lists=50).migrate()

        statements = [" ".join(c.args[0].split()) for c in mock_conn.execute.call_args_list]
        assert statements[0] == "CREATE EXTENSION IF NOT EXISTS vector"
        assert "CREATE TABLE IF NOT EXISTS proverbs" in statements[1]
        assert "vector vector(8)" in statements[1]
        assert "UNIQUE(chapter, verse)" in statements[1]
        assert "USING ivfflat (vector vector_cosine_ops) WITH (lists = 50)" in statements[2]
        assert "proverbs_chapter_idx" in statements[3]
