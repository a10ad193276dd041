"""Tests for the command-line interface."""

import io
from unittest.mock import MagicMock, patch

import pytest

from proverbs.cli.__main__ import create_parser, main


@pytest.fixture
def run(config, store):
    """Run the CLI against the shared in-memory store"""
    with patch("proverbs.cli.__main__.load_config", return_value=config), \
            patch("proverbs.cli.commands.build_store", return_value=store):
        yield main


class TestParser:
    def test_requires_command(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    def test_ingest_arguments(self):
        args = create_parser().parse_args(["ingest", "--chapter", "3", "-"])
        assert (args.chapter, args.file, args.missing) == (3, "-", False)


class TestCommands:
    def test_seed(self, run, store, capsys):
        assert run(["seed"]) == 0
        assert "Seeded 10 proverbs" in capsys.readouterr().out
        assert store.stats().items == 10

    def test_ingest_file(self, run, store, tmp_path, capsys):
        block = tmp_path / "chapter3.txt"
        block.write_text("My son, forget not my law\n\nLet not mercy and truth forsake thee\n", encoding="utf-8")

        assert run(["ingest", "--chapter", "3", str(block)]) == 0

        out = capsys.readouterr().out
        assert "chapter 3: processed=2" in out
        assert [i.ordinal for i in store.list_by_group(3)] == [1, 3]
        assert store.stats().embedded == 2

    def test_ingest_stdin(self, run, store, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO("Hear, ye children\nFor I give you good doctrine"))
        assert run(["ingest", "--chapter", "4", "-"]) == 0
        assert store.stats().items == 2

    def test_ingest_missing(self, run, store, capsys):
        run(["seed"])
        assert run(["ingest", "--missing"]) == 0
        assert "all chapters: processed=10" in capsys.readouterr().out
        assert store.stats().embedded == 10

    def test_ingest_needs_chapter(self, run, capsys):
        assert run(["ingest", "-"]) == 2
        assert "--chapter" in capsys.readouterr().err

    def test_ingest_invalid_chapter(self, run, tmp_path, capsys):
        block = tmp_path / "x.txt"
        block.write_text("x", encoding="utf-8")
        assert run(["ingest", "--chapter", "99", str(block)]) == 1
        assert "Chapter must be between" in capsys.readouterr().err

    def test_ingest_missing_file(self, run, tmp_path):
        assert run(["ingest", "--chapter", "1", str(tmp_path / "nope.txt")]) == 1

    def test_search(self, run, capsys):
        run(["seed"])
        capsys.readouterr()

        assert run(["search", "iron"]) == 0

        assert capsys.readouterr().out.strip() == (
            "27:17  Iron sharpeneth iron; so a man sharpeneth the countenance of his friend."
        )

    def test_search_no_results(self, run, capsys):
        assert run(["search", "nothing here"]) == 0
        assert "No results" in capsys.readouterr().out

    def test_stats(self, run, capsys):
        run(["seed"])
        assert run(["stats"]) == 0
        assert "proverbs=10 embedded=0 chapters=6" in capsys.readouterr().out

    def test_migrate_without_database(self, run, capsys):
        assert run(["migrate"]) == 1
        assert "Database not configured" in capsys.readouterr().err

    def test_migrate(self, run, capsys):
        pool = MagicMock()
        conn = pool.connection.return_value.__enter__.return_value

        with patch("proverbs.cli.commands.create_pool", return_value=pool):
            assert run(["migrate"]) == 0

        assert conn.execute.call_count == 4
        pool.close.assert_called_once()
        assert "Migration completed successfully" in capsys.readouterr().out

    def test_serve(self, run, config):
        with patch("uvicorn.run") as uvicorn_run:
            assert run(["serve", "--port", "9000"]) == 0

        _, kwargs = uvicorn_run.call_args
        assert kwargs == {"host": "127.0.0.1", "port": 9000}
