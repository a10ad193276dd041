"""Subcommand implementations. Each returns a process exit code."""

import argparse
import sys
from typing import TextIO

from loguru import logger

from proverbs.embedding import EmbeddingProviderFactory
from proverbs.ingestion import BatchReport, IngestionPipeline
from proverbs.items import ItemService
from proverbs.retrieval import RetrievalEngine
from proverbs.shared.config import AppConfig
from proverbs.shared.db_pool import close_pool, create_pool
from proverbs.shared.exceptions import SharedError
from proverbs.storage import DbSchemaManager, build_store, seed_store


def migrate(args: argparse.Namespace, config: AppConfig) -> int:
    """Create the vector extension, the table and its indexes."""
    try:
        pool = create_pool(config)
    except SharedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        DbSchemaManager(
            pool,
            table_name=config.table_name,
            embedding_dim=config.embedding_dim,
            ivfflat_lists=config.ivfflat_lists,
        ).migrate()
    except Exception:
        logger.exception("Migration failed")
        return 1
    finally:
        close_pool(pool)

    print("Migration completed successfully")
    return 0


def seed(args: argparse.Namespace, config: AppConfig) -> int:
    """Load the sample proverbs (without vectors)."""
    store = build_store(config)
    try:
        count = seed_store(store)
    except SharedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"Seeded {count} proverbs")
    return 0


def _print_report(report: BatchReport, out: TextIO) -> None:
    label = f"chapter {report.group_key}" if report.group_key is not None else "all chapters"
    print(
        f"{label}: processed={report.processed} stored={report.stored} "
        f"embedded={report.embedded} degraded={report.degraded} failed={report.failed}",
        file=out,
    )
    if report.degraded_ordinals:
        print(f"  without vector: {', '.join(map(str, report.degraded_ordinals))}", file=out)
    for failure in report.failures:
        print(f"  verse {failure.ordinal} failed: {failure.reason}", file=out)


def ingest(args: argparse.Namespace, config: AppConfig) -> int:
    """Ingest a text block (file or stdin), or re-embed items without vectors."""
    if not args.missing and (args.chapter is None or args.file is None):
        print("Error: ingest needs --chapter and FILE (or --missing)", file=sys.stderr)
        return 2

    store = build_store(config)
    try:
        pipeline = IngestionPipeline(store, EmbeddingProviderFactory.create(config), config)
        if args.missing:
            report = pipeline.embed_missing(args.chapter)
        else:
            if args.file == "-":
                raw_block = sys.stdin.read()
            else:
                with open(args.file, encoding="utf-8") as f:
                    raw_block = f.read()
            report = pipeline.ingest_batch(args.chapter, raw_block)
    except (SharedError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    _print_report(report, sys.stdout)
    return 0 if report.ok else 1


def search(args: argparse.Namespace, config: AppConfig) -> int:
    """Case-insensitive substring search."""
    store = build_store(config)
    try:
        items = RetrievalEngine(store, config).search_text(args.query, args.limit)
    except SharedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    if not items:
        print("No results")
        return 0
    for item in items:
        print(f"{item.group_key}:{item.ordinal}  {item.text}")
    return 0


def stats(args: argparse.Namespace, config: AppConfig) -> int:
    store = build_store(config)
    try:
        counts = ItemService(store, config).stats()
    except SharedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        store.close()

    print(f"proverbs={counts.items} embedded={counts.embedded} chapters={counts.groups}")
    return 0


def serve(args: argparse.Namespace, config: AppConfig) -> int:
    import uvicorn

    from proverbs.api.app import create_app

    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0
