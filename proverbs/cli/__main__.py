"""CLI entry point for running as `python -m proverbs.cli`.

Usage:
    python -m proverbs.cli migrate                      # Create schema
    python -m proverbs.cli seed                         # Load sample proverbs
    python -m proverbs.cli ingest --chapter 3 ch3.txt   # Ingest a chapter
    python -m proverbs.cli ingest --chapter 3 -         # ... from stdin
    python -m proverbs.cli ingest --missing             # Re-embed items without vectors
    python -m proverbs.cli search "wisdom"              # Text search
    python -m proverbs.cli stats
    python -m proverbs.cli serve --port 8000
"""

import argparse
import sys
from typing import List, Optional

from proverbs.shared.config import load_config
from proverbs.shared.exceptions import ConfigurationError
from proverbs.shared.logging_setup import configure_logging

from . import commands

COMMANDS = {
    "migrate": commands.migrate,
    "seed": commands.seed,
    "ingest": commands.ingest,
    "search": commands.search,
    "stats": commands.stats,
    "serve": commands.serve,
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m proverbs.cli")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Create the pgvector schema")
    subparsers.add_parser("seed", help="Load the sample proverbs")

    ingest_parser = subparsers.add_parser("ingest", help="Ingest a chapter from a text block")
    ingest_parser.add_argument("file", nargs="?", help="Text file, one verse per line ('-' for stdin)")
    ingest_parser.add_argument("--chapter", type=int, help="Chapter number")
    ingest_parser.add_argument(
        "--missing",
        action="store_true",
        help="Embed stored verses that have no vector (optionally within --chapter)",
    )

    search_parser = subparsers.add_parser("search", help="Text search")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--limit", type=int, default=None)

    subparsers.add_parser("stats", help="Item, embedded and chapter counts")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for `python -m proverbs.cli`."""
    args = create_parser().parse_args(argv)
    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    configure_logging(config.log_level)
    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
