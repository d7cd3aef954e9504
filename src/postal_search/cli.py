"""
Command-line entry point.

    postal-search rebuild [--no-download | --source-csv PATH]
    postal-search search KEYWORD...
    postal-search stats
    postal-search serve [--host HOST] [--port PORT]
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional, Sequence

from postal_search.config import Config, load_config
from postal_search.ingestion.source import DownloadError
from postal_search.pipeline import index_stats, rebuild_index, search_address

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="postal-search",
        description="Build and query a bigram index over the Japan Post address catalogue.",
    )
    parser.add_argument(
        "--base-path",
        type=Path,
        default=None,
        help="Base path for sources and indexes (defaults to config.storage.base_path).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    rebuild = subparsers.add_parser("rebuild", help="Rebuild the index and publish a new version.")
    source = rebuild.add_mutually_exclusive_group()
    source.add_argument(
        "--source-csv",
        type=Path,
        default=None,
        help="Build from this catalogue CSV instead of downloading.",
    )
    source.add_argument(
        "--download",
        default=True,
        action=argparse.BooleanOptionalAction,
        help="Download a fresh archive before building (default: on).",
    )

    search = subparsers.add_parser("search", help="Search the current index version.")
    search.add_argument("keyword", nargs="+", help="Keyword; whitespace is ignored.")

    subparsers.add_parser("stats", help="Show statistics for the current index version.")

    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default=None, help="Bind address (defaults to config).")
    serve.add_argument("--port", type=int, default=None, help="Bind port (defaults to config).")

    return parser


def _run_rebuild(args: argparse.Namespace, config: Config) -> int:
    try:
        version = rebuild_index(config, source_csv=args.source_csv, download=args.download)
    except (DownloadError, FileNotFoundError) as e:
        logger.error(f"Rebuild failed: {e}")
        return 1
    print(f"Published index version {version}")
    return 0


def _run_search(args: argparse.Namespace, config: Config) -> int:
    keyword = " ".join(args.keyword)
    try:
        results = search_address(keyword, config)
    except FileNotFoundError as e:
        logger.error(f"Search failed: {e}")
        return 1

    for line in results:
        print(line)
    if not results:
        print("No addresses matched")
    else:
        print(f"{len(results)} addresses matched")
    return 0


def _run_stats(args: argparse.Namespace, config: Config) -> int:
    try:
        stats = index_stats(config)
    except ValueError as e:
        logger.error(str(e))
        return 1
    for key, value in stats.items():
        print(f"{key}: {value}")
    return 0


def _run_serve(args: argparse.Namespace, config: Config) -> int:
    import uvicorn

    from postal_search.api.server import app

    app.state.config = config
    uvicorn.run(
        app,
        host=args.host or config.server.host,
        port=args.port or config.server.port,
        log_level=config.log_level.lower(),
    )
    return 0


COMMANDS = {
    "rebuild": _run_rebuild,
    "search": _run_search,
    "stats": _run_stats,
    "serve": _run_serve,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(base_path=args.base_path)

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    return COMMANDS[args.command](args, config)


if __name__ == "__main__":
    raise SystemExit(main())
