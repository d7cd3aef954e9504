"""
Rebuild and search triggers.

These are the entry points shared by the CLI and the HTTP server. Each takes
an explicit Config.
"""

import logging
from pathlib import Path

from postal_search.api.loader import IndexLoader
from postal_search.api.query import QueryEngine
from postal_search.config import Config
from postal_search.index.builder import IndexBuilder
from postal_search.ingestion.source import SourceFetcher
from postal_search.storage.layout import StorageLayout

logger = logging.getLogger(__name__)


def make_builder(config: Config) -> IndexBuilder:
    return IndexBuilder(
        base_path=config.storage.base_path,
        compression_level=config.index.compression_level,
        keep_versions=config.storage.keep_versions,
    )


def rebuild_index(
    config: Config, source_csv: Path | None = None, download: bool = True
) -> str:
    """
    Rebuild the record store and bigram index and publish a new version.

    Args:
        config: Configuration
        source_csv: Read this catalogue CSV instead of the configured source
        download: Fetch a fresh archive first; when False, reuse the CSV
            already extracted under source/

    Returns:
        Published version identifier

    Raises:
        DownloadError: If the archive cannot be downloaded or is corrupt
        FileNotFoundError: If the source CSV is missing
    """
    fetcher = SourceFetcher(config, StorageLayout(config.storage.base_path))

    if source_csv is not None:
        csv_path = Path(source_csv)
    elif download:
        csv_path = fetcher.fetch()
    else:
        csv_path = fetcher.layout.get_source_path(config.source.csv_name)

    logger.info(f"Rebuilding index from {csv_path}")
    rows = fetcher.read_rows(csv_path)
    return make_builder(config).build_all(rows)


def search_address(keyword: str, config: Config) -> list[str]:
    """
    Search the current index version.

    Args:
        keyword: Raw keyword
        config: Configuration

    Returns:
        Formatted address lines in ascending order

    Raises:
        FileNotFoundError: If no index has been built
    """
    loader = IndexLoader(config.storage.base_path)
    loader.load()
    return QueryEngine(loader.index, loader.records).search(keyword)


def index_stats(config: Config) -> dict[str, str | int]:
    """Statistics for the current index version."""
    return make_builder(config).get_stats()
