"""
Index builder orchestrator.

Coordinates a full rebuild:
1. Merge continuation rows into canonical records
2. Build the bigram inverted index
3. Write the record store
4. Write the index store
5. Publish the version to the manifest
6. Drop versions beyond keep_versions, manifest entry first, then directory
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from pathlib import Path

from postal_search.index.bigram import BigramIndexBuilder, InvertedIndex
from postal_search.index.manifest import IndexVersion, Manifest
from postal_search.ingestion.merger import RecordMerger
from postal_search.records import AddressRecord, RawRow
from postal_search.storage.layout import StorageLayout
from postal_search.storage.stores import (
    IndexStore,
    ParquetRecordStore,
    RecordStore,
    TsvIndexStore,
)

logger = logging.getLogger(__name__)


def new_version_id() -> str:
    """Version identifier derived from the current UTC time."""
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")


class IndexBuilder:
    """
    Orchestrate building the record store and bigram index.
    """

    def __init__(
        self,
        base_path: Path,
        compression_level: int = 6,
        keep_versions: int = 5,
    ):
        """
        Initialize index builder.

        Args:
            base_path: Base path for storage
            compression_level: Zstd compression level
            keep_versions: Versions kept in the manifest after publishing
        """
        self.base_path = Path(base_path)
        self.compression_level = compression_level
        self.keep_versions = keep_versions

        self.layout = StorageLayout(self.base_path)
        self.merger = RecordMerger()
        self.bigram_builder = BigramIndexBuilder()
        self.manifest = Manifest(self.base_path)

    def build_into(
        self,
        rows: Iterable[RawRow],
        record_store: RecordStore,
        index_store: IndexStore,
    ) -> tuple[list[AddressRecord], InvertedIndex]:
        """
        Build records and index in memory, then write both stores.

        Nothing is written until the in-memory build has succeeded.

        Args:
            rows: Raw catalogue rows in file order
            record_store: Destination for canonical records
            index_store: Destination for the bigram index

        Returns:
            (records, index)
        """
        logger.info("Step 1/4: Merging continuation rows...")
        records = self.merger.merge(rows)

        logger.info("Step 2/4: Building bigram index...")
        index = self.bigram_builder.build(records)

        logger.info("Step 3/4: Writing record store...")
        record_store.save_all_records(records)

        logger.info("Step 4/4: Writing index store...")
        index_store.save_index(index)

        return records, index

    def build_all(self, rows: Iterable[RawRow], version: str | None = None) -> str:
        """
        Build a new index version from raw rows and make it current.

        Args:
            rows: Raw catalogue rows in file order
            version: Version identifier (defaults to current timestamp)

        Returns:
            Version identifier of the built index
        """
        if version is None:
            version = new_version_id()

        logger.info(f"Building indexes for version {version}")

        record_store = ParquetRecordStore(
            self.layout.get_records_path(version), self.compression_level
        )
        index_store = TsvIndexStore(
            self.layout.get_index_path(version), self.compression_level
        )
        records, index = self.build_into(rows, record_store, index_store)

        logger.info("Publishing to manifest...")
        self.manifest.load()
        self.manifest.publish_version(
            version, record_count=len(records), bigram_count=len(index)
        )
        removed = self.manifest.cleanup_old_versions(keep_last_n=self.keep_versions)
        if removed:
            # Directories go only after the manifest no longer names them
            self.manifest.save()
            for old_version in removed:
                if self.layout.remove_version(old_version):
                    logger.info(f"Removed old version directory {old_version}")

        logger.info(
            f"Successfully built indexes for version {version} "
            f"({len(records):,} records, {len(index):,} bigrams)"
        )

        return version

    def get_stats(self, version: str | None = None) -> dict[str, str | int]:
        """
        Get statistics for an index version.

        Args:
            version: Version identifier (defaults to the current version)

        Returns:
            Dictionary of statistics

        Raises:
            ValueError: If the version is unknown or nothing has been published
        """
        self.manifest.load()
        index_version: IndexVersion | None
        if version is None:
            index_version = self.manifest.get_current_version()
        else:
            index_version = self.manifest.get_version(version)

        if index_version is None:
            raise ValueError(f"Index version not found: {version or 'current'}")

        stats: dict[str, str | int] = {
            "version": index_version.version,
            "created_at": index_version.created_at,
            "num_records": index_version.record_count,
            "num_bigrams": index_version.bigram_count,
        }

        for key, rel_path in (
            ("records_bytes", index_version.records_path),
            ("index_bytes", index_version.index_path),
        ):
            path = self.base_path / rel_path
            stats[key] = path.stat().st_size if path.exists() else 0

        logger.info(f"Statistics for version {index_version.version}: {stats}")

        return stats
