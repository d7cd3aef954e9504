"""
Index loader.

Loads the current manifest version's record store and bigram index into
memory. Both artifacts are always resolved through the same manifest entry, so
a loaded generation is internally consistent. Swapping generations after a
rebuild replaces the global loader instance as a whole.
"""

import logging
from pathlib import Path

from postal_search.index.manifest import IndexVersion, Manifest
from postal_search.records import AddressRecord
from postal_search.storage.stores import ParquetRecordStore, TsvIndexStore

logger = logging.getLogger(__name__)


class IndexLoader:
    """
    Loads and holds one index generation for query serving.
    """

    def __init__(self, base_path: Path | str):
        """
        Initialize the loader.

        Args:
            base_path: Base path containing the index/ directory
        """
        self.base_path = Path(base_path)
        self.manifest = Manifest(self.base_path)

        # Loaded structures (lazy)
        self._current_version: IndexVersion | None = None
        self._records: dict[int, AddressRecord] | None = None
        self._index: dict[str, list[int]] | None = None

        logger.info(f"IndexLoader initialized with base_path={base_path}")

    def load(self) -> None:
        """
        Load the record store and index of the current manifest version.

        Raises:
            FileNotFoundError: If no version has been published or a store is missing
        """
        logger.info("Loading indexes...")

        self.manifest.load()
        current = self.manifest.get_current_version()
        if current is None:
            raise FileNotFoundError(
                f"No published index version under {self.manifest.manifest_path}"
            )
        logger.info(f"Current version: {current.version}")

        record_store = ParquetRecordStore(self.base_path / current.records_path)
        records = {r.unique_id: r for r in record_store.load_all_records()}

        index_store = TsvIndexStore(self.base_path / current.index_path)
        index = index_store.load_index()

        self._current_version = current
        self._records = records
        self._index = index

        logger.info(
            f"All indexes loaded successfully ({len(records):,} records, "
            f"{len(index):,} bigrams)"
        )

    @property
    def is_loaded(self) -> bool:
        return self._index is not None and self._records is not None

    @property
    def version(self) -> str:
        """Get the loaded version identifier (must be loaded first)."""
        if self._current_version is None:
            raise RuntimeError("Indexes not loaded. Call load() first.")
        return self._current_version.version

    @property
    def current_version(self) -> IndexVersion:
        """Get the loaded manifest entry (must be loaded first)."""
        if self._current_version is None:
            raise RuntimeError("Indexes not loaded. Call load() first.")
        return self._current_version

    @property
    def records(self) -> dict[int, AddressRecord]:
        """Get records keyed by unique_id (must be loaded first)."""
        if self._records is None:
            raise RuntimeError("Indexes not loaded. Call load() first.")
        return self._records

    @property
    def index(self) -> dict[str, list[int]]:
        """Get the bigram index (must be loaded first)."""
        if self._index is None:
            raise RuntimeError("Indexes not loaded. Call load() first.")
        return self._index


# Global singleton instance
_loader: IndexLoader | None = None


def get_loader() -> IndexLoader:
    """
    Get the global IndexLoader instance.

    Returns:
        IndexLoader instance

    Raises:
        RuntimeError: If loader not initialized
    """
    if _loader is None:
        raise RuntimeError("IndexLoader not initialized. Call init_loader() first.")
    return _loader


def init_loader(base_path: Path | str) -> IndexLoader:
    """
    Load the current generation and install it as the global IndexLoader.

    The previous instance keeps serving until the new one has loaded.

    Args:
        base_path: Base path containing the index/ directory

    Returns:
        Initialized IndexLoader instance
    """
    global _loader
    loader = IndexLoader(base_path)
    loader.load()
    _loader = loader
    return _loader


def reset_loader() -> None:
    """Drop the global IndexLoader (mainly for testing)."""
    global _loader
    _loader = None
