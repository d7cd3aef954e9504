"""
Storage layout management.

Directory structure under the base path:
    source/
      KEN_ALL.ZIP
      KEN_ALL.CSV
    index/
      manifest.json
      {version}/
        records.parquet
        bigrams.tsv.zst
"""

import shutil
from pathlib import Path

RECORDS_FILE_NAME = "records.parquet"
INDEX_FILE_NAME = "bigrams.tsv.zst"
MANIFEST_FILE_NAME = "manifest.json"


class StorageLayout:
    """
    Manages the directory structure for source files and index versions.
    """

    def __init__(self, base_path: Path):
        """
        Initialize storage layout manager.

        Args:
            base_path: Root directory for all data (e.g., ./data)
        """
        self.base_path = Path(base_path)
        self.source_root = self.base_path / "source"
        self.index_root = self.base_path / "index"

    @property
    def manifest_path(self) -> Path:
        """Path to the manifest that names the current index version."""
        return self.index_root / MANIFEST_FILE_NAME

    def get_source_path(self, file_name: str) -> Path:
        """
        Get the path of a downloaded or extracted source file.

        Example:
            >>> StorageLayout(Path("./data")).get_source_path("KEN_ALL.CSV")
            PosixPath('data/source/KEN_ALL.CSV')
        """
        return self.source_root / file_name

    def get_version_path(self, version: str) -> Path:
        """Get the directory holding one index version."""
        return self.index_root / version

    def get_records_path(self, version: str) -> Path:
        """
        Get the record store path for a version.

        Example:
            >>> StorageLayout(Path("./data")).get_records_path("20240101T000000000000Z")
            PosixPath('data/index/20240101T000000000000Z/records.parquet')
        """
        return self.get_version_path(version) / RECORDS_FILE_NAME

    def get_index_path(self, version: str) -> Path:
        """Get the bigram index store path for a version."""
        return self.get_version_path(version) / INDEX_FILE_NAME

    def relative(self, path: Path) -> str:
        """Express ``path`` relative to the base path (as stored in the manifest)."""
        return Path(path).relative_to(self.base_path).as_posix()

    def ensure_source_dir(self) -> Path:
        """Create the source directory if it doesn't exist."""
        self.source_root.mkdir(parents=True, exist_ok=True)
        return self.source_root


    def remove_version(self, version: str) -> bool:
        """
        Delete a version directory and everything in it.

        Returns:
            True if a directory was removed
        """
        path = self.get_version_path(version)
        if not path.is_dir():
            return False
        shutil.rmtree(path)
        return True
