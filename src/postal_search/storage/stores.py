"""
Record and index stores.

The rebuild and search pipelines only talk to the ``RecordStore`` and
``IndexStore`` protocols. File-backed stores write one version's artifacts:

- records.parquet: unique_id, zip_code, prefecture, detail_address1,
  detail_address2 (zstd-compressed Parquet)
- bigrams.tsv.zst: index_key \t unique_ids, ids comma-joined as decimal
  strings, zstd compressed

Both file stores overwrite atomically via a temporary file.
"""

import io
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import polars as pl
import zstandard as zstd

from postal_search.records import AddressRecord

logger = logging.getLogger(__name__)

RECORD_SCHEMA = {
    "unique_id": pl.Int64,
    "zip_code": pl.String,
    "prefecture": pl.String,
    "detail_address1": pl.String,
    "detail_address2": pl.String,
}

INDEX_SCHEMA = {
    "index_key": pl.String,
    "unique_ids": pl.String,
}


class RecordStore(Protocol):
    """Persistence of canonical address records."""

    def load_all_records(self) -> list[AddressRecord]: ...

    def save_all_records(self, records: Iterable[AddressRecord]) -> None: ...


class IndexStore(Protocol):
    """Persistence of the bigram inverted index."""

    def load_index(self) -> dict[str, list[int]]: ...

    def save_index(self, index: dict[str, list[int]]) -> None: ...


def _tmp_path(path: Path) -> Path:
    return path.with_name(path.name + ".tmp")


class ParquetRecordStore:
    """
    Record store backed by a single Parquet file.
    """

    def __init__(self, path: Path, compression_level: int = 6):
        """
        Args:
            path: Parquet file path
            compression_level: Zstd compression level
        """
        self.path = Path(path)
        self.compression_level = compression_level

    def save_all_records(self, records: Iterable[AddressRecord]) -> None:
        """Overwrite the store with ``records``."""
        rows = [
            {
                "unique_id": r.unique_id,
                "zip_code": r.zip_code,
                "prefecture": r.prefecture,
                "detail_address1": r.detail_address1,
                "detail_address2": r.detail_address2,
            }
            for r in records
        ]
        df = pl.DataFrame(rows, schema=RECORD_SCHEMA)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = _tmp_path(self.path)
        df.write_parquet(
            tmp_path, compression="zstd", compression_level=self.compression_level
        )
        tmp_path.replace(self.path)

        logger.info(f"Saved {df.height:,} records to {self.path}")

    def load_all_records(self) -> list[AddressRecord]:
        """
        Load every stored record.

        Raises:
            FileNotFoundError: If the store file does not exist
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Record store not found: {self.path}")

        df = pl.read_parquet(self.path)
        records = [AddressRecord(**row) for row in df.iter_rows(named=True)]

        logger.info(f"Loaded {len(records):,} records from {self.path}")
        return records


class TsvIndexStore:
    """
    Index store backed by a zstd-compressed TSV file.
    """

    def __init__(self, path: Path, compression_level: int = 6):
        """
        Args:
            path: Path of the .tsv.zst file
            compression_level: Zstd compression level
        """
        self.path = Path(path)
        self.compression_level = compression_level

    def save_index(self, index: dict[str, list[int]]) -> None:
        """Overwrite the store with ``index``."""
        df = pl.DataFrame(
            {
                "index_key": list(index.keys()),
                "unique_ids": [",".join(map(str, ids)) for ids in index.values()],
            },
            schema=INDEX_SCHEMA,
        )

        # Write to TSV via StringIO buffer
        buffer = io.StringIO()
        df.write_csv(file=buffer, separator="\t")
        tsv_bytes = buffer.getvalue().encode("utf-8")

        # Compress
        compressor = zstd.ZstdCompressor(level=self.compression_level)
        compressed_data = compressor.compress(tsv_bytes)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = _tmp_path(self.path)
        tmp_path.write_bytes(compressed_data)
        tmp_path.replace(self.path)

        original_size = len(tsv_bytes)
        compressed_size = len(compressed_data)
        ratio = original_size / compressed_size if compressed_size > 0 else 0

        logger.info(
            f"Saved bigram index: {len(index):,} bigrams, "
            f"{original_size:,} bytes → {compressed_size:,} bytes "
            f"(compression ratio: {ratio:.2f}x)"
        )

    def load_index(self) -> dict[str, list[int]]:
        """
        Load the full index.

        Raises:
            FileNotFoundError: If the store file does not exist
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Index store not found: {self.path}")

        decompressor = zstd.ZstdDecompressor()
        tsv_bytes = decompressor.decompress(self.path.read_bytes())

        df = pl.read_csv(tsv_bytes, separator="\t", schema=INDEX_SCHEMA)

        index = {
            key: [int(uid) for uid in ids.split(",")] if ids else []
            for key, ids in df.iter_rows()
        }

        logger.info(f"Loaded bigram index: {len(index):,} bigrams from {self.path}")
        return index


class InMemoryRecordStore:
    """Record store held in memory, for tests and ad-hoc pipelines."""

    def __init__(self, records: Iterable[AddressRecord] = ()):
        self._records = list(records)

    def save_all_records(self, records: Iterable[AddressRecord]) -> None:
        self._records = list(records)

    def load_all_records(self) -> list[AddressRecord]:
        return list(self._records)


class InMemoryIndexStore:
    """Index store held in memory, for tests and ad-hoc pipelines."""

    def __init__(self, index: dict[str, list[int]] | None = None):
        self._index = {key: list(ids) for key, ids in (index or {}).items()}

    def save_index(self, index: dict[str, list[int]]) -> None:
        self._index = {key: list(ids) for key, ids in index.items()}

    def load_index(self) -> dict[str, list[int]]:
        return {key: list(ids) for key, ids in self._index.items()}
