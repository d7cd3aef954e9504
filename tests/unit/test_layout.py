"""
Unit tests for StorageLayout class.
"""

from pathlib import Path

import pytest

from postal_search.storage.layout import StorageLayout


@pytest.fixture
def layout(tmp_path):
    """Create a StorageLayout instance with temp storage."""
    return StorageLayout(tmp_path)


class TestStorageLayout:
    """Test StorageLayout path generation."""

    def test_initialization(self, tmp_path):
        layout = StorageLayout(tmp_path)

        assert layout.source_root == tmp_path / "source"
        assert layout.index_root == tmp_path / "index"
        assert layout.manifest_path == tmp_path / "index" / "manifest.json"

    def test_version_paths(self, layout, tmp_path):
        assert layout.get_records_path("v1") == tmp_path / "index" / "v1" / "records.parquet"
        assert layout.get_index_path("v1") == tmp_path / "index" / "v1" / "bigrams.tsv.zst"

    def test_source_path(self, layout, tmp_path):
        assert layout.get_source_path("KEN_ALL.CSV") == tmp_path / "source" / "KEN_ALL.CSV"

    def test_relative(self, layout):
        assert layout.relative(layout.get_records_path("v1")) == "index/v1/records.parquet"

    def test_relative_outside_base(self, layout):
        with pytest.raises(ValueError):
            layout.relative(Path("/elsewhere/file"))

    def test_ensure_source_dir(self, layout):
        path = layout.ensure_source_dir()

        assert path.is_dir()
        # Idempotent
        assert layout.ensure_source_dir() == path

    def test_remove_version(self, layout):
        records_path = layout.get_records_path("v1")
        records_path.parent.mkdir(parents=True)
        records_path.write_bytes(b"data")

        assert layout.remove_version("v1") is True
        assert not layout.get_version_path("v1").exists()

    def test_remove_missing_version(self, layout):
        assert layout.remove_version("v1") is False
