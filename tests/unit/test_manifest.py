"""Tests for the index manifest."""

import json

import pytest

from postal_search.index import IndexVersion, Manifest


def make_version(version: str, created_at: str) -> IndexVersion:
    return IndexVersion(
        version=version,
        records_path=f"index/{version}/records.parquet",
        index_path=f"index/{version}/bigrams.tsv.zst",
        created_at=created_at,
    )


class TestIndexVersion:
    def test_dict_round_trip(self):
        version = IndexVersion("v1", "a", "b", record_count=3, bigram_count=10)

        restored = IndexVersion.from_dict(version.to_dict())

        assert restored.to_dict() == version.to_dict()

    def test_created_at_defaults(self):
        assert IndexVersion("v1", "a", "b").created_at

    def test_from_dict_tolerates_missing_and_extra_keys(self):
        restored = IndexVersion.from_dict(
            {"version": "v1", "records_path": "a", "index_path": "b", "note": "x"}
        )

        assert restored.record_count == 0
        assert restored.created_at


class TestManifest:
    def test_load_missing_starts_fresh(self, tmp_path):
        manifest = Manifest(tmp_path)
        manifest.load()

        assert manifest.current_version is None
        assert manifest.versions == []
        assert manifest.get_current_version() is None

    def test_publish_version(self, tmp_path):
        manifest = Manifest(tmp_path)
        published = manifest.publish_version("v1", record_count=5, bigram_count=42)

        assert published.records_path == "index/v1/records.parquet"
        assert published.index_path == "index/v1/bigrams.tsv.zst"

        reloaded = Manifest(tmp_path)
        reloaded.load()
        current = reloaded.get_current_version()

        assert current is not None
        assert current.version == "v1"
        assert current.record_count == 5
        assert current.bigram_count == 42

    def test_manifest_file_is_json(self, tmp_path):
        Manifest(tmp_path).publish_version("v1")

        data = json.loads((tmp_path / "index" / "manifest.json").read_text())

        assert data["current_version"] == "v1"
        assert len(data["versions"]) == 1
        assert not (tmp_path / "index" / "manifest.tmp").exists()

    def test_publish_flips_current(self, tmp_path):
        manifest = Manifest(tmp_path)
        manifest.publish_version("v1")
        manifest.publish_version("v2")

        assert manifest.current_version == "v2"
        assert set(manifest.list_versions()) == {"v1", "v2"}

    def test_set_unknown_version(self, tmp_path):
        manifest = Manifest(tmp_path)

        with pytest.raises(ValueError, match="not found in manifest"):
            manifest.set_current_version("missing")

    def test_add_existing_version_replaces(self, tmp_path):
        manifest = Manifest(tmp_path)
        manifest.add_version(make_version("v1", "2024-01-01T00:00:00+00:00"))
        manifest.add_version(make_version("v1", "2024-02-01T00:00:00+00:00"))

        assert len(manifest.versions) == 1
        assert manifest.get_version("v1").created_at == "2024-02-01T00:00:00+00:00"

    def test_list_versions_by_creation_time(self, tmp_path):
        manifest = Manifest(tmp_path)
        manifest.add_version(make_version("b", "2024-02-01T00:00:00+00:00"))
        manifest.add_version(make_version("a", "2024-03-01T00:00:00+00:00"))
        manifest.add_version(make_version("c", "2024-01-01T00:00:00+00:00"))

        assert manifest.list_versions() == ["c", "b", "a"]

    def test_cleanup_keeps_newest(self, tmp_path):
        manifest = Manifest(tmp_path)
        for i in range(4):
            manifest.add_version(make_version(f"v{i}", f"2024-0{i + 1}-01T00:00:00+00:00"))
        manifest.set_current_version("v3")

        removed = manifest.cleanup_old_versions(keep_last_n=2)

        assert sorted(removed) == ["v0", "v1"]
        assert sorted(manifest.list_versions()) == ["v2", "v3"]

    def test_cleanup_never_drops_current(self, tmp_path):
        manifest = Manifest(tmp_path)
        for i in range(3):
            manifest.add_version(make_version(f"v{i}", f"2024-0{i + 1}-01T00:00:00+00:00"))
        manifest.set_current_version("v0")

        removed = manifest.cleanup_old_versions(keep_last_n=1)

        assert removed == ["v1"]
        assert sorted(manifest.list_versions()) == ["v0", "v2"]

    def test_cleanup_nothing_to_do(self, tmp_path):
        manifest = Manifest(tmp_path)
        manifest.add_version(make_version("v0", "2024-01-01T00:00:00+00:00"))

        assert manifest.cleanup_old_versions(keep_last_n=5) == []
