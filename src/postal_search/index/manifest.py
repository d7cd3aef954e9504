"""
Index manifest.

``index/manifest.json`` names the current index version and remembers the
recent ones. A rebuild writes its record store and bigram index into a fresh
``index/{version}/`` directory first; publishing that version here is the
single step that makes it current, so readers resolving both artifacts through
the manifest never pair stores from different builds.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path

from postal_search.storage.layout import StorageLayout

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class IndexVersion:
    """
    One published build.

    Attributes:
        version: Version identifier (e.g. "20251024T120000000000Z")
        records_path: Record store path, relative to the base path
        index_path: Bigram index path, relative to the base path
        record_count: Canonical records in the build
        bigram_count: Distinct bigrams in the build
        created_at: ISO timestamp of the build
    """

    version: str
    records_path: str
    index_path: str
    record_count: int = 0
    bigram_count: int = 0
    created_at: str = field(default_factory=_utc_now)

    def to_dict(self) -> dict[str, str | int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "IndexVersion":
        """Rebuild an entry from manifest JSON, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        entry = {key: value for key, value in data.items() if key in known}
        if not entry.get("created_at"):
            entry.pop("created_at", None)
        return cls(**entry)


class Manifest:
    """
    Read and update the manifest of published index versions.

    Usage:
        manifest = Manifest(base_path)
        manifest.load()
        current = manifest.get_current_version()
    """

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path)
        self.layout = StorageLayout(self.base_path)
        self.manifest_path = self.layout.manifest_path
        self.current_version: str | None = None
        self.versions: list[IndexVersion] = []

    def load(self) -> None:
        """Read the manifest; a missing file means nothing has been published."""
        if not self.manifest_path.exists():
            logger.info("No manifest found, starting fresh")
            self.current_version = None
            self.versions = []
            return

        data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        self.current_version = data.get("current_version")
        self.versions = [IndexVersion.from_dict(v) for v in data.get("versions", [])]

        logger.info(
            f"Loaded manifest {self.manifest_path}: current={self.current_version}, "
            f"{len(self.versions)} versions"
        )

    def save(self) -> None:
        """Write the manifest through a temporary file and an atomic rename."""
        payload = json.dumps(
            {
                "current_version": self.current_version,
                "versions": [v.to_dict() for v in self.versions],
            },
            indent=2,
            ensure_ascii=False,
        )

        self.manifest_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.manifest_path.with_suffix(".tmp")
        temp_path.write_text(payload, encoding="utf-8")
        temp_path.replace(self.manifest_path)

        logger.info(f"Saved manifest with {len(self.versions)} versions")

    def add_version(self, version: IndexVersion) -> None:
        """Record a version, replacing an entry with the same identifier."""
        if self.get_version(version.version) is not None:
            logger.warning(f"Version {version.version} already exists, replacing")
        self.versions = [v for v in self.versions if v.version != version.version]
        self.versions.append(version)

    def set_current_version(self, version: str) -> None:
        """
        Point the manifest at a known version.

        Raises:
            ValueError: If the version is not in the manifest
        """
        if self.get_version(version) is None:
            raise ValueError(f"Version {version} not found in manifest")

        logger.info(f"Current version: {self.current_version} → {version}")
        self.current_version = version

    def get_version(self, version: str) -> IndexVersion | None:
        return next((v for v in self.versions if v.version == version), None)

    def get_current_version(self) -> IndexVersion | None:
        if self.current_version is None:
            return None
        return self.get_version(self.current_version)

    def list_versions(self) -> list[str]:
        """Version identifiers, oldest build first."""
        return [v.version for v in self._by_age()]

    def create_version_from_build(
        self, version: str, record_count: int = 0, bigram_count: int = 0
    ) -> IndexVersion:
        """Describe a build written to the standard layout under ``version``."""
        return IndexVersion(
            version=version,
            records_path=self.layout.relative(self.layout.get_records_path(version)),
            index_path=self.layout.relative(self.layout.get_index_path(version)),
            record_count=record_count,
            bigram_count=bigram_count,
        )

    def publish_version(
        self, version: str, record_count: int = 0, bigram_count: int = 0
    ) -> IndexVersion:
        """
        Add a freshly built version, make it current and save.

        Args:
            version: Version identifier
            record_count: Records written by the build
            bigram_count: Distinct bigrams written by the build

        Returns:
            The published IndexVersion
        """
        entry = self.create_version_from_build(
            version, record_count=record_count, bigram_count=bigram_count
        )
        self.add_version(entry)
        self.set_current_version(version)
        self.save()

        logger.info(f"Published version {version}")
        return entry

    def cleanup_old_versions(self, keep_last_n: int = 5) -> list[str]:
        """
        Drop all but the newest ``keep_last_n`` versions from the manifest.

        The current version survives even when it is not among the newest.
        Only the manifest is changed; callers save it and remove the dropped
        version directories.

        Returns:
            Identifiers of the dropped versions
        """
        newest_first = list(reversed(self._by_age()))
        keep = {v.version for v in newest_first[:keep_last_n]}
        if self.current_version is not None:
            keep.add(self.current_version)

        removed = [v.version for v in newest_first if v.version not in keep]
        if removed:
            self.versions = [v for v in self.versions if v.version in keep]
            logger.info(f"Dropped {len(removed)} old versions from manifest: {removed}")
        return removed

    def _by_age(self) -> list[IndexVersion]:
        return sorted(self.versions, key=lambda v: v.created_at)
