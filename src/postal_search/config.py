"""
Configuration management for the postal-search system.

Settings are read from the environment (and an optional .env file) into an
explicit ``Config`` object that callers pass to the rebuild and search
triggers. There is no process-wide configuration instance.
"""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SourceConfig(BaseSettings):
    """Configuration for the upstream postal code catalogue."""

    url: str = Field(
        default="https://www.post.japanpost.jp/zipcode/dl/kogaki/zip/ken_all.zip",
        description="Download URL of the zipped catalogue",
    )
    archive_name: str = Field(
        default="KEN_ALL.ZIP", description="Local file name of the downloaded archive"
    )
    csv_name: str = Field(
        default="KEN_ALL.CSV", description="Name of the CSV member inside the archive"
    )
    encoding: str = Field(default="cp932", description="Character encoding of the CSV")
    download_timeout: float = Field(
        default=120.0, description="Download timeout in seconds"
    )

    # Fixed column positions in the KEN_ALL layout (0-based)
    zip_code_column: int = Field(default=2, description="Column holding the zip code")
    prefecture_column: int = Field(
        default=6, description="Column holding the prefecture"
    )
    detail_address1_column: int = Field(
        default=7, description="Column holding the city/ward"
    )
    detail_address2_column: int = Field(
        default=8, description="Column holding the town area (may be split across rows)"
    )

    model_config = SettingsConfigDict(env_prefix="SOURCE_")


class StorageConfig(BaseSettings):
    """Configuration for the storage layer."""

    base_path: Path = Field(
        default=Path("./data"), description="Base path for sources and indexes"
    )
    keep_versions: int = Field(
        default=5, description="Number of index versions kept in the manifest"
    )

    model_config = SettingsConfigDict(env_prefix="STORAGE_")


class IndexConfig(BaseSettings):
    """Configuration for index building."""

    compression_level: int = Field(
        default=6, description="Compression level (1-22 for zstd)"
    )

    model_config = SettingsConfigDict(env_prefix="INDEX_")


class ServerConfig(BaseSettings):
    """Configuration for the HTTP server."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class Config(BaseSettings):
    """Main configuration."""

    # Sub-configs
    source: SourceConfig = Field(default_factory=SourceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    # Global settings
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_nested_delimiter="__"
    )


def load_config(base_path: Path | str | None = None) -> Config:
    """
    Build a fresh configuration from the environment.

    Args:
        base_path: Optional override for ``storage.base_path``

    Returns:
        New Config instance
    """
    config = Config()
    if base_path is not None:
        config.storage.base_path = Path(base_path)
    return config
