"""
Source catalogue loader.

Downloads the zipped KEN_ALL catalogue from Japan Post, extracts the CSV and
reads the columns the index needs as RawRows in file order.
"""

import logging
import urllib.request
import zipfile
from collections.abc import Iterator
from http.client import HTTPException
from pathlib import Path

import polars as pl

from postal_search.config import Config
from postal_search.records import RawRow
from postal_search.storage.layout import StorageLayout

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """Raised when the source archive cannot be downloaded."""


class SourceFetcher:
    """
    Fetch and read the upstream postal code catalogue.

    Usage:
        fetcher = SourceFetcher(config)
        csv_path = fetcher.fetch()
        rows = list(fetcher.read_rows(csv_path))
    """

    def __init__(self, config: Config, layout: StorageLayout | None = None):
        """
        Initialize the fetcher.

        Args:
            config: Configuration (source URL, file names, encoding, columns)
            layout: Storage layout (defaults to one rooted at config.storage.base_path)
        """
        self.config = config
        self.source = config.source
        self.layout = layout or StorageLayout(config.storage.base_path)

    def fetch(self) -> Path:
        """Download and extract the catalogue, returning the CSV path."""
        archive_path = self.download()
        return self.extract(archive_path)

    def download(self) -> Path:
        """
        Download the archive, replacing any previous copy.

        The previous archive is only replaced once the body has been received
        in full (when the server announces a Content-Length).

        Returns:
            Path to the downloaded archive

        Raises:
            DownloadError: If the request fails or the body is truncated
        """
        self.layout.ensure_source_dir()
        archive_path = self.layout.get_source_path(self.source.archive_name)
        tmp_path = archive_path.with_suffix(".part")

        logger.info(f"Downloading {self.source.url} → {archive_path}")

        req = urllib.request.Request(self.source.url, headers={"User-Agent": "postal-search"})
        try:
            with urllib.request.urlopen(req, timeout=self.source.download_timeout) as response:
                total_size = int(response.headers.get("Content-Length", 0))
                downloaded = 0
                with open(tmp_path, "wb") as f:
                    while True:
                        chunk = response.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        f.write(chunk)
                        downloaded += len(chunk)
        except (OSError, HTTPException) as e:
            # URLError and socket timeouts are OSErrors
            tmp_path.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {self.source.url}: {e}") from e

        if total_size and downloaded != total_size:
            tmp_path.unlink(missing_ok=True)
            raise DownloadError(
                f"Incomplete download of {self.source.url}: "
                f"received {downloaded:,} of {total_size:,} bytes"
            )

        tmp_path.replace(archive_path)
        logger.info(f"Downloaded {downloaded:,} bytes")
        return archive_path

    def extract(self, archive_path: Path) -> Path:
        """
        Extract the catalogue CSV from the archive.

        Args:
            archive_path: Path to the zip archive

        Returns:
            Path to the extracted CSV

        Raises:
            FileNotFoundError: If the archive has no member named ``csv_name``
            DownloadError: If the archive is not a readable zip file
        """
        self.layout.ensure_source_dir()
        csv_path = self.layout.get_source_path(self.source.csv_name)

        try:
            with zipfile.ZipFile(archive_path, "r") as zf:
                # Member names differ in case between releases (KEN_ALL.CSV / ken_all.csv)
                members = {name.lower(): name for name in zf.namelist()}
                member = members.get(self.source.csv_name.lower())
                if member is None:
                    raise FileNotFoundError(
                        f"{self.source.csv_name} not found in {archive_path}"
                    )

                with zf.open(member) as src, open(csv_path, "wb") as dst:
                    while True:
                        chunk = src.read(CHUNK_SIZE)
                        if not chunk:
                            break
                        dst.write(chunk)
        except zipfile.BadZipFile as e:
            raise DownloadError(f"Corrupt source archive {archive_path}: {e}") from e

        logger.info(f"Extracted {member} → {csv_path}")
        return csv_path

    def read_frame(self, csv_path: Path) -> pl.DataFrame:
        """
        Read the four indexed columns of the catalogue.

        All values are kept as strings so zip codes keep their leading zeros.

        Args:
            csv_path: Path to the catalogue CSV

        Returns:
            DataFrame with zip_code, prefecture, detail_address1, detail_address2
        """
        if not Path(csv_path).exists():
            raise FileNotFoundError(f"Source CSV not found: {csv_path}")

        df = pl.read_csv(
            csv_path,
            has_header=False,
            encoding=self.source.encoding,
            infer_schema=False,
        )

        columns = df.columns
        df = df.select(
            pl.col(columns[self.source.zip_code_column]).alias("zip_code"),
            pl.col(columns[self.source.prefecture_column]).alias("prefecture"),
            pl.col(columns[self.source.detail_address1_column]).alias("detail_address1"),
            pl.col(columns[self.source.detail_address2_column]).alias("detail_address2"),
        ).fill_null("")

        logger.info(f"Read {df.height:,} rows from {csv_path}")
        return df

    def read_rows(self, csv_path: Path) -> Iterator[RawRow]:
        """
        Yield the catalogue rows in file order.

        Args:
            csv_path: Path to the catalogue CSV

        Yields:
            RawRow per CSV line
        """
        df = self.read_frame(csv_path)
        for row in df.iter_rows(named=True):
            yield RawRow(**row)
