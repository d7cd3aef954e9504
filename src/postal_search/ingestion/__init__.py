"""
Source ingestion.

Handles fetching the upstream catalogue and merging continuation rows.
"""

from .merger import RecordMerger, should_merge
from .source import DownloadError, SourceFetcher

__all__ = ["DownloadError", "RecordMerger", "SourceFetcher", "should_merge"]
