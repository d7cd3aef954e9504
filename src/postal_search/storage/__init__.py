"""
Storage layer for record and index stores.

Handles the on-disk layout and the store implementations.
"""

from .layout import StorageLayout
from .stores import (
    IndexStore,
    InMemoryIndexStore,
    InMemoryRecordStore,
    ParquetRecordStore,
    RecordStore,
    TsvIndexStore,
)

__all__ = [
    "StorageLayout",
    "IndexStore",
    "RecordStore",
    "InMemoryIndexStore",
    "InMemoryRecordStore",
    "ParquetRecordStore",
    "TsvIndexStore",
]
