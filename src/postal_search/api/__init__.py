"""
API serving layer.

Handles keyword searches and index rebuild requests. The FastAPI app lives in
``postal_search.api.server``.
"""

from postal_search.api.loader import IndexLoader, get_loader, init_loader
from postal_search.api.models import AddressItem, IndexStats, RebuildResponse, SearchResponse
from postal_search.api.query import QueryEngine, QueryService, normalize_keyword, split_keyword

__all__ = [
    "IndexLoader",
    "get_loader",
    "init_loader",
    "AddressItem",
    "IndexStats",
    "RebuildResponse",
    "SearchResponse",
    "QueryEngine",
    "QueryService",
    "normalize_keyword",
    "split_keyword",
]
