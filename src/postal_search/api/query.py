"""
Keyword search over the bigram index.

A keyword is stripped of whitespace and split into single characters. Each
character selects every bigram key that contains it; a record matches when it
is selected for every character (AND). Matching ids are deduplicated, looked
up in the record store and returned sorted by their formatted text.
"""

import logging
import re
from collections.abc import Iterable, Mapping

from postal_search.api.loader import IndexLoader
from postal_search.api.models import AddressItem, SearchResponse
from postal_search.records import AddressRecord

logger = logging.getLogger(__name__)

# \s covers the full-width space (U+3000) for str patterns
WHITESPACE_PATTERN = re.compile(r"\s+")

NO_MATCH_MESSAGE = "No addresses matched"


def normalize_keyword(keyword: str) -> str:
    """Remove every whitespace character from the keyword."""
    return WHITESPACE_PATTERN.sub("", keyword)


def split_keyword(keyword: str) -> list[str]:
    """
    Normalize a keyword and split it into single characters.

    Example:
        >>> split_keyword("東 京　都")
        ['東', '京', '都']
    """
    return list(normalize_keyword(keyword))


class QueryEngine:
    """
    Execute keyword queries against one index generation.

    Usage:
        engine = QueryEngine(index, records)
        engine.search("千代田")
    """

    def __init__(
        self,
        index: Mapping[str, list[int]],
        records: Mapping[int, AddressRecord] | Iterable[AddressRecord],
    ):
        """
        Args:
            index: Bigram → record ids
            records: Records keyed by unique_id, or any iterable of records
        """
        self.index = index
        if isinstance(records, Mapping):
            self.records = records
        else:
            self.records = {record.unique_id: record for record in records}

    def candidate_ids(self, char: str) -> set[int]:
        """Ids attached to every bigram key containing ``char``."""
        candidates: set[int] = set()
        for key, ids in self.index.items():
            if char in key:
                candidates.update(ids)
        return candidates

    def matching_ids(self, chars: list[str]) -> set[int]:
        """
        AND-intersect the per-character candidate sets.

        Args:
            chars: Single-character keyword tokens

        Returns:
            Ids selected for every token (empty for no tokens)
        """
        matched: set[int] | None = None
        for char in chars:
            candidates = self.candidate_ids(char)
            if matched is None:
                matched = candidates
            else:
                matched &= candidates
            if not matched:
                break
        return matched or set()

    def search_records(self, keyword: str) -> list[AddressRecord]:
        """
        Find the records matching a keyword.

        Args:
            keyword: Raw keyword (whitespace is ignored)

        Returns:
            Matching records sorted by their formatted text
        """
        chars = split_keyword(keyword)
        if not chars:
            return []

        ids = self.matching_ids(chars)

        results = []
        for unique_id in ids:
            record = self.records.get(unique_id)
            if record is None:
                logger.debug(f"Index references unknown record id {unique_id}, skipping")
                continue
            results.append(record)

        results.sort(key=lambda r: r.formatted())
        return results

    def search(self, keyword: str) -> list[str]:
        """
        Find the formatted addresses matching a keyword.

        Args:
            keyword: Raw keyword (whitespace is ignored)

        Returns:
            Formatted address lines in ascending order
        """
        return [record.formatted() for record in self.search_records(keyword)]


class QueryService:
    """
    Service for executing searches against the loaded index generation.
    """

    def __init__(self, loader: IndexLoader):
        """
        Initialize the query service.

        Args:
            loader: IndexLoader instance with loaded indexes
        """
        self.loader = loader

    def search(self, keyword: str) -> SearchResponse:
        """
        Search addresses for a keyword.

        Args:
            keyword: Raw keyword

        Returns:
            SearchResponse with matching addresses

        Raises:
            RuntimeError: If no index has been loaded
        """
        engine = QueryEngine(self.loader.index, self.loader.records)
        records = engine.search_records(keyword)

        items = [
            AddressItem(
                unique_id=r.unique_id,
                zip_code=r.zip_code,
                prefecture=r.prefecture,
                detail_address1=r.detail_address1,
                detail_address2=r.detail_address2,
                formatted=r.formatted(),
            )
            for r in records
        ]

        logger.info(f"Search '{keyword}': {len(items)} hits")

        return SearchResponse(
            keyword=keyword,
            version=self.loader.version,
            count=len(items),
            items=items,
            message=None if items else NO_MATCH_MESSAGE,
        )
