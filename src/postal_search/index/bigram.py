"""
Character-bigram inverted index.

Maps every 2-character window of a record's address text to the ids of the
records containing it. Ids are appended once per occurrence, so a bigram that
appears twice in one address lists that record twice.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable

from postal_search.records import AddressRecord

logger = logging.getLogger(__name__)

BIGRAM_SIZE = 2

InvertedIndex = dict[str, list[int]]


def extract_bigrams(text: str) -> list[str]:
    """
    Split text into overlapping 2-character windows.

    Example:
        >>> extract_bigrams("東京都")
        ['東京', '京都']
    """
    return [text[i : i + BIGRAM_SIZE] for i in range(len(text) - BIGRAM_SIZE + 1)]


class BigramIndexBuilder:
    """
    Build a bigram inverted index from canonical address records.
    """

    def build(self, records: Iterable[AddressRecord]) -> InvertedIndex:
        """
        Build a fresh index over all records.

        Args:
            records: Canonical address records

        Returns:
            Mapping bigram → record ids in record order (duplicates kept)
        """
        index: defaultdict[str, list[int]] = defaultdict(list)
        num_records = 0

        for record in records:
            num_records += 1
            for bigram in extract_bigrams(record.address):
                index[bigram].append(record.unique_id)

        logger.info(f"Built bigram index: {num_records:,} records, {len(index):,} bigrams")
        return dict(index)
