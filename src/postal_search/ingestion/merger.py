"""
Continuation-row merging.

The catalogue splits long town-area names across consecutive rows that share a
zip code. A split is recognised by an opening full-width bracket that is not
closed on the same row, e.g. zip codes 6050874, 6020847 and 9380162.
"""

import logging
from collections.abc import Iterable

from postal_search.records import AddressRecord, RawRow

logger = logging.getLogger(__name__)

OPEN_BRACKET = "（"
CLOSE_BRACKET = "）"


def should_merge(
    current: RawRow, next_row: RawRow, current_detail2: str, accumulator: str
) -> bool:
    """
    Decide whether ``current`` continues into ``next_row``.

    Rows merge only within one zip code, while a bracket is open (on this
    fragment or earlier in the accumulator) and this fragment does not close it.

    Args:
        current: Row being examined
        next_row: Row that follows it in file order
        current_detail2: Detail-2 fragment of ``current``
        accumulator: Fragments merged so far for the pending address

    Returns:
        True if ``current_detail2`` should be held back and joined with the next row
    """
    return (
        current.zip_code == next_row.zip_code
        and (OPEN_BRACKET in current_detail2 or OPEN_BRACKET in accumulator)
        and CLOSE_BRACKET not in current_detail2
    )


class RecordMerger:
    """
    Turn raw catalogue rows into one AddressRecord per logical address.

    Usage:
        merger = RecordMerger()
        records = merger.merge(rows)
    """

    def merge(self, rows: Iterable[RawRow]) -> list[AddressRecord]:
        """
        Merge rows in file order.

        Ids are assigned in emission order starting at 1, so they stay dense
        even when rows are folded together.

        Args:
            rows: Raw rows in file order

        Returns:
            Canonical address records
        """
        rows = list(rows)
        records: list[AddressRecord] = []
        accumulator = ""

        for i, current in enumerate(rows):
            current_detail2 = current.detail_address2

            if i < len(rows) - 1 and should_merge(
                current, rows[i + 1], current_detail2, accumulator
            ):
                accumulator += current_detail2
                continue

            # The last row is always emitted, even with an open bracket
            records.append(
                AddressRecord(
                    unique_id=len(records) + 1,
                    zip_code=current.zip_code,
                    prefecture=current.prefecture,
                    detail_address1=current.detail_address1,
                    detail_address2=accumulator + current_detail2,
                )
            )
            accumulator = ""

        logger.info(f"Merged {len(rows):,} rows into {len(records):,} records")
        return records
