"""
Address record types.

A ``RawRow`` is one line of the upstream catalogue; an ``AddressRecord`` is one
logical address after continuation rows have been merged.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class RawRow:
    """
    The columns of one catalogue row that the index uses.

    Attributes:
        zip_code: 7-digit postal code
        prefecture: Prefecture name
        detail_address1: City / ward name
        detail_address2: Town area, or a fragment of one
    """

    zip_code: str
    prefecture: str
    detail_address1: str
    detail_address2: str


@dataclass(frozen=True)
class AddressRecord:
    """
    One canonical address.

    Attributes:
        unique_id: Dense 1-based id, stable within one index version only
        zip_code: 7-digit postal code
        prefecture: Prefecture name
        detail_address1: City / ward name
        detail_address2: Town area, possibly merged from several rows
    """

    unique_id: int
    zip_code: str
    prefecture: str
    detail_address1: str
    detail_address2: str

    @property
    def address(self) -> str:
        """Searchable address text (prefecture + detail 1 + detail 2)."""
        return self.prefecture + self.detail_address1 + self.detail_address2

    def formatted(self) -> str:
        """
        Render the record as a search result line.

        Example:
            >>> AddressRecord(1, "1000001", "東京都", "千代田区", "千代田").formatted()
            '"1000001","東京都","千代田区","千代田"'
        """
        fields = (self.zip_code, self.prefecture, self.detail_address1, self.detail_address2)
        return ",".join(f'"{field}"' for field in fields)
