"""
Postal code catalogue search.

Builds a character-bigram inverted index over the Japan Post address
catalogue and answers keyword queries against it.
"""

from postal_search.records import AddressRecord, RawRow

__version__ = "0.1.0"

__all__ = ["AddressRecord", "RawRow", "__version__"]
