"""
Index building and management.

Handles the bigram inverted index, rebuild orchestration and the manifest.
"""

from .bigram import BigramIndexBuilder, InvertedIndex, extract_bigrams
from .builder import IndexBuilder
from .manifest import IndexVersion, Manifest

__all__ = [
    "BigramIndexBuilder",
    "InvertedIndex",
    "extract_bigrams",
    "IndexBuilder",
    "IndexVersion",
    "Manifest",
]
