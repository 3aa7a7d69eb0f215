"""Index files: building them from a dataset and querying them without loading."""

from .format import looks_like_index_file
from .reader import PersistedIndexReader
from .writer import BuildReport, PersistedIndexBuilder

__all__ = [
    "looks_like_index_file",
    "PersistedIndexReader",
    "PersistedIndexBuilder",
    "BuildReport",
]
