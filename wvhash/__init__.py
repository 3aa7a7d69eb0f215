"""wvhash - word vector similarity through a chained hash table."""

__version__ = "0.1.0"

from .config import IndexConfig
from .core.types import Comparison, IndexStats, LookupResult, Record
from .errors import WordVectorIndexError
from .memory_index import InMemoryIndex
from .persisted.reader import PersistedIndexReader
from .persisted.writer import BuildReport, PersistedIndexBuilder

__all__ = [
    "IndexConfig",
    "InMemoryIndex",
    "PersistedIndexBuilder",
    "PersistedIndexReader",
    "BuildReport",
    "Comparison",
    "IndexStats",
    "LookupResult",
    "Record",
    "WordVectorIndexError",
    "__version__",
]
