"""
Hash table of word vectors held fully in memory.

Collisions are handled by chaining: every bucket is a list of records in
insertion order, created on first use.
"""

from pathlib import Path
from typing import Iterator, List, Optional, Union

from .config import IndexConfig
from .core.base import DatasetIndex
from .core.parsing import iter_records
from .core.types import Comparison, IndexStats, LookupResult, Record
from .errors import MalformedRecordError
from .utils.logging_setup import get_logger, log_operation

logger = get_logger(__name__)


class InMemoryIndex(DatasetIndex):
    """
    Word vectors of one dataset, bucketed in memory for a single session.

    Usage::

        index = InMemoryIndex("vectors.txt")
        index.build()
        result = index.compare("cat", "dog")
    """

    def __init__(self, dataset_path: Union[str, Path],
                 config: Optional[IndexConfig] = None,
                 table_size: Optional[int] = None):
        super().__init__(dataset_path, config, table_size)
        self._buckets: List[Optional[List[Record]]] = [None] * self.table_size
        self._size = 0
        self._built = False

    def build(self) -> 'InMemoryIndex':
        """
        Load the dataset into the table in one linear pass.

        Returns:
            self, for chaining

        Raises:
            InvalidIndexError: If the dataset shape is invalid
            MalformedRecordError: On a bad line while ``strict_records`` is set
        """
        self.require_valid()
        if self._built:
            return self
        log_operation(logger, "build_in_memory", source=self.source, buckets=self.table_size)

        saved_buckets = [list(chain) if chain else None for chain in self._buckets]
        saved_size = self._size
        try:
            for _, record in iter_records(self.dataset_path, self.vector_size,
                                          strict=self.config.strict_records,
                                          on_skip=self._skip):
                self.add(record)
        except MalformedRecordError:
            # a failed build leaves the table as it was
            self._buckets, self._size = saved_buckets, saved_size
            raise

        self._built = True
        logger.info(f"Loaded {self._size} word vectors into {self.table_size} buckets")
        return self

    def _skip(self, error) -> None:
        logger.warning(f"Skipping malformed line: {error.message}")

    def add(self, record: Record) -> int:
        """Append ``record`` to the tail of its bucket's chain; returns the bucket."""
        if record.dimension != self.vector_size:
            raise ValueError(
                f"Record {record.key!r} has {record.dimension} values, expected {self.vector_size}"
            )
        index = self.bucket_for(record.key)
        chain = self._buckets[index]
        if chain is None:
            chain = self._buckets[index] = []
        chain.append(record)
        self._size += 1
        return index

    def lookup(self, key: str) -> LookupResult:
        """
        Find the vector stored for ``key``.

        The first record in the chain with an equal key wins.
        """
        index = self.bucket_for(key)
        chain = self._buckets[index]
        if chain:
            for record in chain:
                if record.key == key:
                    return LookupResult(key=key, vector=record.vector, bucket=index)
        return LookupResult.missing(key, index)

    def compare(self, first: str, second: str) -> Comparison:
        """Look up both keys and compute their similarity."""
        return self.compare_results(self.lookup(first), self.lookup(second))

    def bucket(self, index: int) -> List[Record]:
        """Records of bucket ``index`` in chain order (empty list for an empty bucket)."""
        self.require_valid()
        if not 0 <= index < self.table_size:
            raise IndexError(f"Bucket {index} outside the table of {self.table_size} buckets")
        return list(self._buckets[index] or [])

    def bucket_sizes(self) -> List[int]:
        """Chain length of every bucket, computed by a full scan."""
        self.require_valid()
        return [len(chain) if chain else 0 for chain in self._buckets]

    def stats(self) -> IndexStats:
        """Compute table diagnostics (empty buckets, longest chain)."""
        sizes = self.bucket_sizes()
        return IndexStats(
            vector_size=self.vector_size,
            record_count=self.record_count,
            table_size=self.table_size,
            empty_buckets=sum(1 for size in sizes if size == 0),
            longest_chain=max(sizes, default=0),
            stored_records=self._size,
        )

    def __iter__(self) -> Iterator[Record]:
        for chain in self._buckets:
            if chain:
                yield from chain

    def __len__(self) -> int:
        return self._size

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key).found
