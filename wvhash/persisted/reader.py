"""
Read path for index files written by ``PersistedIndexBuilder``.

Only the header is read at construction. A lookup hashes its keys, then walks
the bucket lines forward exactly once: bucket lines are sorted, so the scan
starts with the smaller of the two target buckets, continues to the larger
one, and stops as soon as a line's bucket index passes the target. The file is
never rewound.
"""

from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Sequence, Tuple, Union

from ..core.base import DatasetShape, HashIndex
from ..core.types import Comparison, IndexStats, LookupResult
from ..errors import IndexFormatError
from ..utils.logging_setup import get_logger
from .format import bucket_of_line, decode_line, parse_header, record_key, split_bucket_records

logger = get_logger(__name__)


class _BucketLineScanner:
    """Forward-only cursor over the bucket lines of an open index file."""

    def __init__(self, handle: BinaryIO, file_path: str):
        self._handle = handle
        self._file_path = file_path
        self._pending: Optional[Tuple[int, str]] = None
        self.line_number = 1  # header already consumed
        self.lines_read = 0

    def _next(self) -> Optional[Tuple[int, str]]:
        if self._pending is not None:
            pending, self._pending = self._pending, None
            return pending
        while True:
            raw = self._handle.readline()
            if not raw:
                return None
            self.line_number += 1
            line = decode_line(raw, self._file_path, self.line_number)
            if not line.strip():
                continue
            self.lines_read += 1
            return bucket_of_line(line, self._file_path, self.line_number), line

    def seek_bucket(self, target: int) -> Optional[str]:
        """
        Advance to the line of bucket ``target``.

        Returns:
            The bucket line, or None when the bucket has no line. A line that
            overshoots the target is kept for the next call.
        """
        while True:
            entry = self._next()
            if entry is None:
                return None
            bucket, line = entry
            if bucket == target:
                return line
            if bucket > target:
                self._pending = entry
                return None


class PersistedIndexReader(HashIndex):
    """
    Query an index file without loading it.

    Usage::

        reader = PersistedIndexReader("vectors.idx")
        result = reader.compare("cat", "dog")
    """

    def __init__(self, index_path: Union[str, Path]):
        self.index_path = Path(index_path)
        self.lines_scanned = 0
        try:
            with open(self.index_path, "rb") as f:
                header = decode_line(f.readline(), str(index_path), 1)
        except OSError as e:
            logger.error(f"Opening {index_path} failed: {e}")
            super().__init__(DatasetShape.invalid(f"cannot read {index_path}: {e}"), 0, str(index_path))
            return

        vector_size, record_count, table_size = parse_header(header, str(index_path))
        shape = DatasetShape(vector_size, record_count)
        if not shape.is_valid or table_size < 1:
            shape = DatasetShape(vector_size, record_count,
                                 reason=f"header of {index_path} describes an empty table")
        super().__init__(shape, table_size, str(index_path))
        logger.info(
            f"Index file {index_path}: {record_count} word vectors with "
            f"{vector_size} dimensions in {table_size} buckets"
        )

    def _parse_vector(self, serialized: str, line_number: int) -> Tuple[float, ...]:
        values = serialized.split()[1:]
        if len(values) != self.vector_size:
            raise IndexFormatError(
                f"Record {record_key(serialized)!r} has {len(values)} values, "
                f"expected {self.vector_size}",
                file_path=self.source,
                line_number=line_number,
            )
        try:
            return tuple(float(v) for v in values)
        except ValueError as e:
            raise IndexFormatError(f"Non-numeric value in record: {e}",
                                   file_path=self.source, line_number=line_number)

    def _find_in_line(self, line: str, keys: Sequence[str], line_number: int) -> List[Optional[Tuple[float, ...]]]:
        """Resolve every key against one bucket line, stopping once all are found."""
        vectors: List[Optional[Tuple[float, ...]]] = [None] * len(keys)
        remaining = len(keys)
        for serialized in split_bucket_records(line):
            key = record_key(serialized)
            for i, wanted in enumerate(keys):
                if vectors[i] is None and key == wanted:
                    vectors[i] = self._parse_vector(serialized, line_number)
                    remaining -= 1
            if remaining == 0:
                break
        return vectors

    def lookup_pair(self, first: str, second: str) -> Tuple[LookupResult, LookupResult]:
        """
        Look up two keys with a single forward scan of the file.

        Returns:
            Lookup results in query order
        """
        keys = (first, second)
        buckets = (self.bucket_for(first), self.bucket_for(second))
        vectors: List[Optional[Tuple[float, ...]]] = [None, None]

        with open(self.index_path, "rb") as f:
            f.readline()  # header
            scanner = _BucketLineScanner(f, self.source)
            if buckets[0] == buckets[1]:
                line = scanner.seek_bucket(buckets[0])
                if line is not None:
                    vectors = self._find_in_line(line, keys, scanner.line_number)
            else:
                order = (0, 1) if buckets[0] < buckets[1] else (1, 0)
                for i in order:
                    line = scanner.seek_bucket(buckets[i])
                    if line is not None:
                        vectors[i] = self._find_in_line(line, [keys[i]], scanner.line_number)[0]
            self.lines_scanned = scanner.lines_read

        logger.debug(f"Lookup of {keys} read {self.lines_scanned} bucket lines")
        return (
            LookupResult(keys[0], vectors[0], buckets[0]),
            LookupResult(keys[1], vectors[1], buckets[1]),
        )

    def lookup(self, key: str) -> LookupResult:
        """Look up a single key."""
        return self.lookup_pair(key, key)[0]

    def compare(self, first: str, second: str) -> Comparison:
        """Look up both keys and compute their similarity."""
        return self.compare_results(*self.lookup_pair(first, second))

    def iter_buckets(self) -> Iterator[Tuple[int, List[str]]]:
        """Yield ``(bucket, serialized_records)`` for every bucket line."""
        self.require_valid()
        with open(self.index_path, "rb") as f:
            f.readline()
            for line_number, raw in enumerate(f, start=2):
                line = decode_line(raw, self.source, line_number)
                if not line.strip():
                    continue
                yield bucket_of_line(line, self.source, line_number), split_bucket_records(line)

    def stats(self) -> IndexStats:
        """Compute table diagnostics with a full scan of the file."""
        non_empty = longest = stored = 0
        previous = -1
        for bucket, records in self.iter_buckets():
            if bucket <= previous or bucket >= self.table_size:
                raise IndexFormatError(
                    f"Bucket {bucket} out of order or outside the table",
                    file_path=self.source,
                )
            previous = bucket
            non_empty += 1
            stored += len(records)
            longest = max(longest, len(records))
        return IndexStats(
            vector_size=self.vector_size,
            record_count=self.record_count,
            table_size=self.table_size,
            empty_buckets=self.table_size - non_empty,
            longest_chain=longest,
            stored_records=stored,
        )
