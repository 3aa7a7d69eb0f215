"""
Shared index configuration: dataset shape detection, table sizing, the bucket
hash, and similarity computation over lookup results.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import IndexConfig
from ..errors import InvalidIndexError
from ..utils.logging_setup import get_logger
from .hashing import bucket_index
from .metrics import cosine_similarity, euclidean_distance
from .parsing import split_fields
from .types import Comparison, LookupResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class DatasetShape:
    """Vector size and record count of a dataset, detected once."""
    vector_size: int
    record_count: int
    line_count: int = 0
    reason: Optional[str] = None  # why the shape is invalid, if it is

    @property
    def is_valid(self) -> bool:
        return self.vector_size >= 1 and self.record_count >= 1

    @classmethod
    def invalid(cls, reason: str) -> 'DatasetShape':
        return cls(vector_size=-1, record_count=-1, reason=reason)


def detect_shape(path: Union[str, Path]) -> DatasetShape:
    """
    Detect the shape of a dataset file.

    The vector size is the number of fields after the key on the first
    non-blank line; the record count is the number of non-blank lines. An
    unreadable or empty file yields an invalid shape instead of raising.

    Args:
        path: Dataset file

    Returns:
        Detected shape
    """
    vector_size = None
    record_count = 0
    line_count = 0
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line_count, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                if vector_size is None:
                    vector_size = len(split_fields(line)) - 1
                record_count += 1
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Opening {path} failed: {e}")
        return DatasetShape.invalid(f"cannot read {path}: {e}")

    if vector_size is None:
        return DatasetShape.invalid(f"{path} contains no records")
    if vector_size < 1:
        return DatasetShape(vector_size, record_count, line_count,
                            reason=f"first line of {path} carries no vector values")

    logger.debug(f"Detected {record_count} vectors of size {vector_size} in {path}")
    return DatasetShape(vector_size, record_count, line_count)


class HashIndex:
    """
    Base class holding the fixed configuration of a hash index.

    Vector size, record count and table size are set once at construction and
    never change. An index with an invalid shape refuses every operation with
    ``InvalidIndexError``.
    """

    def __init__(self, shape: DatasetShape, table_size: int, source: str):
        self.shape = shape
        self.source = source
        self.table_size = table_size if shape.is_valid else 0

    @property
    def vector_size(self) -> int:
        return self.shape.vector_size

    @property
    def record_count(self) -> int:
        return self.shape.record_count

    @property
    def is_valid(self) -> bool:
        return self.shape.is_valid and self.table_size >= 1

    def require_valid(self) -> None:
        """Raise ``InvalidIndexError`` unless the index can be used."""
        if not self.is_valid:
            reason = self.shape.reason or "vector size and record count must be >= 1"
            raise InvalidIndexError(
                f"Index over {self.source} is invalid: {reason}",
                source=self.source,
                vector_size=self.vector_size,
                record_count=self.record_count,
            )

    def bucket_for(self, key: str) -> int:
        """Bucket index of ``key`` in this table."""
        self.require_valid()
        return bucket_index(key, self.table_size)

    def compare_results(self, first: LookupResult, second: LookupResult) -> Comparison:
        """Compute similarity metrics when both lookups resolved."""
        if not (first.found and second.found):
            return Comparison(first=first, second=second)
        return Comparison(
            first=first,
            second=second,
            cosine_similarity=cosine_similarity(first.vector, second.vector),
            euclidean_distance=euclidean_distance(first.vector, second.vector),
        )

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(source={self.source!r}, vector_size={self.vector_size}, "
                f"record_count={self.record_count}, table_size={self.table_size})")


class DatasetIndex(HashIndex):
    """A hash index whose shape comes from scanning a dataset file."""

    def __init__(self, dataset_path: Union[str, Path],
                 config: Optional[IndexConfig] = None,
                 table_size: Optional[int] = None):
        """
        Initialize from a dataset.

        Args:
            dataset_path: Word vector file
            config: Index configuration (defaults when None)
            table_size: Explicit bucket count, overriding the configuration
        """
        self.config = config or IndexConfig()
        self.dataset_path = Path(dataset_path)
        shape = detect_shape(self.dataset_path)
        if table_size is not None and table_size < 1:
            raise ValueError(f"table_size must be >= 1, got {table_size}")
        if shape.is_valid:
            size = table_size if table_size is not None else self.config.resolve_table_size(shape.record_count)
        else:
            size = 0
            logger.error(f"Invalid dataset {dataset_path}: {shape.reason}")
        super().__init__(shape, size, str(dataset_path))
