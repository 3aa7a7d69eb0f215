"""
Result and record types shared by the in-memory and file-backed indexes.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Record:
    """One (key, vector) pair from the dataset."""
    key: str
    vector: Tuple[float, ...]

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class LookupResult:
    """
    Outcome of looking up one key.

    ``vector`` is None only when the key is absent; an all-zero vector is a
    legitimate hit.
    """
    key: str
    vector: Optional[Tuple[float, ...]]
    bucket: int

    @property
    def found(self) -> bool:
        return self.vector is not None

    @classmethod
    def missing(cls, key: str, bucket: int) -> 'LookupResult':
        return cls(key=key, vector=None, bucket=bucket)


@dataclass(frozen=True)
class Comparison:
    """Similarity between two looked-up keys."""
    first: LookupResult
    second: LookupResult
    cosine_similarity: Optional[float] = None
    euclidean_distance: Optional[float] = None

    @property
    def keys(self) -> Tuple[str, str]:
        return (self.first.key, self.second.key)

    @property
    def missing(self) -> List[str]:
        """Keys that could not be resolved, in query order."""
        return [r.key for r in (self.first, self.second) if not r.found]

    @property
    def ok(self) -> bool:
        return not self.missing

    def to_dict(self) -> Dict[str, Any]:
        return {
            'keys': list(self.keys),
            'missing': self.missing,
            'cosine_similarity': self.cosine_similarity,
            'euclidean_distance': self.euclidean_distance,
        }


@dataclass(frozen=True)
class IndexStats:
    """Diagnostics of a built index."""
    vector_size: int
    record_count: int
    table_size: int
    empty_buckets: int
    longest_chain: int
    stored_records: int = field(default=-1)

    def __post_init__(self):
        if self.stored_records < 0:
            object.__setattr__(self, 'stored_records', self.record_count)

    @property
    def load_factor(self) -> float:
        return self.record_count / self.table_size

    @property
    def empty_bucket_percentage(self) -> float:
        return 100.0 * self.empty_buckets / self.table_size

    @property
    def longest_chain_percentage(self) -> float:
        if self.stored_records == 0:
            return math.nan
        return 100.0 * self.longest_chain / self.stored_records

    def to_dict(self) -> Dict[str, Any]:
        return {
            'vector_size': self.vector_size,
            'record_count': self.record_count,
            'stored_records': self.stored_records,
            'table_size': self.table_size,
            'load_factor': self.load_factor,
            'empty_buckets': self.empty_buckets,
            'empty_bucket_percentage': self.empty_bucket_percentage,
            'longest_chain': self.longest_chain,
            'longest_chain_percentage': self.longest_chain_percentage,
        }
