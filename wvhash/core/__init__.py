"""Index core: shape detection, hashing, parsing, metrics and visited-line tracking."""

from .base import DatasetIndex, DatasetShape, HashIndex, detect_shape
from .dedup import VisitedLines
from .hashing import PRIMES, bucket_index
from .metrics import cosine_similarity, euclidean_distance, euclidean_norm

__all__ = [
    "DatasetIndex",
    "DatasetShape",
    "HashIndex",
    "detect_shape",
    "VisitedLines",
    "PRIMES",
    "bucket_index",
    "cosine_similarity",
    "euclidean_distance",
    "euclidean_norm",
]
