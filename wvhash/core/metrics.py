"""Vector similarity and distance measures."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np


def euclidean_norm(vector: Sequence[float]) -> float:
    """Euclidean (L2) norm of ``vector``."""
    return float(np.linalg.norm(np.asarray(vector, dtype=np.float64)))


def euclidean_distance(first: Sequence[float], second: Sequence[float]) -> float:
    """Euclidean distance between two vectors of equal length."""
    a = np.asarray(first, dtype=np.float64)
    b = np.asarray(second, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Vector shapes differ: {a.shape} vs {b.shape}")
    return float(np.linalg.norm(a - b))


def cosine_similarity(first: Sequence[float], second: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors of equal length.

    Returns ``nan`` when either vector has zero norm, where the angle is
    undefined.
    """
    a = np.asarray(first, dtype=np.float64)
    b = np.asarray(second, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Vector shapes differ: {a.shape} vs {b.shape}")
    denom = np.linalg.norm(a) * np.linalg.norm(b)
    if denom == 0:
        return math.nan
    return float(np.dot(a, b) / denom)
