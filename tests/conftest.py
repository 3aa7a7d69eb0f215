"""
Shared fixtures for the wvhash tests.
"""

from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import pytest


SCENARIO_LINES = [
    "cat 1.0 2.0",
    "dog 3.0 4.0",
    "bird 0.0 0.0",
]


def write_dataset(path: Path, lines: List[str]) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def scenario_dataset(tmp_path):
    """Three records of dimension 2, including an all-zero vector."""
    return write_dataset(tmp_path / "scenario.txt", SCENARIO_LINES)


@pytest.fixture
def synthetic_vectors() -> Dict[str, Tuple[float, ...]]:
    """200 deterministic 8-dimensional word vectors."""
    rng = np.random.RandomState(42)
    vectors = {}
    for i in range(200):
        values = rng.randn(8)
        # round-trip through the text form so parsed values compare exactly
        vectors[f"word{i}"] = tuple(float(f"{v:.6f}") for v in values)
    return vectors


@pytest.fixture
def synthetic_dataset(tmp_path, synthetic_vectors):
    """Dataset file holding ``synthetic_vectors``."""
    lines = [
        " ".join([word, *(f"{v:.6f}" for v in vector)])
        for word, vector in synthetic_vectors.items()
    ]
    return write_dataset(tmp_path / "synthetic.txt", lines)
