"""
Serialization of a bucketed hash table to an index file.

File layout::

    vectorSize,recordCount,tableSize
    bucketIndex,key f1 ... fD,key f1 ... fD,...
    ...

Bucket lines appear in ascending bucket order and empty buckets have no line,
which is what lets the reader stop scanning as soon as it has passed the
buckets it is looking for.
"""

import math
import tempfile
import time
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Tuple, Union

import numpy as np

from ..config import IndexConfig
from ..core.base import DatasetIndex
from ..core.dedup import VisitedLines
from ..core.hashing import bucket_index
from ..core.parsing import check_serializable_key, iter_lines, parse_fields, split_fields
from ..core.types import IndexStats
from ..errors import ConfigurationError, MalformedRecordError, OutputExistsError
from ..utils.logging_setup import get_logger, log_operation, log_progress
from .format import format_bucket_line, format_header

logger = get_logger(__name__)

NOT_HASHED = -1
SKIPPED = -2


@dataclass(frozen=True)
class BuildReport:
    """Summary of a finished index build."""
    output_path: Path
    strategy: str
    stats: IndexStats
    elapsed_seconds: float


class PersistedIndexBuilder(DatasetIndex):
    """
    Builds an index file from a word vector dataset.

    Two strategies produce byte-identical files:

    - ``rescan``: one pass over the dataset per bucket. Lines already placed
      are remembered in a ``VisitedLines`` bit-set and every line's bucket is
      cached in an integer array, so each line is parsed and hashed once and
      memory holds integers only.
    - ``grouped``: a single pass spills records into temporary partition files
      covering contiguous bucket ranges, which are then grouped and emitted in
      order.
    """

    def __init__(self, dataset_path: Union[str, Path], output_path: Union[str, Path],
                 config: Optional[IndexConfig] = None,
                 table_size: Optional[int] = None):
        super().__init__(dataset_path, config, table_size)
        self.output_path = Path(output_path)

    def build(self, strategy: Optional[str] = None, overwrite: bool = False) -> BuildReport:
        """
        Write the index file.

        Args:
            strategy: ``rescan`` or ``grouped``; defaults to the configured one
            overwrite: Replace an existing output file

        Returns:
            Build report with table diagnostics

        Raises:
            InvalidIndexError: If the dataset shape is invalid
            ConfigurationError: If the output path is the dataset itself
            OutputExistsError: If the output exists and overwrite is False
            MalformedRecordError: On a bad line while ``strict_records`` is set
        """
        self.require_valid()
        strategy = strategy or self.config.build_strategy
        if strategy == "rescan":
            write_buckets = self._write_rescan
        elif strategy == "grouped":
            write_buckets = self._write_grouped
        else:
            raise ValueError(f"Unknown build strategy: {strategy!r}")

        if self._output_is_dataset():
            raise ConfigurationError(
                f"Refusing to write the index over its own dataset: {self.output_path}",
                source=self.source,
            )
        if self.output_path.exists() and not overwrite:
            raise OutputExistsError(str(self.output_path))

        log_operation(logger, "build_index_file", source=self.source,
                      output=str(self.output_path), buckets=self.table_size, strategy=strategy)
        started = time.perf_counter()

        try:
            with open(self.output_path, "w", encoding="utf-8", newline="\n") as out:
                out.write(format_header(self.vector_size, self.record_count, self.table_size) + "\n")
                empty, longest, placed = write_buckets(out)
        except MalformedRecordError:
            # no half-written index files
            self.output_path.unlink()
            raise

        stats = IndexStats(
            vector_size=self.vector_size,
            record_count=self.record_count,
            table_size=self.table_size,
            empty_buckets=empty,
            longest_chain=longest,
            stored_records=placed,
        )
        elapsed = time.perf_counter() - started
        logger.info(f"Index file {self.output_path} written in {elapsed:.2f}s")
        return BuildReport(self.output_path, strategy, stats, elapsed)

    def _output_is_dataset(self) -> bool:
        if self.output_path.exists():
            return self.output_path.samefile(self.dataset_path)
        return self.output_path.resolve() == self.dataset_path.resolve()

    def _serialize_line(self, line_index: int, line: str) -> Optional[Tuple[int, str]]:
        """
        Validate a dataset line and compute its bucket.

        Returns:
            ``(bucket, serialized_record)`` or None for a skipped line
        """
        tokens = split_fields(line)
        try:
            parse_fields(tokens, self.vector_size, source=self.source, line_index=line_index)
            check_serializable_key(tokens[0], source=self.source, line_index=line_index)
        except MalformedRecordError as e:
            if self.config.strict_records:
                raise
            logger.warning(f"Skipping malformed line: {e.message}")
            return None
        return bucket_index(tokens[0], self.table_size), " ".join(tokens)

    def _write_rescan(self, out: TextIO) -> Tuple[int, int, int]:
        visited = VisitedLines(self.shape.line_count)
        line_buckets = np.full(self.shape.line_count, NOT_HASHED, dtype=np.int64)
        empty = longest = 0
        flush_interval = self.config.flush_interval

        for bucket in range(self.table_size):
            if visited.is_complete():
                # every line is placed; the remaining buckets are empty
                empty += self.table_size - bucket
                break

            chain: List[str] = []
            for line_index, line in iter_lines(self.dataset_path):
                if line_index in visited:
                    continue
                target = line_buckets[line_index]
                if target == NOT_HASHED:
                    entry = self._serialize_line(line_index, line)
                    if entry is None:
                        line_buckets[line_index] = SKIPPED
                        visited.add(line_index)
                        continue
                    target, serialized = entry
                    line_buckets[line_index] = target
                    if target == bucket:
                        chain.append(serialized)
                        visited.add(line_index)
                elif target == bucket:
                    chain.append(" ".join(split_fields(line)))
                    visited.add(line_index)

            if chain:
                out.write(format_bucket_line(bucket, chain) + "\n")
                longest = max(longest, len(chain))
            else:
                empty += 1

            if (bucket + 1) % flush_interval == 0:
                out.flush()
                log_progress(logger, "buckets", bucket + 1, self.table_size)

            # blank lines never get hashed; mark them so is_complete() can trigger
            if bucket == 0:
                self._mark_blank_lines(visited, line_buckets)

        placed = int(np.count_nonzero(line_buckets >= 0))
        return empty, longest, placed

    def _mark_blank_lines(self, visited: VisitedLines, line_buckets: np.ndarray) -> None:
        for line_index in np.flatnonzero(line_buckets == NOT_HASHED):
            visited.add(int(line_index))

    def _write_grouped(self, out: TextIO) -> Tuple[int, int, int]:
        partitions = min(self.config.spill_partitions, self.table_size)
        span = math.ceil(self.table_size / partitions)
        empty = self.table_size
        longest = placed = 0

        with tempfile.TemporaryDirectory(prefix="wvhash-") as tmp:
            paths = [Path(tmp) / f"part-{i:04d}.txt" for i in range(partitions)]
            with ExitStack() as stack:
                spills = [stack.enter_context(open(p, "w", encoding="utf-8", newline="\n"))
                          for p in paths]
                for line_index, line in iter_lines(self.dataset_path):
                    entry = self._serialize_line(line_index, line)
                    if entry is None:
                        continue
                    bucket, serialized = entry
                    spills[bucket // span].write(f"{bucket},{serialized}\n")
                    placed += 1
            logger.debug(f"Spilled {placed} records into {partitions} partitions")

            for done, path in enumerate(paths, start=1):
                groups: Dict[int, List[str]] = {}
                with open(path, "r", encoding="utf-8") as f:
                    for row in f:
                        bucket, serialized = row.rstrip("\n").split(",", 1)
                        groups.setdefault(int(bucket), []).append(serialized)
                for bucket in sorted(groups):
                    chain = groups[bucket]
                    out.write(format_bucket_line(bucket, chain) + "\n")
                    longest = max(longest, len(chain))
                    empty -= 1
                out.flush()
                log_progress(logger, "partitions", done, partitions)

        return empty, longest, placed
