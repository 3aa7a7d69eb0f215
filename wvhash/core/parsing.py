"""
Dataset line parsing.

A dataset line is a key followed by exactly ``vector_size`` whitespace
separated numeric fields. Blank lines are ignored everywhere; line indices
handed out here are physical (0-based) line positions so that they stay
stable across repeated scans of the same file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from ..errors import MalformedRecordError
from .types import Record

PathLike = Union[str, Path]


def split_fields(line: str) -> List[str]:
    """Split a dataset line into its key and value tokens."""
    return line.split()


def parse_fields(
    tokens: List[str],
    vector_size: int,
    source: Optional[str] = None,
    line_index: Optional[int] = None,
) -> Record:
    """
    Build a record from already split tokens.

    Args:
        tokens: Key followed by the value tokens
        vector_size: Expected number of values
        source: Dataset path, for error messages
        line_index: 0-based physical line index, for error messages

    Returns:
        Parsed record

    Raises:
        MalformedRecordError: On a wrong field count or a non-numeric value
    """
    line_number = None if line_index is None else line_index + 1
    if len(tokens) != vector_size + 1:
        raise MalformedRecordError(
            f"Expected {vector_size} values after the key, found {max(0, len(tokens) - 1)}",
            file_path=source,
            line_number=line_number,
        )
    try:
        vector = tuple(float(token) for token in tokens[1:])
    except ValueError as e:
        raise MalformedRecordError(
            f"Non-numeric value for key {tokens[0]!r}: {e}",
            file_path=source,
            line_number=line_number,
        )
    return Record(key=tokens[0], vector=vector)


def parse_record(line: str, vector_size: int, **context) -> Record:
    """Parse a raw dataset line; see ``parse_fields`` for the error contract."""
    return parse_fields(split_fields(line), vector_size, **context)


def check_serializable_key(key: str, source: Optional[str] = None,
                           line_index: Optional[int] = None) -> None:
    """Reject keys that would break the comma-separated bucket-line format."""
    if "," in key:
        raise MalformedRecordError(
            f"Key {key!r} contains ',' and cannot be stored in an index file",
            file_path=source,
            line_number=None if line_index is None else line_index + 1,
        )


def iter_lines(path: PathLike) -> Iterator[Tuple[int, str]]:
    """
    Yield ``(line_index, line)`` for every non-blank line of ``path``.

    Trailing newlines are stripped; indices count blank lines too.
    """
    with open(path, "r", encoding="utf-8") as f:
        for line_index, line in enumerate(f):
            line = line.rstrip("\r\n")
            if line.strip():
                yield line_index, line


def iter_records(
    path: PathLike,
    vector_size: int,
    strict: bool = True,
    on_skip=None,
) -> Iterator[Tuple[int, Record]]:
    """
    Yield ``(line_index, record)`` for every record line of ``path``.

    Args:
        path: Dataset file
        vector_size: Expected number of values per line
        strict: Raise on malformed lines instead of skipping them
        on_skip: Called with the ``MalformedRecordError`` of each skipped line

    Yields:
        Line index and parsed record
    """
    source = str(path)
    for line_index, line in iter_lines(path):
        try:
            record = parse_record(line, vector_size, source=source, line_index=line_index)
        except MalformedRecordError as e:
            if strict:
                raise
            if on_skip is not None:
                on_skip(e)
            continue
        yield line_index, record
