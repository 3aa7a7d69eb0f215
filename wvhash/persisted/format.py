"""
Index file line formats and the format sniffer.

Header: ``vectorSize,recordCount,tableSize``. Bucket line:
``bucketIndex,key f1 ... fD,key f1 ... fD,...``.
"""

from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..errors import IndexFormatError

HEADER_FIELDS = 3


def decode_line(raw: bytes, file_path: Optional[str] = None,
                line_number: Optional[int] = None) -> str:
    """Decode one raw line of an index file, which is always UTF-8."""
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise IndexFormatError(
            f"Line is not valid UTF-8: {e.reason} at byte {e.start}",
            file_path=file_path,
            line_number=line_number,
        )


def format_header(vector_size: int, record_count: int, table_size: int) -> str:
    return f"{vector_size},{record_count},{table_size}"


def parse_header(line: str, file_path: Optional[str] = None) -> Tuple[int, int, int]:
    """
    Parse a header line into ``(vector_size, record_count, table_size)``.

    Raises:
        IndexFormatError: Unless the line is three comma-separated integers
    """
    values = line.strip().split(",")
    if len(values) != HEADER_FIELDS or not all(_is_integer(v) for v in values):
        raise IndexFormatError(
            f"Header must be 'vectorSize,recordCount,tableSize', got {line.strip()!r}",
            file_path=file_path,
            line_number=1,
        )
    vector_size, record_count, table_size = (int(v) for v in values)
    return vector_size, record_count, table_size


def _is_integer(value: str) -> bool:
    return value.isdigit() and value.isascii()


def format_bucket_line(bucket: int, records: List[str]) -> str:
    return ",".join([str(bucket), *records])


def bucket_of_line(line: str, file_path: Optional[str] = None,
                   line_number: Optional[int] = None) -> int:
    """Read the leading ``bucketIndex,`` prefix of a bucket line."""
    prefix, sep, _ = line.partition(",")
    if not sep or not _is_integer(prefix):
        raise IndexFormatError(
            f"Bucket line must start with 'bucketIndex,', got {line[:40]!r}",
            file_path=file_path,
            line_number=line_number,
        )
    return int(prefix)


def split_bucket_records(line: str) -> List[str]:
    """Serialized records of a bucket line, in chain order."""
    return line.rstrip("\r\n").split(",")[1:]


def record_key(serialized: str) -> str:
    """Key of a serialized ``key f1 ... fD`` record."""
    return serialized.partition(" ")[0]


def looks_like_index_file(path: Union[str, Path]) -> bool:
    """
    Check whether ``path`` is an index file rather than a word vector dataset.

    True iff the first line is exactly three comma-separated non-negative
    integers. Unreadable files are not index files.
    """
    try:
        with open(path, "rb") as f:
            first_line = f.readline()
    except OSError:
        return False
    try:
        parse_header(decode_line(first_line))
    except IndexFormatError:
        return False
    return True
