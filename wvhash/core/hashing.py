# wvhash/core/hashing.py
"""
Bucket hash for word keys.

The hash multiplies every byte of the key by a prime taken from a fixed,
rotating list and sums the products. Bytes are read as signed 8-bit values and
the remainder keeps the sign of the sum, so non-ASCII keys (whose UTF-8 bytes
are >= 0x80) can produce a negative remainder; those land in bucket 0. This
matches the bucket layout of index files written by earlier tooling, which
means existing files stay readable.
"""
from __future__ import annotations

from typing import Tuple

PRIMES: Tuple[int, ...] = (179, 181, 191, 193, 197, 199, 211, 223, 227, 229)


def key_hash(key: str) -> int:
    """Raw (unreduced) hash of ``key``; may be negative."""
    total = 0
    for position, byte in enumerate(key.encode("utf-8")):
        if byte > 127:
            byte -= 256
        # rotation restarts at the first prime every len(PRIMES) bytes
        total += byte * PRIMES[position % len(PRIMES)]
    return total


def bucket_index(key: str, table_size: int) -> int:
    """
    Map ``key`` to a bucket in ``[0, table_size)``.

    Args:
        key: Word to hash
        table_size: Number of buckets, must be >= 1

    Returns:
        Bucket index
    """
    if table_size < 1:
        raise ValueError(f"table_size must be >= 1, got {table_size}")
    total = key_hash(key)
    # truncated remainder: sign follows the dividend
    index = abs(total) % table_size
    if total < 0:
        index = -index
    if index < 0:
        return 0
    if index > table_size - 1:
        return table_size - 1
    return index
