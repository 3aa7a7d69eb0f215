"""
Visited-line tracking for persisted index construction.

Line indices are dense integers bounded by the dataset's line count, so a
bytearray-backed bit-set is both the smallest and the fastest ordered set for
them.
"""

from typing import Iterator


class VisitedLines:
    """
    Bit-set over line indices ``0 .. capacity - 1``.

    - ``add`` is idempotent.
    - Membership and insertion are O(1); memory is ``capacity / 8`` bytes.
    - Iteration yields indices in ascending order.
    """
    __slots__ = ("capacity", "_bits", "_count")

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("capacity must be >= 0")
        self.capacity = capacity
        self._bits = bytearray((capacity + 7) // 8)
        self._count = 0

    def add(self, index: int) -> None:
        """Mark ``index`` as visited; no-op if already marked."""
        self._check(index)
        byte, mask = index >> 3, 1 << (index & 7)
        if not self._bits[byte] & mask:
            self._bits[byte] |= mask
            self._count += 1

    def __contains__(self, index: object) -> bool:
        if not isinstance(index, int) or index < 0 or index >= self.capacity:
            return False
        return bool(self._bits[index >> 3] & (1 << (index & 7)))

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[int]:
        for byte_pos, byte in enumerate(self._bits):
            if not byte:
                continue
            for bit in range(8):
                if byte & (1 << bit):
                    yield (byte_pos << 3) | bit

    def is_complete(self) -> bool:
        """True once every index below ``capacity`` has been visited."""
        return self._count == self.capacity

    def _check(self, index: int) -> None:
        if index < 0 or index >= self.capacity:
            raise ValueError(f"line index {index} outside [0, {self.capacity})")
