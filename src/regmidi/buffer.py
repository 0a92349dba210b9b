"""Auto-growing byte buffer for incremental file encoding.

Positions inside the buffer are plain integer offsets. They stay valid
across growth because every access resolves them against the current
storage.
"""
from __future__ import annotations

import logging
import struct

from .errors import ResourceExhausted

logger = logging.getLogger(__name__)

DEFAULT_INITIAL_CAPACITY = 64 * 1024
DEFAULT_GROWTH_THRESHOLD = 1024
# Largest size a u32 chunk length can describe.
DEFAULT_MAX_CAPACITY = 0xFFFFFFFF


class GrowableBuffer:
    """Append-only byte storage with doubling growth.

    Capacity doubles while the free space is below ``growth_threshold``.
    Growth past ``max_capacity`` or a failed allocation raises
    :class:`ResourceExhausted` and leaves the written bytes untouched.
    """

    def __init__(
        self,
        initial_capacity: int = DEFAULT_INITIAL_CAPACITY,
        growth_threshold: int = DEFAULT_GROWTH_THRESHOLD,
        max_capacity: int = DEFAULT_MAX_CAPACITY,
    ) -> None:
        if initial_capacity <= 0:
            raise ValueError("initial_capacity must be positive")
        if growth_threshold < 0:
            raise ValueError("growth_threshold must be non-negative")
        if max_capacity < initial_capacity:
            raise ValueError("max_capacity must be >= initial_capacity")
        self._threshold = int(growth_threshold)
        self._max_capacity = int(max_capacity)
        try:
            self._data = bytearray(int(initial_capacity))
        except MemoryError as exc:
            raise ResourceExhausted(
                f"cannot allocate {initial_capacity} byte buffer"
            ) from exc
        self._length = 0
        self._released = False

    @property
    def capacity(self) -> int:
        return len(self._data)

    @property
    def released(self) -> bool:
        return self._released

    def length(self) -> int:
        """Number of bytes written so far (the next write offset)."""
        return self._length

    def __len__(self) -> int:
        return self._length

    def reserve(self, extra_bytes: int) -> None:
        """Make sure ``extra_bytes`` more bytes fit without further growth."""
        if extra_bytes < 0:
            raise ValueError("extra_bytes must be non-negative")
        self._ensure(extra_bytes)

    def append_byte(self, value: int) -> None:
        self._ensure(1)
        self._data[self._length] = value & 0xFF
        self._length += 1
        self._after_write()

    def append_bytes(self, data: bytes) -> None:
        n = len(data)
        if n == 0:
            return
        self._ensure(n)
        self._data[self._length:self._length + n] = data
        self._length += n
        self._after_write()

    def append_u16be(self, value: int) -> None:
        self.append_bytes(struct.pack(">H", value & 0xFFFF))

    def append_u32be(self, value: int) -> None:
        self.append_bytes(struct.pack(">I", value & 0xFFFFFFFF))

    def patch_u32be(self, offset: int, value: int) -> None:
        """Overwrite four already-written bytes at ``offset``."""
        self._check_live()
        if offset < 0 or offset + 4 > self._length:
            raise ValueError(
                f"patch offset {offset} outside written range 0..{self._length}"
            )
        self._data[offset:offset + 4] = struct.pack(">I", value & 0xFFFFFFFF)

    def getvalue(self) -> bytes:
        """Copy of bytes ``0 .. length``."""
        self._check_live()
        return bytes(memoryview(self._data)[:self._length])

    def release(self) -> None:
        self._data = bytearray()
        self._released = True

    def _check_live(self) -> None:
        if self._released:
            raise ValueError("buffer has been released")

    def _ensure(self, n: int) -> None:
        self._check_live()
        needed = self._length + n
        if needed > len(self._data):
            new_cap = max(len(self._data), 1)
            while new_cap < needed:
                new_cap *= 2
            self._grow_to(min(new_cap, max(needed, self._max_capacity)))

    def _after_write(self) -> None:
        # Keep at least `threshold` bytes free so small appends rarely grow.
        while (
            len(self._data) - self._length < self._threshold
            and len(self._data) < self._max_capacity
        ):
            self._grow_to(min(len(self._data) * 2, self._max_capacity))

    def _grow_to(self, new_capacity: int) -> None:
        old = len(self._data)
        if new_capacity > self._max_capacity:
            raise ResourceExhausted(
                f"buffer would exceed max capacity {self._max_capacity} bytes"
            )
        try:
            self._data.extend(bytes(new_capacity - old))
        except MemoryError as exc:
            raise ResourceExhausted(
                f"cannot grow buffer from {old} to {new_capacity} bytes"
            ) from exc
        logger.debug("buffer grown %d -> %d bytes", old, new_capacity)
