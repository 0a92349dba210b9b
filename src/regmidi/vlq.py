"""MIDI variable-length quantities.

Delta-times and meta event lengths are stored big-endian in 7-bit groups;
every group except the last has the high bit set.
"""
from __future__ import annotations

from typing import Tuple

# Canonical SMF limit; larger values still encode (to 5 bytes).
MAX_CANONICAL = 0x0FFFFFFF
MAX_BYTES = 5


def encode_vlq(value: int) -> bytes:
    """Encode a non-negative integer as a MIDI variable-length quantity.

    Values above 0x0FFFFFFF are not clamped and produce a fifth byte.
    """
    if value < 0:
        raise ValueError(f"VLQ value must be non-negative, got {value}")
    result = bytearray()
    result.append(value & 0x7F)
    value >>= 7
    while value > 0:
        result.insert(0, (value & 0x7F) | 0x80)
        value >>= 7
    return bytes(result)


def decode_vlq(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode a VLQ starting at ``offset``.

    Returns ``(value, next_offset)``.
    """
    value = 0
    for i in range(MAX_BYTES):
        pos = offset + i
        if pos >= len(data):
            raise ValueError(f"truncated VLQ at offset {offset}")
        byte = data[pos]
        value = (value << 7) | (byte & 0x7F)
        if not byte & 0x80:
            return value, pos + 1
    raise ValueError(f"VLQ at offset {offset} longer than {MAX_BYTES} bytes")
