from __future__ import annotations

import random

import pytest

from regmidi.buffer import GrowableBuffer
from regmidi.errors import ResourceExhausted


def test_growth_past_one_megabyte_preserves_content():
    rng = random.Random(7)
    buf = GrowableBuffer(initial_capacity=16)
    expected = bytearray()
    while len(expected) < (1 << 20) + 12345:
        if rng.random() < 0.3:
            b = rng.randrange(256)
            buf.append_byte(b)
            expected.append(b)
        else:
            chunk = bytes(rng.randrange(256) for _ in range(rng.randrange(1, 700)))
            buf.append_bytes(chunk)
            expected.extend(chunk)

    assert buf.capacity > (1 << 20)
    assert len(buf) == len(expected)
    assert buf.getvalue() == bytes(expected)


def test_free_space_kept_above_threshold():
    buf = GrowableBuffer(initial_capacity=16, growth_threshold=1024)
    buf.append_byte(1)
    assert buf.capacity - buf.length() >= 1024
    # Doubling only: 16 * 2**n
    assert buf.capacity & (buf.capacity - 1) == 0


def test_recorded_offset_survives_growth():
    buf = GrowableBuffer(initial_capacity=16)
    buf.append_bytes(b"MTrk")
    offset = buf.length()
    buf.append_u32be(0)
    start_cap = buf.capacity
    payload = bytes(range(256)) * 400
    buf.append_bytes(payload)
    assert buf.capacity > start_cap

    buf.patch_u32be(offset, 0xDEADBEEF)
    data = buf.getvalue()
    assert data[:4] == b"MTrk"
    assert data[4:8] == bytes.fromhex("deadbeef")
    assert data[8:] == payload


def test_big_endian_helpers():
    buf = GrowableBuffer()
    buf.append_u16be(480)
    buf.append_u32be(6)
    assert buf.getvalue() == bytes.fromhex("01e000000006")


def test_max_capacity_raises_and_keeps_prefix():
    buf = GrowableBuffer(initial_capacity=8, growth_threshold=0, max_capacity=16)
    buf.append_bytes(b"0123456789abcdef")
    assert buf.capacity == 16
    with pytest.raises(ResourceExhausted):
        buf.append_byte(0x7F)
    with pytest.raises(ResourceExhausted):
        buf.reserve(1)
    assert buf.getvalue() == b"0123456789abcdef"


def test_reserve_grows_without_writing():
    buf = GrowableBuffer(initial_capacity=64, growth_threshold=0)
    buf.reserve(1000)
    assert buf.capacity >= 1000
    assert len(buf) == 0


def test_patch_outside_written_range():
    buf = GrowableBuffer()
    buf.append_bytes(b"abc")
    with pytest.raises(ValueError):
        buf.patch_u32be(0, 1)
    with pytest.raises(ValueError):
        buf.patch_u32be(-1, 1)


def test_released_buffer_rejects_use():
    buf = GrowableBuffer()
    buf.append_byte(1)
    buf.release()
    assert buf.released
    with pytest.raises(ValueError):
        buf.append_byte(2)
    with pytest.raises(ValueError):
        buf.getvalue()
