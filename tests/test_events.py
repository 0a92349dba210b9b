from __future__ import annotations

import pytest

from regmidi.events import END_OF_TRACK, SYSEX, SYSEX_ESCAPE, encode_event, text_event


@pytest.mark.parametrize(
    "request_,expected",
    [
        ((0x90, 0, 60, 100), "903c64"),
        ((0x80, 0, 60, 0), "803c00"),
        ((0xB0, 5, 7, 127), "b5077f"),
        ((0xC0, 2, 99, 0x85), "c205"),
        ((0xE0, 1, 0, 0x2000), "e10040"),
        ((0xE0, 1, 0, 0xFFFF), "e17f7f"),
        ((0xFF, 0, 0x2F, 0), "ff2f00"),
    ],
)
def test_supported_messages(request_, expected):
    assert encode_event(*request_) == bytes.fromhex(expected)


def test_inputs_are_masked_not_rejected():
    # low nibble of command ignored, channel from channel_select, 7-bit data
    assert encode_event(0x9F, 0x21, 0x1C3, 0xFF) == bytes.fromhex("91437f")
    # meta type is the low byte of data0
    assert encode_event(0xFF, 0, 0x12F, 0) == END_OF_TRACK


@pytest.mark.parametrize(
    "command,data0",
    [
        (0xFF, 0x01),
        (0xFF, 0x51),
        (SYSEX, 0),
        (SYSEX_ESCAPE, 0),
        (0xA0, 60),
        (0xD0, 10),
        (0xFE, 0x2F),
        (0x00, 0),
    ],
)
def test_unsupported_requests_encode_to_nothing(command, data0):
    assert encode_event(command, 0, data0, 1) == b""


def test_text_event_layout():
    assert text_event(b"abc") == bytes.fromhex("ff0103616263")
    long_payload = b"x" * 200
    assert text_event(long_payload)[:4] == bytes.fromhex("ff018148")
