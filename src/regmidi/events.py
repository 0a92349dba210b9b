"""Mapping of register-write requests to MIDI channel and meta events.

A request is ``(command, channel_select, data0, data1)``. The high nibble of
``command`` selects the message type and the low nibble of
``channel_select`` the channel. Data bytes are masked to 7 bits; nothing is
rejected. Requests with no MIDI encoding produce an empty byte string.
"""
from __future__ import annotations

from .vlq import encode_vlq

NOTE_OFF = 0x80
NOTE_ON = 0x90
CONTROL_CHANGE = 0xB0
PROGRAM_CHANGE = 0xC0
PITCH_BEND = 0xE0
SYSEX = 0xF0
SYSEX_ESCAPE = 0xF7
META = 0xFF

META_TEXT = 0x01
META_END_OF_TRACK = 0x2F

END_OF_TRACK = bytes([META, META_END_OF_TRACK, 0x00])


def _pitch_bend(channel: int, value: int) -> bytes:
    bend = value & 0x3FFF
    return bytes([PITCH_BEND | channel, bend & 0x7F, (bend >> 7) & 0x7F])


def _meta(meta_type: int) -> bytes:
    if meta_type & 0xFF == META_END_OF_TRACK:
        return END_OF_TRACK
    # Other meta types carry payloads the request cannot express.
    return b""


def encode_event(command: int, channel_select: int, data0: int, data1: int) -> bytes:
    """Return the MIDI bytes for one request, or ``b""`` if unsupported."""
    status = command & 0xF0
    channel = channel_select & 0x0F

    if status in (NOTE_ON, NOTE_OFF, CONTROL_CHANGE):
        return bytes([status | channel, data0 & 0x7F, data1 & 0x7F])
    if status == PROGRAM_CHANGE:
        # Program number travels in data1, matching the register layout.
        return bytes([PROGRAM_CHANGE | channel, data1 & 0x7F])
    if status == PITCH_BEND:
        return _pitch_bend(channel, data1)
    if command == META:
        return _meta(data0)
    # SysEx (0xF0/0xF7) and everything else: no transport.
    return b""


def text_event(payload: bytes) -> bytes:
    """Text meta event body: ``FF 01 <vlq length> <payload>``."""
    return bytes([META, META_TEXT]) + encode_vlq(len(payload)) + payload
