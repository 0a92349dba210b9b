"""
Register-write to Standard MIDI File encoder.

Contains the growable output buffer, VLQ codec, delay accumulator, event
mapping and the single-track file session.
"""

from .config import SessionConfig, load_session_config, session_config_from_dict
from .errors import (
    RegMidiError,
    ResourceExhausted,
    ScriptError,
    SessionClosedError,
    SinkFailure,
)
from .session import (
    MidiSession,
    add_delay,
    close,
    datablock,
    open_session,
    poke8,
    poke32,
    set_loop,
    write_event,
    write_tag,
)
from .vlq import decode_vlq, encode_vlq

__all__ = [
    "MidiSession",
    "RegMidiError",
    "ResourceExhausted",
    "ScriptError",
    "SessionClosedError",
    "SessionConfig",
    "SinkFailure",
    "add_delay",
    "close",
    "datablock",
    "decode_vlq",
    "encode_vlq",
    "load_session_config",
    "open_session",
    "poke8",
    "poke32",
    "session_config_from_dict",
    "set_loop",
    "write_event",
    "write_tag",
]
