from __future__ import annotations


class RegMidiError(Exception):
    """Base error for the regmidi package."""


class ResourceExhausted(RegMidiError):
    """Raised when the output buffer cannot grow any further."""


class SinkFailure(RegMidiError):
    """Raised when the finished file cannot be persisted.

    The encoded bytes are kept on the exception so a caller can hand them
    to another sink.
    """

    def __init__(self, path: str, data: bytes, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.data = data


class SessionClosedError(RegMidiError):
    """Raised when a closed or aborted session is used again."""


class ScriptError(RegMidiError):
    """Raised when a render script cannot be interpreted."""
