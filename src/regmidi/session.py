"""Single-track Standard MIDI File session.

A session writes the ``MThd`` header and an ``MTrk`` chunk with a
placeholder length when opened, appends one (delta-time, event) pair per
encodable write, and on close appends End of Track, patches the track
length and hands the bytes to a sink.

Each :class:`MidiSession` owns its buffer, delay accumulator and recorded
offsets, so sessions are independent of each other.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from .buffer import GrowableBuffer
from .config import SessionConfig
from .errors import ResourceExhausted, SessionClosedError, SinkFailure
from .events import END_OF_TRACK, encode_event, text_event
from .sink import Sink, write_file
from .timebase import DelayAccumulator
from .vlq import encode_vlq

logger = logging.getLogger(__name__)

HEADER_CHUNK_ID = b"MThd"
TRACK_CHUNK_ID = b"MTrk"
HEADER_LENGTH = 6
SMF_FORMAT = 0
TRACK_COUNT = 1
TAG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def normalize_output_name(name: str, extension: str = ".mid") -> str:
    if name.endswith(extension):
        return name
    return name + extension


def format_tag(name: Optional[str], song_id: Optional[int], now: datetime) -> str:
    """Tag text stored in the track's text meta event."""
    stamp = now.strftime(TAG_TIME_FORMAT)
    name = name or ""
    if song_id is not None and song_id >= 0:
        return f"{name} — Song ID: {song_id & 0x7FF:03x} — Generated: {stamp}"
    return f"{name} — Generated: {stamp}"


class MidiSession:
    """One open MIDI file being encoded. Use :meth:`open` to create."""

    def __init__(self, path: str, config: SessionConfig, sink: Sink) -> None:
        self.path = path
        self.config = config
        self._sink = sink
        self._buffer = GrowableBuffer(
            initial_capacity=config.initial_capacity,
            growth_threshold=config.growth_threshold,
            max_capacity=config.max_capacity,
        )
        self._delay = DelayAccumulator(carry_remainder=config.carry_remainder)
        self._closed = False
        self.track_length_offset = -1
        self.track_data_start = -1

    @classmethod
    def open(
        cls,
        name: str,
        config: Optional[SessionConfig] = None,
        sink: Optional[Sink] = None,
    ) -> "MidiSession":
        cfg = config or SessionConfig()
        cfg.validate()
        session = cls(
            normalize_output_name(name, cfg.extension),
            cfg,
            sink if sink is not None else write_file,
        )
        session._write_preamble()
        logger.debug("opened %s (division=%d)", session.path, cfg.division)
        return session

    def _write_preamble(self) -> None:
        buf = self._buffer
        buf.append_bytes(HEADER_CHUNK_ID)
        buf.append_u32be(HEADER_LENGTH)
        buf.append_u16be(SMF_FORMAT)
        buf.append_u16be(TRACK_COUNT)
        buf.append_u16be(self.config.division)
        buf.append_bytes(TRACK_CHUNK_ID)
        self.track_length_offset = buf.length()
        buf.append_u32be(0)
        self.track_data_start = buf.length()

    # -- state ---------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_delay(self) -> int:
        return self._delay.pending

    def __len__(self) -> int:
        return self._buffer.length()

    def getvalue(self) -> bytes:
        """Bytes written so far; the track length is still the placeholder."""
        self._check_open()
        return self._buffer.getvalue()

    def _check_open(self) -> None:
        if self._closed:
            raise SessionClosedError(f"session for {self.path} is closed")

    def _emit(self, event: bytes) -> int:
        """Append delta-time + ``event``. Only call with non-empty events."""
        ticks = self._delay.flush_as_ticks()
        data = encode_vlq(ticks) + event
        try:
            self._buffer.append_bytes(data)
        except ResourceExhausted:
            logger.error("buffer exhausted while writing %s; aborting", self.path)
            self.abort()
            raise
        return len(data)

    # -- writes --------------------------------------------------------

    def add_delay(self, units: int) -> None:
        self._check_open()
        self._delay.add(units)

    def write_event(self, command: int, channel_select: int, data0: int, data1: int) -> int:
        """Encode one register write. Returns the number of bytes appended.

        Writes with no MIDI encoding append nothing and leave the pending
        delay for the next event.
        """
        self._check_open()
        event = encode_event(command, channel_select, data0, data1)
        if not event:
            logger.debug(
                "no encoding for command=0x%02X data0=0x%X; delay kept pending",
                command & 0xFF,
                data0,
            )
            return 0
        return self._emit(event)

    def write_tag(
        self,
        name: Optional[str],
        song_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        self._check_open()
        text = format_tag(name, song_id, now or datetime.now())
        return self._emit(text_event(text.encode("utf-8")))

    # Register-level operations that have no MIDI counterpart. They are
    # accepted so existing callers keep working.

    def poke8(self, offset: int, value: int) -> None:
        self._check_open()

    def poke32(self, offset: int, value: int) -> None:
        self._check_open()

    def datablock(self, *args: Any, **kwargs: Any) -> None:
        self._check_open()

    def set_loop(self) -> None:
        self._check_open()

    # -- lifecycle -----------------------------------------------------

    def close(self) -> bytes:
        """Finish the track, hand the file to the sink and return its bytes."""
        self._check_open()
        self._emit(END_OF_TRACK)
        track_length = self._buffer.length() - self.track_data_start
        self._buffer.patch_u32be(self.track_length_offset, track_length)
        data = self._buffer.getvalue()
        self._buffer.release()
        self._closed = True
        logger.debug("closed %s: track length %d", self.path, track_length)
        try:
            self._sink(self.path, data)
        except Exception as exc:
            raise SinkFailure(self.path, data, f"cannot write {self.path}: {exc}") from exc
        return data

    def abort(self) -> None:
        """Drop the session without writing anything."""
        if self._closed:
            return
        self._buffer.release()
        self._closed = True
        logger.debug("aborted %s", self.path)

    def __enter__(self) -> "MidiSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if not self._closed:
            if exc_type is None:
                self.close()
            else:
                self.abort()
        return False


# Function-style entry points, one per session operation.

def open_session(
    name: str,
    config: Optional[SessionConfig] = None,
    sink: Optional[Sink] = None,
) -> MidiSession:
    return MidiSession.open(name, config=config, sink=sink)


def add_delay(session: MidiSession, units: int) -> None:
    session.add_delay(units)


def write_event(session: MidiSession, command: int, channel_select: int, data0: int, data1: int) -> int:
    return session.write_event(command, channel_select, data0, data1)


def write_tag(
    session: MidiSession,
    name: Optional[str],
    song_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> int:
    return session.write_tag(name, song_id, now=now)


def close(session: MidiSession) -> bytes:
    return session.close()


def poke8(session: MidiSession, offset: int, value: int) -> None:
    session.poke8(offset, value)


def poke32(session: MidiSession, offset: int, value: int) -> None:
    session.poke32(offset, value)


def datablock(session: MidiSession, *args: Any, **kwargs: Any) -> None:
    session.datablock(*args, **kwargs)


def set_loop(session: MidiSession) -> None:
    session.set_loop()
