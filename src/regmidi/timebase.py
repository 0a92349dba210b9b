from __future__ import annotations

"""
Timebase utilities: delay accumulation in sub-tick units and tick/ms
conversion for inspecting rendered files.

Delays arrive in sub-tick units, ten of which make one MIDI tick.
"""

SUBTICKS_PER_TICK = 10


class DelayAccumulator:
    """Pending elapsed time, flushed as whole ticks before each event.

    Amounts below one tick stay pending until enough time accumulates.
    Once a flush happens the sub-tick remainder is dropped, unless
    ``carry_remainder`` is set, in which case it stays pending.
    """

    def __init__(self, carry_remainder: bool = False) -> None:
        self.carry_remainder = carry_remainder
        self._pending = 0

    @property
    def pending(self) -> int:
        return self._pending

    def add(self, units: int) -> None:
        # Delays are u32 register values; wrap instead of rejecting.
        self._pending += int(units) & 0xFFFFFFFF

    def flush_as_ticks(self) -> int:
        if self._pending < SUBTICKS_PER_TICK:
            return 0
        ticks, remainder = divmod(self._pending, SUBTICKS_PER_TICK)
        self._pending = remainder if self.carry_remainder else 0
        return ticks


def ticks_per_second(ppq: int, bpm: float) -> float:
    """Compute ticks per second for given PPQ and BPM.

    One quarter note lasts 60/BPM seconds. With PPQ ticks per quarter note,
    ticks per second = PPQ * BPM / 60.
    """
    return (ppq * bpm) / 60.0


def ticks_per_ms(ppq: int, bpm: float) -> float:
    return ticks_per_second(ppq, bpm) / 1000.0


def ticks_to_ms(ticks: int, ppq: int, bpm: float) -> float:
    """Convert ticks to milliseconds (float)."""
    return float(ticks) / ticks_per_ms(ppq, bpm)
