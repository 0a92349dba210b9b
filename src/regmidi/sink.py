"""Destinations for finished files.

A sink is any callable ``sink(path, data)``. Any exception it raises is
wrapped by the session in :class:`regmidi.errors.SinkFailure`.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict

logger = logging.getLogger(__name__)

Sink = Callable[[str, bytes], None]


def write_file(path: str, data: bytes) -> None:
    """Write ``data`` to ``path``, creating parent directories."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(data)
    logger.info("wrote %s (%d bytes)", out, len(data))


class MemorySink:
    """Keeps finished files in a dict keyed by output name."""

    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}

    def __call__(self, path: str, data: bytes) -> None:
        self.files[path] = bytes(data)
