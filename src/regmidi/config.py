from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict

from .buffer import (
    DEFAULT_GROWTH_THRESHOLD,
    DEFAULT_INITIAL_CAPACITY,
    DEFAULT_MAX_CAPACITY,
)


@dataclass
class SessionConfig:
    extension: str = ".mid"
    division: int = 480  # ticks per quarter note
    initial_capacity: int = DEFAULT_INITIAL_CAPACITY
    growth_threshold: int = DEFAULT_GROWTH_THRESHOLD
    max_capacity: int = DEFAULT_MAX_CAPACITY
    # Keep the sub-tick remainder when a delay is flushed.
    carry_remainder: bool = False

    def validate(self) -> None:
        # Bit 15 set would mean SMPTE timing in the header.
        if not 0 < int(self.division) < 0x8000:
            raise ValueError(f"division must be in 1..32767, got {self.division}")
        if int(self.initial_capacity) <= 0:
            raise ValueError("initial_capacity must be positive")
        if int(self.growth_threshold) < 0:
            raise ValueError("growth_threshold must be non-negative")
        if int(self.max_capacity) < int(self.initial_capacity):
            raise ValueError("max_capacity must be >= initial_capacity")


def _session_config_from_dict(raw: Dict[str, Any]) -> SessionConfig:
    defaults = SessionConfig()
    cfg = SessionConfig(
        extension=str(raw.get("extension", defaults.extension)),
        division=int(raw.get("division", defaults.division)),
        initial_capacity=int(raw.get("initial_capacity", defaults.initial_capacity)),
        growth_threshold=int(raw.get("growth_threshold", defaults.growth_threshold)),
        max_capacity=int(raw.get("max_capacity", defaults.max_capacity)),
        carry_remainder=bool(raw.get("carry_remainder", defaults.carry_remainder)),
    )
    cfg.validate()
    return cfg


def session_config_from_dict(raw: Dict[str, Any]) -> SessionConfig:
    return _session_config_from_dict(raw)


def load_session_config(path: str) -> SessionConfig:
    with open(path, "r") as f:
        raw = json.load(f)
    return _session_config_from_dict(raw)
