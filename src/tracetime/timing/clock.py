"""Millisecond clock sources for time entries."""

from __future__ import annotations

import time
from collections.abc import Callable

from tracetime.constants import CLOCK_MONOTONIC, CLOCK_NAMES, CLOCK_WALL

Clock = Callable[[], int]

_NANOS_PER_MILLI = 1_000_000


def wall_clock_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""

    return time.time_ns() // _NANOS_PER_MILLI


def monotonic_clock_ms() -> int:
    """Monotonic milliseconds; only differences between readings are meaningful."""

    return time.monotonic_ns() // _NANOS_PER_MILLI


_CLOCKS: dict[str, Clock] = {
    CLOCK_WALL: wall_clock_ms,
    CLOCK_MONOTONIC: monotonic_clock_ms,
}


def resolve_clock(name: str) -> Clock:
    """Return the clock registered under ``name``."""

    if not isinstance(name, str):
        raise ValueError(f"clock name must be a string, got {type(name).__name__}")
    normalized = name.strip().lower()
    try:
        return _CLOCKS[normalized]
    except KeyError:
        expected = ", ".join(CLOCK_NAMES)
        raise ValueError(f"unknown clock {name!r}; expected one of: {expected}") from None


__all__ = ["Clock", "monotonic_clock_ms", "resolve_clock", "wall_clock_ms"]
