"""Time entries and the millisecond clocks that drive them."""

from tracetime.timing.clock import Clock, monotonic_clock_ms, resolve_clock, wall_clock_ms
from tracetime.timing.entry import (
    InvalidStateError,
    Ready,
    Running,
    Stopped,
    TimeEntry,
    TimerSnapshot,
    TimerState,
)

__all__ = [
    "Clock",
    "InvalidStateError",
    "Ready",
    "Running",
    "Stopped",
    "TimeEntry",
    "TimerSnapshot",
    "TimerState",
    "monotonic_clock_ms",
    "resolve_clock",
    "wall_clock_ms",
]
