"""
tracetime — time entry state machine.

File: src/tracetime/timing/entry.py

Purpose
- Record start/stop timestamps for one labelled activity and report its
  elapsed duration in milliseconds.

States
- ``Ready``: nothing recorded.
- ``Running``: started, not stopped.
- ``Stopped``: started and stopped; ``stopped_at >= started_at``.

Transition contract
- ``start()`` moves any state to ``Running`` and discards a previous stop.
- ``stop()`` moves ``Running`` to ``Stopped``; elsewhere it is a no-op.
- ``reset()`` returns to ``Ready`` and clears the label.
- ``elapsed()`` measures against the clock while running, against the stop
  timestamp once stopped, and raises ``InvalidStateError`` while ready.

Transitions are logged through ``structlog`` as machine-parseable events.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from tracetime.timing.clock import Clock, wall_clock_ms
from tracetime.validation.chain import UNSET, check

if TYPE_CHECKING:
    from types import TracebackType

    from tracetime.config.schema import TimingConfig


class TimerState(StrEnum):
    """Name of the variant an entry is currently in."""

    READY = "ready"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True, slots=True)
class Ready:
    @property
    def kind(self) -> TimerState:
        return TimerState.READY


@dataclass(frozen=True, slots=True)
class Running:
    started_at: int

    @property
    def kind(self) -> TimerState:
        return TimerState.RUNNING


@dataclass(frozen=True, slots=True)
class Stopped:
    started_at: int
    stopped_at: int

    def __post_init__(self) -> None:
        if self.stopped_at < self.started_at:
            raise ValueError("stopped_at must be >= started_at")

    @property
    def kind(self) -> TimerState:
        return TimerState.STOPPED


TimerSnapshot = Ready | Running | Stopped


class InvalidStateError(RuntimeError):
    """Raised when an operation is not defined for the entry's current state."""

    def __init__(self, state: TimerState, message: str) -> None:
        self.state = state
        super().__init__(message)


class TimeEntry:
    """Stopwatch for a single labelled activity."""

    __slots__ = ("_clock", "_label", "_logger", "_state")

    def __init__(
        self,
        label: str | None = None,
        start: object = UNSET,
        *,
        clock: Clock | None = None,
        logger: Any | None = None,
    ) -> None:
        self._clock = clock if clock is not None else wall_clock_ms
        self._logger = logger if logger is not None else _default_logger()
        self._label = _normalize_label(label)
        self._state: TimerSnapshot = Ready()

        # Anything other than a literal True leaves the entry ready.
        if check(start).is_boolean().is_true().is_valid():
            self.start()

    @classmethod
    def from_config(
        cls,
        config: TimingConfig,
        label: str | None = None,
        start: object = UNSET,
        *,
        logger: Any | None = None,
    ) -> TimeEntry:
        """Build an entry reading time from the clock selected in ``config``."""

        return cls(label, start, clock=config.make_clock(), logger=logger)

    @property
    def label(self) -> str | None:
        return self._label

    @property
    def snapshot(self) -> TimerSnapshot:
        return self._state

    @property
    def state(self) -> TimerState:
        return self._state.kind

    @property
    def started_at(self) -> int:
        if isinstance(self._state, Ready):
            return 0
        return self._state.started_at

    @property
    def stopped_at(self) -> int:
        if isinstance(self._state, Stopped):
            return self._state.stopped_at
        return 0

    @property
    def ready(self) -> bool:
        return isinstance(self._state, Ready)

    @property
    def running(self) -> bool:
        return isinstance(self._state, Running)

    @property
    def stopped(self) -> bool:
        return isinstance(self._state, Stopped)

    def start(self, label: str | None = None) -> int:
        """Start (or restart) timing and return the new start timestamp.

        A non-empty ``label`` replaces the current one; otherwise it is kept.
        """

        self._label = _normalize_label(label) or self._label
        started_at = self._clock()
        self._state = Running(started_at=started_at)
        self._logger.debug(
            "time_entry_started",
            label=self._label,
            started_at=started_at,
        )
        return started_at

    def stop(self) -> int:
        """Stop a running entry and return the stop timestamp.

        Outside ``Running`` nothing changes and the previous stop timestamp
        (``0`` when ready) is returned.
        """

        state = self._state
        if not isinstance(state, Running):
            self._logger.debug(
                "time_entry_stop_ignored",
                label=self._label,
                state=state.kind.value,
            )
            return self.stopped_at

        stopped_at = self._clock()
        if stopped_at < state.started_at:
            self._logger.warning(
                "time_entry_clock_regressed",
                label=self._label,
                started_at=state.started_at,
                observed_at=stopped_at,
            )
            stopped_at = state.started_at

        self._state = Stopped(started_at=state.started_at, stopped_at=stopped_at)
        self._logger.debug(
            "time_entry_stopped",
            label=self._label,
            started_at=state.started_at,
            stopped_at=stopped_at,
            elapsed_ms=stopped_at - state.started_at,
        )
        return stopped_at

    def reset(self) -> None:
        previous = self._state.kind
        self._state = Ready()
        self._label = None
        self._logger.debug("time_entry_reset", previous_state=previous.value)

    def elapsed(self) -> int:
        """Return elapsed milliseconds.

        Raises:
            InvalidStateError: if the entry was never started.
        """

        state = self._state
        if isinstance(state, Stopped):
            return state.stopped_at - state.started_at
        if isinstance(state, Running):
            return max(0, self._clock() - state.started_at)
        raise InvalidStateError(
            TimerState.READY,
            f"time entry {self._label!r} has not been started; nothing to measure",
        )

    def __enter__(self) -> TimeEntry:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        del exc_type, exc, tb
        self.stop()

    def __repr__(self) -> str:
        return (
            f"TimeEntry(label={self._label!r}, state={self.state.value}, "
            f"started_at={self.started_at}, stopped_at={self.stopped_at})"
        )


def _default_logger() -> Any:
    # Processors resolve from the active structlog config on every call.
    return structlog.wrap_logger(
        logging.getLogger(__name__),
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def _normalize_label(label: str | None) -> str | None:
    return label or None


__all__ = [
    "InvalidStateError",
    "Ready",
    "Running",
    "Stopped",
    "TimeEntry",
    "TimerSnapshot",
    "TimerState",
]
