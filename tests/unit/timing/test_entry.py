"""
tracetime — unit tests for the time entry state machine

File: tests/unit/timing/test_entry.py

Purpose
- Validate ready/running/stopped transitions, elapsed-time contract, and
  structlog transition events.

Non-functional requirements
- Deterministic: every test drives a fake millisecond clock.
"""

from __future__ import annotations

from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs

from tracetime.config import TimingConfig
from tracetime.timing import (
    InvalidStateError,
    Ready,
    Running,
    Stopped,
    TimeEntry,
    TimerState,
    monotonic_clock_ms,
)


class _FakeClock:
    def __init__(self, now: int = 1000) -> None:
        self.now = now
        self.reads = 0

    def __call__(self) -> int:
        self.reads += 1
        return self.now


class _RecordingLogger:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict[str, Any]]] = []

    def debug(self, event: str, **fields: Any) -> None:
        self.calls.append(("debug", event, fields))

    def warning(self, event: str, **fields: Any) -> None:
        self.calls.append(("warning", event, fields))


def _entry(label: str | None = "x", start: object = False, now: int = 1000) -> TimeEntry:
    return TimeEntry(label, start, clock=_FakeClock(now), logger=_RecordingLogger())


@pytest.mark.unit
def test_new_entry_with_false_flag_is_ready() -> None:
    entry = _entry("x", False)

    assert entry.ready
    assert not entry.running
    assert not entry.stopped
    assert entry.state is TimerState.READY
    assert entry.started_at == 0
    assert entry.stopped_at == 0
    assert entry.label == "x"


@pytest.mark.unit
def test_new_entry_with_true_flag_is_running() -> None:
    entry = _entry("x", True, now=42)

    assert entry.running
    assert entry.state is TimerState.RUNNING
    assert entry.started_at == 42
    assert entry.snapshot == Running(started_at=42)


@pytest.mark.unit
@pytest.mark.parametrize("flag", [1, "true", None, 0, [True]])
def test_non_boolean_start_flags_never_start_and_never_raise(flag: object) -> None:
    clock = _FakeClock()
    entry = TimeEntry("x", flag, clock=clock, logger=_RecordingLogger())

    assert entry.ready
    assert clock.reads == 0


@pytest.mark.unit
def test_omitted_start_flag_leaves_entry_ready() -> None:
    entry = TimeEntry(clock=_FakeClock(), logger=_RecordingLogger())

    assert entry.ready
    assert entry.label is None


@pytest.mark.unit
def test_empty_label_is_normalized_to_none() -> None:
    assert _entry("").label is None


@pytest.mark.unit
def test_start_then_stop_records_ordered_timestamps() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("job", clock=clock, logger=_RecordingLogger())

    assert entry.start() == 1000
    clock.now = 1500
    assert entry.stop() == 1500

    assert entry.stopped
    assert entry.snapshot == Stopped(started_at=1000, stopped_at=1500)
    assert entry.stopped_at >= entry.started_at


@pytest.mark.unit
def test_elapsed_on_stopped_entry_is_exact_difference() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("job", True, clock=clock, logger=_RecordingLogger())
    clock.now = 1500
    entry.stop()
    clock.now = 99_999

    assert entry.elapsed() == 500


@pytest.mark.unit
def test_elapsed_while_running_measures_against_clock() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("job", True, clock=clock, logger=_RecordingLogger())
    clock.now = 1250

    assert entry.elapsed() == 250
    assert entry.running


@pytest.mark.unit
def test_elapsed_while_running_never_negative_when_clock_goes_back() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("job", True, clock=clock, logger=_RecordingLogger())
    clock.now = 900

    assert entry.elapsed() == 0


@pytest.mark.unit
def test_elapsed_on_ready_entry_raises() -> None:
    entry = _entry("idle")

    with pytest.raises(InvalidStateError, match="has not been started") as excinfo:
        entry.elapsed()
    assert excinfo.value.state is TimerState.READY


@pytest.mark.unit
def test_stop_on_ready_entry_is_noop() -> None:
    clock = _FakeClock()
    entry = TimeEntry("x", clock=clock, logger=_RecordingLogger())

    assert entry.stop() == 0
    assert entry.ready
    assert entry.stopped_at == 0
    assert clock.reads == 0


@pytest.mark.unit
def test_second_stop_keeps_first_stop_timestamp() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("x", True, clock=clock, logger=_RecordingLogger())
    clock.now = 1200
    first = entry.stop()
    clock.now = 5000
    second = entry.stop()

    assert first == second == 1200
    assert entry.stopped_at == 1200


@pytest.mark.unit
def test_restart_after_stop_clears_previous_stop() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("x", True, clock=clock, logger=_RecordingLogger())
    clock.now = 1100
    entry.stop()
    clock.now = 2000

    assert entry.start() == 2000
    assert entry.running
    assert not entry.stopped
    assert entry.stopped_at == 0


@pytest.mark.unit
def test_restart_while_running_overwrites_start() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("x", True, clock=clock, logger=_RecordingLogger())
    clock.now = 1300

    entry.start()

    assert entry.started_at == 1300
    assert entry.running


@pytest.mark.unit
def test_start_label_replaces_only_when_non_empty() -> None:
    entry = _entry("first")

    entry.start()
    assert entry.label == "first"
    entry.start("")
    assert entry.label == "first"
    entry.start("second")
    assert entry.label == "second"


@pytest.mark.unit
@pytest.mark.parametrize("finish", ["ready", "running", "stopped"])
def test_reset_from_any_state_returns_to_ready(finish: str) -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("x", clock=clock, logger=_RecordingLogger())
    if finish in {"running", "stopped"}:
        entry.start()
    if finish == "stopped":
        clock.now = 1100
        entry.stop()

    entry.reset()

    assert entry.ready
    assert entry.snapshot == Ready()
    assert entry.started_at == 0
    assert entry.stopped_at == 0
    assert entry.label is None


@pytest.mark.unit
def test_entry_is_reusable_after_reset() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("x", True, clock=clock, logger=_RecordingLogger())
    entry.reset()
    clock.now = 3000
    entry.start("again")
    clock.now = 3400
    entry.stop()

    assert entry.elapsed() == 400
    assert entry.label == "again"


@pytest.mark.unit
def test_stop_clamps_when_clock_moves_backwards_and_warns() -> None:
    clock = _FakeClock(1000)
    logger = _RecordingLogger()
    entry = TimeEntry("x", True, clock=clock, logger=logger)
    clock.now = 400

    assert entry.stop() == 1000
    assert entry.elapsed() == 0
    assert ("warning", "time_entry_clock_regressed") in [
        (level, event) for level, event, _ in logger.calls
    ]


@pytest.mark.unit
def test_stopped_snapshot_rejects_inverted_timestamps() -> None:
    with pytest.raises(ValueError, match="stopped_at must be >= started_at"):
        Stopped(started_at=10, stopped_at=5)


@pytest.mark.unit
def test_context_manager_starts_and_stops() -> None:
    clock = _FakeClock(1000)
    with TimeEntry("block", clock=clock, logger=_RecordingLogger()) as entry:
        assert entry.running
        clock.now = 1075

    assert entry.stopped
    assert entry.elapsed() == 75


@pytest.mark.unit
def test_context_manager_stops_and_propagates_errors() -> None:
    clock = _FakeClock(1000)
    entry = TimeEntry("block", clock=clock, logger=_RecordingLogger())

    with pytest.raises(KeyError), entry:
        clock.now = 1010
        raise KeyError("boom")

    assert entry.stopped
    assert entry.elapsed() == 10


@pytest.mark.unit
def test_transitions_emit_structlog_events() -> None:
    clock = _FakeClock(1000)
    with capture_logs() as captured:
        entry = TimeEntry("traced", True, clock=clock)
        clock.now = 1020
        entry.stop()
        entry.stop()
        entry.reset()

    events = [item["event"] for item in captured]
    assert events == [
        "time_entry_started",
        "time_entry_stopped",
        "time_entry_stop_ignored",
        "time_entry_reset",
    ]
    stopped = captured[1]
    assert stopped["label"] == "traced"
    assert stopped["elapsed_ms"] == 20
    assert stopped["log_level"] == "debug"


@pytest.mark.unit
def test_default_logger_is_silent_without_logging_setup(
    capsys: pytest.CaptureFixture[str],
) -> None:
    structlog.reset_defaults()
    clock = _FakeClock(1000)

    entry = TimeEntry("quiet", True, clock=clock)
    clock.now = 1250
    entry.stop()
    entry.stop()
    entry.start()
    clock.now = 900
    entry.stop()
    entry.reset()

    captured = capsys.readouterr()
    assert captured.out == ""
    assert captured.err == ""


@pytest.mark.unit
def test_from_config_uses_configured_clock() -> None:
    entry = TimeEntry.from_config(
        TimingConfig(clock="monotonic"), "cfg", True, logger=_RecordingLogger()
    )

    assert entry.running
    assert entry.started_at <= monotonic_clock_ms()


@pytest.mark.unit
def test_repr_shows_label_and_state() -> None:
    entry = _entry("shown", True, now=7)

    assert repr(entry) == "TimeEntry(label='shown', state=running, started_at=7, stopped_at=0)"
