"""
tracetime — labelled stopwatches guarded by a fluent value-validation chain.

File: src/tracetime/__init__.py

Purpose
- Package root. Re-exports the small public surface.

Functional requirements
- Must not have side effects at import time beyond attaching a
  ``logging.NullHandler`` to the package logger (no config loading, no sinks).
"""

import logging

from tracetime.timing import (
    InvalidStateError,
    Ready,
    Running,
    Stopped,
    TimeEntry,
    TimerState,
)
from tracetime.validation import UNSET, ValueChain, check

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "InvalidStateError",
    "Ready",
    "Running",
    "Stopped",
    "TimeEntry",
    "TimerState",
    "UNSET",
    "ValueChain",
    "__version__",
    "check",
]
