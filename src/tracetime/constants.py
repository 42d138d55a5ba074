"""Stable constants shared across tracetime modules."""

from __future__ import annotations

from typing import Final

# Schema version for tracetime.toml / tracetime.yaml payloads.
CONFIG_SCHEMA_VERSION: Final[int] = 1

DEFAULT_CONFIG_FILE: Final[str] = "tracetime.toml"

# Clock sources selectable by configuration.
CLOCK_WALL: Final[str] = "wall"
CLOCK_MONOTONIC: Final[str] = "monotonic"
CLOCK_NAMES: Final[tuple[str, ...]] = (CLOCK_WALL, CLOCK_MONOTONIC)

LOG_LEVELS: Final[tuple[str, ...]] = ("DEBUG", "INFO", "WARNING", "ERROR")
DEFAULT_LOGGER_NAME: Final[str] = "tracetime"

__all__ = [
    "CLOCK_MONOTONIC",
    "CLOCK_NAMES",
    "CLOCK_WALL",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_LOGGER_NAME",
    "LOG_LEVELS",
]
