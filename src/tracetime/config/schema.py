"""
tracetime — configuration schema and validation.

File: src/tracetime/config/schema.py

Purpose
- Define configuration defaults and strict validation rules.
- Materialize validated payloads into the immutable ``TimingConfig``.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Deterministic deep-merge helper for layering file and override payloads.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final, NotRequired, TypedDict

from tracetime.constants import CLOCK_NAMES, CLOCK_WALL, CONFIG_SCHEMA_VERSION, LOG_LEVELS
from tracetime.timing.clock import Clock, resolve_clock

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

# Config paths that should be normalized relative to config file location.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (("logging", "log_file"),)


class MetaConfig(TypedDict):
    schema_version: int


class LoggingSection(TypedDict):
    level: str
    log_to_stdout: bool
    rotating_file: bool
    max_bytes: int
    backup_count: int
    log_file: NotRequired[str]


class TimingConfigPayload(TypedDict):
    meta: MetaConfig
    clock: str
    logging: LoggingSection


DEFAULT_CONFIG: Final[TimingConfigPayload] = {
    "meta": {
        "schema_version": ConfigSchemaVersion,
    },
    "clock": CLOCK_WALL,
    "logging": {
        "level": "INFO",
        "log_to_stdout": True,
        "rotating_file": False,
        "max_bytes": 10_000_000,
        "backup_count": 5,
    },
}


@dataclass(frozen=True, slots=True)
class LoggingSettings:
    """Validated ``[logging]`` section."""

    level: str = "INFO"
    log_file: str | None = None
    log_to_stdout: bool = True
    rotating_file: bool = False
    max_bytes: int = 10_000_000
    backup_count: int = 5


@dataclass(frozen=True, slots=True)
class TimingConfig:
    """Effective runtime configuration."""

    clock: str = CLOCK_WALL
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    schema_version: int = ConfigSchemaVersion

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> TimingConfig:
        """Validate ``payload`` (layered over defaults) and build a config."""

        validated = assert_valid_config(merge_config(default_config(), payload))
        section = validated["logging"]
        return cls(
            clock=validated["clock"],
            logging=LoggingSettings(
                level=section["level"],
                log_file=section.get("log_file"),
                log_to_stdout=section["log_to_stdout"],
                rotating_file=section["rotating_file"],
                max_bytes=section["max_bytes"],
                backup_count=section["backup_count"],
            ),
            schema_version=validated["meta"]["schema_version"],
        )

    def make_clock(self) -> Clock:
        return resolve_clock(self.clock)

    def to_dict(self) -> dict[str, Any]:
        logging_section: dict[str, Any] = {
            "level": self.logging.level,
            "log_to_stdout": self.logging.log_to_stdout,
            "rotating_file": self.logging.rotating_file,
            "max_bytes": self.logging.max_bytes,
            "backup_count": self.logging.backup_count,
        }
        if self.logging.log_file is not None:
            logging_section["log_file"] = self.logging.log_file
        return {
            "meta": {"schema_version": self.schema_version},
            "clock": self.clock,
            "logging": logging_section,
        }


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> TimingConfigPayload:
    """Return a deep copy of built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"meta", "clock", "logging"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed, "", issues)

    out: dict[str, Any] = {}

    meta = _section(payload, "meta", issues)
    if meta is not None:
        out["meta"] = _validate_meta(meta, "meta", issues)

    if "clock" in payload:
        parsed_clock = _as_enum(payload["clock"], "clock", issues, allowed_values=CLOCK_NAMES)
        if parsed_clock is not None:
            out["clock"] = parsed_clock

    logging_section = _section(payload, "logging", issues)
    if logging_section is not None:
        out["logging"] = _validate_logging(logging_section, "logging", issues)

    return out


def _section(
    payload: Mapping[str, object], key: str, issues: _IssueCollector
) -> dict[str, object] | None:
    if key not in payload:
        return None
    return _as_object(payload[key], key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        version_path = _join(path, "schema_version")
        version = _as_int(payload["schema_version"], version_path, issues, minimum=1)
        if version is not None:
            if version != ConfigSchemaVersion:
                issues.add(version_path, migration_guidance(version))
            else:
                out["schema_version"] = version
    return out


def migration_guidance(found_version: int) -> str:
    """Return deterministic migration guidance for schema version mismatch."""

    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade the config file to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade tracetime"
        )
    return "schema version is current"


def _validate_logging(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    required = {"level", "log_to_stdout", "rotating_file", "max_bytes", "backup_count"}
    _reject_unknown_keys(payload, required | {"log_file"}, path, issues)
    _require_keys(payload, required, path, issues)

    out: dict[str, Any] = {}

    if "level" in payload:
        raw_level = payload["level"]
        if isinstance(raw_level, str):
            raw_level = raw_level.strip().upper()
        parsed_level = _as_enum(raw_level, _join(path, "level"), issues, allowed_values=LOG_LEVELS)
        if parsed_level is not None:
            out["level"] = parsed_level

    if "log_file" in payload:
        parsed_file = _as_path_text(payload["log_file"], _join(path, "log_file"), issues)
        if parsed_file is not None:
            out["log_file"] = parsed_file

    for key in ("log_to_stdout", "rotating_file"):
        if key in payload:
            parsed_flag = _as_bool(payload[key], _join(path, key), issues)
            if parsed_flag is not None:
                out[key] = parsed_flag

    if "max_bytes" in payload:
        parsed_max = _as_int(payload["max_bytes"], _join(path, "max_bytes"), issues, minimum=1)
        if parsed_max is not None:
            out["max_bytes"] = parsed_max

    if "backup_count" in payload:
        parsed_backups = _as_int(
            payload["backup_count"], _join(path, "backup_count"), issues, minimum=1
        )
        if parsed_backups is not None:
            out["backup_count"] = parsed_backups

    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = copy.deepcopy(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        item = value[key]
        out[key] = _deep_copy_mapping(item) if isinstance(item, Mapping) else copy.deepcopy(item)
    return out


__all__ = [
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "LoggingSettings",
    "PATH_FIELDS",
    "TimingConfig",
    "TimingConfigPayload",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
