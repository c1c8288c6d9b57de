"""
Pomodoro settings — persisted to data/pomodoro_settings.json.

Import get_settings() to read the current persisted values.
Import update_settings(patch) to mutate and save.
Import load_timer_settings() to take the frozen snapshot a timer runs with.

A timer reads its settings exactly once, at construction. Later calls to
update_settings() are picked up by the next timer instance only.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping

from .config import config
from .logging_handler import setup_logger

logger = setup_logger(__name__)

_FILE: Path = config.data_dir / config.settings_file

DEFAULTS: Dict[str, Any] = {
    "workMinutes":          25,
    "breakMinutes":         5,
    "longBreakMinutes":     15,
    "cyclesUntilLong":      4,      # every Nth work interval earns a long break
    "sound":                False,
    "desktopNotifications": False,
    "vibration":            False,
}

# smallest legal value for each numeric key
_MINIMUMS: Dict[str, int] = {
    "workMinutes":      1,
    "breakMinutes":     1,
    "longBreakMinutes": 1,
    "cyclesUntilLong":  1,
}

# TimerSettings attribute -> persisted key
_FIELD_KEYS: Dict[str, str] = {
    "work_minutes":          "workMinutes",
    "break_minutes":         "breakMinutes",
    "long_break_minutes":    "longBreakMinutes",
    "cycles_until_long":     "cyclesUntilLong",
    "sound":                 "sound",
    "desktop_notifications": "desktopNotifications",
    "vibration":             "vibration",
}

_current: Dict[str, Any] = {}


@dataclass(frozen=True)
class TimerSettings:
    """Immutable settings snapshot handed to a FocusTimer."""
    work_minutes: int = DEFAULTS["workMinutes"]
    break_minutes: int = DEFAULTS["breakMinutes"]
    long_break_minutes: int = DEFAULTS["longBreakMinutes"]
    cycles_until_long: int = DEFAULTS["cyclesUntilLong"]
    sound: bool = DEFAULTS["sound"]
    desktop_notifications: bool = DEFAULTS["desktopNotifications"]
    vibration: bool = DEFAULTS["vibration"]

    @property
    def work_seconds(self) -> int:
        return self.work_minutes * 60

    @property
    def break_seconds(self) -> int:
        return self.break_minutes * 60

    @property
    def long_break_seconds(self) -> int:
        return self.long_break_minutes * 60

    def __post_init__(self):
        # direct construction gets the same per-field checks as the settings file
        for attr, key in _FIELD_KEYS.items():
            value = getattr(self, attr)
            try:
                value = _coerce(key, value)
            except ValueError as exc:
                logger.warning("Ignoring setting %s: %s (using default %r)", key, exc, DEFAULTS[key])
                value = DEFAULTS[key]
            object.__setattr__(self, attr, value)

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "TimerSettings":
        """Build from the persisted camelCase shape; bad values fall back to defaults."""
        s = _sanitise(raw)
        return cls(**{attr: s[key] for attr, key in _FIELD_KEYS.items()})

    def to_mapping(self) -> Dict[str, Any]:
        return {key: getattr(self, attr) for attr, key in _FIELD_KEYS.items()}


def _coerce(key: str, value: Any) -> Any:
    """Coerce *value* to the type of DEFAULTS[key]; raise ValueError if invalid."""
    default = DEFAULTS[key]
    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise ValueError(f"{key} must be a boolean, got {value!r}")

    if isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{key} must be a number, got {value!r}") from None
    if number < _MINIMUMS[key]:
        raise ValueError(f"{key} must be >= {_MINIMUMS[key]}, got {value!r}")
    return number


def _sanitise(raw: Mapping[str, Any]) -> Dict[str, Any]:
    result = dict(DEFAULTS)
    for k, v in raw.items():
        if k not in DEFAULTS:
            continue
        try:
            result[k] = _coerce(k, v)
        except ValueError as exc:
            logger.warning("Ignoring setting %s: %s (using default %r)", k, exc, DEFAULTS[k])
    return result


def _load() -> None:
    global _current
    _current = dict(DEFAULTS)
    if _FILE.exists():
        try:
            saved = json.loads(_FILE.read_text())
        except (OSError, ValueError):
            logger.warning("Malformed settings file %s, using defaults", _FILE)
            return
        if not isinstance(saved, dict):
            logger.warning("Settings file %s is not an object, using defaults", _FILE)
            return
        _current = _sanitise(saved)


def get_settings() -> Dict[str, Any]:
    """Return a copy of the current settings dict."""
    if not _current:
        _load()
    return dict(_current)


def update_settings(patch: Dict[str, Any]) -> Dict[str, Any]:
    """Apply *patch* (unknown or invalid keys ignored), persist to disk, return full settings."""
    if not _current:
        _load()
    for k, v in patch.items():
        if k not in DEFAULTS:
            continue
        try:
            _current[k] = _coerce(k, v)
        except ValueError as exc:
            logger.warning("Rejected settings update for %s: %s", k, exc)
    _FILE.parent.mkdir(parents=True, exist_ok=True)
    _FILE.write_text(json.dumps(_current, indent=2))
    return dict(_current)


def load_timer_settings() -> TimerSettings:
    """Snapshot the persisted settings for a new timer instance."""
    return TimerSettings.from_mapping(get_settings())


# Eagerly load on import
_load()
