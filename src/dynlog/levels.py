"""
Severity levels and the shared, mutable level cell.

A :class:`LevelVar` is created once per logger family and referenced by
every logger derived from the family root, so changing it through any handle
changes filtering for all of them.
"""
from __future__ import annotations

import logging
import threading
from enum import IntEnum
from typing import Dict, Union


class Severity(IntEnum):
    """Log severities ordered from least to most verbose."""

    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3

    @property
    def label(self) -> str:
        """Lowercase name used in rendered records and as the emit method."""
        return _LABELS[self]

    def to_python_level(self) -> int:
        return _PYTHON_LEVELS[self]

    @classmethod
    def from_python_level(cls, level: int) -> "Severity":
        """Map a stdlib ``logging`` level onto the closest severity."""
        if level >= logging.ERROR:
            return cls.ERROR
        if level >= logging.WARNING:
            return cls.WARN
        if level >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


_LABELS: Dict[Severity, str] = {
    Severity.ERROR: "error",
    Severity.WARN: "warning",
    Severity.INFO: "info",
    Severity.DEBUG: "debug",
}

_PYTHON_LEVELS: Dict[Severity, int] = {
    Severity.ERROR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.DEBUG: logging.DEBUG,
}

_NAMES: Dict[str, Severity] = {
    "error": Severity.ERROR,
    "warn": Severity.WARN,
    "warning": Severity.WARN,
    "info": Severity.INFO,
    "debug": Severity.DEBUG,
}

DEFAULT_LEVEL = Severity.INFO


class InvalidLevelName(ValueError):
    """Raised when a level name does not match any known severity."""

    def __init__(self, name: object) -> None:
        self.name = name
        super().__init__(
            f"invalid log level name {name!r}: must be one of error, warn, info, debug"
        )


def parse_level(name: str) -> Severity:
    """Resolve a case-insensitive level name (``warning`` is accepted for ``warn``)."""
    level = _NAMES.get(str(name).lower())
    if level is None:
        raise InvalidLevelName(name)
    return level


def level_from_counter(count: int) -> Severity:
    """
    Translate a verbosity counter (e.g. repeated ``-v`` flags) into a severity.

    0 or less: error, 1: warn, 2: info, 3 or more: debug.
    """
    if count >= 3:
        return Severity.DEBUG
    if count == 2:
        return Severity.INFO
    if count == 1:
        return Severity.WARN
    return Severity.ERROR


class LevelVar:
    """Thread-safe cell holding the current severity threshold."""

    __slots__ = ("_lock", "_value")

    def __init__(self, level: Union[Severity, int] = DEFAULT_LEVEL) -> None:
        self._lock = threading.Lock()
        self._value = Severity(level)

    def get(self) -> Severity:
        with self._lock:
            return self._value

    def set(self, level: Union[Severity, int]) -> None:
        level = Severity(level)
        with self._lock:
            self._value = level

    def set_by_counter(self, count: int) -> None:
        self.set(level_from_counter(count))

    def set_by_name(self, name: str) -> None:
        """Set the threshold from a name; the cell is left untouched on failure."""
        self.set(parse_level(name))

    def enabled(self, level: Severity) -> bool:
        """Return whether a record at ``level`` passes the current threshold."""
        return level <= self.get()

    def __repr__(self) -> str:
        return f"LevelVar({self.get().name})"
