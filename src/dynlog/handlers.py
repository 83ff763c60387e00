"""
Output handler selection.

Each handler kind maps to a structlog processor chain ending in one of
structlog's renderers. The chain starts with a :class:`LevelFilter` that
consults the family's shared :class:`~dynlog.levels.LevelVar` on every record.
"""
from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from .levels import LevelVar, Severity


class HandlerKind(str, Enum):
    """Supported output formats."""

    CONSOLE = "console"
    TEXT = "text"
    JSON = "json"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def is_valid(cls, value: object) -> bool:
        try:
            cls(value)
        except ValueError:
            return False
        return True


@dataclass(frozen=True)
class HandlerOptions:
    """Construction-time rendering options shared by a logger family."""

    kind: HandlerKind = HandlerKind.CONSOLE
    colors: bool = False
    timestamps: bool = True


def resolve_handler_kind(value: object) -> HandlerKind:
    """
    Return the handler kind named by ``value``.

    Unknown values do not raise: a warning is written to stderr and JSON is
    used instead.
    """
    if HandlerKind.is_valid(value):
        return HandlerKind(value)
    sys.stderr.write(f'warning: invalid handler type "{value}", falling back to JSON\n')
    return HandlerKind.JSON


_LOGFMT_UNSAFE = re.compile(r"[\x00-\x20=]")

_METHOD_SEVERITY: Dict[str, Severity] = {
    "debug": Severity.DEBUG,
    "info": Severity.INFO,
    "warn": Severity.WARN,
    "warning": Severity.WARN,
    "error": Severity.ERROR,
    "exception": Severity.ERROR,
    "critical": Severity.ERROR,
    "fatal": Severity.ERROR,
}


class LevelFilter:
    """Drop events the shared level does not admit."""

    def __init__(self, level: LevelVar) -> None:
        self.level = level

    def __call__(
        self, logger: WrappedLogger, method_name: str, event_dict: EventDict
    ) -> EventDict:
        severity = _METHOD_SEVERITY.get(method_name, Severity.INFO)
        if not self.level.enabled(severity):
            raise structlog.DropEvent
        return event_dict


def _walk(prefix: str, value: Dict[str, Any]) -> Iterator[Tuple[str, Any]]:
    for key, item in value.items():
        path = f"{prefix}.{key}"
        if isinstance(item, dict):
            yield from _walk(path, item)
        else:
            yield path, item


def flatten_groups(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Turn nested group dicts into dotted keys (``request.id=7``)."""
    flat: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            flat.update(_walk(key, value))
        else:
            flat[key] = value
    return flat


def sanitize_keys(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Replace whitespace, control characters and ``=`` in keys with ``_`` for logfmt."""
    return {_LOGFMT_UNSAFE.sub("_", str(key)): value for key, value in event_dict.items()}


def shared_processors(kind: HandlerKind, timestamps: bool = True) -> List[Processor]:
    """Enrichment steps run before rendering, for structlog and stdlib records alike."""
    processors: List[Processor] = [structlog.processors.add_log_level]
    if timestamps:
        key = "timestamp" if kind is HandlerKind.CONSOLE else "time"
        processors.append(structlog.processors.TimeStamper(fmt="iso", key=key))
    processors.append(structlog.processors.StackInfoRenderer())
    if kind is not HandlerKind.CONSOLE:
        # ConsoleRenderer formats exc_info itself.
        processors.append(structlog.processors.format_exc_info)
    return processors


def renderer_processors(kind: HandlerKind, colors: bool = False) -> List[Processor]:
    if kind is HandlerKind.CONSOLE:
        return [flatten_groups, structlog.dev.ConsoleRenderer(colors=colors)]
    if kind is HandlerKind.TEXT:
        return [
            flatten_groups,
            sanitize_keys,
            structlog.processors.EventRenamer("msg"),
            structlog.processors.LogfmtRenderer(
                key_order=["time", "level", "msg"],
                drop_missing=True,
                bool_as_flag=False,
            ),
        ]
    return [structlog.processors.EventRenamer("msg"), structlog.processors.JSONRenderer()]


def build_processors(level: LevelVar, options: HandlerOptions) -> List[Processor]:
    """Full processor chain for a logger family."""
    return [
        LevelFilter(level),
        *shared_processors(options.kind, options.timestamps),
        *renderer_processors(options.kind, options.colors),
    ]
