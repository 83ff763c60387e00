"""
Logger families with a dynamically adjustable level.

:func:`new` creates a root :class:`Logger`. Loggers derived from it through
:meth:`Logger.bind` and :meth:`Logger.with_group` carry their own context but
keep a reference to the root's :class:`~dynlog.levels.LevelVar`, so a single
``set_level`` call changes filtering for the whole family.
"""
from __future__ import annotations

import sys
from typing import Any, Dict, Optional, TextIO, Tuple, Union

import structlog

from .handlers import HandlerKind, HandlerOptions, build_processors, resolve_handler_kind
from .levels import DEFAULT_LEVEL, LevelVar, Severity

# Keyword arguments structlog interprets itself; never nested under groups.
_RESERVED_KEYS = frozenset({"exc_info", "stack_info"})


def _nest(groups: Tuple[str, ...], attrs: Dict[str, Any]) -> Dict[str, Any]:
    nested: Dict[str, Any] = dict(attrs)
    for name in reversed(groups):
        nested = {name: nested}
    return nested


def _merge(base: Any, update: Any) -> Any:
    if not (isinstance(base, dict) and isinstance(update, dict)):
        return update
    merged = dict(base)
    for key, value in update.items():
        merged[key] = _merge(base.get(key), value)
    return merged


class Logger:
    """A structlog bound logger paired with its family's shared level."""

    def __init__(
        self,
        bound: Any,
        level: LevelVar,
        options: HandlerOptions,
        out: TextIO,
        groups: Tuple[str, ...] = (),
    ) -> None:
        self._bound = bound
        self.level = level
        self.options = options
        self.out = out
        self.groups = groups

    @property
    def kind(self) -> HandlerKind:
        return self.options.kind

    @property
    def context(self) -> Dict[str, Any]:
        """Copy of the attributes bound to this handle."""
        return dict(structlog.get_context(self._bound))

    # level control

    def get_level(self) -> Severity:
        return self.level.get()

    def set_level(self, level: Severity) -> None:
        self.level.set(level)

    def set_level_by_counter(self, count: int) -> None:
        """0 or less: error, 1: warn, 2: info, 3 or more: debug."""
        self.level.set_by_counter(count)

    def set_level_by_name(self, name: str) -> None:
        """
        Set the level from ``error``, ``warn``/``warning``, ``info`` or ``debug``.

        Raises :class:`~dynlog.levels.InvalidLevelName` for anything else and
        leaves the current level unchanged.
        """
        self.level.set_by_name(name)

    def enabled(self, level: Severity) -> bool:
        return self.level.enabled(level)

    # derivation

    def _updates(self, attrs: Dict[str, Any]) -> Dict[str, Any]:
        """Top-level context keys to overwrite so ``attrs`` land under the open groups."""
        context = structlog.get_context(self._bound)
        return {
            key: _merge(context.get(key), value)
            for key, value in _nest(self.groups, attrs).items()
        }

    def _derive(self, bound: Any, groups: Tuple[str, ...]) -> "Logger":
        return Logger(bound, self.level, self.options, self.out, groups)

    def bind(self, **attrs: Any) -> "Logger":
        """Return a logger with ``attrs`` added to its context."""
        if not attrs:
            return self._derive(self._bound, self.groups)
        return self._derive(self._bound.bind(**self._updates(attrs)), self.groups)

    def with_group(self, name: str) -> "Logger":
        """Return a logger whose later attributes are nested under ``name``."""
        if not name:
            return self
        return self._derive(self._bound, self.groups + (name,))

    # emission

    def _emit(self, method_name: str, msg: str, attrs: Dict[str, Any]) -> None:
        reserved = {key: attrs.pop(key) for key in _RESERVED_KEYS if key in attrs}
        if self.groups and attrs:
            attrs = self._updates(attrs)
        getattr(self._bound, method_name)(msg, **attrs, **reserved)

    def log(self, level: Severity, msg: str, **attrs: Any) -> None:
        self._emit(Severity(level).label, msg, attrs)

    def debug(self, msg: str, **attrs: Any) -> None:
        self._emit("debug", msg, attrs)

    def info(self, msg: str, **attrs: Any) -> None:
        self._emit("info", msg, attrs)

    def warning(self, msg: str, **attrs: Any) -> None:
        self._emit("warning", msg, attrs)

    warn = warning

    def error(self, msg: str, **attrs: Any) -> None:
        self._emit("error", msg, attrs)

    def exception(self, msg: str, **attrs: Any) -> None:
        attrs.setdefault("exc_info", True)
        self._emit("exception", msg, attrs)

    def __repr__(self) -> str:
        return (
            f"<Logger kind={self.kind.value} level={self.get_level().name} "
            f"groups={list(self.groups)} context={self.context!r}>"
        )


def new(
    out: Optional[TextIO] = None,
    handler: Union[HandlerKind, str] = HandlerKind.CONSOLE,
    *,
    level: Severity = DEFAULT_LEVEL,
    colors: bool = False,
    timestamps: bool = True,
) -> Logger:
    """
    Create the root logger of a new family.

    Parameters
    ----------
    out:
        Writable text stream receiving rendered records. Defaults to stderr.
    handler:
        ``console``, ``text`` or ``json``. Unknown values fall back to JSON
        with a warning on stderr instead of raising.
    level:
        Initial threshold of the family's shared level.
    colors:
        Colorize console output.
    timestamps:
        Add an ISO timestamp to every record.
    """
    options = HandlerOptions(
        kind=resolve_handler_kind(handler), colors=colors, timestamps=timestamps
    )
    stream = out if out is not None else sys.stderr
    shared_level = LevelVar(level)
    bound = structlog.wrap_logger(
        structlog.WriteLogger(stream),
        processors=build_processors(shared_level, options),
        wrapper_class=structlog.BoundLogger,
        context_class=dict,
    ).bind()
    return Logger(bound, shared_level, options, stream)
