"""
Structured logging with a shared, adjustable level.

Wraps structlog with a choice of console, text or JSON output and a single
level cell shared by every logger derived from a family root.
"""

from .handlers import HandlerKind, HandlerOptions, resolve_handler_kind
from .levels import (
    DEFAULT_LEVEL,
    InvalidLevelName,
    LevelVar,
    Severity,
    level_from_counter,
    parse_level,
)
from .logger import Logger, new
from .stdlib import install_stdlib_bridge, remove_stdlib_bridge
from .version import __version__

__all__ = [
    "DEFAULT_LEVEL",
    "HandlerKind",
    "HandlerOptions",
    "InvalidLevelName",
    "LevelVar",
    "Logger",
    "Severity",
    "install_stdlib_bridge",
    "level_from_counter",
    "new",
    "parse_level",
    "remove_stdlib_bridge",
    "resolve_handler_kind",
    "__version__",
]
