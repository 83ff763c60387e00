"""
Bridge standard library ``logging`` into a dynlog family.

Records from third-party code that uses :mod:`logging` are rendered with the
family's formatter and filtered by the family's shared level.
"""
from __future__ import annotations

import logging
from typing import Optional

import structlog
from structlog.stdlib import ProcessorFormatter

from .handlers import HandlerOptions, renderer_processors, shared_processors
from .levels import LevelVar, Severity
from .logger import Logger


class SharedLevelFilter(logging.Filter):
    """Admit stdlib records according to a shared :class:`LevelVar`."""

    def __init__(self, level: LevelVar) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return self.level.enabled(Severity.from_python_level(record.levelno))


def build_formatter(options: HandlerOptions) -> ProcessorFormatter:
    return ProcessorFormatter(
        processors=[
            ProcessorFormatter.remove_processors_meta,
            *renderer_processors(options.kind, options.colors),
        ],
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            *shared_processors(options.kind, options.timestamps),
        ],
    )


class BridgeHandler(logging.StreamHandler):
    """Stream handler that remembers where it was attached and the level it replaced."""

    def __init__(self, logger: Logger, target: logging.Logger) -> None:
        super().__init__(logger.out)
        self.target = target
        self.previous_level = target.level
        self.setFormatter(build_formatter(logger.options))
        self.addFilter(SharedLevelFilter(logger.level))


def install_stdlib_bridge(
    logger: Logger, target: Optional[logging.Logger] = None
) -> BridgeHandler:
    """
    Attach a handler writing ``target``'s records to ``logger``'s output.

    ``target`` defaults to the root logger. Its own level is opened up to
    DEBUG so the shared level is the only threshold; pass the returned
    handler to :func:`remove_stdlib_bridge` to detach it and restore the
    previous level.
    """
    target = target if target is not None else logging.getLogger()
    handler = BridgeHandler(logger, target)
    target.addHandler(handler)
    target.setLevel(logging.DEBUG)
    return handler


def remove_stdlib_bridge(handler: BridgeHandler) -> None:
    handler.target.removeHandler(handler)
    handler.target.setLevel(handler.previous_level)
    handler.close()
