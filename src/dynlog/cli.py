"""
Command line interface for trying out dynlog handlers and level controls.
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, List, Optional, Sequence

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from .levels import InvalidLevelName, Severity
from .logger import new
from .settings import AppSettings, load_settings
from .stdlib import install_stdlib_bridge, remove_stdlib_bridge
from .version import __version__

app = typer.Typer(name="dynlog", help="Structured logging with a shared, adjustable level.")
console = Console()

_ACCEPTED_NAMES: Dict[Severity, str] = {
    Severity.ERROR: "error",
    Severity.WARN: "warn, warning",
    Severity.INFO: "info",
    Severity.DEBUG: "debug",
}

_COUNTERS: Dict[Severity, str] = {
    Severity.ERROR: "<= 0",
    Severity.WARN: "1",
    Severity.INFO: "2",
    Severity.DEBUG: ">= 3",
}


def _load_settings() -> AppSettings:
    try:
        return load_settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        typer.echo(f"[ERROR] Invalid settings: {problems}", err=True)
        raise typer.Exit(code=2)


def _parse_attributes(pairs: Sequence[str]) -> Dict[str, str]:
    attributes: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            typer.echo(f"[ERROR] Attribute must look like key=value: {pair}", err=True)
            raise typer.Exit(code=2)
        attributes[key.strip()] = value
    return attributes


@app.command()
def emit(
    message: str = typer.Argument(..., help="Message emitted once per severity."),
    handler: Optional[str] = typer.Option(
        None, "--handler", "-H", help="Output handler: console, text or json."
    ),
    level: Optional[str] = typer.Option(
        None, "--level", "-l", help="Level name: error, warn, info or debug."
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Raise verbosity (-v warn, -vv info, -vvv debug). Applied after --level.",
    ),
    attr: Optional[List[str]] = typer.Option(
        None, "--attr", "-a", help="Attribute to bind as key=value; repeatable."
    ),
    group: Optional[str] = typer.Option(
        None, "--group", "-g", help="Group name the attributes are nested under."
    ),
    timestamps: Optional[bool] = typer.Option(
        None, "--timestamps/--no-timestamps", help="Include ISO timestamps."
    ),
    stdlib: bool = typer.Option(
        False, "--stdlib", help="Also emit the message through the logging module."
    ),
) -> None:
    """Emit MESSAGE at every severity so the active threshold is visible."""
    attributes = _parse_attributes(attr or [])
    settings = _load_settings()
    log = new(
        sys.stdout,
        handler or settings.handler,
        colors=settings.colors,
        timestamps=settings.timestamps if timestamps is None else timestamps,
    )
    try:
        log.set_level_by_name(level or settings.level)
    except InvalidLevelName as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=2)
    if verbose:
        log.set_level_by_counter(verbose)
    elif level is None and settings.verbosity is not None:
        log.set_level_by_counter(settings.verbosity)

    scoped = log.with_group(group) if group else log
    scoped = scoped.bind(**attributes)
    for severity in Severity:
        scoped.log(severity, message)

    if stdlib:
        std_logger = logging.getLogger("dynlog.cli")
        std_logger.propagate = False
        bridge = install_stdlib_bridge(log, std_logger)
        try:
            for severity in Severity:
                std_logger.log(severity.to_python_level(), message)
        finally:
            remove_stdlib_bridge(bridge)


@app.command()
def levels() -> None:
    """Show severities with their accepted names and verbosity counters."""
    table = Table(title="Severities")
    table.add_column("Severity")
    table.add_column("Names")
    table.add_column("Counter")
    table.add_column("logging level")
    for severity in Severity:
        table.add_row(
            severity.name,
            _ACCEPTED_NAMES[severity],
            _COUNTERS[severity],
            logging.getLevelName(severity.to_python_level()),
        )
    console.print(table)


@app.command()
def config() -> None:
    """Print the effective settings."""
    settings = _load_settings()
    for key, value in settings.model_dump().items():
        typer.echo(f"{key} = {value}")


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)


if __name__ == "__main__":  # pragma: no cover
    app()
