"""
Centralized logging settings.

Values come from ``DYNLOG_*`` environment variables and an optional TOML file.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore[attr-defined]

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .levels import parse_level
from .logger import Logger, new


class AppSettings(BaseSettings):
    """Logger family defaults loaded from env or TOML."""

    model_config = SettingsConfigDict(
        env_prefix="DYNLOG_",
        extra="ignore",
    )

    handler: str = "console"
    level: str = "info"
    verbosity: Optional[int] = None
    colors: bool = False
    timestamps: bool = True

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        return parse_level(value).name.lower()


_CONFIG_ENV_VAR = "DYNLOG_CONFIG_PATH"
_DEFAULT_CONFIG_FILE = Path("dynlog_settings.toml")


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from the primary TOML file on disk."""
    candidates: List[Path] = []
    config_override = os.getenv(_CONFIG_ENV_VAR)
    if config_override:
        candidates.append(Path(config_override))
    candidates.append(_DEFAULT_CONFIG_FILE)

    for candidate in candidates:
        if candidate.is_file():
            with candidate.open("rb") as handle:
                return tomllib.load(handle)
    return {}


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def _flatten_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """Translate the ``[logging]`` TOML section into AppSettings keyword arguments."""
    data: Dict[str, Any] = {}

    section = raw.get("logging", {})
    for key in ("handler", "level", "verbosity"):
        if key in section:
            value = _blank_to_none(section[key])
            if value is not None:
                data[key] = value
    if "colors" in section:
        data["colors"] = bool(section["colors"])
    if "timestamps" in section:
        data["timestamps"] = bool(section["timestamps"])

    return data


def load_settings() -> AppSettings:
    return AppSettings(**_flatten_config(_load_toml_config()))


def logger_from_settings(
    app_settings: Optional[AppSettings] = None, out: Optional[TextIO] = None
) -> Logger:
    """Build a logger family from ``app_settings``, loading env and TOML values when omitted."""
    cfg = app_settings or load_settings()
    log = new(out, cfg.handler, colors=cfg.colors, timestamps=cfg.timestamps)
    log.set_level_by_name(cfg.level)
    if cfg.verbosity is not None:
        log.set_level_by_counter(cfg.verbosity)
    return log

