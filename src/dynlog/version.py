"""Version of the installed dynlog distribution."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dynlog")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0+unknown"

__all__ = ["__version__"]
