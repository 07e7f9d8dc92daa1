"""Seller net sheet calculations for Indiana closings."""

from importlib import metadata

try:
    __version__ = metadata.version("seller-net-sheet")
except metadata.PackageNotFoundError:  # pragma: no cover - running from a checkout
    __version__ = "0.1.0"

__all__ = ["__version__"]
