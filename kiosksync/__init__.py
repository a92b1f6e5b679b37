"""
kiosksync package initializer.

This package keeps an auction kiosk's listing of items up for bid in sync
with a paginated remote source.

The package exposes a ``__version__`` attribute read from the installed
distribution metadata (pyproject.toml is the single source of truth).
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("kiosksync")
except PackageNotFoundError:
    # Running from a source checkout without ``pip install -e .``
    __version__ = "0.0.0.dev"

__all__: list[str] = ["__version__"]
