"""Click commands for kiosksync."""

from .__main__ import cli
from .sync import sync, watch

__all__ = ["cli", "sync", "watch"]
