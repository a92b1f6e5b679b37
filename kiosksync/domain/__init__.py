"""Domain layer for kiosksync.

Pure models with no knowledge of transport, threads or the event loop.
"""

from . import models

__all__ = ["models"]
