"""Service layer modules for kiosksync.

``ListingSyncService`` lives in :mod:`kiosksync.services.listing_service`;
it is not re-exported here because it pulls in the HTTP adapter, which in
turn depends on this package.
"""

from . import sync
from .scheduler import SchedulerState, SyncScheduler  # noqa: F401
from .sync import *  # noqa: F401,F403

__all__ = ["SchedulerState", "SyncScheduler", *sync.__all__]
