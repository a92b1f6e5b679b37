"""Facade the kiosk display layer talks to.

:class:`ListingSyncService` wires a :class:`ListingStore`, a
:class:`Paginator` and a :class:`SyncScheduler` together from
:class:`SyncSettings`, and exposes only what a renderer needs: snapshots,
change subscription and start/stop for the host lifecycle.
"""

from __future__ import annotations

from typing import Callable

from kiosksync.app.config import SyncSettings
from kiosksync.domain.models import SaleItem, SortOrder, sort_items
from kiosksync.infrastructure.http import HttpPageFetcher
from kiosksync.infrastructure.observability import get_logger
from kiosksync.services.dto import EventPublisher, SaleItemDTO
from kiosksync.services.scheduler import SchedulerState, SyncScheduler
from kiosksync.services.sync import (
    ListingListener,
    ListingSnapshot,
    ListingStore,
    PageFetcher,
    Paginator,
    PassResult,
)


class ListingSyncService:
    """Keep one auction's listing in sync for a kiosk screen."""

    def __init__(
        self,
        settings: SyncSettings,
        *,
        fetcher: PageFetcher | None = None,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self.settings = settings
        self.store = ListingStore(settings.auction_id)
        self.paginator = Paginator(self.store, max_pages=settings.max_pages)
        self.fetcher = fetcher or HttpPageFetcher(
            settings.base_url,
            timeout_seconds=settings.request_timeout_seconds,
            retry_attempts=settings.retry_attempts,
        )
        self.scheduler = SyncScheduler(
            self.paginator,
            self.fetcher,
            page_size=settings.page_size,
            event_publisher=event_publisher,
        )
        self._logger = get_logger(__name__)

    # -------------------- display layer --------------------
    def snapshot(self) -> ListingSnapshot:
        return self.store.snapshot()

    def sorted_snapshot(self, order: SortOrder = SortOrder.GRID) -> list[SaleItem]:
        return sort_items(self.store.snapshot(), order)

    def snapshot_dtos(self, order: SortOrder = SortOrder.GRID) -> list[SaleItemDTO]:
        return [SaleItemDTO.from_item(item) for item in self.sorted_snapshot(order)]

    def subscribe(self, listener: ListingListener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    # -------------------- host lifecycle --------------------
    async def start(self, interval: float | None = None) -> SchedulerState:
        """Start syncing; ``interval`` defaults to the configured one."""
        if interval is None:
            interval = self.settings.sync_interval_seconds
        return await self.scheduler.start(interval)

    async def stop(self) -> SchedulerState:
        return await self.scheduler.stop()

    async def sync_once(self) -> PassResult:
        return await self.scheduler.run_now()

    def sync_once_blocking(self) -> PassResult:
        """Run a single pass on the calling thread, outside any event loop."""
        return self.paginator.run_pass(self.fetcher, self.settings.page_size)


__all__ = ["ListingSyncService"]
