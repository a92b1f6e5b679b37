"""Sync scheduler that runs listing passes on an interval.

The scheduler owns the periodic loop for one :class:`ListingStore`. It runs a
pass immediately on :meth:`SyncScheduler.start`, then waits ``interval``
seconds after each pass finishes before starting the next one, whether the
pass succeeded or not. Passes execute in a worker thread via
:func:`asyncio.to_thread`, so the event loop (and any renderer reading
snapshots) is never blocked by network I/O.

Stopping is cooperative. :meth:`SyncScheduler.stop` cancels the pending wait
and lets an in-flight pass run to completion, including its commit.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from kiosksync.app.events import (
    ListingUpdatedMessage,
    SchedulerStatusMessage,
    SyncFailedMessage,
    SyncStartedMessage,
)
from kiosksync.infrastructure.observability import get_logger, log_context, log_exception
from kiosksync.services.dto import EventPublisher, noop_event_publisher
from kiosksync.services.sync import (
    DEFAULT_PAGE_SIZE,
    PageFetcher,
    Paginator,
    PassResult,
)

SchedulerStatus = Literal["idle", "running", "stopped"]
Trigger = Literal["scheduled", "manual"]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SchedulerState:
    """Point-in-time view of the scheduler for status reporting."""

    status: SchedulerStatus = "idle"
    interval_seconds: float | None = None
    passes_run: int = 0
    current_pass_started_at: str | None = None
    last_result: PassResult | None = None
    last_error: str | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "interval_seconds": self.interval_seconds,
            "passes_run": self.passes_run,
            "current_pass_started_at": self.current_pass_started_at,
            "last_result": self.last_result.to_dict() if self.last_result else None,
            "last_error": self.last_error,
        }


class SyncScheduler:
    """Periodically reconcile one auction's listing.

    Only one pass runs at a time: the periodic loop and :meth:`run_now` share
    a lock, so a manual trigger issued mid-pass waits for that pass to
    commit before starting its own.
    """

    def __init__(
        self,
        paginator: Paginator,
        fetcher: PageFetcher,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        event_publisher: EventPublisher | None = None,
    ) -> None:
        self._paginator = paginator
        self._fetcher = fetcher
        self._page_size = page_size
        self._event_publisher = event_publisher or noop_event_publisher
        self._logger = get_logger(__name__)

        self._state = SchedulerState()
        self._task: asyncio.Task | None = None
        self._pass_lock = asyncio.Lock()
        self._stop_event = asyncio.Event()

    @property
    def auction_id(self) -> str:
        return self._paginator.store.auction_id

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def status(self) -> SchedulerStatus:
        return self._state.status

    def get_status(self) -> dict:
        return self._state.to_dict()

    # -------------------- lifecycle --------------------
    async def start(self, interval: float | None = None) -> SchedulerState:
        """Run a pass now and then every ``interval`` seconds.

        ``interval`` of ``None`` or ``<= 0`` runs a single pass, after which
        the scheduler returns to ``idle``.

        Raises:
            RuntimeError: the scheduler is already running.
        """
        if self._state.status == "running":
            raise RuntimeError(f"Scheduler for auction {self.auction_id} is already running")
        if self._task is not None and not self._task.done():
            # A previous stop() has not finished draining its loop yet.
            await self._task

        self._state.interval_seconds = interval
        self._state.last_error = None
        self._stop_event.clear()
        await self._set_status("running")
        self._logger.info("Scheduler started for auction %s (interval=%s)", self.auction_id, interval)
        self._task = asyncio.create_task(self._run_loop())
        return self._state

    async def stop(self) -> SchedulerState:
        """Stop scheduling passes and wait for the loop to exit.

        A pass that is already running finishes and commits. The scheduler
        ends up ``stopped`` whether it was running or idle.
        """
        self._stop_event.set()
        if self._state.status != "stopped":
            await self._set_status("stopped")
            self._logger.info("Scheduler stopping for auction %s", self.auction_id)
        task = self._task
        if task is not None:
            await task
        self._task = None
        return self._state

    def set_interval(self, interval: float | None) -> None:
        """Change the interval used for the next wait.

        A wait that has already begun keeps its original length.
        """
        self._state.interval_seconds = interval

    async def run_now(self) -> PassResult:
        """Run one pass immediately, after any pass already in flight."""
        return await self._run_pass(trigger="manual")

    async def wait_idle(self) -> None:
        """Wait until the loop task (if any) has exited."""
        if self._task is not None:
            await self._task

    # -------------------- loop --------------------
    async def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self._run_pass(trigger="scheduled")
            except Exception as exc:
                log_exception(self._logger, "Sync pass crashed", exc, auction_id=self.auction_id)
                self._state.last_error = str(exc)

            interval = self._state.interval_seconds
            if interval is None or interval <= 0:
                break
            if self._stop_event.is_set():
                break

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

        if self._state.status == "running":
            await self._set_status("idle")

    async def _run_pass(self, *, trigger: Trigger) -> PassResult:
        async with self._pass_lock:
            self._state.current_pass_started_at = _utcnow()
            await self._publish(
                SyncStartedMessage(
                    auction_id=self.auction_id,
                    page_size=self._page_size,
                    trigger=trigger,
                ).to_wire()
            )
            try:
                with log_context(auction_id=self.auction_id, trigger=trigger):
                    result = await asyncio.to_thread(
                        self._paginator.run_pass, self._fetcher, self._page_size
                    )
            finally:
                self._state.current_pass_started_at = None
                self._state.passes_run += 1

        self._state.last_result = result
        if result.ok:
            self._state.last_error = None
            await self._publish(
                ListingUpdatedMessage(
                    auction_id=self.auction_id,
                    item_count=result.item_count,
                    version=self._paginator.store.version,
                    pages_fetched=result.pages_fetched,
                    records_skipped=result.records_skipped,
                    duration_seconds=round(result.duration_seconds, 3),
                ).to_wire()
            )
        else:
            error = result.error
            self._state.last_error = str(error)
            await self._publish(
                SyncFailedMessage(
                    auction_id=self.auction_id,
                    error=str(error),
                    error_type=type(error).__name__,
                    page=getattr(error, "page", None),
                ).to_wire()
            )
        return result

    # -------------------- events --------------------
    async def _publish(self, payload: dict) -> None:
        try:
            await self._event_publisher(payload)
        except Exception:
            self._logger.exception("Failed to publish sync event")

    async def _set_status(self, status: SchedulerStatus) -> None:
        self._state.status = status
        await self._publish(
            SchedulerStatusMessage(
                auction_id=self.auction_id,
                status=status,
                interval_seconds=self._state.interval_seconds,
                passes_run=self._state.passes_run,
                state=self.get_status(),
            ).to_wire()
        )


__all__ = ["SchedulerState", "SchedulerStatus", "SyncScheduler"]
