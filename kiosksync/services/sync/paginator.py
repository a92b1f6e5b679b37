"""Drive one reconciliation pass over every page of an auction listing."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from kiosksync.domain.models import SaleItem
from kiosksync.infrastructure.observability import (
    get_logger,
    log_context,
    record_skipped_records,
    record_sync_pass,
)

from .decoder import decode_sale_item
from .errors import (
    DecodeError,
    DecodeFailedError,
    FetchFailedError,
    PageLimitExceededError,
    SyncError,
)
from .fetcher import PageFetcher
from .store import ListingPass, ListingStore

Decoder = Callable[[Any], SaleItem]

DEFAULT_PAGE_SIZE = 10

logger = get_logger(__name__)


@dataclass
class PassResult:
    """Outcome of :meth:`Paginator.run_pass`."""

    auction_id: str
    status: str
    pages_fetched: int
    item_count: int
    records_seen: int = 0
    records_skipped: int = 0
    duplicates: int = 0
    duration_seconds: float = 0.0
    error: SyncError | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "auction_id": self.auction_id,
            "status": self.status,
            "pages_fetched": self.pages_fetched,
            "item_count": self.item_count,
            "records_seen": self.records_seen,
            "records_skipped": self.records_skipped,
            "duplicates": self.duplicates,
            "duration_seconds": round(self.duration_seconds, 3),
        }
        if self.error is not None:
            payload["error"] = str(self.error)
            payload["failed_page"] = self.error.page
        return payload


class Paginator:
    """Fetch pages 1..N in order and reconcile them into a :class:`ListingStore`.

    A pass either commits every page it fetched or leaves the visible listing
    untouched. ``max_pages`` caps runaway sources: when the source still has
    data after that many pages the pass is aborted rather than committing a
    truncated listing.
    """

    def __init__(
        self,
        store: ListingStore,
        *,
        decoder: Decoder = decode_sale_item,
        max_pages: int | None = None,
    ) -> None:
        if max_pages is not None and max_pages < 1:
            raise ValueError("max_pages must be a positive integer or None")
        self.store = store
        self.decoder = decoder
        self.max_pages = max_pages

    def run_pass(self, fetcher: PageFetcher, page_size: int = DEFAULT_PAGE_SIZE) -> PassResult:
        """Run one full pass and return its result.

        Passes against the same store are serialized on
        :attr:`ListingStore.pass_lock`, whoever starts them; a caller that
        arrives mid-pass blocks until that pass has committed or aborted.

        Sync failures never propagate; they come back as a failed
        :class:`PassResult` carrying the :class:`SyncError`.

        Raises:
            ValueError: ``page_size`` is not a positive integer.
        """
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
            raise ValueError(f"page_size must be a positive integer, got {page_size!r}")

        with self.store.pass_lock:
            return self._run_locked(fetcher, page_size)

    def _run_locked(self, fetcher: PageFetcher, page_size: int) -> PassResult:
        auction_id = self.store.auction_id
        started = time.perf_counter()
        result = PassResult(auction_id=auction_id, status="running", pages_fetched=0, item_count=0)

        with log_context(auction_id=auction_id):
            listing_pass = self.store.begin_pass()
            try:
                error = self._collect(fetcher, page_size, listing_pass, result)
            except BaseException:
                # Leave nothing half-open if the decoder or store blows up.
                if not listing_pass.closed:
                    self.store.abort_pass(listing_pass)
                raise

            result.duplicates = listing_pass.duplicates
            if error is None:
                snapshot = self.store.commit_pass(listing_pass)
                result.status = "success"
                result.item_count = len(snapshot)
            else:
                self.store.abort_pass(listing_pass)
                result.status = "failed"
                result.error = error
                result.item_count = len(self.store.snapshot())
                logger.warning("Sync pass aborted on page %s: %s", error.page, error)

        result.duration_seconds = time.perf_counter() - started
        record_sync_pass(auction_id, result.status, result.duration_seconds, result.item_count)
        record_skipped_records(auction_id, result.records_skipped)
        return result

    def _collect(
        self,
        fetcher: PageFetcher,
        page_size: int,
        listing_pass: ListingPass,
        result: PassResult,
    ) -> SyncError | None:
        page_number = 0
        while True:
            page_number += 1
            if self.max_pages is not None and page_number > self.max_pages:
                return PageLimitExceededError(self.max_pages)

            logger.debug("Fetching page %s (size %s)", page_number, page_size)
            try:
                page = fetcher.fetch(self.store.auction_id, page_number, page_size)
            except Exception as exc:
                return FetchFailedError(page_number, exc)
            result.pages_fetched += 1

            records = list(page.records)
            items = self._decode_page(page_number, records, result)
            if records and not items:
                return DecodeFailedError(page_number, len(records))
            self.store.add_to_pass(listing_pass, items)

            if page.is_last(page_size):
                logger.debug("Page %s is the last page (%s record(s))", page_number, len(records))
                return None

    def _decode_page(
        self, page_number: int, records: Sequence[Any], result: PassResult
    ) -> list[SaleItem]:
        items: list[SaleItem] = []
        for index, record in enumerate(records):
            result.records_seen += 1
            try:
                items.append(self.decoder(record))
            except DecodeError as exc:
                result.records_skipped += 1
                logger.warning(
                    "Skipping record %s on page %s: %s (%s)",
                    index,
                    page_number,
                    exc,
                    type(exc).__name__,
                )
        return items


__all__ = ["DEFAULT_PAGE_SIZE", "Decoder", "PassResult", "Paginator"]
