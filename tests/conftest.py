"""Shared test doubles for the sync tests.

``ListingsFixture`` mirrors the kiosk's stubbed listings endpoint: page 1
returns two records, later pages one, and two external knobs (``bid_count``
and ``count``) let a test change what the next pass will see.
"""

from __future__ import annotations

import asyncio
import sys
import threading
import time
from pathlib import Path
from typing import Any, Callable

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kiosksync.infrastructure.observability import get_registry  # noqa: E402
from kiosksync.services.sync import ListingStore, PageResult  # noqa: E402


def make_record(item_id: str, bid_count: int = 0, **extra: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "id": item_id,
        "artwork": {
            "id": "artwork-id",
            "title": "artwork title",
            "date": "late 2014",
            "blurb": "Some description",
            "price": "1200",
        },
        "bidder_positions_count": bid_count,
    }
    record.update(extra)
    return record


def listings_data_for_page(page: int, bid_count: int, count: int | None) -> list[dict[str, Any]]:
    size = count if count is not None else (2 if page == 1 else 1)
    return [make_record(str(size + index * 10), bid_count) for index in range(1, size + 1)]


class ListingsFixture:
    """Deterministic page source driven by mutable knobs."""

    def __init__(self, bid_count: int = 3, count: int | None = None) -> None:
        self.bid_count = bid_count
        self.count = count
        self.calls: list[tuple[str, int, int]] = []
        self.delay = 0.0
        self._lock = threading.Lock()

    def fetch(self, auction_id: str, page_number: int, page_size: int) -> PageResult:
        with self._lock:
            self.calls.append((auction_id, page_number, page_size))
            bid_count, count = self.bid_count, self.count
        if self.delay:
            time.sleep(self.delay)
        return PageResult(records=listings_data_for_page(page_number, bid_count, count))


class RecordingStore(ListingStore):
    """Listing store that tracks how many passes are open at once."""

    def __init__(self, auction_id: str) -> None:
        super().__init__(auction_id)
        self._guard = threading.Lock()
        self.active = 0
        self.max_active = 0
        self.commits = 0

    def begin_pass(self):
        with self._guard:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        return super().begin_pass()

    def commit_pass(self, listing_pass):
        snapshot = super().commit_pass(listing_pass)
        with self._guard:
            self.active -= 1
            self.commits += 1
        return snapshot

    def abort_pass(self, listing_pass):
        super().abort_pass(listing_pass)
        with self._guard:
            self.active -= 1


class ScriptedFetcher:
    """Return scripted pages keyed by page number.

    A value may be a list of records, a :class:`PageResult` or an exception
    instance to raise.
    """

    def __init__(self, pages: dict[int, Any]) -> None:
        self.pages = pages
        self.calls: list[int] = []

    def fetch(self, auction_id: str, page_number: int, page_size: int) -> PageResult:
        self.calls.append(page_number)
        page = self.pages.get(page_number, [])
        if isinstance(page, BaseException):
            raise page
        if isinstance(page, PageResult):
            return page
        return PageResult(records=list(page))


async def eventually(
    predicate: Callable[[], bool], timeout: float = 3.0, poll_interval: float = 0.02
) -> None:
    """Poll ``predicate`` until it holds or ``timeout`` elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            raise AssertionError(f"condition not met within {timeout}s")
        await asyncio.sleep(poll_interval)


@pytest.fixture
def listings() -> ListingsFixture:
    return ListingsFixture()


@pytest.fixture(autouse=True)
def _reset_metrics():
    get_registry().reset()
    yield
    get_registry().reset()
