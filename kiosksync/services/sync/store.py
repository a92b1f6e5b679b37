"""In-memory listing of one auction's sale items.

The store is the only writer of the visible listing. Writers go through the
pass API (:meth:`ListingStore.begin_pass`, :meth:`~ListingStore.add_to_pass`,
:meth:`~ListingStore.commit_pass`, :meth:`~ListingStore.abort_pass`); readers
call :meth:`ListingStore.snapshot` from any thread. The visible listing is an
immutable tuple that is swapped in one assignment under a lock, so a reader
sees either the previous complete listing or the next one, never a mix.
"""

from __future__ import annotations

import itertools
import threading
from datetime import datetime, timezone
from typing import Callable, Iterable

from kiosksync.domain.models import SaleItem
from kiosksync.infrastructure.observability import get_logger

from .errors import PassClosedError

ListingSnapshot = tuple[SaleItem, ...]
ListingListener = Callable[[ListingSnapshot], None]

_pass_ids = itertools.count(1)


class ListingPass:
    """Items accumulated by one in-flight reconciliation pass.

    Handles are created by :meth:`ListingStore.begin_pass` and are only
    meaningful to the store that issued them.
    """

    def __init__(self, store: "ListingStore") -> None:
        self.pass_id = next(_pass_ids)
        self.started_at = datetime.now(timezone.utc)
        self._store = store
        # dict keeps first-arrival order; reassigning a key keeps its slot.
        self._items: dict[str, SaleItem] = {}
        self._closed = False
        self.duplicates = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<ListingPass #{self.pass_id} {state} items={len(self._items)}>"


class ListingStore:
    """Authoritative ordered collection of :class:`SaleItem` for one auction."""

    def __init__(self, auction_id: str) -> None:
        self.auction_id = auction_id
        self._items: ListingSnapshot = ()
        self._version = 0
        self._committed_at: datetime | None = None
        self._lock = threading.Lock()
        # Held by a paginator for a whole pass, begin through commit or abort.
        self.pass_lock = threading.Lock()
        self._listeners: list[ListingListener] = []
        self._logger = get_logger(__name__)

    # -------------------- readers --------------------
    def snapshot(self) -> ListingSnapshot:
        """Return the visible listing in arrival order."""
        with self._lock:
            return self._items

    def get(self, item_id: str) -> SaleItem | None:
        for item in self.snapshot():
            if item.id == item_id:
                return item
        return None

    @property
    def version(self) -> int:
        """Number of successful commits so far."""
        with self._lock:
            return self._version

    @property
    def committed_at(self) -> datetime | None:
        with self._lock:
            return self._committed_at

    def __len__(self) -> int:
        return len(self.snapshot())

    def __bool__(self) -> bool:
        # An empty listing is still a store.
        return True

    # -------------------- change notification --------------------
    def subscribe(self, listener: ListingListener) -> Callable[[], None]:
        """Call ``listener`` with the new snapshot after every commit.

        Returns a function that removes the listener again.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, snapshot: ListingSnapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                self._logger.exception("Listing listener %r failed", listener)

    # -------------------- pass API --------------------
    def begin_pass(self) -> ListingPass:
        """Start accumulating a new pass. The visible listing is unchanged."""
        listing_pass = ListingPass(self)
        self._logger.debug("Began pass #%s for auction %s", listing_pass.pass_id, self.auction_id)
        return listing_pass

    def add_to_pass(self, listing_pass: ListingPass, items: Iterable[SaleItem]) -> None:
        """Accumulate ``items`` into ``listing_pass``.

        A repeated id replaces the earlier item but keeps its position.
        """
        self._check_open(listing_pass)
        for item in items:
            if item.id in listing_pass._items:
                listing_pass.duplicates += 1
            listing_pass._items[item.id] = item

    def commit_pass(self, listing_pass: ListingPass) -> ListingSnapshot:
        """Make the pass's items the visible listing and notify listeners.

        Items missing from the pass are dropped; items present take the
        pass's values wholesale.
        """
        self._check_open(listing_pass)
        listing_pass._closed = True
        snapshot = tuple(listing_pass._items.values())
        listing_pass._items = {}
        with self._lock:
            previous = len(self._items)
            self._items = snapshot
            self._version += 1
            self._committed_at = datetime.now(timezone.utc)
            version = self._version
        self._logger.info(
            "Committed pass #%s for auction %s: %s item(s) (was %s), version %s",
            listing_pass.pass_id,
            self.auction_id,
            len(snapshot),
            previous,
            version,
        )
        self._notify(snapshot)
        return snapshot

    def abort_pass(self, listing_pass: ListingPass) -> None:
        """Discard the pass; the visible listing is left as it was."""
        self._check_open(listing_pass)
        listing_pass._closed = True
        discarded = len(listing_pass._items)
        listing_pass._items = {}
        self._logger.debug(
            "Aborted pass #%s for auction %s, discarded %s item(s)",
            listing_pass.pass_id,
            self.auction_id,
            discarded,
        )

    def _check_open(self, listing_pass: ListingPass) -> None:
        if listing_pass._store is not self:
            raise ValueError("Pass was started by a different listing store")
        if listing_pass.closed:
            raise PassClosedError(f"Pass #{listing_pass.pass_id} is already closed")


__all__ = ["ListingListener", "ListingPass", "ListingSnapshot", "ListingStore"]
