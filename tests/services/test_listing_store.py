"""Tests for the listing store's pass API."""

import threading

import pytest

from kiosksync.domain.models import SaleItem
from kiosksync.services.sync import ListingStore, PassClosedError


def _item(item_id: str, bids: int = 0) -> SaleItem:
    return SaleItem(id=item_id, bid_count=bids)


def _ids(snapshot):
    return [item.id for item in snapshot]


def test_new_store_is_empty():
    store = ListingStore("sale-1")
    assert store.snapshot() == ()
    assert store.version == 0
    assert store.committed_at is None
    assert len(store) == 0
    assert store


def test_begin_and_add_do_not_touch_visible_listing():
    store = ListingStore("sale-1")
    listing_pass = store.begin_pass()
    store.add_to_pass(listing_pass, [_item("a"), _item("b")])

    assert store.snapshot() == ()
    assert len(listing_pass) == 2


def test_commit_replaces_listing_in_arrival_order():
    store = ListingStore("sale-1")
    listing_pass = store.begin_pass()
    store.add_to_pass(listing_pass, [_item("b"), _item("a")])
    store.add_to_pass(listing_pass, [_item("c")])

    snapshot = store.commit_pass(listing_pass)

    assert _ids(snapshot) == ["b", "a", "c"]
    assert store.snapshot() == snapshot
    assert store.version == 1
    assert store.committed_at is not None


def test_duplicate_in_pass_keeps_position_and_takes_later_values():
    store = ListingStore("sale-1")
    listing_pass = store.begin_pass()
    store.add_to_pass(listing_pass, [_item("a", 1), _item("b", 1)])
    store.add_to_pass(listing_pass, [_item("a", 9)])

    snapshot = store.commit_pass(listing_pass)

    assert _ids(snapshot) == ["a", "b"]
    assert snapshot[0].bid_count == 9
    assert listing_pass.duplicates == 1


def test_commit_drops_items_not_in_pass():
    store = ListingStore("sale-1")
    first = store.begin_pass()
    store.add_to_pass(first, [_item(str(i)) for i in range(5)])
    store.commit_pass(first)

    second = store.begin_pass()
    store.add_to_pass(second, [_item("3", 4), _item("1")])
    store.commit_pass(second)

    assert _ids(store.snapshot()) == ["3", "1"]
    assert store.get("3").bid_count == 4
    assert store.get("0") is None


def test_abort_leaves_listing_untouched():
    store = ListingStore("sale-1")
    first = store.begin_pass()
    store.add_to_pass(first, [_item("a", 1)])
    before = store.commit_pass(first)

    second = store.begin_pass()
    store.add_to_pass(second, [_item("a", 5), _item("b")])
    store.abort_pass(second)

    assert store.snapshot() == before
    assert store.version == 1


def test_closed_pass_cannot_be_reused():
    store = ListingStore("sale-1")
    listing_pass = store.begin_pass()
    store.commit_pass(listing_pass)

    with pytest.raises(PassClosedError):
        store.add_to_pass(listing_pass, [_item("a")])
    with pytest.raises(PassClosedError):
        store.commit_pass(listing_pass)
    with pytest.raises(PassClosedError):
        store.abort_pass(listing_pass)


def test_pass_from_other_store_is_rejected():
    store = ListingStore("sale-1")
    other = ListingStore("sale-2")
    with pytest.raises(ValueError):
        store.commit_pass(other.begin_pass())


def test_empty_commit_is_valid():
    store = ListingStore("sale-1")
    first = store.begin_pass()
    store.add_to_pass(first, [_item("a")])
    store.commit_pass(first)

    store.commit_pass(store.begin_pass())

    assert store.snapshot() == ()
    assert store.version == 2


def test_listeners_notified_once_per_commit():
    store = ListingStore("sale-1")
    seen = []
    unsubscribe = store.subscribe(seen.append)

    listing_pass = store.begin_pass()
    store.add_to_pass(listing_pass, [_item("a")])
    store.commit_pass(listing_pass)
    store.abort_pass(store.begin_pass())

    assert len(seen) == 1
    assert _ids(seen[0]) == ["a"]

    unsubscribe()
    store.commit_pass(store.begin_pass())
    assert len(seen) == 1


def test_failing_listener_does_not_break_commit():
    store = ListingStore("sale-1")
    seen = []

    def broken(_snapshot):
        raise RuntimeError("renderer exploded")

    store.subscribe(broken)
    store.subscribe(seen.append)
    listing_pass = store.begin_pass()
    store.add_to_pass(listing_pass, [_item("a")])
    store.commit_pass(listing_pass)

    assert _ids(store.snapshot()) == ["a"]
    assert len(seen) == 1


def test_concurrent_readers_only_see_complete_listings():
    store = ListingStore("sale-1")
    sizes = {0, 3, 7}
    observed = set()
    duplicates = []
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            snapshot = store.snapshot()
            observed.add(len(snapshot))
            if len({item.id for item in snapshot}) != len(snapshot):
                duplicates.append(snapshot)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    for thread in threads:
        thread.start()
    try:
        for _ in range(200):
            for size in (3, 7):
                listing_pass = store.begin_pass()
                for index in range(size):
                    store.add_to_pass(listing_pass, [_item(str(index))])
                store.commit_pass(listing_pass)
    finally:
        stop.set()
        for thread in threads:
            thread.join()

    assert observed <= sizes
    assert not duplicates
