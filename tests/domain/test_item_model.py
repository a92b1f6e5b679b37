"""Tests for the SaleItem domain model and sort orders."""

import pytest

from kiosksync.domain.models import Artwork, SaleItem, SortOrder, sort_items


def _item(item_id, bids=0, highest=None, opening=None, title="", artist=None):
    return SaleItem(
        id=item_id,
        artwork=Artwork(title=title, artist_name=artist),
        bid_count=bids,
        highest_bid_cents=highest,
        opening_bid_cents=opening,
    )


class TestSaleItem:
    def test_bid_amount_prefers_highest_bid(self):
        assert _item("a", highest=5000, opening=1000).bid_amount_cents == 5000

    def test_bid_amount_falls_back_to_opening_bid(self):
        assert _item("a", opening=1000).bid_amount_cents == 1000

    def test_bid_amount_defaults_to_zero(self):
        assert _item("a").bid_amount_cents == 0

    def test_has_bids(self):
        assert _item("a", bids=1).has_bids is True
        assert _item("a", highest=100).has_bids is True
        assert _item("a").has_bids is False

    def test_sort_title_uses_artist_then_title(self):
        assert _item("a", title="Zebra", artist="Adams").sort_title == "adams"
        assert _item("a", title="Zebra").sort_title == "zebra"

    def test_items_are_immutable(self):
        item = _item("a", bids=1)
        with pytest.raises(AttributeError):
            item.bid_count = 2  # type: ignore[misc]


class TestSortOrder:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, SortOrder.GRID),
            ("", SortOrder.GRID),
            ("grid", SortOrder.GRID),
            ("most_bids", SortOrder.MOST_BIDS),
            ("Least Bids", SortOrder.LEAST_BIDS),
            ("highest-bid", SortOrder.HIGHEST_BID),
            ("ALPHABETICAL", SortOrder.ALPHABETICAL),
        ],
    )
    def test_from_string(self, value, expected):
        assert SortOrder.from_string(value) == expected

    def test_from_string_rejects_unknown(self):
        with pytest.raises(ValueError):
            SortOrder.from_string("newest")


class TestSortItems:
    items = (
        _item("a", bids=2, highest=300, title="Banana"),
        _item("b", bids=5, opening=100, title="apple"),
        _item("c", bids=0, title="Cherry"),
        _item("d", bids=2, highest=900, title="date"),
    )

    def _ids(self, order):
        return [item.id for item in sort_items(self.items, order)]

    def test_grid_keeps_arrival_order(self):
        assert self._ids(SortOrder.GRID) == ["a", "b", "c", "d"]

    def test_least_bids_is_stable(self):
        assert self._ids(SortOrder.LEAST_BIDS) == ["c", "a", "d", "b"]

    def test_most_bids(self):
        assert self._ids(SortOrder.MOST_BIDS) == ["b", "a", "d", "c"]

    def test_highest_bid(self):
        assert self._ids(SortOrder.HIGHEST_BID) == ["d", "a", "b", "c"]

    def test_lowest_bid(self):
        assert self._ids(SortOrder.LOWEST_BID) == ["c", "b", "a", "d"]

    def test_alphabetical_ignores_case(self):
        assert self._ids(SortOrder.ALPHABETICAL) == ["b", "a", "c", "d"]

    def test_sorting_returns_a_new_list(self):
        sorted_items = sort_items(self.items, SortOrder.MOST_BIDS)
        assert isinstance(sorted_items, list)
        assert [item.id for item in self.items] == ["a", "b", "c", "d"]
