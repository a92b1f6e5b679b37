"""Sale item domain model and the kiosk's sort orders."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


@dataclass(frozen=True)
class Artwork:
    """Static metadata shown for an item.

    Set when the item is first decoded and not expected to change while the
    kiosk is syncing.
    """

    id: str = ""
    title: str = ""
    date: str = ""
    blurb: str = ""
    price: float = 0.0
    artist_name: str | None = None


@dataclass(frozen=True)
class SaleItem:
    """An item up for bid in one auction.

    ``id`` identifies the item within its auction. The bid fields are
    replaced wholesale by every sync pass that sees the item; nothing assumes
    they only grow.
    """

    id: str
    artwork: Artwork = field(default_factory=Artwork)
    bid_count: int = 0
    highest_bid_cents: int | None = None
    opening_bid_cents: int | None = None
    lot_number: int | None = None

    @property
    def title(self) -> str:
        return self.artwork.title

    @property
    def has_bids(self) -> bool:
        return self.bid_count > 0 or self.highest_bid_cents is not None

    @property
    def bid_amount_cents(self) -> int:
        """Return the highest bid, the opening bid, or 0, in that order."""
        if self.highest_bid_cents is not None:
            return self.highest_bid_cents
        if self.opening_bid_cents is not None:
            return self.opening_bid_cents
        return 0

    @property
    def sort_title(self) -> str:
        return (self.artwork.artist_name or self.artwork.title).casefold()


class SortOrder(str, Enum):
    """The views offered by the kiosk's sort switch."""

    GRID = "grid"
    LEAST_BIDS = "least_bids"
    MOST_BIDS = "most_bids"
    HIGHEST_BID = "highest_bid"
    LOWEST_BID = "lowest_bid"
    ALPHABETICAL = "alphabetical"

    @classmethod
    def from_string(cls, value: str | None) -> "SortOrder":
        """Parse a user-supplied order name, defaulting to GRID."""
        if not value:
            return cls.GRID
        normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
        for order in cls:
            if order.value == normalized:
                return order
        raise ValueError(f"Unknown sort order: {value!r}")


def sort_items(items: Iterable[SaleItem], order: SortOrder = SortOrder.GRID) -> list[SaleItem]:
    """Return ``items`` as a new list in the requested order.

    Sorts are stable, so items with equal keys keep their arrival order.
    The synchronized listing itself is never reordered.
    """
    result = list(items)
    if order is SortOrder.LEAST_BIDS:
        result.sort(key=lambda item: item.bid_count)
    elif order is SortOrder.MOST_BIDS:
        result.sort(key=lambda item: item.bid_count, reverse=True)
    elif order is SortOrder.HIGHEST_BID:
        result.sort(key=lambda item: item.bid_amount_cents, reverse=True)
    elif order is SortOrder.LOWEST_BID:
        result.sort(key=lambda item: item.bid_amount_cents)
    elif order is SortOrder.ALPHABETICAL:
        result.sort(key=lambda item: item.sort_title)
    return result


__all__ = ["Artwork", "SaleItem", "SortOrder", "sort_items"]
