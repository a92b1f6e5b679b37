"""
Event publishing types and display-layer DTOs for kiosksync services.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict

from kiosksync.domain.models import SaleItem

# --- Event Publishing Types ---
EventPayload = dict[str, object]
EventPublisher = Callable[[EventPayload], Awaitable[None]]


async def noop_event_publisher(_: EventPayload) -> None:
    """Default publisher for callers that do not listen to events."""
    pass


# --- Sale item DTOs ---
class SaleItemDTO(BaseModel):
    """Flat, JSON-friendly view of a :class:`SaleItem` for renderers."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    title: str = ""
    artist_name: str | None = None
    date: str = ""
    blurb: str = ""
    price: float = 0.0
    lot_number: int | None = None
    bid_count: int = 0
    highest_bid_cents: int | None = None
    opening_bid_cents: int | None = None
    bid_amount_cents: int = 0

    @classmethod
    def from_item(cls, item: SaleItem) -> "SaleItemDTO":
        return cls(
            id=item.id,
            title=item.artwork.title,
            artist_name=item.artwork.artist_name,
            date=item.artwork.date,
            blurb=item.artwork.blurb,
            price=item.artwork.price,
            lot_number=item.lot_number,
            bid_count=item.bid_count,
            highest_bid_cents=item.highest_bid_cents,
            opening_bid_cents=item.opening_bid_cents,
            bid_amount_cents=item.bid_amount_cents,
        )


__all__ = ["EventPayload", "EventPublisher", "SaleItemDTO", "noop_event_publisher"]
