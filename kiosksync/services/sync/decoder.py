"""Decode raw sale-artwork records into :class:`SaleItem` values.

Records arrive as the JSON objects served by the listings endpoint::

    {
        "id": "54c7ed2a7261692bfa910200",
        "lot_number": 12,
        "bidder_positions_count": 3,
        "opening_bid_cents": 100000,
        "highest_bid": {"amount_cents": 120000},
        "artwork": {
            "id": "artwork-id",
            "title": "Untitled",
            "date": "late 2014",
            "blurb": "Some description",
            "price": "$1,200",
            "artist": {"name": "Jane Doe"}
        }
    }

Only ``id`` is required. Everything else falls back to an empty or zero
value so one sparse record does not cost the kiosk a whole page.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from kiosksync.domain.models import Artwork, SaleItem

from .errors import InvalidRecordError, MissingIdentityError

_PRICE_CLEAN_RE = re.compile(r"[^\d.\-]")


def parse_price(value: Any) -> float:
    """Convert ``1200``, ``"1200"`` or ``"$1,200.50"`` to a float.

    Anything that does not parse becomes ``0.0``.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return 0.0
    cleaned = _PRICE_CLEAN_RE.sub("", value)
    if not cleaned:
        return 0.0
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def _optional_int(record: Mapping[str, Any], key: str) -> int | None:
    value = record.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise InvalidRecordError(f"{key} must be a number, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise InvalidRecordError(f"{key} must be a number, got {value!r}") from exc


def _text(mapping: Mapping[str, Any], key: str) -> str:
    value = mapping.get(key)
    return "" if value is None else str(value)


def _decode_identity(record: Mapping[str, Any]) -> str:
    raw_id = record.get("id")
    if raw_id is None or isinstance(raw_id, (bool, dict, list)):
        raise MissingIdentityError(record)
    identity = str(raw_id).strip()
    if not identity:
        raise MissingIdentityError(record)
    return identity


def decode_artwork(raw: Any) -> Artwork:
    if not isinstance(raw, Mapping):
        return Artwork()
    artist = raw.get("artist")
    artist_name = artist.get("name") if isinstance(artist, Mapping) else None
    return Artwork(
        id=_text(raw, "id"),
        title=_text(raw, "title"),
        date=_text(raw, "date"),
        blurb=_text(raw, "blurb"),
        price=parse_price(raw.get("price")),
        artist_name=str(artist_name) if artist_name else None,
    )


def decode_sale_item(raw: Any) -> SaleItem:
    """Build a :class:`SaleItem` from one raw record.

    Raises:
        MissingIdentityError: the record has no usable ``id``.
        InvalidRecordError: the record is not a mapping or a numeric field
            holds garbage.
    """
    if not isinstance(raw, Mapping):
        raise InvalidRecordError(f"expected a mapping, got {type(raw).__name__}")

    identity = _decode_identity(raw)

    bid_count = _optional_int(raw, "bidder_positions_count")
    if bid_count is None:
        bid_count = _optional_int(raw, "bid_count")

    highest_bid = raw.get("highest_bid")
    highest_bid_cents = (
        _optional_int(highest_bid, "amount_cents") if isinstance(highest_bid, Mapping) else None
    )

    return SaleItem(
        id=identity,
        artwork=decode_artwork(raw.get("artwork")),
        bid_count=bid_count or 0,
        highest_bid_cents=highest_bid_cents,
        opening_bid_cents=_optional_int(raw, "opening_bid_cents"),
        lot_number=_optional_int(raw, "lot_number"),
    )


__all__ = ["decode_artwork", "decode_sale_item", "parse_price"]
