"""Sync event messages published to the host display layer.

Every event shares one envelope::

    {
        "version": "1",
        "type": "<event_type>",
        "timestamp": "<ISO8601>",
        "payload": { ... }
    }

Event types:
    - sync_started: a pass is about to fetch page 1
    - listing_updated: a pass committed a new listing
    - sync_failed: a pass was aborted; the listing is unchanged
    - scheduler_status: the scheduler changed state

Usage::

    msg = ListingUpdatedMessage(auction_id="sale-1", item_count=12, version=3)
    await publisher(msg.to_wire())
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, Field, ValidationError

MESSAGE_FORMAT_VERSION = "1"


class WireMessage(BaseModel):
    """Envelope shared by all events."""

    version: str = MESSAGE_FORMAT_VERSION
    type: str
    timestamp: str
    payload: dict[str, Any]


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class BaseMessage(BaseModel):
    """Base class for typed event payloads."""

    message_type: ClassVar[str] = ""

    def to_wire(self) -> dict[str, Any]:
        return WireMessage(
            type=self.message_type,
            timestamp=_utcnow(),
            payload=self.model_dump(exclude_none=True),
        ).model_dump()


class SyncStartedMessage(BaseMessage):
    """A pass is starting."""

    message_type: ClassVar[str] = "sync_started"

    auction_id: str
    page_size: int
    trigger: Literal["scheduled", "manual"] = "scheduled"


class ListingUpdatedMessage(BaseMessage):
    """A pass committed; renderers should re-read the snapshot."""

    message_type: ClassVar[str] = "listing_updated"

    auction_id: str
    item_count: int
    version: int
    pages_fetched: int = 0
    records_skipped: int = 0
    duration_seconds: float | None = None


class SyncFailedMessage(BaseMessage):
    """A pass was aborted; the previous listing is still visible."""

    message_type: ClassVar[str] = "sync_failed"

    auction_id: str
    error: str
    error_type: str
    page: int | None = None


class SchedulerStatusMessage(BaseMessage):
    """The scheduler moved between idle, running and stopped."""

    message_type: ClassVar[str] = "scheduler_status"

    auction_id: str
    status: Literal["idle", "running", "stopped"]
    interval_seconds: float | None = None
    passes_run: int = 0
    state: dict[str, Any] = Field(default_factory=dict)


def create_message(message_type: str, **payload: Any) -> dict[str, Any]:
    """Build a wire-format event without a typed payload class."""
    return WireMessage(type=message_type, timestamp=_utcnow(), payload=payload).model_dump()


MESSAGE_TYPE_MAP: dict[str, type[BaseMessage]] = {
    cls.message_type: cls
    for cls in (
        SyncStartedMessage,
        ListingUpdatedMessage,
        SyncFailedMessage,
        SchedulerStatusMessage,
    )
}


def parse_message(data: dict[str, Any]) -> BaseMessage | None:
    """Turn a wire-format dict back into its typed message, if known."""
    message_cls = MESSAGE_TYPE_MAP.get(str(data.get("type")))
    if message_cls is None:
        return None
    try:
        return message_cls.model_validate(data.get("payload", {}))
    except ValidationError:
        return None


__all__ = [
    "MESSAGE_FORMAT_VERSION",
    "MESSAGE_TYPE_MAP",
    "BaseMessage",
    "ListingUpdatedMessage",
    "SchedulerStatusMessage",
    "SyncFailedMessage",
    "SyncStartedMessage",
    "WireMessage",
    "create_message",
    "parse_message",
]
