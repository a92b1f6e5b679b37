"""Page fetcher contract used by the paginator.

The paginator never talks to the network itself. Anything with a matching
``fetch`` method can feed it: the HTTP adapter in
``kiosksync.infrastructure.http``, a local fixture, or a scripted test double.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

RawRecord = Mapping[str, Any]


@dataclass
class PageResult:
    """One page of raw records.

    ``has_more`` is the source's explicit last-page signal. Leave it as
    ``None`` when the source gives none; the paginator then treats a page
    shorter than the requested size as the last one. A page with no records
    is always the last one.
    """

    records: Sequence[Any] = field(default_factory=list)
    has_more: bool | None = None

    def __len__(self) -> int:
        return len(self.records)

    def is_last(self, page_size: int) -> bool:
        # An empty page ends the pass even when the source claims more.
        if not self.records:
            return True
        if self.has_more is not None:
            return not self.has_more
        return len(self.records) < page_size


@runtime_checkable
class PageFetcher(Protocol):
    """Returns page ``page_number`` (1-based) of an auction's listing.

    Implementations raise on transport failure; any exception aborts the
    current pass.
    """

    def fetch(self, auction_id: str, page_number: int, page_size: int) -> PageResult:
        ...


__all__ = ["PageFetcher", "PageResult", "RawRecord"]
