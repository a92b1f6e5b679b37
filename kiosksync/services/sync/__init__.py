"""Listing synchronization services.

This package is the public API for keeping an auction's listing in sync.
Import from here rather than from the submodules.

Public API:
  - ListingStore / ListingPass - the visible listing and its pass handles
  - Paginator / PassResult - one full fetch-and-reconcile pass
  - PageFetcher / PageResult - the contract page sources implement
  - decode_sale_item() - raw record to SaleItem
  - DecodeError, SyncError and their subclasses
"""

from .decoder import decode_artwork, decode_sale_item, parse_price
from .errors import (
    DecodeError,
    DecodeFailedError,
    FetchError,
    FetchFailedError,
    InvalidRecordError,
    MissingIdentityError,
    PageLimitExceededError,
    PassClosedError,
    SyncError,
)
from .fetcher import PageFetcher, PageResult, RawRecord
from .paginator import DEFAULT_PAGE_SIZE, Paginator, PassResult
from .store import ListingListener, ListingPass, ListingSnapshot, ListingStore

__all__ = [
    # === Store
    "ListingListener",
    "ListingPass",
    "ListingSnapshot",
    "ListingStore",
    # === Pagination
    "DEFAULT_PAGE_SIZE",
    "PageFetcher",
    "PageResult",
    "Paginator",
    "PassResult",
    "RawRecord",
    # === Decoding
    "decode_artwork",
    "decode_sale_item",
    "parse_price",
    # === Errors
    "DecodeError",
    "DecodeFailedError",
    "FetchError",
    "FetchFailedError",
    "InvalidRecordError",
    "MissingIdentityError",
    "PageLimitExceededError",
    "PassClosedError",
    "SyncError",
]
