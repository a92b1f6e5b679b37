"""HTTP adapters for kiosksync.

This package provides the ``requests``-based page fetcher used against the
live listings endpoint.
"""

from .client import LISTING_PATH, HttpPageFetcher, parse_listing_payload

__all__ = ["HttpPageFetcher", "LISTING_PATH", "parse_listing_payload"]
