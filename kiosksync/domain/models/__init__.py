"""Domain models package.

This package contains the domain model classes for kiosksync.
"""

from .item import Artwork, SaleItem, SortOrder, sort_items

__all__ = ["Artwork", "SaleItem", "SortOrder", "sort_items"]
