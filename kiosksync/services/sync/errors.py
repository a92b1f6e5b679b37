"""Exceptions raised while decoding records and running sync passes."""

from __future__ import annotations


class DecodeError(Exception):
    """A raw record could not be turned into a :class:`SaleItem`."""


class MissingIdentityError(DecodeError):
    """The record has no ``id`` and therefore cannot be merged."""

    def __init__(self, record: object | None = None) -> None:
        super().__init__("record has no id")
        self.record = record


class InvalidRecordError(DecodeError):
    """The record is not a mapping, or a field has an unusable type."""


class FetchError(Exception):
    """Raised by page fetchers when the transport fails."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class SyncError(Exception):
    """Base class for failures that abort a sync pass.

    Instances are returned inside a ``PassResult`` rather than raised past
    the paginator.
    """

    def __init__(self, page: int, message: str) -> None:
        super().__init__(message)
        self.page = page


class FetchFailedError(SyncError):
    def __init__(self, page: int, cause: BaseException) -> None:
        super().__init__(page, f"Failed to fetch page {page}: {cause}")
        self.cause = cause


class DecodeFailedError(SyncError):
    def __init__(self, page: int, record_count: int = 0) -> None:
        super().__init__(page, f"None of the {record_count} record(s) on page {page} could be decoded")
        self.record_count = record_count


class PageLimitExceededError(SyncError):
    def __init__(self, page: int) -> None:
        super().__init__(page, f"Source still reports more data after page {page}")


class PassClosedError(RuntimeError):
    """A pass handle was used after it was committed or aborted."""


__all__ = [
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
