"""HTTP page fetcher for the sale-artworks listing endpoint.

:class:`HttpPageFetcher` implements the ``PageFetcher`` contract on top of a
:class:`requests.Session`. It retries transient failures with exponential
backoff and reports anything it cannot recover from as a
:class:`~kiosksync.services.sync.FetchError`, which aborts the current pass
without touching the visible listing.
"""

from __future__ import annotations

import time
from typing import Any, Mapping

import requests
from requests import Response, Session

from kiosksync.infrastructure.observability import get_logger
from kiosksync.services.sync.errors import FetchError
from kiosksync.services.sync.fetcher import PageResult

LISTING_PATH = "/api/v1/sale/{auction_id}/sale_artworks"

logger = get_logger(__name__)


class HttpPageFetcher:
    """Fetch listing pages over HTTP with retries and a request timeout."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Session | None = None,
        timeout_seconds: float = 30.0,
        retry_attempts: int = 3,
        backoff_base_seconds: float = 0.5,
        user_agent: str = "",  # Empty string triggers dynamic version lookup
        headers: Mapping[str, str] | None = None,
    ) -> None:
        from kiosksync import __version__

        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout_seconds = timeout_seconds
        self.retry_attempts = max(1, retry_attempts)
        self.backoff_base_seconds = max(0.0, backoff_base_seconds)
        self.headers = {
            "User-Agent": user_agent or f"kiosksync/{__version__}",
            "Accept": "application/json",
        }
        if headers:
            self.headers.update(headers)

    def listing_url(self, auction_id: str) -> str:
        return self.base_url + LISTING_PATH.format(auction_id=auction_id)

    def _backoff_delay(self, attempt: int) -> float:
        return self.backoff_base_seconds * (2**attempt)

    def fetch(self, auction_id: str, page_number: int, page_size: int) -> PageResult:
        url = self.listing_url(auction_id)
        params = {"page": page_number, "size": page_size}
        last_error: FetchError | None = None
        for attempt in range(self.retry_attempts):
            try:
                response = self.session.get(
                    url, params=params, headers=self.headers, timeout=self.timeout_seconds
                )
                return self._page_from_response(response)
            except FetchError as exc:
                last_error = exc
                # Client errors will not fix themselves on retry.
                if exc.status is not None and 400 <= exc.status < 500 and exc.status != 429:
                    break
            except requests.RequestException as exc:
                last_error = FetchError(f"GET {url} failed: {exc}")
            if attempt < self.retry_attempts - 1:
                delay = self._backoff_delay(attempt)
                logger.warning(
                    "Page %s of %s failed (%s); retrying in %.2fs",
                    page_number,
                    auction_id,
                    last_error,
                    delay,
                )
                time.sleep(delay)
        if last_error is None:
            last_error = FetchError(f"GET {url} was not attempted")
        raise last_error

    def _page_from_response(self, response: Response) -> PageResult:
        if response.status_code >= 400:
            raise FetchError(
                f"GET {response.url} returned HTTP {response.status_code}",
                status=response.status_code,
            )
        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"GET {response.url} returned invalid JSON: {exc}") from exc
        return parse_listing_payload(payload)


def parse_listing_payload(payload: Any) -> PageResult:
    """Turn a decoded JSON body into a :class:`PageResult`.

    A bare array carries no last-page flag. An object may wrap the records in
    ``items`` or ``sale_artworks`` and report ``has_more`` (or ``next``).
    """
    if isinstance(payload, list):
        return PageResult(records=payload)
    if isinstance(payload, Mapping):
        records = payload.get("items")
        if records is None:
            records = payload.get("sale_artworks")
        if isinstance(records, list):
            has_more = payload.get("has_more")
            if has_more is None and "next" in payload:
                has_more = bool(payload.get("next"))
            return PageResult(
                records=records,
                has_more=None if has_more is None else bool(has_more),
            )
    raise FetchError(f"Unexpected listing payload of type {type(payload).__name__}")


__all__ = ["HttpPageFetcher", "LISTING_PATH", "parse_listing_payload"]
