"""Shared helpers for CLI commands: settings resolution and rendering."""

from __future__ import annotations

from typing import Iterable

import click
from rich.table import Table

from kiosksync.app.config import ConfigError, SyncSettings, load_settings
from kiosksync.domain.models import SaleItem
from kiosksync.services.dto import EventPublisher
from kiosksync.services.listing_service import ListingSyncService


def resolve_settings(
    config_path: str | None,
    *,
    auction_id: str | None = None,
    base_url: str | None = None,
    page_size: int | None = None,
    interval: float | None = None,
    max_pages: int | None = None,
) -> SyncSettings:
    """Merge config file, environment and command-line options.

    Raises:
        click.UsageError: the merged settings are incomplete or invalid.
    """
    try:
        return load_settings(
            config_path,
            auction_id=auction_id,
            base_url=base_url,
            page_size=page_size,
            sync_interval_seconds=interval,
            max_pages=max_pages,
        )
    except ConfigError as exc:
        raise click.UsageError(str(exc)) from exc


def build_listing_service(
    settings: SyncSettings, event_publisher: EventPublisher | None = None
) -> ListingSyncService:
    return ListingSyncService(settings, event_publisher=event_publisher)


def _format_cents(cents: int | None) -> str:
    if cents is None:
        return "-"
    return f"${cents / 100:,.2f}"


def render_listing(items: Iterable[SaleItem], *, title: str | None = None) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Lot", justify="right")
    table.add_column("Title")
    table.add_column("Artist")
    table.add_column("Bids", justify="right")
    table.add_column("Current bid", justify="right")
    for index, item in enumerate(items, start=1):
        amount = item.highest_bid_cents
        if amount is None:
            amount = item.opening_bid_cents
        table.add_row(
            str(index),
            str(item.lot_number) if item.lot_number is not None else "-",
            item.artwork.title or "(untitled)",
            item.artwork.artist_name or "-",
            str(item.bid_count),
            _format_cents(amount),
        )
    return table


__all__ = ["build_listing_service", "render_listing", "resolve_settings"]
