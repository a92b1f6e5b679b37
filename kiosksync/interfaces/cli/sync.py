"""Sync commands: a single pass, or a live watch loop."""

from __future__ import annotations

import asyncio
import json

import click
from rich.console import Console

from kiosksync.domain.models import SortOrder, sort_items
from kiosksync.services.dto import EventPayload, SaleItemDTO
from kiosksync.services.listing_service import ListingSyncService

from .context import build_listing_service, render_listing, resolve_settings

console = Console()

SORT_CHOICES = [order.value for order in SortOrder]


def _common_options(fn):
    options = [
        click.option(
            "--config",
            "config_path",
            type=click.Path(dir_okay=False, path_type=str),
            default=None,
            help="JSON config file (defaults to ./kiosksync.json when present).",
        ),
        click.option("--auction-id", default=None, help="Auction (sale) identifier to sync."),
        click.option("--base-url", default=None, help="Base URL of the listings API."),
        click.option(
            "--page-size",
            type=click.IntRange(min=1),
            default=None,
            help="Records requested per page.",
        ),
        click.option(
            "--max-pages",
            type=click.IntRange(min=1),
            default=None,
            help="Abort a pass when the source still has data after this many pages.",
        ),
        click.option(
            "--sort",
            "sort_order",
            type=click.Choice(SORT_CHOICES, case_sensitive=False),
            default=SortOrder.GRID.value,
            show_default=True,
            help="Order in which to print the listing.",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


@click.command(name="sync")
@_common_options
@click.option("--json-output", is_flag=True, help="Print the listing as JSON.")
def sync(
    config_path: str | None,
    auction_id: str | None,
    base_url: str | None,
    page_size: int | None,
    max_pages: int | None,
    sort_order: str,
    json_output: bool,
) -> None:
    """Run one sync pass and print the resulting listing."""
    settings = resolve_settings(
        config_path,
        auction_id=auction_id,
        base_url=base_url,
        page_size=page_size,
        max_pages=max_pages,
    )
    service = build_listing_service(settings)

    with console.status(f"Syncing auction {settings.auction_id}..."):
        result = service.sync_once_blocking()

    if not result.ok:
        console.print(f"[red]Sync failed: {result.error}[/red]")
        raise SystemExit(1)

    order = SortOrder.from_string(sort_order)
    if json_output:
        payload = [dto.model_dump(mode="json") for dto in service.snapshot_dtos(order)]
        click.echo(json.dumps(payload, indent=2))
        return

    console.print(
        f"[green]Synced {result.item_count} item(s)[/green] from {result.pages_fetched} page(s)"
        + (f", skipped {result.records_skipped} record(s)" if result.records_skipped else "")
    )
    console.print(render_listing(sort_items(service.snapshot(), order), title=settings.auction_id))


class _WatchPrinter:
    """Event publisher that prints each pass outcome as it arrives."""

    def __init__(self, order: SortOrder, passes: int | None) -> None:
        self.order = order
        self.passes = passes
        self.completed = 0
        self.done = asyncio.Event()
        self.service: ListingSyncService | None = None

    async def __call__(self, event: EventPayload) -> None:
        event_type = event.get("type")
        payload = event.get("payload") or {}
        if event_type == "listing_updated" and self.service is not None:
            console.print(
                render_listing(
                    sort_items(self.service.snapshot(), self.order),
                    title=f"{self.service.settings.auction_id} (v{payload.get('version')})",
                )
            )
        elif event_type == "sync_failed":
            console.print(f"[red]Sync failed: {payload.get('error')}[/red]")
        else:
            return
        self.completed += 1
        if self.passes is not None and self.completed >= self.passes:
            self.done.set()


async def _watch(service: ListingSyncService, printer: _WatchPrinter, interval: float) -> None:
    await service.start(interval)
    done_waiter = asyncio.create_task(printer.done.wait())
    idle_waiter = asyncio.create_task(service.scheduler.wait_idle())
    try:
        await asyncio.wait({done_waiter, idle_waiter}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        done_waiter.cancel()
        await service.stop()
        idle_waiter.cancel()


@click.command(name="watch")
@_common_options
@click.option(
    "--interval",
    type=click.FloatRange(min=0),
    default=None,
    help="Seconds between passes (0 runs a single pass).",
)
@click.option(
    "--passes",
    type=click.IntRange(min=1),
    default=None,
    help="Exit after this many passes instead of running until interrupted.",
)
def watch(
    config_path: str | None,
    auction_id: str | None,
    base_url: str | None,
    page_size: int | None,
    max_pages: int | None,
    sort_order: str,
    interval: float | None,
    passes: int | None,
) -> None:
    """Keep the listing in sync and reprint it after every pass."""
    settings = resolve_settings(
        config_path,
        auction_id=auction_id,
        base_url=base_url,
        page_size=page_size,
        interval=interval,
        max_pages=max_pages,
    )
    printer = _WatchPrinter(SortOrder.from_string(sort_order), passes)
    service = build_listing_service(settings, event_publisher=printer)
    printer.service = service

    console.print(
        f"[bold]Watching auction {settings.auction_id}[/bold] "
        f"every {settings.sync_interval_seconds:g}s (Ctrl-C to stop)"
    )
    try:
        asyncio.run(_watch(service, printer, settings.sync_interval_seconds))
    except KeyboardInterrupt:
        console.print("[yellow]Stopped.[/yellow]")
