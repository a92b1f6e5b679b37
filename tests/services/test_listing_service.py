import asyncio

from conftest import ListingsFixture, RecordingStore, ScriptedFetcher, eventually, make_record

from kiosksync.app.config import SyncSettings
from kiosksync.domain.models import SortOrder
from kiosksync.infrastructure.http import HttpPageFetcher
from kiosksync.services.listing_service import ListingSyncService
from kiosksync.services.sync import FetchError


def _settings(**overrides) -> SyncSettings:
    data = {"auction_id": "sale-1", "page_size": 2, "sync_interval_seconds": 0}
    data.update(overrides)
    return SyncSettings.from_mapping(data)


def test_defaults_to_http_fetcher() -> None:
    service = ListingSyncService(_settings(http={"base_url": "https://api.example.com/"}))
    assert isinstance(service.fetcher, HttpPageFetcher)
    assert service.fetcher.base_url == "https://api.example.com"


def test_sync_once_blocking_commits_listing() -> None:
    service = ListingSyncService(_settings(), fetcher=ListingsFixture())
    seen = []
    service.subscribe(seen.append)

    result = service.sync_once_blocking()

    assert result.ok
    assert [item.id for item in service.snapshot()] == ["12", "22", "11"]
    assert len(seen) == 1 and len(seen[0]) == 3


def test_sorted_snapshot_and_dtos() -> None:
    fetcher = ScriptedFetcher(
        {
            1: [
                make_record("a", bid_count=1, lot_number=1),
                make_record("b", bid_count=7, lot_number=2),
                make_record("c", bid_count=4, lot_number=3),
            ]
        }
    )
    service = ListingSyncService(_settings(page_size=5), fetcher=fetcher)
    service.sync_once_blocking()

    assert [item.id for item in service.sorted_snapshot()] == ["a", "b", "c"]
    assert [item.id for item in service.sorted_snapshot(SortOrder.MOST_BIDS)] == ["b", "c", "a"]

    dtos = service.snapshot_dtos(SortOrder.LEAST_BIDS)
    assert [dto.id for dto in dtos] == ["a", "c", "b"]
    assert dtos[0].bid_count == 1
    assert dtos[0].lot_number == 1
    assert dtos[0].title == "artwork title"


def test_failed_pass_keeps_previous_listing() -> None:
    fetcher = ListingsFixture()
    service = ListingSyncService(_settings(), fetcher=fetcher)
    service.sync_once_blocking()

    service.fetcher = ScriptedFetcher({1: FetchError("offline")})
    result = service.sync_once_blocking()

    assert not result.ok
    assert len(service.snapshot()) == 3


def test_start_uses_configured_interval() -> None:
    events = []

    async def publish(payload):
        events.append(payload)

    async def run():
        service = ListingSyncService(
            _settings(sync_interval_seconds=0), fetcher=ListingsFixture(), event_publisher=publish
        )
        await service.start()
        await service.scheduler.wait_idle()
        state = await service.stop()
        return service, state

    service, state = asyncio.run(run())

    assert state.status == "stopped"
    assert state.passes_run == 1
    assert len(service.snapshot()) == 3
    assert "listing_updated" in [event["type"] for event in events]


def test_blocking_sync_waits_for_scheduled_pass() -> None:
    listings = ListingsFixture()
    listings.delay = 0.2

    async def run():
        service = ListingSyncService(_settings(sync_interval_seconds=30), fetcher=listings)
        store = RecordingStore("sale-1")
        service.store = store
        service.paginator.store = store
        await service.start()
        await eventually(lambda: len(listings.calls) >= 1)
        result = await asyncio.to_thread(service.sync_once_blocking)
        await service.stop()
        return store, result

    store, result = asyncio.run(run())

    assert result.ok
    assert store.max_active == 1
    assert store.commits == 2
