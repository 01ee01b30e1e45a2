"""
Tests for the monitor service: startup, background loops and event publishing.
"""

import asyncio
from datetime import UTC, datetime

from feedwatch.core.delivery import DeliveryStatus
from feedwatch.service.server import MonitorService


async def test_reconcile_publishes_changes(service, store):
    store.upsert_expected("metar", datetime(2024, 1, 1, 5, tzinfo=UTC), "mmetar5.csv")
    queue = service.event_bus.subscribe()

    summary = await service.reconcile_once(now=datetime(2024, 1, 1, 5, 20, tzinfo=UTC))

    event = await asyncio.wait_for(queue.get(), timeout=5)
    assert event["event"] == "status-update"
    assert event["data"]["status"] == "missing"
    assert service.last_pass is summary


async def test_startup_seeds_today_and_runs_pass(service, store, remote):
    await service.startup()

    today = datetime.now(UTC)
    assert service.last_generation.created == 24 + 8
    assert len(store.for_day("metar", today)) == 24
    assert service.last_pass is not None
    assert not service.last_pass.skipped
    # Today's 00:00 slot is always due; nothing is on the fake remote
    assert store.get("metar", today.replace(hour=0, minute=0, second=0, microsecond=0)).status in (
        DeliveryStatus.DELAYED,
        DeliveryStatus.MISSING,
    )
    assert remote.connections > 0


async def test_background_loops_start_and_stop(service):
    service.start_background_tasks()
    for _ in range(5):
        await asyncio.sleep(0)

    status = service.get_scheduler_status()
    assert status["running"] is True
    assert status["jobs"]["reconcile"]["schedule"] == "* * * * *"
    assert status["jobs"]["reconcile"]["next_fire_at"] is not None
    assert status["jobs"]["daily"]["next_fire_at"].endswith("00:00:00+00:00")

    await service.stop_background_tasks()
    assert service.get_scheduler_status()["running"] is False


async def test_passes_do_not_overlap(service, store):
    store.upsert_expected("metar", datetime(2024, 1, 1, 5, tzinfo=UTC), "mmetar5.csv")
    now = datetime(2024, 1, 1, 5, 20, tzinfo=UTC)

    first, second = await asyncio.gather(service.reconcile_once(now), service.reconcile_once(now))

    assert sorted([first.changed, second.changed]) == [0, 1]


def test_from_project(tmp_path):
    (tmp_path / "config.yaml").write_text(
        "monitor:\n  feeds: {buoy: 6}\n"
        "remote:\n  host: sftp.example.org\n  base_path: /data\n"
        "store:\n  path: state/fw.duckdb\n"
        "logging:\n  file_enabled: false\n  console_type: plain\n"
    )

    svc = MonitorService.from_project(tmp_path)
    try:
        assert svc.monitor.feeds == {"buoy": 6}
        assert svc.remote.base_path == "/data"
        assert svc.store.path == str(tmp_path / "state" / "fw.duckdb")
    finally:
        svc.store.close()
