import asyncio

import pytest

from notification_hub.application.use_cases.notifications import (
    RealtimeDataWatcher,
    SystemEventRegistry,
)
from notification_hub.domain.entities import SystemEvent

from conftest import BASE_TIME


def _event(target: str) -> SystemEvent:
    return SystemEvent(type="data_refresh", action="refresh", target=target, timestamp=BASE_TIME)


class CountingFetch:
    def __init__(self) -> None:
        self.calls = 0
        self.fail = False

    async def __call__(self) -> int:
        self.calls += 1
        await asyncio.sleep(0)
        if self.fail:
            raise RuntimeError("fetch failed")
        return self.calls


@pytest.mark.anyio
async def test_matching_target_triggers_refetch():
    registry = SystemEventRegistry()
    fetch = CountingFetch()
    watcher = RealtimeDataWatcher(registry, ["balance", "transactions"], fetch)

    registry.publish(_event("balance"))
    await watcher.wait()

    assert fetch.calls == 1
    assert watcher.data == 1
    assert watcher.loading is False


@pytest.mark.anyio
async def test_other_targets_are_ignored():
    registry = SystemEventRegistry()
    fetch = CountingFetch()
    watcher = RealtimeDataWatcher(registry, ["balance"], fetch)

    registry.publish(_event("users"))
    await watcher.wait()

    assert fetch.calls == 0


@pytest.mark.anyio
async def test_manual_trigger_refetches():
    registry = SystemEventRegistry()
    fetch = CountingFetch()
    watcher = RealtimeDataWatcher(registry, ["balance"], fetch)

    registry.trigger("balance")
    await watcher.wait()

    assert watcher.data == 1


@pytest.mark.anyio
async def test_bursts_collapse_into_one_follow_up():
    registry = SystemEventRegistry()
    fetch = CountingFetch()
    watcher = RealtimeDataWatcher(registry, ["balance"], fetch)

    for _ in range(5):
        registry.publish(_event("balance"))
    await asyncio.sleep(0)
    await watcher.wait()

    assert fetch.calls == 1

    registry.publish(_event("balance"))
    await asyncio.sleep(0)
    registry.publish(_event("balance"))
    registry.publish(_event("balance"))
    await watcher.wait()

    assert fetch.calls == 3


@pytest.mark.anyio
async def test_fetch_error_is_recorded():
    registry = SystemEventRegistry()
    fetch = CountingFetch()
    fetch.fail = True
    watcher = RealtimeDataWatcher(registry, ["balance"], fetch)

    await watcher.refetch()

    assert watcher.error == "fetch failed"
    assert watcher.loading is False


@pytest.mark.anyio
async def test_close_unsubscribes():
    registry = SystemEventRegistry()
    fetch = CountingFetch()
    watcher = RealtimeDataWatcher(registry, ["balance"], fetch)

    watcher.close()
    registry.publish(_event("balance"))
    await watcher.wait()

    assert watcher.closed is True
    assert registry.subscriber_count == 0
    assert fetch.calls == 0
