from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import pytest

from railtrack.exceptions import TransportFailureError
from railtrack.hub import BroadcastHub


async def _until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout)


class _Recorder:
    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)


@pytest.mark.asyncio
async def test_snapshot_is_first_then_events_in_order() -> None:
    hub = BroadcastHub()
    first, second = _Recorder(), _Recorder()
    hub.connect(first, {"snapshot": 1})
    hub.connect(second, {"snapshot": 2})

    for seq in (1, 2, 3):
        assert hub.publish({"type": "X", "seq": seq}) == 2
    await hub.wait_drained()

    assert first.messages == [{"snapshot": 1}, {"type": "X", "seq": 1}, {"type": "X", "seq": 2}, {"type": "X", "seq": 3}]
    assert [m.get("seq") for m in second.messages] == [None, 1, 2, 3]
    await hub.close()


@pytest.mark.asyncio
async def test_slow_observer_drops_without_blocking_others() -> None:
    hub = BroadcastHub(queue_size=2)
    release = asyncio.Event()
    slow_received: list[dict[str, Any]] = []

    async def slow(message: dict[str, Any]) -> None:
        await release.wait()
        slow_received.append(message)

    fast = _Recorder()
    slow_observer = hub.connect(slow, {"snapshot": True})
    hub.connect(fast, {"snapshot": True})
    # Let the slow pump pick up its snapshot and block on it.
    await asyncio.sleep(0)

    for seq in range(1, 6):
        hub.publish({"seq": seq})
        await _until(lambda n=seq + 1: len(fast.messages) == n)

    assert slow_observer.dropped == 3

    release.set()
    await _until(lambda: len(slow_received) == 3)
    assert slow_received == [{"snapshot": True}, {"seq": 1}, {"seq": 2}]
    await hub.close()


@pytest.mark.asyncio
async def test_transport_failure_removes_only_that_observer() -> None:
    hub = BroadcastHub()

    async def broken(message: dict[str, Any]) -> None:
        raise TransportFailureError("gone")

    healthy = _Recorder()
    hub.connect(broken, {"snapshot": True}, name="broken")
    hub.connect(healthy, {"snapshot": True}, name="healthy")

    await _until(lambda: hub.observer_count == 1)
    hub.publish({"seq": 1})
    await hub.wait_drained()

    assert [o.name for o in hub.observers()] == ["healthy"]
    assert healthy.messages == [{"snapshot": True}, {"seq": 1}]
    await hub.close()


@pytest.mark.asyncio
async def test_unexpected_send_error_also_drops_observer(caplog: pytest.LogCaptureFixture) -> None:
    hub = BroadcastHub()

    async def buggy(message: dict[str, Any]) -> None:
        raise ValueError("boom")

    hub.connect(buggy, {"snapshot": True}, name="buggy")
    await _until(lambda: hub.observer_count == 0)

    assert "buggy" in caplog.text
    await hub.close()


@pytest.mark.asyncio
async def test_disconnect_during_broadcast_is_safe() -> None:
    hub = BroadcastHub()
    survivor = _Recorder()
    victim = _Recorder()
    victim_observer = hub.connect(victim, {"snapshot": True})

    async def disconnecting(message: dict[str, Any]) -> None:
        hub.disconnect(victim_observer)
        await survivor(message)

    hub.connect(disconnecting, {"snapshot": True})
    await hub.wait_drained()

    hub.publish({"seq": 1})
    await hub.wait_drained()
    hub.disconnect(victim_observer)

    assert hub.observer_count == 1
    assert survivor.messages == [{"snapshot": True}, {"seq": 1}]
    assert {"seq": 1} not in victim.messages
    await hub.close()


@pytest.mark.asyncio
async def test_closed_hub_refuses_new_observers() -> None:
    hub = BroadcastHub()
    hub.connect(_Recorder(), {"snapshot": True})

    await hub.close()

    assert hub.observer_count == 0
    assert hub.publish({"seq": 1}) == 0
    with pytest.raises(RuntimeError):
        hub.connect(_Recorder(), {"snapshot": True})
