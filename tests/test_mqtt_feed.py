from __future__ import annotations

import asyncio
import logging

import pytest

from railtrack._mqtt import FeedMessage, PositionFeedRuntime
from railtrack.config import RailTrackConfig
from railtrack.models.position import PositionFix
from railtrack.service import RailTrackService


@pytest.mark.asyncio
async def test_payload_is_handed_to_the_loop() -> None:
    received: list[FeedMessage] = []
    runtime = PositionFeedRuntime(loop=asyncio.get_running_loop(), config=RailTrackConfig(), on_message=received.append)

    runtime._handle_payload("railtrack/position", b'{"data": {"lat": 11.0, "lng": 76.9}}')
    await asyncio.sleep(0)

    assert received == [FeedMessage(topic="railtrack/position", payload={"lat": 11.0, "lng": 76.9})]
    assert runtime.is_running is False


@pytest.mark.asyncio
async def test_non_json_payload_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    received: list[FeedMessage] = []
    runtime = PositionFeedRuntime(loop=asyncio.get_running_loop(), config=RailTrackConfig(), on_message=received.append)

    with caplog.at_level(logging.WARNING):
        runtime._handle_payload("railtrack/position", b"\x00garbage")
    await asyncio.sleep(0)

    assert received == []
    assert "non-JSON" in caplog.text


@pytest.mark.asyncio
async def test_feed_positions_reach_the_service() -> None:
    async with RailTrackService() as service:
        runtime = PositionFeedRuntime(
            loop=asyncio.get_running_loop(),
            config=service.config,
            on_message=service._on_feed_message,
        )

        runtime._handle_payload("railtrack/position", b'{"lat": "11.005", "lng": "76.991"}')
        await asyncio.sleep(0)

        snapshot = service.get_snapshot()
        assert snapshot.position == PositionFix(lat=11.005, lng=76.991)
        assert snapshot.nearest.code == "SHI"


@pytest.mark.asyncio
async def test_stop_without_start_is_a_noop() -> None:
    runtime = PositionFeedRuntime(loop=asyncio.get_running_loop(), config=RailTrackConfig(), on_message=print)
    runtime.stop()
    assert runtime.is_running is False
