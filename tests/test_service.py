from __future__ import annotations

import logging
from typing import Any

import pytest

from railtrack._mqtt import FeedMessage
from railtrack.exceptions import InvalidInputError
from railtrack.models.position import PositionFix
from railtrack.models.requests import PositionUpdateRequest, SignalUpdateRequest, validate_request
from railtrack.service import RailTrackService
from railtrack.state.events import ChangeEvent, EventKind


def test_default_state() -> None:
    snapshot = RailTrackService().get_snapshot()

    assert snapshot.position == PositionFix(lat=11.018, lng=76.970)
    assert snapshot.nearest.waypoint_id == "cbe"
    assert snapshot.nearest.distance_km == 0.0
    assert snapshot.nearest.collision_risk is True
    assert set(snapshot.signals) == {"track-up", "track-down"}
    assert all(s.left == "safe" and s.right == "safe" for s in snapshot.signals.values())
    assert snapshot.emergency_stop is None


def test_submit_position_updates_fix_and_nearest_together() -> None:
    service = RailTrackService()
    events: list[ChangeEvent] = []
    service.store.add_listener(events.append)

    update = service.submit_position(10.975, 76.934)

    snapshot = service.get_snapshot()
    assert snapshot.position == update.fix == PositionFix(lat=10.975, lng=76.934)
    assert snapshot.nearest == update.nearest
    assert update.nearest.code == "PTJ"
    assert update.nearest.collision_risk is True

    assert len(events) == 1
    assert events[0].kind == EventKind.LOCATION_UPDATE
    assert events[0].data == {"lat": 10.975, "lng": 76.934, "nearest": update.nearest.to_wire()}


def test_numeric_strings_are_accepted() -> None:
    update = RailTrackService().submit_position("11.03", " 76.98 ")
    assert update.fix == PositionFix(lat=11.03, lng=76.98)


@pytest.mark.parametrize(
    ("lat", "lng"),
    [
        (None, 76.9),
        (11.0, None),
        ("north", 76.9),
        (True, 76.9),
        (float("nan"), 76.9),
        (91.0, 76.9),
        (11.0, -180.5),
        ("", 76.9),
        (10**400, 76.9),
        (11.0, float("inf")),
    ],
)
def test_invalid_position_leaves_state_untouched(lat: Any, lng: Any) -> None:
    service = RailTrackService()
    before = service.get_snapshot()

    with pytest.raises(InvalidInputError) as excinfo:
        service.submit_position(lat, lng)

    assert excinfo.value.fields
    assert service.get_snapshot() == before
    assert service.store.sequence == 0


def test_sequence_spans_every_event_kind() -> None:
    service = RailTrackService()
    events: list[ChangeEvent] = []
    service.store.add_listener(events.append)

    service.submit_position(11.0, 76.9)
    service.advance_signal("track-up", "left")
    service.submit_position(11.01, 76.95)

    assert [(e.kind, e.sequence) for e in events] == [
        (EventKind.LOCATION_UPDATE, 1),
        (EventKind.SIGNAL_UPDATE, 2),
        (EventKind.LOCATION_UPDATE, 3),
    ]


def test_failing_listener_does_not_fail_the_command(caplog: pytest.LogCaptureFixture) -> None:
    service = RailTrackService()

    def broken(event: ChangeEvent) -> None:
        raise RuntimeError("listener down")

    remove = service.store.add_listener(broken)
    update = service.submit_position(11.0, 76.9)

    assert service.get_snapshot().position == update.fix
    assert "Listener failed" in caplog.text

    remove()
    remove()
    caplog.clear()
    service.submit_position(11.1, 76.9)
    assert "Listener failed" not in caplog.text


@pytest.mark.asyncio
async def test_new_observer_receives_current_snapshot_first() -> None:
    async with RailTrackService() as service:
        service.submit_position(11.03, 76.98)
        service.advance_signal("track-down", "left")
        received: list[dict[str, Any]] = []

        async def send(message: dict[str, Any]) -> None:
            received.append(message)

        service.connect_observer(send, name="test")
        await service.hub.wait_drained()
        assert received == [service.get_snapshot().to_wire()]

        service.submit_position(11.0, 76.9)
        await service.hub.wait_drained()

    assert received[1]["type"] == "LOCATION_UPDATE"
    assert received[1]["seq"] == 3
    assert received[1]["lat"] == 11.0
    assert service.hub.observer_count == 0


@pytest.mark.asyncio
async def test_disconnected_observer_receives_nothing_more() -> None:
    async with RailTrackService() as service:
        received: list[dict[str, Any]] = []

        async def send(message: dict[str, Any]) -> None:
            received.append(message)

        observer = service.connect_observer(send)
        await service.hub.wait_drained()
        service.disconnect_observer(observer)
        service.submit_position(11.0, 76.9)
        await service.hub.wait_drained()

        assert len(received) == 1


def test_feed_message_applies_position() -> None:
    service = RailTrackService()

    service._on_feed_message(FeedMessage(topic="railtrack/position", payload={"latitude": 11.0, "longitude": 76.95}))

    assert service.get_snapshot().position == PositionFix(lat=11.0, lng=76.95)


def test_invalid_feed_message_is_logged_and_ignored(caplog: pytest.LogCaptureFixture) -> None:
    service = RailTrackService()
    before = service.get_snapshot()

    with caplog.at_level(logging.WARNING, logger="railtrack.service"):
        service._on_feed_message(FeedMessage(topic="railtrack/position", payload={"lat": "x"}))

    assert service.get_snapshot() == before
    assert "Rejected feed position" in caplog.text


def test_oversized_feed_coordinate_is_rejected(caplog: pytest.LogCaptureFixture) -> None:
    service = RailTrackService()
    before = service.get_snapshot()

    with caplog.at_level(logging.WARNING, logger="railtrack.service"):
        service._on_feed_message(FeedMessage(topic="railtrack/position", payload={"lat": 10**400, "lng": 76.9}))

    assert service.get_snapshot() == before
    assert "Rejected feed position" in caplog.text


def test_apply_accepts_requests_validated_elsewhere() -> None:
    service = RailTrackService()

    update = service.apply_signal(validate_request(SignalUpdateRequest, {"trackId": "track-down", "right": "danger"}))
    fix = service.apply_position(validate_request(PositionUpdateRequest, {"latitude": 11.0, "longitude": 76.9})).fix

    assert update.level == "caution"
    assert update.side == "right"
    assert fix == PositionFix(lat=11.0, lng=76.9)
    assert service.store.sequence == 2
