"""Command surface of the railtrack engine."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from railtrack._mqtt import FeedMessage, PositionFeedRuntime
from railtrack.catalog import WaypointCatalog
from railtrack.config import RailTrackConfig
from railtrack.exceptions import InvalidInputError
from railtrack.hub import BroadcastHub, Observer, Sender
from railtrack.models.position import PositionUpdate
from railtrack.models.requests import (
    EmergencyStopRequest,
    PositionUpdateRequest,
    SignalUpdateRequest,
    validate_request,
)
from railtrack.models.signals import SignalUpdate
from railtrack.models.snapshot import Snapshot
from railtrack.models.stop import StopRecord
from railtrack.state.events import ChangeEvent
from railtrack.state.store import RailStateStore

_logger = logging.getLogger(__name__)


def load_catalog(config: RailTrackConfig) -> WaypointCatalog:
    """Catalog named by ``config.waypoints_file``, or the built-in one."""
    if config.waypoints_file:
        return WaypointCatalog.from_file(config.waypoints_file)
    return WaypointCatalog.default()


class RailTrackService:
    """Live state-synchronization and alerting engine.

    Exposes the four commands (position update, signal advance, emergency
    stop, snapshot read) and the observer registration used by the push
    channel. All methods must be called on the event loop thread.

    Usage::

        async with RailTrackService(config) as service:
            update = service.submit_position(11.03, 76.98)
            snapshot = service.get_snapshot()
    """

    def __init__(
        self,
        config: RailTrackConfig | None = None,
        *,
        catalog: WaypointCatalog | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config or RailTrackConfig()
        store_kwargs: dict[str, Any] = {}
        if clock is not None:
            store_kwargs["clock"] = clock
        self._store = RailStateStore(
            catalog=catalog or load_catalog(self._config),
            track_ids=self._config.track_ids,
            known_entities=self._config.known_entities,
            stop_time_unit_seconds=self._config.stop_time_unit_seconds,
            cancel_superseded_stop_timers=self._config.cancel_superseded_stop_timers,
            **store_kwargs,
        )
        self._hub = BroadcastHub(queue_size=self._config.observer_queue_size)
        self._store.add_listener(self._on_change)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._feed: PositionFeedRuntime | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> RailTrackService:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def start(self) -> None:
        if self._loop is not None:
            return
        self._loop = asyncio.get_running_loop()
        await self._start_feed()

    async def close(self) -> None:
        """Stop the feed, cancel pending stop notifications and drop every observer."""
        await self._stop_feed()
        self._store.shutdown()
        await self._hub.close()
        self._loop = None

    @property
    def config(self) -> RailTrackConfig:
        return self._config

    @property
    def hub(self) -> BroadcastHub:
        return self._hub

    @property
    def store(self) -> RailStateStore:
        return self._store

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit_position(self, lat: Any, lng: Any) -> PositionUpdate:
        """Replace the tracked position and resolve its nearest waypoint.

        Raises
        ------
        InvalidInputError
            A coordinate is missing, non-numeric or out of range. Prior
            state is left untouched.
        """
        return self.apply_position(validate_request(PositionUpdateRequest, {"lat": lat, "lng": lng}))

    def advance_signal(self, track_id: Any, side: Any) -> SignalUpdate:
        """Advance one side of one track a single step along the signal cycle.

        Raises
        ------
        InvalidInputError
            *track_id* is empty or *side* is not ``left``/``right``.
        NotFoundError
            *track_id* is not registered.
        """
        return self.apply_signal(validate_request(SignalUpdateRequest, {"track_id": track_id, "side": side}))

    def trigger_stop(self, entity_id: Any) -> StopRecord:
        """Record an emergency stop for *entity_id* and start its notification sequence.

        Raises
        ------
        InvalidInputError
            *entity_id* is missing or empty.
        NotFoundError
            A registry of known entities is configured and *entity_id* is not in it.

        Called from synchronous code before :meth:`start`, with no event loop
        running, the stop is still recorded and announced as ``initiated``;
        only the deferred ``braking`` and ``stopped`` notifications are skipped.
        """
        return self.apply_stop(validate_request(EmergencyStopRequest, {"entity_id": entity_id}))

    # ------------------------------------------------------------------
    # Already-validated requests (HTTP bodies, feed payloads)
    # ------------------------------------------------------------------

    def apply_position(self, request: PositionUpdateRequest) -> PositionUpdate:
        return self._store.update_position(request.lat, request.lng)

    def apply_signal(self, request: SignalUpdateRequest) -> SignalUpdate:
        return self._store.advance_signal(request.track_id, request.resolved_side)

    def apply_stop(self, request: EmergencyStopRequest) -> StopRecord:
        return self._store.trigger_stop(request.entity_id, loop=self._loop)

    def get_snapshot(self) -> Snapshot:
        return self._store.snapshot()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def connect_observer(self, send: Sender, *, name: str | None = None) -> Observer:
        """Register an observer; its first message is the current snapshot."""
        return self._hub.connect(send, self.get_snapshot().to_wire(), name=name)

    def disconnect_observer(self, observer: Observer) -> None:
        self._hub.disconnect(observer)

    def _on_change(self, event: ChangeEvent) -> None:
        self._hub.publish(event.to_message())

    # ------------------------------------------------------------------
    # MQTT position feed
    # ------------------------------------------------------------------

    async def _start_feed(self) -> None:
        """Best-effort feed startup (failures must not break the HTTP surface)."""
        if not self._config.mqtt_enabled or self._loop is None:
            return
        runtime = PositionFeedRuntime(
            loop=self._loop,
            config=self._config,
            on_message=self._on_feed_message,
            logger=_logger,
        )
        try:
            await self._loop.run_in_executor(None, runtime.start)
        except Exception:
            _logger.warning("MQTT position feed failed to start", exc_info=True)
            return
        self._feed = runtime

    async def _stop_feed(self) -> None:
        runtime = self._feed
        self._feed = None
        if runtime is None:
            return
        loop = self._loop or asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, runtime.stop)
        except Exception:
            _logger.debug("MQTT position feed stop failed", exc_info=True)

    def _on_feed_message(self, message: FeedMessage) -> None:
        """Apply a feed position (called on the loop via call_soon_threadsafe)."""
        try:
            request = validate_request(PositionUpdateRequest, message.payload)
        except InvalidInputError as exc:
            _logger.warning("Rejected feed position topic=%s: %s", message.topic, exc)
            return
        self.apply_position(request)

