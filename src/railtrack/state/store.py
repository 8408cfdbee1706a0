"""Single owner of the live composite state.

This is the only component allowed to mutate position, signals or the
stop record. Mutations are plain synchronous methods and must run on the
event-loop thread, which makes each one indivisible relative to the
others and to snapshot reads.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from railtrack.catalog import WaypointCatalog
from railtrack.models.position import PositionUpdate
from railtrack.models.signals import SignalSide, SignalUpdate
from railtrack.models.snapshot import Snapshot
from railtrack.models.stop import StopRecord
from railtrack.state.events import ChangeEvent
from railtrack.state.position import PositionTracker
from railtrack.state.signals import SignalRegistry
from railtrack.state.stop import StopController

_logger = logging.getLogger(__name__)

Listener = Callable[[ChangeEvent], None]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RailStateStore:
    """In-memory store for position, signals and the emergency-stop record.

    Every change is stamped with the next global sequence number and handed
    to the registered listeners in production order.
    """

    def __init__(
        self,
        *,
        catalog: WaypointCatalog,
        track_ids: Iterable[str],
        known_entities: Iterable[str] = (),
        stop_time_unit_seconds: float = 1.0,
        cancel_superseded_stop_timers: bool = False,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._clock = clock
        self._sequence = 0
        self._listeners: list[Listener] = []
        self._position = PositionTracker(catalog)
        self._signals = SignalRegistry(track_ids)
        self._stop = StopController(
            emit=self._emit,
            time_unit_seconds=stop_time_unit_seconds,
            cancel_superseded=cancel_superseded_stop_timers,
            known_entities=known_entities,
            clock=clock,
        )

    @property
    def catalog(self) -> WaypointCatalog:
        return self._position.catalog

    @property
    def track_ids(self) -> tuple[str, ...]:
        return self._signals.track_ids

    @property
    def sequence(self) -> int:
        return self._sequence

    @property
    def pending_stop_notifications(self) -> int:
        return self._stop.pending_notifications

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _emit(self, event: ChangeEvent) -> None:
        self._sequence += 1
        stamped = event.model_copy(update={"sequence": self._sequence, "produced_at": self._clock()})
        for listener in list(self._listeners):
            try:
                listener(stamped)
            except Exception:
                # A failing consumer must not fail the command that produced the event.
                _logger.exception("Listener failed for event kind=%s seq=%d", stamped.kind, stamped.sequence)

    def update_position(self, lat: float, lng: float) -> PositionUpdate:
        update, event = self._position.update(lat, lng)
        _logger.debug(
            "Position lat=%s lng=%s nearest=%s distance_km=%.3f",
            lat,
            lng,
            update.nearest.waypoint_id,
            update.nearest.distance_km,
        )
        self._emit(event)
        return update

    def advance_signal(self, track_id: str, side: SignalSide) -> SignalUpdate:
        level, event = self._signals.advance(track_id, side)
        _logger.info("Signal track=%s side=%s level=%s", track_id, side.value, level.value)
        self._emit(event)
        return SignalUpdate(track_id=track_id, side=side, level=level, signals=self._signals.table())

    def trigger_stop(self, entity_id: str, *, loop: asyncio.AbstractEventLoop | None = None) -> StopRecord:
        record, event = self._stop.trigger(entity_id, loop=loop)
        self._emit(event)
        return record

    def snapshot(self) -> Snapshot:
        current = self._position.current
        return Snapshot(
            position=current.fix,
            nearest=current.nearest,
            signals=self._signals.table(),
            emergency_stop=self._stop.record,
        )

    def shutdown(self) -> None:
        """Cancel pending deferred stop notifications."""
        self._stop.cancel_pending()
