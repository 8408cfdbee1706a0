"""Emergency-stop controller.

Keeps at most one :class:`StopRecord` (last write wins) and announces the
stop sequence: ``initiated`` immediately, ``braking`` after 2 time units and
``stopped`` after 4. The deferred announcements are ``asyncio`` timer
handles. Re-triggering does not cancel them unless the controller was built
with ``cancel_superseded=True``, so rapid triggers can produce overlapping
sequences.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from railtrack._constants import STOP_BRAKING_AFTER_UNITS, STOP_HALTED_AFTER_UNITS
from railtrack.exceptions import NotFoundError
from railtrack.models.stop import StopPhase, StopRecord
from railtrack.state.events import ChangeEvent, EventKind

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def build_stop_event(record: StopRecord, phase: StopPhase) -> ChangeEvent:
    return ChangeEvent(
        kind=EventKind.EMERGENCY_STOP,
        data={**record.to_wire(), "phase": phase.value},
    )


class StopController:
    def __init__(
        self,
        *,
        emit: Callable[[ChangeEvent], None],
        time_unit_seconds: float = 1.0,
        cancel_superseded: bool = False,
        known_entities: Iterable[str] = (),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._emit = emit
        self._time_unit = time_unit_seconds
        self._cancel_superseded = cancel_superseded
        self._known_entities = frozenset(known_entities)
        self._clock = clock
        self._record: StopRecord | None = None
        self._pending: set[asyncio.TimerHandle] = set()

    @property
    def record(self) -> StopRecord | None:
        return self._record

    @property
    def pending_notifications(self) -> int:
        return len(self._pending)

    def trigger(
        self,
        entity_id: str,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> tuple[StopRecord, ChangeEvent]:
        """Record a stop for *entity_id* and schedule its deferred notifications.

        Must run on the event loop thread (or be given that loop). Without a
        loop the stop is still recorded and announced as ``initiated``, but
        the deferred ``braking`` and ``stopped`` notifications are skipped.

        Raises
        ------
        NotFoundError
            A registry of known entities is configured and *entity_id* is not in it.
        """
        if self._known_entities and entity_id not in self._known_entities:
            raise NotFoundError(f"Entity not found: {entity_id}", key=entity_id)

        running = loop if loop is not None else _running_loop()
        if self._cancel_superseded:
            self.cancel_pending()

        record = StopRecord(entity_id=entity_id, issued_at=self._clock())
        self._record = record
        _logger.warning("EMERGENCY STOP triggered entity=%s", entity_id)

        if running is None:
            _logger.warning("No running event loop, deferred stop notifications skipped entity=%s", entity_id)
        else:
            self._schedule(running, STOP_BRAKING_AFTER_UNITS * self._time_unit, record, StopPhase.BRAKING)
            self._schedule(running, STOP_HALTED_AFTER_UNITS * self._time_unit, record, StopPhase.STOPPED)
        return record, build_stop_event(record, StopPhase.INITIATED)

    def _schedule(
        self,
        loop: asyncio.AbstractEventLoop,
        delay: float,
        record: StopRecord,
        phase: StopPhase,
    ) -> None:
        handle: asyncio.TimerHandle | None = None

        def fire() -> None:
            self._pending.discard(handle)  # type: ignore[arg-type]
            _logger.info("Emergency stop entity=%s phase=%s", record.entity_id, phase.value)
            self._emit(build_stop_event(record, phase))

        handle = loop.call_later(delay, fire)
        self._pending.add(handle)

    def cancel_pending(self) -> int:
        """Cancel every pending deferred notification, returning how many there were."""
        pending = list(self._pending)
        self._pending.clear()
        for handle in pending:
            handle.cancel()
        if pending:
            _logger.debug("Cancelled %d pending stop notifications", len(pending))
        return len(pending)
