"""Signal registry.

One :class:`SignalState` per pre-registered track. The only transition is
:meth:`SignalRegistry.advance`, one cyclic step per call; there is no
direct setter.
"""

from __future__ import annotations

from collections.abc import Iterable

from railtrack.exceptions import NotFoundError
from railtrack.models.signals import SignalLevel, SignalSide, SignalState
from railtrack.state.events import ChangeEvent, EventKind


class SignalRegistry:
    def __init__(self, track_ids: Iterable[str]) -> None:
        self._tracks: dict[str, SignalState] = {track_id: SignalState() for track_id in track_ids}

    @property
    def track_ids(self) -> tuple[str, ...]:
        return tuple(self._tracks)

    def get(self, track_id: str) -> SignalState:
        state = self._tracks.get(track_id)
        if state is None:
            raise NotFoundError(f"Track ID not found: {track_id}", key=track_id)
        return state

    def table(self) -> dict[str, SignalState]:
        """Copy of the full signal table, in registration order."""
        return dict(self._tracks)

    def table_wire(self) -> dict[str, dict[str, str]]:
        return {track_id: state.to_wire() for track_id, state in self._tracks.items()}

    def advance(self, track_id: str, side: SignalSide) -> tuple[SignalLevel, ChangeEvent]:
        """Move *side* of *track_id* one step along the cycle.

        Raises
        ------
        NotFoundError
            *track_id* is not registered. The table is left untouched.
        """
        state = self.get(track_id).advanced(side)
        self._tracks[track_id] = state
        event = ChangeEvent(kind=EventKind.SIGNAL_UPDATE, data={"signals": self.table_wire()})
        return state.level(side), event
