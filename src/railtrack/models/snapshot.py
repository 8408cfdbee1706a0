"""Composite read-only view of the whole system."""

from __future__ import annotations

from railtrack.models._base import RailBaseModel
from railtrack.models.position import NearestWaypointResult, PositionFix
from railtrack.models.signals import SignalState
from railtrack.models.stop import StopRecord


class Snapshot(RailBaseModel):
    """Current position, nearest waypoint, signal table and active stop.

    Assembled on demand; sent unlabelled to every freshly connected observer.
    """

    position: PositionFix
    nearest: NearestWaypointResult
    signals: dict[str, SignalState]
    emergency_stop: StopRecord | None = None
