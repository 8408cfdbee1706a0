"""Data models for railtrack state, commands and snapshots."""

from railtrack.models._base import RailBaseModel
from railtrack.models.position import NearestWaypointResult, PositionFix, PositionUpdate
from railtrack.models.requests import (
    EmergencyStopRequest,
    PositionUpdateRequest,
    SignalUpdateRequest,
    validate_request,
)
from railtrack.models.signals import SignalLevel, SignalSide, SignalState, SignalUpdate
from railtrack.models.snapshot import Snapshot
from railtrack.models.stop import StopPhase, StopRecord
from railtrack.models.waypoint import Waypoint

__all__ = [
    "EmergencyStopRequest",
    "NearestWaypointResult",
    "PositionFix",
    "PositionUpdate",
    "PositionUpdateRequest",
    "RailBaseModel",
    "SignalLevel",
    "SignalSide",
    "SignalState",
    "SignalUpdate",
    "SignalUpdateRequest",
    "Snapshot",
    "StopPhase",
    "StopRecord",
    "Waypoint",
    "validate_request",
]
