"""railtrack - live rail position tracking, signal state and emergency-stop push engine."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("railtrack")
except PackageNotFoundError:
    __version__ = "0+local"
from railtrack.catalog import WaypointCatalog
from railtrack.collision import CollisionAssessment, assess, is_collision_risk
from railtrack.config import RailTrackConfig
from railtrack.exceptions import (
    InvalidInputError,
    NotFoundError,
    RailTrackConfigError,
    RailTrackError,
    TransportFailureError,
)
from railtrack.geo import distance
from railtrack.hub import BroadcastHub, Observer
from railtrack.models import (
    NearestWaypointResult,
    PositionFix,
    PositionUpdate,
    SignalLevel,
    SignalSide,
    SignalState,
    SignalUpdate,
    Snapshot,
    StopPhase,
    StopRecord,
    Waypoint,
)
from railtrack.service import RailTrackService
from railtrack.state.events import ChangeEvent, EventKind

__all__ = [
    "__version__",
    "BroadcastHub",
    "ChangeEvent",
    "CollisionAssessment",
    "EventKind",
    "InvalidInputError",
    "NearestWaypointResult",
    "NotFoundError",
    "Observer",
    "PositionFix",
    "PositionUpdate",
    "RailTrackConfig",
    "RailTrackConfigError",
    "RailTrackError",
    "RailTrackService",
    "SignalLevel",
    "SignalSide",
    "SignalState",
    "SignalUpdate",
    "Snapshot",
    "StopPhase",
    "StopRecord",
    "TransportFailureError",
    "Waypoint",
    "WaypointCatalog",
    "assess",
    "distance",
    "is_collision_risk",
]
