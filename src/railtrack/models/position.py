"""Position fix and nearest-waypoint models."""

from __future__ import annotations

from pydantic import computed_field

from railtrack.collision import is_collision_risk
from railtrack.models._base import RailBaseModel


class PositionFix(RailBaseModel):
    """Last known position of the tracked entity."""

    lat: float
    lng: float


class NearestWaypointResult(RailBaseModel):
    """Closest catalog waypoint to a position fix.

    Derived data: recomputed whenever the fix changes and never mutated
    on its own. ``distance_km`` is kept unrounded.
    """

    waypoint_id: str
    name: str
    code: str | None = None
    distance_km: float
    lat: float
    lng: float

    @computed_field  # type: ignore[prop-decorator]
    @property
    def collision_risk(self) -> bool:
        return is_collision_risk(self.distance_km)


class PositionUpdate(RailBaseModel):
    """Result of a position submission: the new fix and its nearest waypoint."""

    fix: PositionFix
    nearest: NearestWaypointResult
