"""Collision-risk evaluation.

Risk is a pure function of distance; nothing here owns state. Consumers
read the flag off the latest nearest-waypoint result, or call
:func:`assess` for two arbitrary entities.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from railtrack._constants import COLLISION_THRESHOLD_KM
from railtrack.geo import Coordinate, distance


class CollisionAssessment(BaseModel):
    """Distance between two entities and the resulting risk flag."""

    model_config = ConfigDict(frozen=True)

    distance_km: float
    risk: bool


def is_collision_risk(distance_km: float) -> bool:
    """``True`` when *distance_km* is at or below the 1 km threshold."""
    return distance_km <= COLLISION_THRESHOLD_KM


def assess(a: Coordinate, b: Coordinate) -> CollisionAssessment:
    """Evaluate collision risk between two positioned entities."""
    km = distance(a, b)
    return CollisionAssessment(distance_km=km, risk=is_collision_risk(km))
