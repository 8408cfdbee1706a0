"""Fixed constants for railtrack."""

from __future__ import annotations

from typing import Any

EARTH_RADIUS_KM: float = 6371.0

# Inclusive: a distance equal to the threshold is a risk.
COLLISION_THRESHOLD_KM: float = 1.0

DEFAULT_TRACK_IDS: tuple[str, ...] = ("track-up", "track-down")

# Offsets of the deferred emergency-stop notifications, in time units.
STOP_BRAKING_AFTER_UNITS: float = 2.0
STOP_HALTED_AFTER_UNITS: float = 4.0

# Catalog order matters: it is the tie-break for nearest-waypoint resolution
# and its first entry is the default position.
DEFAULT_WAYPOINTS: tuple[dict[str, Any], ...] = (
    {"id": "cbe", "name": "Coimbatore Junction", "code": "CBE", "lat": 11.018, "lng": 76.970},
    {"id": "cbf", "name": "Coimbatore North Junction", "code": "CBF", "lat": 11.039, "lng": 76.983},
    {"id": "ptj", "name": "Podanur Junction", "code": "PTJ", "lat": 10.974, "lng": 76.933},
    {"id": "shi", "name": "Singanallur", "code": "SHI", "lat": 11.005, "lng": 76.991},
)
