"""Position tracker.

Holds the single current position fix and its nearest waypoint. Both are
replaced together on every update; no history is retained.
"""

from __future__ import annotations

from railtrack.catalog import WaypointCatalog
from railtrack.models.position import NearestWaypointResult, PositionFix, PositionUpdate
from railtrack.state.events import ChangeEvent, EventKind


class PositionTracker:
    def __init__(self, catalog: WaypointCatalog) -> None:
        self._catalog = catalog
        first = catalog.first
        fix = PositionFix(lat=first.lat, lng=first.lng)
        self._current = PositionUpdate(fix=fix, nearest=catalog.nearest(fix))

    @property
    def catalog(self) -> WaypointCatalog:
        return self._catalog

    @property
    def fix(self) -> PositionFix:
        return self._current.fix

    @property
    def nearest(self) -> NearestWaypointResult:
        return self._current.nearest

    @property
    def current(self) -> PositionUpdate:
        return self._current

    def update(self, lat: float, lng: float) -> tuple[PositionUpdate, ChangeEvent]:
        """Replace the fix, resolve its nearest waypoint and describe the change.

        The new pair is built completely before it is swapped in, so readers
        never see a fix without its matching nearest waypoint.
        """
        fix = PositionFix(lat=lat, lng=lng)
        update = PositionUpdate(fix=fix, nearest=self._catalog.nearest(fix))
        self._current = update
        event = ChangeEvent(
            kind=EventKind.LOCATION_UPDATE,
            data={"lat": fix.lat, "lng": fix.lng, "nearest": update.nearest.to_wire()},
        )
        return update, event
