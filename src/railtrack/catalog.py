"""Static waypoint catalog and nearest-waypoint resolution."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from railtrack._constants import DEFAULT_WAYPOINTS
from railtrack.exceptions import RailTrackConfigError
from railtrack.geo import Coordinate, distance
from railtrack.models.position import NearestWaypointResult
from railtrack.models.waypoint import Waypoint

_logger = logging.getLogger(__name__)


def _parse_entry(entry: Mapping[str, Any]) -> Waypoint:
    """Build a waypoint, accepting the nested ``coordinates`` shape as well."""
    values = dict(entry)
    coords = values.pop("coordinates", None)
    if isinstance(coords, Mapping):
        values.setdefault("lat", coords.get("lat"))
        values.setdefault("lng", coords.get("lng"))
    return Waypoint.model_validate(values)


class WaypointCatalog:
    """Immutable, ordered table of known waypoints.

    Insertion order is significant: the first waypoint is the default
    position and, on exact distance ties, the earlier waypoint wins.
    """

    def __init__(self, waypoints: Iterable[Waypoint]) -> None:
        self._waypoints: tuple[Waypoint, ...] = tuple(waypoints)
        if not self._waypoints:
            raise RailTrackConfigError("Waypoint catalog must contain at least one waypoint")
        seen: set[str] = set()
        for waypoint in self._waypoints:
            if waypoint.id in seen:
                raise RailTrackConfigError(f"Duplicate waypoint id: {waypoint.id}")
            seen.add(waypoint.id)
        self._by_id = {waypoint.id: waypoint for waypoint in self._waypoints}

    @classmethod
    def from_entries(cls, entries: Iterable[Mapping[str, Any]]) -> WaypointCatalog:
        try:
            return cls(_parse_entry(entry) for entry in entries)
        except ValidationError as exc:
            raise RailTrackConfigError(f"Invalid waypoint entry: {exc}") from exc

    @classmethod
    def default(cls) -> WaypointCatalog:
        return cls.from_entries(DEFAULT_WAYPOINTS)

    @classmethod
    def from_file(cls, path: str | Path) -> WaypointCatalog:
        """Load a catalog from a JSON list of waypoint objects."""
        file_path = Path(path)
        try:
            raw = json.loads(file_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise RailTrackConfigError(f"Cannot read waypoint file {file_path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise RailTrackConfigError(f"Waypoint file {file_path} is not valid JSON: {exc}") from exc

        if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
            raise RailTrackConfigError(f"Waypoint file {file_path} must contain a JSON list of objects")

        catalog = cls.from_entries(raw)
        _logger.debug("Loaded %d waypoints from %s", len(catalog), file_path)
        return catalog

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(self._waypoints)

    def __len__(self) -> int:
        return len(self._waypoints)

    @property
    def first(self) -> Waypoint:
        return self._waypoints[0]

    def get(self, waypoint_id: str) -> Waypoint | None:
        return self._by_id.get(waypoint_id)

    def nearest(self, point: Coordinate) -> NearestWaypointResult:
        """Resolve the waypoint closest to *point*.

        Linear scan with a strict less-than comparison, so the first
        waypoint in catalog order wins on exact ties.
        """
        best: Waypoint | None = None
        best_km = float("inf")
        for waypoint in self._waypoints:
            km = distance(point, waypoint)
            if km < best_km:
                best = waypoint
                best_km = km

        # Only reachable when every distance is NaN.
        if best is None:
            best = self.first
            best_km = distance(point, best)

        return NearestWaypointResult(
            waypoint_id=best.id,
            name=best.name,
            code=best.code,
            distance_km=best_km,
            lat=best.lat,
            lng=best.lng,
        )
