from __future__ import annotations

import pytest

from railtrack.catalog import WaypointCatalog
from railtrack.geo import distance, haversine_km
from railtrack.models.position import PositionFix


def _catalog(*points: tuple[str, float, float]) -> WaypointCatalog:
    return WaypointCatalog.from_entries(
        {"id": wid, "name": wid.upper(), "code": wid.upper(), "lat": lat, "lng": lng} for wid, lat, lng in points
    )


def test_distance_to_same_point_is_zero() -> None:
    point = PositionFix(lat=11.018, lng=76.970)
    assert distance(point, point) == 0.0


def test_one_degree_of_longitude_on_the_equator() -> None:
    # 6371 * pi / 180
    assert haversine_km(0.0, 0.0, 0.0, 1.0) == pytest.approx(111.19493, abs=1e-4)


def test_distance_is_symmetric() -> None:
    a = PositionFix(lat=11.018, lng=76.970)
    b = PositionFix(lat=10.974, lng=76.933)
    assert distance(a, b) == pytest.approx(distance(b, a))


def test_nearest_picks_minimum_distance() -> None:
    catalog = _catalog(("w1", 0.0, 0.0), ("w2", 0.0, 1.0))

    assert catalog.nearest(PositionFix(lat=0.0, lng=0.6)).waypoint_id == "w2"
    assert catalog.nearest(PositionFix(lat=0.0, lng=0.4)).waypoint_id == "w1"


def test_nearest_exact_tie_goes_to_first_registered() -> None:
    midpoint = PositionFix(lat=0.0, lng=0.5)

    assert _catalog(("w1", 0.0, 0.0), ("w2", 0.0, 1.0)).nearest(midpoint).waypoint_id == "w1"
    assert _catalog(("w2", 0.0, 1.0), ("w1", 0.0, 0.0)).nearest(midpoint).waypoint_id == "w2"


def test_nearest_colocated_waypoints_resolve_to_first() -> None:
    catalog = _catalog(("a", 5.0, 5.0), ("b", 5.0, 5.0), ("c", 9.0, 9.0))
    assert catalog.nearest(PositionFix(lat=5.1, lng=5.1)).waypoint_id == "a"


def test_nearest_result_carries_waypoint_details_and_unrounded_distance() -> None:
    catalog = WaypointCatalog.default()
    fix = PositionFix(lat=11.03, lng=76.98)

    nearest = catalog.nearest(fix)

    assert nearest.waypoint_id == "cbf"
    assert nearest.name == "Coimbatore North Junction"
    assert nearest.code == "CBF"
    assert (nearest.lat, nearest.lng) == (11.039, 76.983)
    assert nearest.distance_km == distance(fix, catalog.get("cbf"))  # type: ignore[arg-type]
