from __future__ import annotations

from railtrack.collision import assess, is_collision_risk
from railtrack.models.position import NearestWaypointResult, PositionFix


def test_threshold_is_inclusive() -> None:
    assert is_collision_risk(1.0) is True
    assert is_collision_risk(1.000001) is False


def test_zero_distance_is_a_risk() -> None:
    assert is_collision_risk(0.0) is True


def test_assess_between_two_entities() -> None:
    origin = PositionFix(lat=0.0, lng=0.0)

    close = assess(origin, PositionFix(lat=0.0, lng=0.005))
    far = assess(origin, PositionFix(lat=0.0, lng=0.01))

    assert close.risk is True
    assert close.distance_km < 1.0
    assert far.risk is False
    assert far.distance_km > 1.0


def _nearest(distance_km: float) -> NearestWaypointResult:
    return NearestWaypointResult(
        waypoint_id="cbe",
        name="Coimbatore Junction",
        code="CBE",
        distance_km=distance_km,
        lat=11.018,
        lng=76.970,
    )


def test_nearest_result_exposes_derived_risk_flag() -> None:
    assert _nearest(1.0).collision_risk is True
    assert _nearest(1.000001).collision_risk is False


def test_risk_flag_is_part_of_the_wire_form() -> None:
    wire = _nearest(0.4).to_wire()
    assert wire["collision_risk"] is True
    assert wire["distance_km"] == 0.4
