import threading
import time

import pytest

from consolidation.impact import ImpactEstimator
from consolidation.models import Impact
from consolidation.policy import ConsolidationPolicy, default_policy
from consolidation.scoring import VehicleScorer
from parcels.models import ParcelPriority
from routing.geo_distance import DistanceStatus
from tests.conftest import MockGeoService


def scorer_for(geo, policy=None):
    return VehicleScorer(ImpactEstimator(geo), policy or default_policy())


def test_worked_scenario_breakdown(parcel, vehicle, geo):
    """
    capacity fit: min(2.5/15.5, 0.1/1.3) * 30 = 0.1/1.3 * 30 ~ 2.31
    proximity:    25 - (2.5 / 10) * 5 = 23.75
    trust:        92 / 100 * 20 = 18.4
    type:         15 (four-wheeler)
    priority:     5 (normal)
    """
    breakdown = scorer_for(geo).breakdown(parcel, vehicle)

    assert breakdown.capacity_fit == pytest.approx(0.1 / 1.3 * 30)
    assert breakdown.proximity == pytest.approx(23.75)
    assert breakdown.trust == pytest.approx(18.4)
    assert breakdown.type_preference == 15
    assert breakdown.priority_bonus == 5
    assert breakdown.raw_total == pytest.approx(64.4577, abs=1e-3)


def test_worked_scenario_score_rounds_to_64(parcel, vehicle, geo):
    assert scorer_for(geo).score(parcel, vehicle) == 64


def test_score_reuses_supplied_impact(parcel, vehicle, geo):
    impact = Impact(additional_km=0.0, additional_minutes=0.0, utilization_improvement_pct=5.0)
    scorer_for(geo).score(parcel, vehicle, impact)
    assert geo.calls == []


def test_proximity_never_goes_negative(parcel, vehicle):
    far = MockGeoService(distance_km=400.0, duration_minutes=600.0)
    assert scorer_for(far).breakdown(parcel, vehicle).proximity == 0


def test_score_reaches_upper_bound(make_parcel, make_vehicle):
    parcel = make_parcel(weight=5.0, volume=0.5, priority=ParcelPriority.URGENT)
    vehicle = make_vehicle(spare_weight=5.0, spare_volume=0.5, trust_score=100)
    at_door = MockGeoService(distance_km=0.0, duration_minutes=0.0)

    assert scorer_for(at_door).score(parcel, vehicle) == 100


def test_full_axis_counts_as_saturated(make_parcel, make_vehicle, geo):
    parcel = make_parcel(weight=0.0, volume=0.0)
    vehicle = make_vehicle(spare_weight=0.0, spare_volume=0.0)
    assert scorer_for(geo).breakdown(parcel, vehicle).capacity_fit == 30


@pytest.mark.parametrize("distance_km", [0.0, 3.0, 49.0, 1000.0])
@pytest.mark.parametrize("trust_score", [0, 55, 100])
@pytest.mark.parametrize("vehicle_type", ["2w", "4w"])
def test_score_stays_within_bounds(make_parcel, make_vehicle, distance_km, trust_score, vehicle_type):
    parcel = make_parcel(weight=30.0, volume=2.0, priority=ParcelPriority.URGENT)
    # spare smaller than the parcel: capacity share must still cap at 30 points
    vehicle = make_vehicle(vehicle_type=vehicle_type, trust_score=trust_score, spare_weight=3.0, spare_volume=0.2)
    score = scorer_for(MockGeoService(distance_km, distance_km * 2)).score(parcel, vehicle)
    assert 0 <= score <= 100


def test_rank_orders_by_score_descending(parcel, make_vehicle):
    near = make_vehicle(vehicle_id="near", lat=12.90, lon=77.50)
    far = make_vehicle(vehicle_id="far", lat=12.80, lon=77.40)
    geo = MockGeoService(by_origin={near.location: (1.0, 4.0), far.location: (30.0, 60.0)})

    ranked = scorer_for(geo).rank(parcel, [far, near])

    assert [candidate.vehicle.id for candidate in ranked] == ["near", "far"]
    assert ranked[0].score > ranked[1].score
    # impact travels with the ranking entry
    assert ranked[0].impact.additional_km == 1.0
    assert len(geo.calls) == 2


def test_rank_tie_breaks_on_trust_then_id(make_parcel, make_vehicle):
    """
    Trust 90 vs 91 changes the raw total by 0.2, both round to the same score.
    """
    parcel = make_parcel(weight=1.0, volume=0.001)
    geo = MockGeoService(distance_km=0.0, duration_minutes=0.0)
    vehicles = [
        make_vehicle(vehicle_id="b", trust_score=90, spare_weight=1000, spare_volume=2.0),
        make_vehicle(vehicle_id="a", trust_score=90, spare_weight=1000, spare_volume=2.0),
        make_vehicle(vehicle_id="c", trust_score=91, spare_weight=1000, spare_volume=2.0),
    ]

    ranked = scorer_for(geo).rank(parcel, vehicles)

    assert len({candidate.score for candidate in ranked}) == 1
    assert [candidate.vehicle.id for candidate in ranked] == ["c", "a", "b"]


def test_rank_empty(parcel, geo):
    assert scorer_for(geo).rank(parcel, []) == []


def test_rank_falls_back_when_lookups_hang(parcel, make_vehicle):
    """
    A lookup that never answers within the timeout is replaced by the
    great-circle estimate instead of blocking the ranking.
    """
    release = threading.Event()

    class HangingGeoService:
        def distance(self, origin, destination):
            release.wait(5)
            raise TimeoutError("never answered")

    policy = ConsolidationPolicy(max_workers=2, geo_timeout_seconds=0.05)
    vehicles = [make_vehicle(vehicle_id="a"), make_vehicle(vehicle_id="b", lat=12.95)]

    try:
        ranked = scorer_for(HangingGeoService(), policy).rank(parcel, vehicles)
    finally:
        release.set()

    assert len(ranked) == 2
    assert all(candidate.impact.distance_status == DistanceStatus.FALLBACK for candidate in ranked)


class BlockedGeoService:
    """Holds every lookup until `release` is set."""
    def __init__(self):
        self.release = threading.Event()

    def distance(self, origin, destination):
        self.release.wait(5)
        raise TimeoutError("never answered")


def test_single_vehicle_lookup_is_bounded_by_timeout(parcel, vehicle):
    geo = BlockedGeoService()
    policy = ConsolidationPolicy(geo_timeout_seconds=0.1)

    started = time.monotonic()
    try:
        ranked = scorer_for(geo, policy).rank(parcel, [vehicle])
    finally:
        geo.release.set()

    assert time.monotonic() - started < 1.0
    assert ranked[0].impact.distance_status == DistanceStatus.FALLBACK


def test_single_worker_does_not_stack_lookup_delays(parcel, make_vehicle):
    geo = BlockedGeoService()
    policy = ConsolidationPolicy(max_workers=1, geo_timeout_seconds=0.1)
    vehicles = [make_vehicle(vehicle_id="a"), make_vehicle(vehicle_id="b", lat=12.95)]

    started = time.monotonic()
    try:
        ranked = scorer_for(geo, policy).rank(parcel, vehicles)
    finally:
        geo.release.set()

    assert time.monotonic() - started < 1.0
    assert len(ranked) == 2
    assert all(candidate.impact.distance_status == DistanceStatus.FALLBACK for candidate in ranked)
