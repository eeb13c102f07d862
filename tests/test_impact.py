import pytest
import requests

from consolidation.impact import ImpactEstimator, utilization_improvement
from routing.geo_distance import DistanceStatus, GeoDistanceService, haversine_km
from tests.conftest import DESTINATION, VEHICLE_LOCATION


class TimingOutGeoService:
    def distance(self, origin, destination):
        raise requests.Timeout("distance service did not answer in time")


def test_impact_uses_distance_result_directly(parcel, vehicle, geo):
    impact = ImpactEstimator(geo).estimate(parcel, vehicle)

    assert impact.additional_km == 2.5
    assert impact.additional_minutes == 8.0
    assert impact.distance_status == DistanceStatus.OK
    # one lookup, from the vehicle to the parcel destination
    assert geo.calls == [(VEHICLE_LOCATION, DESTINATION)]


def test_utilization_improvement_uses_scarcer_axis(parcel, vehicle):
    """
    Current utilization max(25/50, 1.2/2.5) = 50%.
    With the parcel: max(27.5/50, 1.3/2.5) = 55%, so +5 points.
    """
    assert vehicle.utilization_percentage == pytest.approx(50.0)
    assert utilization_improvement(parcel, vehicle) == pytest.approx(5.0)


def test_utilization_improvement_is_not_clamped(parcel, make_vehicle):
    # a snapshot reporting a higher utilization than its load implies
    vehicle = make_vehicle(utilization_percentage=90.0)
    assert utilization_improvement(parcel, vehicle) == pytest.approx(-35.0)


def test_collaborator_failure_degrades_to_great_circle(parcel, vehicle):
    impact = ImpactEstimator(TimingOutGeoService()).estimate(parcel, vehicle)

    expected_km = haversine_km(VEHICLE_LOCATION, DESTINATION)
    assert impact.distance_status == DistanceStatus.FALLBACK
    assert impact.additional_km == pytest.approx(expected_km)
    # 30 km/h average
    assert impact.additional_minutes == pytest.approx(expected_km * 2)


def test_default_estimator_works_without_network(parcel, vehicle):
    impact = ImpactEstimator().estimate(parcel, vehicle)
    assert impact.distance_status == DistanceStatus.FALLBACK


def test_fallback_estimate_matches_service_fallback(parcel, vehicle):
    impact = ImpactEstimator(GeoDistanceService()).fallback_estimate(parcel, vehicle)
    assert impact.additional_km == pytest.approx(haversine_km(VEHICLE_LOCATION, DESTINATION))
