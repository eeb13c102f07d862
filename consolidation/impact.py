"""
Purpose: Marginal cost of adding one parcel to one vehicle.
What it does:
- asks the distance collaborator for vehicle position -> parcel destination
- turns the answer into extra km / extra minutes
- computes how much the vehicle's utilization rises with the parcel on board

Rule: never raises because of the distance collaborator. Any failure degrades
to a great-circle estimate so the evaluation can always finish.
"""

from __future__ import annotations

import logging

from parcels.models import Parcel
from routing.geo_distance import DistanceResult, GeoDistanceService
from vehicles.models import Vehicle

from .models import Impact

logger = logging.getLogger(__name__)


class ImpactEstimator:

    def __init__(self, geo_service=None):
        # geo_service: anything with distance(origin, destination) -> DistanceResult
        self.geo_service = geo_service or GeoDistanceService()
        self._local = GeoDistanceService()

    def estimate(self, parcel: Parcel, vehicle: Vehicle) -> Impact:
        distance = self._lookup_distance(parcel, vehicle)
        return self.build_impact(parcel, vehicle, distance)

    def fallback_estimate(self, parcel: Parcel, vehicle: Vehicle) -> Impact:
        """Impact from the local great-circle estimate only (no network)."""
        distance = self._local.fallback(vehicle.location, parcel.destination)
        return self.build_impact(parcel, vehicle, distance)

    @staticmethod
    def build_impact(parcel: Parcel, vehicle: Vehicle, distance: DistanceResult) -> Impact:
        return Impact(
            additional_km=distance.distance_km,
            additional_minutes=distance.duration_minutes,
            utilization_improvement_pct=utilization_improvement(parcel, vehicle),
            distance_status=distance.status,
        )

    def _lookup_distance(self, parcel: Parcel, vehicle: Vehicle) -> DistanceResult:
        try:
            return self.geo_service.distance(vehicle.location, parcel.destination)
        except Exception as exc:
            logger.warning(
                f"Distance service failed for vehicle {vehicle.registration_number} / parcel {parcel.reference}, "
                f"falling back to great-circle estimate: {exc}"
            )
            return self._local.fallback(vehicle.location, parcel.destination)


def utilization_improvement(parcel: Parcel, vehicle: Vehicle) -> float:
    """
    Percentage points gained by loading the parcel.
    New utilization is the scarcer of the weight and volume axes.
    Not clamped.
    """
    new_weight_utilization = (vehicle.current_weight + parcel.weight) / vehicle.max_weight * 100
    new_volume_utilization = (vehicle.current_volume + parcel.volume) / vehicle.max_volume * 100
    return max(new_weight_utilization, new_volume_utilization) - vehicle.utilization_percentage
