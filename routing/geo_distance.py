#Purpose: Geospatial distance collaborator for the consolidation engine.
#Answers "how far / how long from A to B" with a result that is always usable:
#road distance from OSRM when it works, a great-circle estimate when it doesn't.
#Also hosts the small coordinate helpers shared by the domain models.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Optional, Tuple

from routing.osrm_client import OSRMClient, OSRMError

logger = logging.getLogger(__name__)

#internal coordinate type :(lat,lon)
LatLon = Tuple[float, float]

EARTH_RADIUS_KM = 6371.0
FALLBACK_SPEED_KMH = 30.0

# Service area bounds (India)
SERVICE_AREA_BOUNDS = {
    "north": 37.6,
    "south": 6.4,
    "east": 97.25,
    "west": 68.7,
}


class DistanceStatus(str, Enum):
    OK = "OK"
    FALLBACK = "FALLBACK"


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    duration_minutes: float
    status: DistanceStatus = DistanceStatus.OK


def validate_coordinates(coordinates) -> bool:
    """True for a (lat, lon) pair of finite numbers within the valid ranges."""
    try:
        lat, lon = coordinates
        lat = float(lat)
        lon = float(lon)
    except (TypeError, ValueError):
        return False
    if math.isnan(lat) or math.isnan(lon):
        return False
    return -90 <= lat <= 90 and -180 <= lon <= 180


def is_within_service_area(coordinates: LatLon) -> bool:
    lat, lon = coordinates
    return (
        SERVICE_AREA_BOUNDS["south"] <= lat <= SERVICE_AREA_BOUNDS["north"]
        and SERVICE_AREA_BOUNDS["west"] <= lon <= SERVICE_AREA_BOUNDS["east"]
    )


def haversine_km(origin: LatLon, destination: LatLon) -> float:
    """Great-circle distance between two (lat, lon) points in kilometers."""
    lat1, lon1 = origin
    lat2, lon2 = destination
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


class GeoDistanceService:
    """
    Distance/duration lookup with local degradation.

    Any OSRM failure (timeout, HTTP error, bad payload) or a missing client
    yields a FALLBACK result built from the haversine distance at
    FALLBACK_SPEED_KMH. Callers never see an exception from distance().
    """

    def __init__(self, osrm_client: Optional[OSRMClient] = None, fallback_speed_kmh: float = FALLBACK_SPEED_KMH):
        if fallback_speed_kmh <= 0:
            raise ValueError("fallback_speed_kmh must be > 0")
        self.osrm_client = osrm_client
        self.fallback_speed_kmh = fallback_speed_kmh

    def distance(self, origin: LatLon, destination: LatLon) -> DistanceResult:
        if self.osrm_client is None:
            return self.fallback(origin, destination)

        try:
            route = self.osrm_client.compute_route([origin, destination])
        except (OSRMError, ValueError) as exc:
            logger.warning(f"Distance lookup {origin} -> {destination} failed, using great-circle estimate: {exc}")
            return self.fallback(origin, destination)

        return DistanceResult(
            distance_km=route["distance"] / 1000,
            duration_minutes=route["duration"] / 60,
            status=DistanceStatus.OK,
        )

    def fallback(self, origin: LatLon, destination: LatLon) -> DistanceResult:
        distance_km = haversine_km(origin, destination)
        return DistanceResult(
            distance_km=distance_km,
            duration_minutes=distance_km / self.fallback_speed_kmh * 60,
            status=DistanceStatus.FALLBACK,
        )
