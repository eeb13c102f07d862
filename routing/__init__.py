#Marks routing as a package.
#Re-exports the public APIs (OSRMClient, GeoDistanceService, helpers)
#so other modules import from routing without knowing internal file names.
#No business logic.

from .osrm_client import OSRMClient, OSRMError
from .geo_distance import (
    DistanceResult,
    DistanceStatus,
    GeoDistanceService,
    haversine_km,
    is_within_service_area,
    validate_coordinates,
)

__all__ = [
    "OSRMClient",
    "OSRMError",
    "DistanceResult",
    "DistanceStatus",
    "GeoDistanceService",
    "haversine_km",
    "is_within_service_area",
    "validate_coordinates",
]
