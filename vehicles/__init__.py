"""
Vehicles domain package.

Public API:
- Domain models: Vehicle, VehicleType, VehicleStatus
- calculate_trust_score
"""
from .models import Vehicle, VehicleStatus, VehicleType
from .trust import calculate_trust_score

__all__ = [
    "Vehicle",
    "VehicleStatus",
    "VehicleType",
    "calculate_trust_score",
]
