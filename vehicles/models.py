"""
Purpose: Core data models for the vehicles domain.
What it does:
Defines the structure of a Vehicle snapshot, its type and its operational status,
without relying on any ORM or storage layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from parcels.models import LatLon, ValidationError
from routing.geo_distance import validate_coordinates


class VehicleType(str, Enum):
    TWO_WHEELER = "2w"
    FOUR_WHEELER = "4w"


class VehicleStatus(str, Enum):
    """
    Operational state of a vehicle.
    Only DISPATCHED and IN_TRANSIT vehicles are consolidation targets.
    """
    IDLE = "idle"
    DISPATCHED = "dispatched"
    IN_TRANSIT = "in_transit"
    RETURNING = "returning"
    MAINTENANCE = "maintenance"


@dataclass(frozen=True)
class Vehicle:
    """
    A purely stateless representation of a Vehicle at evaluation time.
    """
    id: str
    registration_number: str
    type: VehicleType
    status: VehicleStatus
    location: LatLon

    # Capacity, kg and cubic meters
    spare_weight: float
    spare_volume: float
    current_weight: float
    current_volume: float
    max_weight: float
    max_volume: float
    utilization_percentage: float

    # Reputation signal maintained outside the engine (0-100)
    trust_score: float

    # Consolidation constraints
    max_deviation_km: float = 5.0
    max_deviation_minutes: float = 30.0
    allow_consolidation: bool = True

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Vehicle id must not be empty")
        if not isinstance(self.type, VehicleType):
            raise ValidationError(f"Vehicle {self.id} has unknown type {self.type!r}")
        if not isinstance(self.status, VehicleStatus):
            raise ValidationError(f"Vehicle {self.id} has unknown status {self.status!r}")
        if not validate_coordinates(self.location):
            raise ValidationError(f"Vehicle {self.id} has malformed location {self.location!r}")
        if self.max_weight <= 0 or self.max_volume <= 0:
            raise ValidationError(f"Vehicle {self.id} max weight/volume must be > 0")
        for name in ("spare_weight", "spare_volume", "current_weight", "current_volume",
                     "max_deviation_km", "max_deviation_minutes"):
            if getattr(self, name) < 0:
                raise ValidationError(f"Vehicle {self.id} has negative {name}")
        # An overloaded snapshot would turn utilization math negative, so refuse it here.
        if self.current_weight > self.max_weight or self.current_volume > self.max_volume:
            raise ValidationError(
                f"Vehicle {self.id} current load ({self.current_weight}kg, {self.current_volume}m3) "
                f"exceeds its maximum ({self.max_weight}kg, {self.max_volume}m3)"
            )
        if not 0 <= self.trust_score <= 100:
            raise ValidationError(f"Vehicle {self.id} trust score {self.trust_score} outside 0-100")

    @classmethod
    def new(
        cls,
        vehicle_id: str,
        registration_number: str,
        vehicle_type: str | VehicleType,
        status: str | VehicleStatus,
        lat: float,
        lon: float,
        max_weight: float,
        max_volume: float,
        current_weight: float = 0.0,
        current_volume: float = 0.0,
        trust_score: float = 100.0,
        spare_weight: Optional[float] = None,
        spare_volume: Optional[float] = None,
        utilization_percentage: Optional[float] = None,
        max_deviation_km: float = 5.0,
        max_deviation_minutes: float = 30.0,
        allow_consolidation: bool = True,
    ) -> Vehicle:
        """
        Build a snapshot from raw values (CSV rows, API payloads).
        Spare capacity and utilization are derived from the load when not given.
        """
        try:
            if isinstance(vehicle_type, str):
                vehicle_type = VehicleType(vehicle_type)
            if isinstance(status, str):
                status = VehicleStatus(status)
            lat, lon = float(lat), float(lon)
            max_weight, max_volume = float(max_weight), float(max_volume)
            current_weight, current_volume = float(current_weight), float(current_volume)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Vehicle {vehicle_id}: {exc}") from None

        if max_weight <= 0 or max_volume <= 0:
            raise ValidationError(f"Vehicle {vehicle_id} max weight/volume must be > 0")

        if spare_weight is None:
            spare_weight = max_weight - current_weight
        if spare_volume is None:
            spare_volume = max_volume - current_volume
        if utilization_percentage is None:
            utilization_percentage = max(
                current_weight / max_weight * 100,
                current_volume / max_volume * 100,
            )

        return cls(
            id=vehicle_id,
            registration_number=registration_number,
            type=vehicle_type,
            status=status,
            location=(float(lat), float(lon)),
            spare_weight=float(spare_weight),
            spare_volume=float(spare_volume),
            current_weight=float(current_weight),
            current_volume=float(current_volume),
            max_weight=float(max_weight),
            max_volume=float(max_volume),
            utilization_percentage=float(utilization_percentage),
            trust_score=float(trust_score),
            max_deviation_km=float(max_deviation_km),
            max_deviation_minutes=float(max_deviation_minutes),
            allow_consolidation=bool(allow_consolidation),
        )
