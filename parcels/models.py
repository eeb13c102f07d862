"""
Purpose: Core data models for the parcels domain.
What it does:
- Defines the immutable Parcel snapshot handed to the consolidation engine
- Defines ParcelPriority = LOW | NORMAL | HIGH | URGENT (ordered)

Rule: No routing calls, no scoring logic. Models and input validation only.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from routing.geo_distance import validate_coordinates

LatLon = Tuple[float, float]


class ValidationError(ValueError):
    """Raised when an entity snapshot breaks an input invariant."""
    pass


class ParcelPriority(str, Enum):
    """
    Ordered LOW < NORMAL < HIGH < URGENT.
    Comparisons go by rank, not by the string value.
    """
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_ORDER.index(self)

    def __lt__(self, other):
        if not isinstance(other, ParcelPriority):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, ParcelPriority):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, ParcelPriority):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, ParcelPriority):
            return NotImplemented
        return self.rank >= other.rank


_PRIORITY_ORDER = [
    ParcelPriority.LOW,
    ParcelPriority.NORMAL,
    ParcelPriority.HIGH,
    ParcelPriority.URGENT,
]


@dataclass(frozen=True)
class Parcel:
    """
    A parcel that missed its assigned vehicle, as seen at evaluation time.
    """
    id: str
    weight: float  # kg
    volume: float  # cubic meters
    destination: LatLon
    sla_deadline: datetime
    priority: ParcelPriority = ParcelPriority.NORMAL

    # human readable reference, only used in log lines
    tracking_number: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Parcel id must not be empty")
        if self.weight < 0:
            raise ValidationError(f"Parcel {self.id} has negative weight {self.weight}")
        if self.volume < 0:
            raise ValidationError(f"Parcel {self.id} has negative volume {self.volume}")
        if not validate_coordinates(self.destination):
            raise ValidationError(f"Parcel {self.id} has malformed destination {self.destination!r}")
        if self.sla_deadline.tzinfo is None:
            raise ValidationError(f"Parcel {self.id} sla_deadline must be timezone-aware")
        if not isinstance(self.priority, ParcelPriority):
            raise ValidationError(f"Parcel {self.id} has unknown priority {self.priority!r}")

    @property
    def reference(self) -> str:
        return self.tracking_number or self.id

    @classmethod
    def new(
        cls,
        parcel_id: str,
        weight: float,
        volume: float,
        lat: float,
        lon: float,
        sla_deadline: datetime,
        priority: str | ParcelPriority = ParcelPriority.NORMAL,
        tracking_number: Optional[str] = None,
    ) -> Parcel:
        if isinstance(priority, str) and not isinstance(priority, ParcelPriority):
            try:
                priority = ParcelPriority(priority.lower())
            except ValueError:
                raise ValidationError(f"Parcel {parcel_id} has unknown priority {priority!r}") from None

        return cls(
            id=parcel_id,
            weight=float(weight),
            volume=float(volume),
            destination=(float(lat), float(lon)),
            sla_deadline=sla_deadline,
            priority=priority,
            tracking_number=tracking_number,
        )
