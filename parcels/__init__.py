"""
Parcels domain package.

Public API:
- Domain models: Parcel, ParcelPriority
- ValidationError raised on malformed snapshots
"""
from .models import Parcel, ParcelPriority, ValidationError

__all__ = [
    "Parcel",
    "ParcelPriority",
    "ValidationError",
]
