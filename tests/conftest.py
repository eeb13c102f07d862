import threading
from datetime import datetime, timedelta, timezone

import pytest

from parcels.models import Parcel, ParcelPriority
from routing.geo_distance import DistanceResult, DistanceStatus
from vehicles.models import Vehicle

NOW = datetime(2026, 1, 15, 10, 0, tzinfo=timezone.utc)

# Somewhere in Bengaluru; the mocked distance service ignores the actual geometry.
DESTINATION = (12.9716, 77.5946)
VEHICLE_LOCATION = (12.9600, 77.6000)


class MockGeoService:
    """
    Distance collaborator double. Returns a fixed answer, or a per-origin answer
    when `by_origin` is given. Counts calls (thread safe, rank() fans out).
    """
    def __init__(self, distance_km=2.5, duration_minutes=8.0, by_origin=None):
        self.default = DistanceResult(distance_km, duration_minutes, DistanceStatus.OK)
        self.by_origin = by_origin or {}
        self.calls = []
        self._lock = threading.Lock()

    def distance(self, origin, destination):
        with self._lock:
            self.calls.append((origin, destination))
        if origin in self.by_origin:
            distance_km, duration_minutes = self.by_origin[origin]
            return DistanceResult(distance_km, duration_minutes, DistanceStatus.OK)
        return self.default


class RecordingRecorder:
    def __init__(self):
        self.records = []

    def record(self, parcel_id, decision, shadow_mode):
        self.records.append((parcel_id, decision, shadow_mode))
        return True


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def make_parcel():
    def _make(**overrides):
        values = dict(
            parcel_id="parcel-1",
            weight=2.5,
            volume=0.1,
            lat=DESTINATION[0],
            lon=DESTINATION[1],
            sla_deadline=NOW + timedelta(hours=4),
            priority=ParcelPriority.NORMAL,
            tracking_number="TRK-0001",
        )
        values.update(overrides)
        return Parcel.new(**values)
    return _make


@pytest.fixture
def make_vehicle():
    def _make(**overrides):
        values = dict(
            vehicle_id="vehicle-1",
            registration_number="KA-01-0001",
            vehicle_type="4w",
            status="dispatched",
            lat=VEHICLE_LOCATION[0],
            lon=VEHICLE_LOCATION[1],
            max_weight=50.0,
            max_volume=2.5,
            current_weight=25.0,
            current_volume=1.2,
            trust_score=92,
            spare_weight=15.5,
            spare_volume=1.3,
            max_deviation_km=10.0,
            max_deviation_minutes=30.0,
            allow_consolidation=True,
        )
        values.update(overrides)
        return Vehicle.new(**values)
    return _make


@pytest.fixture
def parcel(make_parcel):
    return make_parcel()


@pytest.fixture
def vehicle(make_vehicle):
    return make_vehicle()


@pytest.fixture
def geo():
    return MockGeoService()


@pytest.fixture
def recorder():
    return RecordingRecorder()
