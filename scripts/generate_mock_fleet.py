import os
import sys
import uuid
from datetime import datetime, timezone, timedelta

import numpy as np
import pandas as pd

# Allow running as `python scripts/generate_mock_fleet.py` from the repo root.
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from routing.geo_distance import is_within_service_area
from vehicles.trust import calculate_trust_score

# Center around Bengaluru (inside the India service area)
CENTER_LAT = 12.971599
CENTER_LON = 77.594566


def random_point(spread):
    """A (lat, lon) near the center, redrawn until it falls inside the service area."""
    while True:
        point = (
            float(np.round(CENTER_LAT + np.random.uniform(-spread, spread), 6)),
            float(np.round(CENTER_LON + np.random.uniform(-spread, spread), 6)),
        )
        if is_within_service_area(point):
            return point


def random_trust_score():
    """
    Trust from a generated delivery history. About a third of the partners are new
    (no deliveries yet, full trust); the rest carry a track record.
    """
    if np.random.random() < 0.35:
        return calculate_trust_score(0, 0, 0, 0)

    total = int(np.random.randint(20, 500))
    successful = int(np.random.binomial(total, np.random.uniform(0.85, 0.99)))
    late = int(np.random.binomial(total, np.random.uniform(0.0, 0.1)))
    exceptions = int(np.random.binomial(total, np.random.uniform(0.0, 0.05)))
    return round(calculate_trust_score(total, successful, late, exceptions), 1)


def generate_mock_vehicles(num_vehicles=60, output_file="mock_vehicles.csv"):
    """
    Generates a fleet snapshot for consolidation simulations.
    Most vehicles are already en route so that there are real consolidation targets,
    with a mix of 2-wheelers and 4-wheelers. Trust comes from random_trust_score():
    a track record caps at 60 (success weight 0.6), so only new partners clear
    the per-type trust minimums.
    """
    data = []
    for vehicle_index in range(num_vehicles):
        vehicle_type = np.random.choice(["2w", "4w"], p=[0.6, 0.4])

        if vehicle_type == "2w":
            max_weight, max_volume = 20.0, 0.3
            max_deviation_km, max_deviation_minutes = 5.0, 20
        else:
            max_weight, max_volume = 500.0, 3.0
            max_deviation_km, max_deviation_minutes = 10.0, 30

        load_share = np.random.uniform(0.1, 0.9)
        # Scatter vehicles within roughly 10km of the center
        lat, lon = random_point(0.09)

        data.append({
            "vehicle_id": f"v_{str(uuid.uuid4())[:8]}",
            "registration_number": f"KA-{np.random.randint(1, 60):02d}-{vehicle_index + 1:04d}",
            "type": vehicle_type,
            "status": np.random.choice(
                ["dispatched", "in_transit", "idle", "returning", "maintenance"],
                p=[0.35, 0.35, 0.15, 0.1, 0.05],
            ),
            "lat": lat,
            "lon": lon,
            "max_weight": max_weight,
            "max_volume": max_volume,
            "current_weight": np.round(max_weight * load_share, 2),
            "current_volume": np.round(max_volume * load_share, 3),
            "trust_score": random_trust_score(),
            "max_deviation_km": max_deviation_km,
            "max_deviation_minutes": max_deviation_minutes,
            "allow_consolidation": bool(np.random.random() < 0.9),
        })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {num_vehicles} vehicles and saved to '{output_file}'")

    print("\nFleet status mix:")
    for status, count in df["status"].value_counts().items():
        print(f"  {status}: {count}")


def generate_mock_parcels(num_parcels=40, output_file="mock_parcels.csv"):
    """
    Parcels that missed their vehicle, with SLA deadlines 1-6 hours out.
    """
    now = datetime.now(timezone.utc)
    data = []
    for parcel_index in range(num_parcels):
        destination_lat, destination_lon = random_point(0.08)
        data.append({
            "parcel_id": f"p_{str(parcel_index + 1).zfill(5)}",
            "tracking_number": f"TRK{np.random.randint(10**7, 10**8)}",
            "weight": np.round(np.random.uniform(0.2, 12.0), 1),
            "volume": np.round(np.random.uniform(0.005, 0.2), 3),
            "destination_lat": destination_lat,
            "destination_lon": destination_lon,
            "sla_deadline": (now + timedelta(minutes=int(np.random.randint(60, 360)))).isoformat(),
            "priority": np.random.choice(["low", "normal", "high", "urgent"], p=[0.2, 0.5, 0.2, 0.1]),
        })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"✅ Generated {num_parcels} parcels and saved to '{output_file}'")


if __name__ == "__main__":
    generate_mock_vehicles()
    generate_mock_parcels()
