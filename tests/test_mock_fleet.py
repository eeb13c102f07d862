import numpy as np
import pandas as pd

from routing.geo_distance import is_within_service_area
from scripts.generate_mock_fleet import generate_mock_parcels, generate_mock_vehicles, random_trust_score


def test_trust_scores_come_from_delivery_history():
    np.random.seed(7)
    scores = [random_trust_score() for _ in range(200)]

    # new partners start at full trust, a track record tops out at 60
    assert 100.0 in scores
    assert all(score == 100.0 or 0 <= score <= 60 for score in scores)


def test_generated_fleet_and_parcels_stay_in_service_area(tmp_path):
    np.random.seed(11)
    vehicles_file = tmp_path / "vehicles.csv"
    parcels_file = tmp_path / "parcels.csv"

    generate_mock_vehicles(30, vehicles_file)
    generate_mock_parcels(20, parcels_file)

    vehicles = pd.read_csv(vehicles_file)
    parcels = pd.read_csv(parcels_file)
    assert len(vehicles) == 30 and len(parcels) == 20
    assert all(is_within_service_area((lat, lon)) for lat, lon in zip(vehicles["lat"], vehicles["lon"]))
    assert all(
        is_within_service_area((lat, lon))
        for lat, lon in zip(parcels["destination_lat"], parcels["destination_lon"])
    )
    assert vehicles["trust_score"].between(0, 100).all()
