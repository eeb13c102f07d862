import logging
import os
import sys
import time
from datetime import datetime
from typing import List

import pandas as pd

# Allow running as `python scripts/run_consolidation_simulation.py` from the repo root.
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from audit.stats import decision_stats
from audit.store import JsonlAuditStore
from consolidation.decision_maker import DecisionMaker
from consolidation.policy import policy_from_env
from consolidation.recorder import DecisionRecorder
from parcels.models import Parcel, ValidationError
from routing.geo_distance import GeoDistanceService
from routing.osrm_client import OSRMClient
from vehicles.models import Vehicle


def load_parcels(filepath="mock_parcels.csv") -> List[Parcel]:
    df = pd.read_csv(filepath)
    parcels = []
    for _, row in df.iterrows():
        parcels.append(
            Parcel.new(
                parcel_id=str(row["parcel_id"]),
                weight=row["weight"],
                volume=row["volume"],
                lat=row["destination_lat"],
                lon=row["destination_lon"],
                sla_deadline=datetime.fromisoformat(row["sla_deadline"]),
                priority=row["priority"],
                tracking_number=str(row["tracking_number"]),
            )
        )
    return parcels


def load_vehicles(filepath="mock_vehicles.csv") -> List[Vehicle]:
    df = pd.read_csv(filepath)
    vehicles = []
    skipped = 0
    for _, row in df.iterrows():
        try:
            vehicles.append(
                Vehicle.new(
                    vehicle_id=str(row["vehicle_id"]),
                    registration_number=str(row["registration_number"]),
                    vehicle_type=row["type"],
                    status=row["status"],
                    lat=row["lat"],
                    lon=row["lon"],
                    max_weight=row["max_weight"],
                    max_volume=row["max_volume"],
                    current_weight=row["current_weight"],
                    current_volume=row["current_volume"],
                    trust_score=row["trust_score"],
                    max_deviation_km=row["max_deviation_km"],
                    max_deviation_minutes=row["max_deviation_minutes"],
                    allow_consolidation=bool(row["allow_consolidation"]),
                )
            )
        except ValidationError as exc:
            skipped += 1
            print(f"[SKIPPED] {exc}")
    if skipped:
        print(f"Skipped {skipped} malformed vehicle snapshots.")
    return vehicles


def build_geo_service() -> GeoDistanceService:
    # Without an OSRM server configured every lookup uses the great-circle estimate.
    if os.getenv("BASE_URL"):
        return GeoDistanceService(OSRMClient())
    print("BASE_URL not set, distances use the great-circle fallback.")
    return GeoDistanceService()


def run_simulation(parcels_file="mock_parcels.csv", vehicles_file="mock_vehicles.csv",
                   output_file="consolidation_results.csv", shadow_mode=True):
    print("=== STARTING CONSOLIDATION SIMULATION ===")

    parcels = load_parcels(parcels_file)
    vehicles = load_vehicles(vehicles_file)
    print(f"Loaded {len(parcels)} Parcels and {len(vehicles)} Vehicles.\n")

    store = JsonlAuditStore()
    rows = []

    with DecisionRecorder(store) as recorder:
        decision_maker = DecisionMaker(
            geo_service=build_geo_service(),
            recorder=recorder,
            policy=policy_from_env(),
        )

        start_time = time.time()
        for parcel in parcels:
            decision = decision_maker.evaluate_parcel(parcel, vehicles, shadow_mode=shadow_mode)
            rows.append({
                "parcel_id": parcel.id,
                "decision": decision.decision.value,
                "vehicle_id": decision.vehicle_id or "",
                "score": decision.score if decision.score is not None else "",
                "explanation": decision.explanation,
            })
            print(f"[{decision.decision.value}] {parcel.reference}: {decision.explanation}")
        print(f"\nEvaluated {len(parcels)} parcels in {time.time() - start_time:.2f}s.")

    pd.DataFrame(rows).to_csv(output_file, index=False)

    stats = decision_stats(store.read_entries(limit=len(parcels)))
    print("\n=== SIMULATION COMPLETE ===")
    print(f"Accepted: {stats['accepted_decisions']} / {stats['total_evaluations']}")
    print(f"Average score: {stats['average_score']}")
    print(f"Dispatches avoided: {stats['dispatches_avoided']} (shadow decisions: {stats['shadow_decisions']})")
    print(f"Results written to '{output_file}', audit log at '{store.path}'.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING)
    run_simulation()
