"""
Purpose: Central configuration for consolidation decisions.
What it does:

Stores all tunable thresholds used by the eligibility filter, scorer and
decision maker:

MIN_TRUST = {2w: 80, 4w: 70}
SLA_BUFFER_MINUTES = {2w: 15, 4w: 30}
MIN_SCORE = {2w: 60, 4w: 50}
PRIORITY_BONUS = {low: 2, normal: 5, high: 8, urgent: 10}

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from typing import Dict, FrozenSet

from dotenv import load_dotenv

from parcels.models import ParcelPriority
from vehicles.models import VehicleStatus, VehicleType


@dataclass(frozen=True)
class ConsolidationPolicy:
    """
    Central configuration for consolidation thresholds and score weights.
    """

    # --- Hard constraints ---
    # Minimum partner trust score per vehicle type (inclusive).
    min_trust: Dict[VehicleType, float] = field(default_factory=lambda: {
        VehicleType.TWO_WHEELER: 80,
        VehicleType.FOUR_WHEELER: 70,
    })

    # Only vehicles already en route are consolidation targets.
    eligible_statuses: FrozenSet[VehicleStatus] = frozenset({
        VehicleStatus.DISPATCHED,
        VehicleStatus.IN_TRANSIT,
    })

    # Safety margin added to the ETA before comparing with the SLA deadline.
    sla_buffer_minutes: Dict[VehicleType, float] = field(default_factory=lambda: {
        VehicleType.TWO_WHEELER: 15,
        VehicleType.FOUR_WHEELER: 30,
    })

    # --- Acceptance threshold ---
    min_score: Dict[VehicleType, int] = field(default_factory=lambda: {
        VehicleType.TWO_WHEELER: 60,
        VehicleType.FOUR_WHEELER: 50,
    })

    # --- Score weights (max points per factor) ---
    capacity_fit_points: float = 30
    proximity_points: float = 25
    # Proximity loses proximity_penalty_points for every proximity_step_km of detour.
    proximity_step_km: float = 10
    proximity_penalty_points: float = 5
    trust_points: float = 20

    type_preference_points: Dict[VehicleType, float] = field(default_factory=lambda: {
        VehicleType.TWO_WHEELER: 5,
        VehicleType.FOUR_WHEELER: 15,
    })

    priority_bonus_points: Dict[ParcelPriority, float] = field(default_factory=lambda: {
        ParcelPriority.LOW: 2,
        ParcelPriority.NORMAL: 5,
        ParcelPriority.HIGH: 8,
        ParcelPriority.URGENT: 10,
    })

    # --- Concurrency ---
    # Cap on concurrent outbound distance lookups per evaluation.
    max_workers: int = 8
    # Per-candidate wait before falling back to a local estimate.
    geo_timeout_seconds: float = 2.0

    def validate(self) -> None:
        """
        Basic sanity checks. Every enum member must have an entry in each table.
        """
        for table_name in ("min_trust", "sla_buffer_minutes", "min_score", "type_preference_points"):
            table = getattr(self, table_name)
            missing = [vehicle_type.value for vehicle_type in VehicleType if vehicle_type not in table]
            if missing:
                raise ValueError(f"{table_name} missing vehicle types: {missing}")

        missing_priorities = [p.value for p in ParcelPriority if p not in self.priority_bonus_points]
        if missing_priorities:
            raise ValueError(f"priority_bonus_points missing priorities: {missing_priorities}")

        if not self.eligible_statuses:
            raise ValueError("eligible_statuses must not be empty")

        for vehicle_type, trust in self.min_trust.items():
            if not 0 <= trust <= 100:
                raise ValueError(f"min_trust for {vehicle_type.value} must be within 0-100")

        for vehicle_type, score in self.min_score.items():
            if not 0 <= score <= 100:
                raise ValueError(f"min_score for {vehicle_type.value} must be within 0-100")

        if any(buffer < 0 for buffer in self.sla_buffer_minutes.values()):
            raise ValueError("sla_buffer_minutes must be >= 0")

        if self.proximity_step_km <= 0:
            raise ValueError("proximity_step_km must be > 0")

        max_total = (
            self.capacity_fit_points
            + self.proximity_points
            + self.trust_points
            + max(self.type_preference_points.values())
            + max(self.priority_bonus_points.values())
        )
        if max_total > 100:
            raise ValueError(f"score weights add up to {max_total}, must be <= 100")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.geo_timeout_seconds <= 0:
            raise ValueError("geo_timeout_seconds must be > 0")


def default_policy() -> ConsolidationPolicy:
    """
    Convenience factory for the default policy.
    """
    p = ConsolidationPolicy()
    p.validate()
    return p


def policy_from_env() -> ConsolidationPolicy:
    """
    Default policy with the concurrency knobs read from the environment / .env:
    CONSOLIDATION_MAX_WORKERS, GEO_TIMEOUT_SECONDS.
    """
    load_dotenv()
    p = replace(
        ConsolidationPolicy(),
        max_workers=int(os.getenv("CONSOLIDATION_MAX_WORKERS", "8")),
        geo_timeout_seconds=float(os.getenv("GEO_TIMEOUT_SECONDS", "2")),
    )
    p.validate()
    return p
