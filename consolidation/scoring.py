#Purpose: Ranking/selection model (the "who is best" layer).
#Takes vehicles (already eligible) + their impact (extra km / minutes / utilization)
#Produces:
#a bounded 0-100 score per vehicle and the ordered candidate list
#
#Score = round(capacity fit + proximity + trust + type preference + priority bonus)
#  capacity fit     min(weight%, volume%) / 100 * 30    (parcel share of spare capacity)
#  proximity        max(0, 25 - (extra_km / 10) * 5)
#  trust            trust_score / 100 * 20
#  type preference  15 four-wheeler, 5 two-wheeler
#  priority bonus   low 2, normal 5, high 8, urgent 10
#
#Tie-breaking (deterministic): higher score, then higher trust score, then lower vehicle id.

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
import logging
import math
import time
from typing import List, Optional, Sequence

from parcels.models import Parcel
from vehicles.models import Vehicle

from .impact import ImpactEstimator
from .models import Impact, ScoreBreakdown, ScoredVehicle
from .policy import ConsolidationPolicy, default_policy

logger = logging.getLogger(__name__)


class VehicleScorer:

    def __init__(self, impact_estimator: Optional[ImpactEstimator] = None, policy: Optional[ConsolidationPolicy] = None):
        self.impact_estimator = impact_estimator or ImpactEstimator()
        self.policy = policy or default_policy()

    def breakdown(self, parcel: Parcel, vehicle: Vehicle, impact: Optional[Impact] = None) -> ScoreBreakdown:
        """
        The five capped components. Computes the impact when it is not supplied.
        """
        policy = self.policy
        if impact is None:
            impact = self.impact_estimator.estimate(parcel, vehicle)

        weight_pct = _fill_percentage(parcel.weight, vehicle.spare_weight)
        volume_pct = _fill_percentage(parcel.volume, vehicle.spare_volume)
        capacity_fit = min(weight_pct, volume_pct) / 100 * policy.capacity_fit_points

        detour_km = max(0.0, impact.additional_km)
        proximity = policy.proximity_points - (detour_km / policy.proximity_step_km) * policy.proximity_penalty_points
        proximity = _clamp(proximity, 0, policy.proximity_points)

        trust = _clamp(vehicle.trust_score / 100 * policy.trust_points, 0, policy.trust_points)

        return ScoreBreakdown(
            capacity_fit=_clamp(capacity_fit, 0, policy.capacity_fit_points),
            proximity=proximity,
            trust=trust,
            type_preference=policy.type_preference_points[vehicle.type],
            priority_bonus=policy.priority_bonus_points[parcel.priority],
        )

    def score(self, parcel: Parcel, vehicle: Vehicle, impact: Optional[Impact] = None) -> int:
        return total_score(self.breakdown(parcel, vehicle, impact))

    def rank(self, parcel: Parcel, vehicles: Sequence[Vehicle]) -> List[ScoredVehicle]:
        """
        Score every vehicle and return them best first.
        Impacts are estimated once per vehicle, fanned out over a bounded pool.
        """
        if not vehicles:
            return []

        impacts = self._estimate_impacts(parcel, vehicles)

        ranked: List[ScoredVehicle] = []
        for vehicle, impact in zip(vehicles, impacts):
            breakdown = self.breakdown(parcel, vehicle, impact)
            score = total_score(breakdown)
            logger.debug(f"Vehicle {vehicle.registration_number} scored {score} for parcel {parcel.reference}: {breakdown.as_dict()}")
            ranked.append(ScoredVehicle(vehicle=vehicle, score=score, impact=impact, breakdown=breakdown))

        ranked.sort(
            key=lambda candidate: (
                -candidate.score,
                -candidate.vehicle.trust_score,
                candidate.vehicle.id,
            )
        )
        return ranked

    def _estimate_impacts(self, parcel: Parcel, vehicles: Sequence[Vehicle]) -> List[Impact]:
        """
        One impact per vehicle, in input order. Every lookup goes through the pool,
        a single vehicle included, so geo_timeout_seconds always applies.

        A lookup that misses the deadline is replaced by the great-circle estimate.
        Its worker thread is not interrupted: it keeps running until the collaborator
        returns, and pool threads are joined at interpreter exit.
        """
        workers = min(self.policy.max_workers, len(vehicles))

        # Queued lookups get their own timeout slot, so the deadline grows with the number of rounds.
        rounds = math.ceil(len(vehicles) / workers)
        deadline = time.monotonic() + self.policy.geo_timeout_seconds * rounds

        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="impact")
        try:
            futures = [executor.submit(self.impact_estimator.estimate, parcel, vehicle) for vehicle in vehicles]

            impacts: List[Impact] = []
            for vehicle, future in zip(vehicles, futures):
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    impacts.append(future.result(timeout=remaining))
                except FuturesTimeout:
                    logger.warning(
                        f"Impact estimate for vehicle {vehicle.registration_number} timed out, "
                        f"using great-circle estimate"
                    )
                    impacts.append(self.impact_estimator.fallback_estimate(parcel, vehicle))
            return impacts
        finally:
            # Do not wait on lookups that already timed out.
            executor.shutdown(wait=False, cancel_futures=True)


def total_score(breakdown: ScoreBreakdown) -> int:
    """Sum of the components, rounded half up and kept within 0-100."""
    return int(_clamp(math.floor(breakdown.raw_total + 0.5), 0, 100))


def _fill_percentage(amount: float, spare: float) -> float:
    # share of the spare capacity the parcel takes; a full axis counts as saturated
    if spare <= 0:
        return 100.0
    return min(100.0, amount / spare * 100)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
