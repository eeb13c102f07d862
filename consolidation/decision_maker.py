"""
Purpose: Orchestrator / decision pipeline (the "glue").
What it does:
Accepts a parcel that missed its vehicle plus the vehicles visible to the evaluator,
filters them on hard rules, ranks the survivors, re-validates the best one and
returns a single explainable ACCEPT/REJECT decision. Every decision is handed to
the recorder, shadow-mode ones included.

Evaluation is atomic and stateless: nothing is kept between calls.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
from typing import Callable, Optional, Sequence

from parcels.models import Parcel
from vehicles.models import Vehicle

from .eligibility import check_capacity, check_trust, filter_eligible_vehicles
from .impact import ImpactEstimator
from .models import (
    ConsolidationDecision,
    ConstraintChecks,
    DecisionContext,
    DecisionOutcome,
    ScoredVehicle,
)
from .policy import ConsolidationPolicy, default_policy
from .scoring import VehicleScorer

logger = logging.getLogger(__name__)

NO_ELIGIBLE_EXPLANATION = (
    "No vehicle meets hard constraints (capacity, trust, en-route status or consolidation opt-in)"
)


class DecisionMaker:
    """
    Decides whether a parcel can be consolidated onto a vehicle already in motion.
    """
    def __init__(
        self,
        geo_service=None,
        recorder=None,
        policy: Optional[ConsolidationPolicy] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.policy = policy or default_policy()
        self.policy.validate()
        self.scorer = VehicleScorer(ImpactEstimator(geo_service), self.policy)
        self.recorder = recorder
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def evaluate_parcel(self, parcel: Parcel, vehicles: Sequence[Vehicle], shadow_mode: bool = False) -> ConsolidationDecision:
        return self.evaluate(DecisionContext.new(parcel, list(vehicles), shadow_mode))

    def evaluate(self, context: DecisionContext) -> ConsolidationDecision:
        parcel = context.parcel
        logger.info(
            f"Evaluating consolidation for parcel {parcel.reference} "
            f"against {len(context.vehicles)} vehicles (shadow={context.shadow_mode})"
        )

        # 1. Hard rules
        eligible = filter_eligible_vehicles(parcel, context.vehicles, self.policy)

        if not eligible:
            decision = ConsolidationDecision(
                decision=DecisionOutcome.REJECT,
                explanation=NO_ELIGIBLE_EXPLANATION,
                constraints=ConstraintChecks.all_failed(),
            )
        else:
            # 2. Rank, 3-6. re-validate the best candidate only
            ranked = self.scorer.rank(parcel, eligible)
            decision = self.decide(parcel, ranked[0])

        logger.info(f"Parcel {parcel.reference}: {decision.decision.value} - {decision.explanation}")

        # 7. Record regardless of outcome
        self._record(parcel, decision, context.shadow_mode)
        return decision

    def decide(self, parcel: Parcel, best: ScoredVehicle) -> ConsolidationDecision:
        """
        Final constraint checks on the top-ranked candidate plus the score threshold.
        """
        vehicle, score, impact = best.vehicle, best.score, best.impact

        constraints = ConstraintChecks(
            capacity=check_capacity(parcel, vehicle),
            sla=self.check_sla(parcel, best),
            deviation=check_deviation(best),
            trust=check_trust(vehicle, self.policy),
        )

        min_score = self.policy.min_score[vehicle.type]
        score_ok = score >= min_score

        if constraints.all_passed and score_ok:
            return ConsolidationDecision(
                decision=DecisionOutcome.ACCEPT,
                vehicle_id=vehicle.id,
                score=score,
                explanation=(
                    f"Vehicle {vehicle.registration_number} selected with score {score}. "
                    f"Impact: +{impact.additional_km:.1f}km, +{impact.additional_minutes:.0f}min, "
                    f"{impact.utilization_improvement_pct:+.1f}% utilization."
                ),
                constraints=constraints,
                impact=impact,
            )

        reasons = []
        if not constraints.all_passed:
            reasons.append(f"Failed constraints: {', '.join(constraints.failed())}")
        if not score_ok:
            reasons.append(f"Score {score} below threshold {min_score} (short by {min_score - score})")

        return ConsolidationDecision(
            decision=DecisionOutcome.REJECT,
            vehicle_id=vehicle.id,
            score=score,
            explanation=f"Best candidate {vehicle.registration_number} rejected. {'. '.join(reasons)}.",
            constraints=constraints,
        )

    def check_sla(self, parcel: Parcel, best: ScoredVehicle) -> bool:
        """
        now + travel minutes + per-type buffer must land on or before the deadline.
        """
        buffer_minutes = self.policy.sla_buffer_minutes[best.vehicle.type]
        estimated_delivery = self.clock() + timedelta(minutes=best.impact.additional_minutes + buffer_minutes)
        return estimated_delivery <= parcel.sla_deadline

    def _record(self, parcel: Parcel, decision: ConsolidationDecision, shadow_mode: bool) -> None:
        if self.recorder is None:
            return
        try:
            self.recorder.record(parcel.id, decision, shadow_mode)
        except Exception:
            logger.exception(f"Recorder failed for parcel {parcel.reference}; decision stands")


def check_deviation(best: ScoredVehicle) -> bool:
    vehicle, impact = best.vehicle, best.impact
    return (
        impact.additional_km <= vehicle.max_deviation_km
        and impact.additional_minutes <= vehicle.max_deviation_minutes
    )
