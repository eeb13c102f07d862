"""
Purpose: Data models for the consolidation decision pipeline.
What it does:
- DecisionContext: what the evaluator sees (parcel, candidates, shadow flag)
- Impact: marginal distance/time/utilization cost of adding a parcel to a vehicle
- ScoreBreakdown / ScoredVehicle: the five scoring components and ranking entries
- ConstraintChecks: the fully populated capacity/sla/deviation/trust map
- ConsolidationDecision: ACCEPT/REJECT output with its explanation

Rule: No routing calls, no scoring logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from parcels.models import Parcel
from routing.geo_distance import DistanceStatus
from vehicles.models import Vehicle


class DecisionOutcome(str, Enum):
    ACCEPT = "ACCEPT"
    REJECT = "REJECT"


@dataclass(frozen=True)
class DecisionContext:
    parcel: Parcel
    vehicles: Tuple[Vehicle, ...] = field(default_factory=tuple)
    # Advisory only: recorded but never acted upon operationally.
    shadow_mode: bool = False

    @classmethod
    def new(cls, parcel: Parcel, vehicles: List[Vehicle], shadow_mode: bool = False) -> DecisionContext:
        return cls(parcel=parcel, vehicles=tuple(vehicles), shadow_mode=shadow_mode)


@dataclass(frozen=True)
class Impact:
    additional_km: float
    additional_minutes: float
    utilization_improvement_pct: float
    distance_status: DistanceStatus = DistanceStatus.OK

    def as_dict(self) -> Dict[str, Any]:
        return {
            "additional_km": self.additional_km,
            "additional_minutes": self.additional_minutes,
            "utilization_improvement_pct": self.utilization_improvement_pct,
            "distance_status": self.distance_status.value,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    The five independently capped scoring terms for one (parcel, vehicle) pair.
    """
    capacity_fit: float
    proximity: float
    trust: float
    type_preference: float
    priority_bonus: float

    @property
    def raw_total(self) -> float:
        return self.capacity_fit + self.proximity + self.trust + self.type_preference + self.priority_bonus

    def as_dict(self) -> Dict[str, float]:
        return {
            "capacity_fit": self.capacity_fit,
            "proximity": self.proximity,
            "trust": self.trust,
            "type_preference": self.type_preference,
            "priority_bonus": self.priority_bonus,
        }


@dataclass(frozen=True)
class ScoredVehicle:
    vehicle: Vehicle
    score: int
    impact: Impact
    breakdown: ScoreBreakdown


@dataclass(frozen=True)
class ConstraintChecks:
    capacity: bool
    sla: bool
    deviation: bool
    trust: bool

    @classmethod
    def all_failed(cls) -> ConstraintChecks:
        return cls(capacity=False, sla=False, deviation=False, trust=False)

    @property
    def all_passed(self) -> bool:
        return self.capacity and self.sla and self.deviation and self.trust

    def failed(self) -> List[str]:
        """Names of the failed constraints, in capacity/sla/deviation/trust order."""
        return [name for name, passed in self.as_dict().items() if not passed]

    def as_dict(self) -> Dict[str, bool]:
        return {
            "capacity": self.capacity,
            "sla": self.sla,
            "deviation": self.deviation,
            "trust": self.trust,
        }


@dataclass(frozen=True)
class ConsolidationDecision:
    """
    Output of one evaluation.

    ACCEPT carries vehicle_id, score and impact. REJECT carries the explanation
    and the constraint map of the best candidate (all False when there was none);
    vehicle_id/score are kept on REJECT too when a best candidate existed, so
    operators can see who was closest.
    """
    decision: DecisionOutcome
    explanation: str
    constraints: ConstraintChecks
    vehicle_id: Optional[str] = None
    score: Optional[int] = None
    impact: Optional[Impact] = None

    def __post_init__(self):
        if not self.explanation:
            raise ValueError("Every decision needs an explanation")
        if self.decision == DecisionOutcome.ACCEPT:
            if self.vehicle_id is None or self.score is None or self.impact is None:
                raise ValueError("ACCEPT decisions need vehicle_id, score and impact")
            if not self.constraints.all_passed:
                raise ValueError("ACCEPT decisions need every constraint satisfied")

    @property
    def accepted(self) -> bool:
        return self.decision == DecisionOutcome.ACCEPT

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready shape (one object per decision)."""
        payload: Dict[str, Any] = {
            "decision": self.decision.value,
            "explanation": self.explanation,
            "constraints": self.constraints.as_dict(),
        }
        if self.vehicle_id is not None:
            payload["vehicle_id"] = self.vehicle_id
        if self.score is not None:
            payload["score"] = self.score
        if self.impact is not None:
            payload["impact"] = self.impact.as_dict()
        return payload
