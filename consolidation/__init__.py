#Expose the high-level pipeline pieces:
#Eligibility filtering (hard rules)
#Impact estimation and scoring / ranking
#DecisionMaker orchestrator (the "one call" entry point)
#Recorders (audit side effect)

from .eligibility import filter_eligible_vehicles, exclusion_reasons
from .impact import ImpactEstimator
from .scoring import VehicleScorer
from .decision_maker import DecisionMaker #the main class to call to evaluate a parcel
from .recorder import DecisionRecorder, SynchronousRecorder
from .models import (
    ConsolidationDecision,
    ConstraintChecks,
    DecisionContext,
    DecisionOutcome,
    Impact,
    ScoreBreakdown,
    ScoredVehicle,
)
from .policy import ConsolidationPolicy, default_policy, policy_from_env

__all__ = [
    "filter_eligible_vehicles",
    "exclusion_reasons",
    "ImpactEstimator",
    "VehicleScorer",
    "DecisionMaker",
    "DecisionRecorder",
    "SynchronousRecorder",
    "ConsolidationDecision",
    "ConstraintChecks",
    "DecisionContext",
    "DecisionOutcome",
    "Impact",
    "ScoreBreakdown",
    "ScoredVehicle",
    "ConsolidationPolicy",
    "default_policy",
    "policy_from_env",
]
