#Purpose: Non-routing hard eligibility filtering (rule gates).
#Builds the candidate set before impact estimation and scoring.
#A vehicle stays a candidate only if:
#it has spare weight and volume for the parcel
#its partner trust score clears the per-type minimum
#it is already en route (DISPATCHED / IN_TRANSIT)
#its operator allows consolidation
#
#Output: "rule-qualified vehicles" (still not ranked), in input order.

import logging
from typing import List, Optional, Sequence

from parcels.models import Parcel
from vehicles.models import Vehicle

from .policy import ConsolidationPolicy, default_policy

logger = logging.getLogger(__name__)


def check_capacity(parcel: Parcel, vehicle: Vehicle) -> bool:
    return vehicle.spare_weight >= parcel.weight and vehicle.spare_volume >= parcel.volume


def check_trust(vehicle: Vehicle, policy: ConsolidationPolicy) -> bool:
    return vehicle.trust_score >= policy.min_trust[vehicle.type]


def exclusion_reasons(parcel: Parcel, vehicle: Vehicle, policy: Optional[ConsolidationPolicy] = None) -> List[str]:
    """
    Names of the hard rules this vehicle fails for the parcel (empty when eligible).
    """
    policy = policy or default_policy()
    reasons = []

    if not check_capacity(parcel, vehicle):
        reasons.append("capacity")

    if not check_trust(vehicle, policy):
        reasons.append("trust")

    if vehicle.status not in policy.eligible_statuses:
        reasons.append("status")

    if not vehicle.allow_consolidation:
        reasons.append("opt_out")

    return reasons


def filter_eligible_vehicles(
    parcel: Parcel,
    vehicles: Sequence[Vehicle],
    policy: Optional[ConsolidationPolicy] = None,
) -> List[Vehicle]:
    """
    Returns only the vehicles that pass every hard rule, preserving input order.
    Pure: the inputs are not touched.
    """
    policy = policy or default_policy()
    eligible = []

    for vehicle in vehicles:
        reasons = exclusion_reasons(parcel, vehicle, policy)
        if reasons:
            logger.debug(f"Vehicle {vehicle.registration_number} excluded for parcel {parcel.reference}: {', '.join(reasons)}")
            continue

        eligible.append(vehicle)

    return eligible
