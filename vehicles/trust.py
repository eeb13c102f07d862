"""
Purpose: Partner trust score computation.
What it does:
Turns a vehicle/partner delivery history into the 0-100 reputation signal
that the consolidation engine consumes as Vehicle.trust_score.

The engine never calls this itself; the fleet data side does, before snapshots
are handed over.
"""

SUCCESS_WEIGHT = 0.6
LATE_PENALTY = 0.3
EXCEPTION_PENALTY = 0.4


def calculate_trust_score(
    total_deliveries: int,
    successful_deliveries: int,
    late_deliveries: int,
    exception_count: int,
) -> float:
    """
    Weighted trust score from delivery outcome rates (all rates in percent):
      score = success_rate * 0.6 - late_rate * 0.3 - exception_rate * 0.4
    New partners with no deliveries start at full trust.
    """
    if min(total_deliveries, successful_deliveries, late_deliveries, exception_count) < 0:
        raise ValueError("delivery counts must be >= 0")

    if total_deliveries == 0:
        return 100.0

    success_rate = successful_deliveries / total_deliveries * 100
    late_rate = late_deliveries / total_deliveries * 100
    exception_rate = exception_count / total_deliveries * 100

    score = success_rate * SUCCESS_WEIGHT
    score -= late_rate * LATE_PENALTY
    score -= exception_rate * EXCEPTION_PENALTY

    return max(0.0, min(100.0, score))
