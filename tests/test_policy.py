from dataclasses import replace

import pytest

from consolidation.policy import ConsolidationPolicy, default_policy, policy_from_env
from parcels.models import ParcelPriority
from vehicles.models import VehicleType


def test_default_policy_values():
    p = default_policy()

    assert p.min_trust == {VehicleType.TWO_WHEELER: 80, VehicleType.FOUR_WHEELER: 70}
    assert p.sla_buffer_minutes == {VehicleType.TWO_WHEELER: 15, VehicleType.FOUR_WHEELER: 30}
    assert p.min_score == {VehicleType.TWO_WHEELER: 60, VehicleType.FOUR_WHEELER: 50}
    assert p.priority_bonus_points[ParcelPriority.URGENT] == 10


def test_missing_vehicle_type_is_rejected():
    p = replace(ConsolidationPolicy(), min_score={VehicleType.TWO_WHEELER: 60})
    with pytest.raises(ValueError, match="min_score"):
        p.validate()


def test_missing_priority_is_rejected():
    p = replace(ConsolidationPolicy(), priority_bonus_points={ParcelPriority.LOW: 2})
    with pytest.raises(ValueError, match="priority_bonus_points"):
        p.validate()


def test_weights_above_hundred_are_rejected():
    p = replace(ConsolidationPolicy(), trust_points=40)
    with pytest.raises(ValueError, match="add up to"):
        p.validate()


@pytest.mark.parametrize("overrides", [
    {"max_workers": 0},
    {"geo_timeout_seconds": 0},
    {"proximity_step_km": 0},
    {"eligible_statuses": frozenset()},
    {"min_trust": {VehicleType.TWO_WHEELER: 120, VehicleType.FOUR_WHEELER: 70}},
])
def test_invalid_values_are_rejected(overrides):
    with pytest.raises(ValueError):
        replace(ConsolidationPolicy(), **overrides).validate()


def test_policy_from_env(monkeypatch):
    monkeypatch.setenv("CONSOLIDATION_MAX_WORKERS", "3")
    monkeypatch.setenv("GEO_TIMEOUT_SECONDS", "0.5")

    p = policy_from_env()

    assert p.max_workers == 3
    assert p.geo_timeout_seconds == 0.5
    assert p.min_score[VehicleType.FOUR_WHEELER] == 50
