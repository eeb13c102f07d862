"""
Audit package: durable record of every consolidation decision.

Public API:
- JsonlAuditStore, InMemoryAuditStore, AuditStoreError
- build_decision_entry
- decision_stats
"""
from .store import (
    AuditStoreError,
    InMemoryAuditStore,
    JsonlAuditStore,
    build_decision_entry,
)
from .stats import decision_stats

__all__ = [
    "AuditStoreError",
    "InMemoryAuditStore",
    "JsonlAuditStore",
    "build_decision_entry",
    "decision_stats",
]
