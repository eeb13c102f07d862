"""
Audit log for consolidation decisions.

Every decision the engine makes (ACCEPT or REJECT, binding or shadow) ends up
here as one entry:

    {
        "id": "...",
        "action": "consolidation_evaluated",
        "actor_id": "system",
        "actor_type": "system",
        "parcel_id": "...",
        "metadata": {"decision": {...}, "shadow_mode": false, "timestamp": "..."},
        "description": "Consolidation decision: ACCEPT - Vehicle ... selected ...",
        "created_at": "..."
    }

Two stores share the append/read_entries interface:
- JsonlAuditStore: append-only JSONL file, one entry per line
- InMemoryAuditStore: process-local list (tests, simulations)
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import os
from pathlib import Path
import threading
from typing import Any, Dict, List, Optional
import uuid

from dotenv import load_dotenv

load_dotenv()
DEFAULT_AUDIT_LOG_PATH = os.getenv("AUDIT_LOG_PATH", "data/logs/consolidation_audit.jsonl")

CONSOLIDATION_EVALUATED = "consolidation_evaluated"
SYSTEM_ACTOR = "system"


class AuditStoreError(Exception):
    """Raised when an audit entry cannot be written or read back."""
    pass


def build_decision_entry(
    parcel_id: str,
    decision_payload: Dict[str, Any],
    shadow_mode: bool,
    timestamp: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Wrap a decision payload (ConsolidationDecision.to_dict()) into an audit entry.
    """
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "id": str(uuid.uuid4()),
        "action": CONSOLIDATION_EVALUATED,
        "actor_id": SYSTEM_ACTOR,
        "actor_type": SYSTEM_ACTOR,
        "parcel_id": parcel_id,
        "metadata": {
            "decision": decision_payload,
            "shadow_mode": shadow_mode,
            "timestamp": timestamp.isoformat(),
        },
        "description": f"Consolidation decision: {decision_payload['decision']} - {decision_payload['explanation']}",
        "created_at": timestamp.isoformat(),
    }


class InMemoryAuditStore:

    def __init__(self):
        self._entries: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def append(self, entry: Dict[str, Any]) -> None:
        with self._lock:
            self._entries.append(entry)

    def read_entries(self, parcel_id: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        with self._lock:
            entries = list(self._entries)
        return _newest_first(entries, parcel_id, limit)


class JsonlAuditStore:
    """
    Append-only JSONL audit log. Never rewrites existing lines.
    """

    def __init__(self, path: str | Path = DEFAULT_AUDIT_LOG_PATH):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, entry: Dict[str, Any]) -> None:
        line = json.dumps(entry, sort_keys=True)
        try:
            with self._lock:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("a", encoding="utf-8") as f:
                    f.write(line + "\n")
        except OSError as exc:
            raise AuditStoreError(f"Cannot append to audit log {self.path}: {exc}") from exc

    def read_entries(self, parcel_id: Optional[str] = None, limit: int = 100) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []

        entries = []
        try:
            with self._lock, self.path.open("r", encoding="utf-8") as f:
                for line_number, line in enumerate(f, 1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(json.loads(line))
                    except json.JSONDecodeError as exc:
                        raise AuditStoreError(f"Corrupt audit log line {line_number} in {self.path}: {exc}") from exc
        except OSError as exc:
            raise AuditStoreError(f"Cannot read audit log {self.path}: {exc}") from exc

        return _newest_first(entries, parcel_id, limit)


def _newest_first(entries: List[Dict[str, Any]], parcel_id: Optional[str], limit: int) -> List[Dict[str, Any]]:
    if parcel_id is not None:
        entries = [entry for entry in entries if entry.get("parcel_id") == parcel_id]
    # append order is chronological, so reversing gives newest first
    entries = list(reversed(entries))
    if limit is not None and limit >= 0:
        entries = entries[:limit]
    return entries
