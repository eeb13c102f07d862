"""
Decision statistics over audit entries (what the operator dashboard shows):
total evaluations, accepted / rejected, average score, dispatches avoided.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable

import pandas as pd


def decision_stats(entries: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Aggregate audit entries into headline numbers.

    - average_score only counts decisions that carry a score (None when none do)
    - dispatches_avoided counts binding ACCEPT decisions; shadow ones are advisory
    """
    entries = list(entries)
    if not entries:
        return {
            "total_evaluations": 0,
            "accepted_decisions": 0,
            "rejected_decisions": 0,
            "shadow_decisions": 0,
            "average_score": None,
            "dispatches_avoided": 0,
        }

    df = pd.json_normalize(entries)

    outcome = df["metadata.decision.decision"]
    shadow = df.get("metadata.shadow_mode", pd.Series(False, index=df.index)).fillna(False).astype(bool)
    accepted = outcome == "ACCEPT"

    average_score = None
    if "metadata.decision.score" in df.columns:
        scores = pd.to_numeric(df["metadata.decision.score"], errors="coerce").dropna()
        if not scores.empty:
            average_score = round(float(scores.mean()), 1)

    return {
        "total_evaluations": int(len(df)),
        "accepted_decisions": int(accepted.sum()),
        "rejected_decisions": int((outcome == "REJECT").sum()),
        "shadow_decisions": int(shadow.sum()),
        "average_score": average_score,
        "dispatches_avoided": int((accepted & ~shadow).sum()),
    }
