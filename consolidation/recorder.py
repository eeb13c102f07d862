"""
Purpose: Adapter between the decision maker and the audit store.
What it does:
Hands every decision (with its shadow-mode flag) to the audit store without
ever slowing down or undoing the decision itself.

- DecisionRecorder: fire-and-forget. record() enqueues and returns at once;
  a background worker writes to the store with retry/backoff.
- SynchronousRecorder: writes inline (scripts, tests), same error policy.

Recording failures are logged, never raised: a decision that was already
returned still governs dispatch.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import queue
import threading
import time
from typing import Callable, Optional

from audit.store import build_decision_entry

from .models import ConsolidationDecision

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SynchronousRecorder:

    def __init__(self, store, clock: Clock = _utc_now):
        self.store = store
        self.clock = clock

    def record(self, parcel_id: str, decision: ConsolidationDecision, shadow_mode: bool) -> bool:
        entry = build_decision_entry(parcel_id, decision.to_dict(), shadow_mode, self.clock())
        try:
            self.store.append(entry)
        except Exception:
            logger.exception(f"Failed to record consolidation decision for parcel {parcel_id}")
            return False
        return True


class DecisionRecorder:
    """
    Background audit writer.

    record() returns True once the entry is queued (the "ack"), False when the
    queue is full or the recorder is closed. The entry is stamped when queued,
    not when written.
    """

    def __init__(
        self,
        store,
        *,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
        max_queue_size: int = 1000,
        clock: Clock = _utc_now,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if backoff_seconds < 0:
            raise ValueError("backoff_seconds must be >= 0")

        self.store = store
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.clock = clock

        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._pending = 0
        self._pending_changed = threading.Condition()
        self._closed = False
        self._worker = threading.Thread(target=self._run, name="decision-recorder", daemon=True)
        self._worker.start()

    def record(self, parcel_id: str, decision: ConsolidationDecision, shadow_mode: bool) -> bool:
        entry = build_decision_entry(parcel_id, decision.to_dict(), shadow_mode, self.clock())

        # Checked and enqueued under the lock so nothing lands behind the stop sentinel.
        with self._pending_changed:
            if self._closed:
                logger.error(f"Recorder closed, dropping consolidation decision for parcel {parcel_id}")
                return False
            try:
                self._queue.put_nowait(entry)
            except queue.Full:
                logger.error(f"Audit queue full, dropping consolidation decision for parcel {parcel_id}")
                return False
            self._pending += 1
        return True

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every queued entry has been written (or given up on).
        Returns False if the timeout expired first.
        """
        with self._pending_changed:
            return self._pending_changed.wait_for(lambda: self._pending == 0, timeout=timeout)

    def close(self, timeout: Optional[float] = 5.0) -> None:
        self.flush(timeout)
        with self._pending_changed:
            if self._closed:
                return
            self._closed = True
        self._queue.put(None)
        self._worker.join(timeout)

    def __enter__(self) -> DecisionRecorder:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -------------------------
    # Worker
    # -------------------------

    def _run(self) -> None:
        while True:
            entry = self._queue.get()
            if entry is None:
                return
            try:
                self._write_with_retry(entry)
            finally:
                self._mark_done()

    def _write_with_retry(self, entry) -> None:
        for attempt in range(1, self.max_attempts + 1):
            try:
                self.store.append(entry)
                return
            except Exception as exc:
                if attempt == self.max_attempts:
                    logger.error(
                        f"Giving up recording decision for parcel {entry['parcel_id']} "
                        f"after {attempt} attempts: {exc}"
                    )
                    return
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    f"Recording decision for parcel {entry['parcel_id']} failed "
                    f"(attempt {attempt}/{self.max_attempts}), retrying in {delay:.2f}s: {exc}"
                )
                time.sleep(delay)

    def _mark_done(self) -> None:
        with self._pending_changed:
            self._pending -= 1
            self._pending_changed.notify_all()
