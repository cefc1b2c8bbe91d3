"""Level-triggered reconcile loop.

Change notifications are mapped to reconciliation keys and queued; a bounded
pool of worker threads drains the queue.  Each key moves through a small
state machine::

    IDLE --notify--> QUEUED --worker--> RUNNING --done--> IDLE
                                           |
                                           +--notify while running--> dirty
                                              (re-QUEUED on completion)

Repeated notifications for a queued key collapse into one pending pass, and
a key is never processed by two workers at once.  A pass that raises is
retried after an exponential backoff; a successful pass resets the backoff.
Each key holds at most one pending retry, and a fresh notification replaces
it with an immediate pass.

Classes
-------
ReconcileLoop
    Work queue, per-key state records, and worker threads.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from addon_health.domain.enums import KeyState, ResourceKind
from addon_health.domain.events import ReconcileFailed
from addon_health.domain.values import ChangeNotification, ResourceKey
from addon_health.infrastructure.config import ControllerConfig
from addon_health.infrastructure.event_bus import EventBus

logger = logging.getLogger(__name__)

SyncFn = Callable[[ResourceKey], Any]


@dataclass
class _KeyRecord:
    state: KeyState = KeyState.IDLE
    dirty: bool = False
    failures: int = 0
    retry_at: float | None = None


class ReconcileLoop:
    """Deduplicating work queue with per-key mutual exclusion.

    Parameters
    ----------
    sync:
        Callable running one pass for a key (usually a ``Reconciler``).
    config:
        Supplies the worker count, the backoff bounds, and the well-known
        target key that non-configuration notifications map onto.
    event_bus:
        Optional bus receiving ``ReconcileFailed`` events.
    """

    def __init__(
        self,
        sync: SyncFn,
        config: ControllerConfig,
        event_bus: EventBus | None = None,
    ) -> None:
        self._sync = sync
        self._config = config
        self._event_bus = event_bus
        self._cond = threading.Condition()
        self._records: dict[ResourceKey, _KeyRecord] = {}
        self._ready: deque[ResourceKey] = deque()
        self._delayed: list[tuple[float, int, ResourceKey]] = []
        self._seq = itertools.count()
        self._workers: list[threading.Thread] = []
        self._stopping = False

    # -- notifications ------------------------------------------------------

    def key_for(self, notification: ChangeNotification) -> ResourceKey:
        """Map a watch event onto the key it affects."""
        if notification.kind is ResourceKind.SUBMARINER:
            return notification.key
        return self._config.target_key

    def notify(self, notification: ChangeNotification) -> None:
        """Queue the key affected by *notification*."""
        self.enqueue(self.key_for(notification))

    def enqueue(self, key: ResourceKey) -> None:
        """Request a pass for *key*; no-op if one is already pending."""
        with self._cond:
            self._enqueue_locked(key)

    def _enqueue_locked(self, key: ResourceKey) -> None:
        record = self._records.setdefault(key, _KeyRecord())
        if record.state is KeyState.IDLE:
            self._cancel_retry_locked(key, record)
            record.state = KeyState.QUEUED
            self._ready.append(key)
            self._cond.notify_all()
        elif record.state is KeyState.RUNNING:
            record.dirty = True

    # -- retries ------------------------------------------------------------

    def _schedule_retry_locked(self, key: ResourceKey, record: _KeyRecord, delay: float) -> None:
        # At most one pending retry per key.
        self._cancel_retry_locked(key, record)
        record.retry_at = time.monotonic() + delay
        heapq.heappush(self._delayed, (record.retry_at, next(self._seq), key))

    def _cancel_retry_locked(self, key: ResourceKey, record: _KeyRecord) -> None:
        if record.retry_at is None:
            return
        record.retry_at = None
        self._delayed = [entry for entry in self._delayed if entry[2] != key]
        heapq.heapify(self._delayed)

    def pending_retries(self, key: ResourceKey) -> int:
        """Number of scheduled backoff retries for *key* (0 or 1)."""
        with self._cond:
            return sum(1 for entry in self._delayed if entry[2] == key)

    # -- introspection ------------------------------------------------------

    def state_of(self, key: ResourceKey) -> KeyState:
        with self._cond:
            record = self._records.get(key)
            return record.state if record is not None else KeyState.IDLE

    def failures_of(self, key: ResourceKey) -> int:
        with self._cond:
            record = self._records.get(key)
            return record.failures if record is not None else 0

    def _idle_locked(self) -> bool:
        if self._ready or self._delayed:
            return False
        return all(r.state is KeyState.IDLE for r in self._records.values())

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until nothing is queued, running, or waiting on backoff."""
        with self._cond:
            return self._cond.wait_for(self._idle_locked, timeout)

    # -- dequeue ------------------------------------------------------------

    def _promote_due_locked(self) -> None:
        now = time.monotonic()
        while self._delayed and self._delayed[0][0] <= now:
            due, _, key = heapq.heappop(self._delayed)
            record = self._records.get(key)
            if record is None or record.retry_at != due:
                continue
            record.retry_at = None
            self._enqueue_locked(key)

    def _take_locked(self) -> ResourceKey | None:
        if not self._ready:
            return None
        key = self._ready.popleft()
        self._records[key].state = KeyState.RUNNING
        return key

    def _next_key(self) -> ResourceKey | None:
        """Block until a key is ready or the loop stops."""
        with self._cond:
            while not self._stopping:
                self._promote_due_locked()
                key = self._take_locked()
                if key is not None:
                    return key
                wait = None
                if self._delayed:
                    wait = max(0.0, self._delayed[0][0] - time.monotonic())
                self._cond.wait(wait)
            return None

    # -- processing ---------------------------------------------------------

    def _backoff(self, failures: int) -> float:
        delay = self._config.retry_base_delay * (2 ** (failures - 1))
        return min(delay, self._config.retry_max_delay)

    def _process(self, key: ResourceKey) -> None:
        error: Exception | None = None
        try:
            self._sync(key)
        except Exception as exc:
            error = exc
            logger.exception("ReconcileLoop: pass for %s failed", key)

        with self._cond:
            record = self._records[key]
            if record.dirty:
                record.dirty = False
                record.state = KeyState.QUEUED
                self._ready.append(key)
            else:
                record.state = KeyState.IDLE

            retry_in = 0.0
            if error is None:
                record.failures = 0
            else:
                record.failures += 1
                if record.state is KeyState.IDLE:
                    retry_in = self._backoff(record.failures)
                    self._schedule_retry_locked(key, record, retry_in)
            failures = record.failures
            self._cond.notify_all()

        if error is not None and self._event_bus is not None:
            self._event_bus.publish(
                ReconcileFailed(
                    source_id=self._config.cluster_name,
                    key=str(key),
                    error=f"{type(error).__name__}: {error}",
                    failures=failures,
                    retry_in=retry_in,
                )
            )

    def process_next(self) -> bool:
        """Run one ready pass on the calling thread. Returns ``False`` if none."""
        with self._cond:
            self._promote_due_locked()
            key = self._take_locked()
        if key is None:
            return False
        self._process(key)
        return True

    def run_until_idle(self, max_passes: int = 1000) -> int:
        """Drain ready and due keys on the calling thread; return passes run."""
        passes = 0
        while passes < max_passes and self.process_next():
            passes += 1
        return passes

    # -- lifecycle ----------------------------------------------------------

    def _worker(self) -> None:
        while True:
            key = self._next_key()
            if key is None:
                return
            self._process(key)

    def start(self) -> None:
        """Spawn ``config.workers`` worker threads."""
        with self._cond:
            if self._workers:
                raise RuntimeError("ReconcileLoop already started")
            self._stopping = False
            for i in range(self._config.workers):
                thread = threading.Thread(
                    target=self._worker, name=f"reconcile-worker-{i}", daemon=True
                )
                self._workers.append(thread)
        for thread in self._workers:
            thread.start()
        logger.info("ReconcileLoop: started %d worker(s)", len(self._workers))

    def stop(self, timeout: float | None = None) -> None:
        """Stop the workers; in-flight passes finish, queued keys are dropped."""
        with self._cond:
            self._stopping = True
            self._cond.notify_all()
            workers, self._workers = self._workers, []
        for thread in workers:
            thread.join(timeout)
        with self._cond:
            dropped = len(self._ready) + len(self._delayed)
            self._ready.clear()
            self._delayed.clear()
            # Records of passes still in flight survive; everything else resets.
            self._records = {
                key: record
                for key, record in self._records.items()
                if record.state is KeyState.RUNNING
            }
            self._cond.notify_all()
        logger.info("ReconcileLoop: stopped (%d pending key(s) dropped)", dropped)
