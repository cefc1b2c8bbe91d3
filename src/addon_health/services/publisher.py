"""Status publishing with optimistic read-modify-write.

The remote status object is never mutated in place.  A *merge function*
``(AddOnStatus) -> tuple[StatusCondition, ...]`` computes the new condition
list from whatever is currently stored; on a write conflict the whole
read-merge-write cycle is repeated against a fresh read.

Functions
---------
set_condition
    Pure merge of one condition into a condition list.
update_condition_fn
    Build the merge function for one composite condition.

Classes
-------
StatusPublisher
    Retrying writer that skips no-op writes and records an event on change.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

from addon_health.domain.exceptions import WriteConflictError, WriteExhaustedError
from addon_health.domain.values import AddOnStatus, CompositeCondition, StatusCondition
from addon_health.infrastructure.event_bus import EventRecorder
from addon_health.infrastructure.status_store import StatusStore

logger = logging.getLogger(__name__)

STATUS_UPDATED_REASON = "ManagedClusterAddOnStatusUpdated"

MergeFn = Callable[[AddOnStatus], tuple[StatusCondition, ...]]


# ===================================================================== #
#  Merge functions                                                       #
# ===================================================================== #


def set_condition(
    conditions: Sequence[StatusCondition],
    condition: CompositeCondition,
    now: float,
) -> tuple[StatusCondition, ...]:
    """Return *conditions* with *condition* set, replacing the same type.

    The transition time is kept while the status is unchanged and stamped
    with *now* when it flips or the condition is new.
    """
    merged: list[StatusCondition] = []
    found = False
    for existing in conditions:
        if existing.type != condition.type:
            merged.append(existing)
            continue
        found = True
        if condition.same_as(existing):
            merged.append(existing)
            continue
        transition = (
            existing.last_transition_time
            if existing.status == condition.status
            else now
        )
        merged.append(StatusCondition.from_composite(condition, transition))
    if not found:
        merged.append(StatusCondition.from_composite(condition, now))
    return tuple(merged)


def update_condition_fn(
    condition: CompositeCondition,
    clock: Callable[[], float] = time.time,
) -> MergeFn:
    """Merge function setting *condition* on whatever status is current."""

    def merge(status: AddOnStatus) -> tuple[StatusCondition, ...]:
        return set_condition(status.conditions, condition, clock())

    return merge


def _describe(conditions: Sequence[StatusCondition]) -> str:
    return "; ".join(
        f"{c.type}={c.status.value} ({c.reason}): {c.message!r}" for c in conditions
    )


# ===================================================================== #
#  Status Publisher                                                      #
# ===================================================================== #


class StatusPublisher:
    """Apply merge functions to the remote status object.

    Parameters
    ----------
    store:
        The remote status store.
    recorder:
        Optional event sink; receives one event per actual change.
    max_attempts:
        Read-modify-write attempts before ``WriteExhaustedError``.
    timeout:
        Wall-clock bound in seconds around the retries.
    conflict_delay:
        Sleep in seconds between attempts after a conflict.
    """

    def __init__(
        self,
        store: StatusStore,
        recorder: EventRecorder | None = None,
        max_attempts: int = 5,
        timeout: float = 30.0,
        conflict_delay: float = 0.01,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        self._store = store
        self._recorder = recorder
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._conflict_delay = conflict_delay
        self._clock = clock

    def update_status(self, cluster: str, merge_fn: MergeFn) -> tuple[AddOnStatus, bool]:
        """Read, merge, and write the status of *cluster*.

        Returns
        -------
        tuple[AddOnStatus, bool]
            The stored status and whether a write happened.

        Raises
        ------
        WriteExhaustedError
            When every attempt conflicted or the timeout elapsed.
        """
        deadline = time.monotonic() + self._timeout
        last_conflict: WriteConflictError | None = None

        for attempt in range(1, self._max_attempts + 1):
            current = self._store.get_status(cluster)
            merged = merge_fn(current)
            if merged == current.conditions:
                logger.debug("StatusPublisher: %s already up to date", cluster)
                return current, False

            try:
                updated = self._store.replace_status(cluster, current.with_conditions(merged))
            except WriteConflictError as exc:
                last_conflict = exc
                logger.warning(
                    "StatusPublisher: conflict updating %s (attempt %d/%d)",
                    cluster,
                    attempt,
                    self._max_attempts,
                )
                if time.monotonic() >= deadline:
                    break
                if self._conflict_delay > 0 and attempt < self._max_attempts:
                    time.sleep(self._conflict_delay)
                continue

            logger.info("StatusPublisher: updated %s: %s", cluster, _describe(merged))
            if self._recorder is not None:
                self._recorder.record_event(
                    STATUS_UPDATED_REASON,
                    f"Updated status conditions: {_describe(updated.conditions)}",
                )
            return updated, True

        raise WriteExhaustedError(
            f"giving up on status of {cluster} after {attempt} attempt(s)",
            cluster=cluster,
            attempts=attempt,
        ) from last_conflict

    def publish(self, cluster: str, condition: CompositeCondition) -> tuple[AddOnStatus, bool]:
        """Set *condition* on the status of *cluster*."""
        return self.update_status(cluster, update_condition_fn(condition, self._clock))
