"""Remote status object store.

``StatusStore`` is the transport contract for the hub-side status object:
``get_status`` reads the current snapshot and ``replace_status`` writes a new
one under optimistic concurrency -- the write carries the
``resource_version`` it was derived from and is rejected with
``WriteConflictError`` when the stored version has moved on.

``InMemoryStatusStore`` implements the contract with a versioned dict and
counts reads and writes, which is what the publisher's idempotence is
measured against.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from addon_health.domain.exceptions import WriteConflictError
from addon_health.domain.values import AddOnStatus

logger = logging.getLogger(__name__)


class StatusStore(Protocol):
    """Versioned get/replace access to per-cluster status objects."""

    def get_status(self, cluster: str) -> AddOnStatus:
        ...

    def replace_status(self, cluster: str, status: AddOnStatus) -> AddOnStatus:
        ...


class InMemoryStatusStore:
    """Thread-safe versioned status store.

    A cluster that was never written reads as an empty status at version 0.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._statuses: dict[str, AddOnStatus] = {}
        self.read_count = 0
        self.write_count = 0

    def get_status(self, cluster: str) -> AddOnStatus:
        with self._lock:
            self.read_count += 1
            return self._statuses.get(cluster, AddOnStatus())

    def replace_status(self, cluster: str, status: AddOnStatus) -> AddOnStatus:
        """Store *status* if its version matches; return it at the new version."""
        with self._lock:
            current = self._statuses.get(cluster, AddOnStatus())
            if status.resource_version != current.resource_version:
                logger.debug(
                    "InMemoryStatusStore: conflict on %s (have %d, got %d)",
                    cluster,
                    current.resource_version,
                    status.resource_version,
                )
                raise WriteConflictError(
                    f"status of {cluster} was modified concurrently",
                    cluster=cluster,
                    expected_version=status.resource_version,
                    actual_version=current.resource_version,
                )
            stored = AddOnStatus(
                conditions=status.conditions,
                resource_version=current.resource_version + 1,
            )
            self._statuses[cluster] = stored
            self.write_count += 1
            return stored
