"""Value objects for the add-on health controller.

All types here are frozen dataclasses -- immutable, compared by value.
They represent identities, signals, and snapshots that have no identity
beyond their content.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .enums import ConditionStatus, ResourceKind

AGENT_DEGRADED = "AgentDegraded"
DEPLOYED_REASON = "Deployed"

_REASON_RE = re.compile(r"[A-Z][A-Za-z0-9]*")


# ---------------------------------------------------------------------------
# ResourceKey
# ---------------------------------------------------------------------------

@dataclass(frozen=True, order=True)
class ResourceKey:
    """``(namespace, name)`` identity of a resource or reconciliation target."""

    namespace: str
    name: str

    @classmethod
    def parse(cls, key: str) -> ResourceKey:
        """Split a ``namespace/name`` cache key.

        A key without a slash is cluster-scoped and gets an empty namespace.
        """
        namespace, sep, name = key.partition("/")
        if not sep:
            return cls(namespace="", name=namespace)
        return cls(namespace=namespace, name=name)

    def __str__(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"


# ---------------------------------------------------------------------------
# ChangeNotification
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ChangeNotification:
    """A watch event: some resource of *kind* changed."""

    kind: ResourceKind
    namespace: str
    name: str

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(self.namespace, self.name)


# ---------------------------------------------------------------------------
# DegradedSignal
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DegradedSignal:
    """One detected problem: a PascalCase reason token and a sentence."""

    reason: str
    message: str

    def __post_init__(self) -> None:
        if not _REASON_RE.fullmatch(self.reason):
            raise ValueError(
                f"reason must be a PascalCase token without spaces, got {self.reason!r}"
            )


# ---------------------------------------------------------------------------
# CompositeCondition
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompositeCondition:
    """The single merged health condition published to the hub."""

    status: ConditionStatus
    reason: str
    message: str
    type: str = AGENT_DEGRADED

    @property
    def degraded(self) -> bool:
        return self.status is ConditionStatus.TRUE

    def same_as(self, other: CompositeCondition | StatusCondition | None) -> bool:
        """True when *other* carries the same type, status, reason and message."""
        if other is None:
            return False
        return (
            self.type == other.type
            and self.status == other.status
            and self.reason == other.reason
            and self.message == other.message
        )


# ---------------------------------------------------------------------------
# StatusCondition / AddOnStatus
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusCondition:
    """A condition as stored on the remote status object."""

    type: str
    status: ConditionStatus
    reason: str
    message: str
    last_transition_time: float = 0.0

    @classmethod
    def from_composite(
        cls, condition: CompositeCondition, last_transition_time: float
    ) -> StatusCondition:
        return cls(
            type=condition.type,
            status=condition.status,
            reason=condition.reason,
            message=condition.message,
            last_transition_time=last_transition_time,
        )


@dataclass(frozen=True)
class AddOnStatus:
    """Snapshot of the remote status object.

    ``resource_version`` is the optimistic-concurrency token; a write made
    against a stale version is rejected by the store.
    """

    conditions: tuple[StatusCondition, ...] = ()
    resource_version: int = 0

    def find(self, condition_type: str) -> StatusCondition | None:
        """Return the condition of *condition_type*, or ``None``."""
        for cond in self.conditions:
            if cond.type == condition_type:
                return cond
        return None

    def with_conditions(self, conditions: tuple[StatusCondition, ...]) -> AddOnStatus:
        """Return a copy carrying *conditions*, keeping the version."""
        return AddOnStatus(
            conditions=conditions,
            resource_version=self.resource_version,
        )
