"""Domain layer for the add-on health controller.

Re-exports all public domain types so that consumers can write::

    from addon_health.domain import CompositeCondition, DegradedSignal, ResourceKey
"""

# -- Enumerations -------------------------------------------------------------
from .enums import ConditionStatus, KeyState, ResourceKind

# -- Value Objects ------------------------------------------------------------
from .values import (
    AGENT_DEGRADED,
    DEPLOYED_REASON,
    AddOnStatus,
    ChangeNotification,
    CompositeCondition,
    DegradedSignal,
    ResourceKey,
    StatusCondition,
)

# -- Resource Snapshots -------------------------------------------------------
from .resources import (
    DaemonSet,
    Deployment,
    Submariner,
    Subscription,
    decode,
)

# -- Domain Events ------------------------------------------------------------
from .events import (
    DomainEvent,
    ReconcileCompleted,
    ReconcileFailed,
    ReconcileSkipped,
    RecordedEvent,
)

# -- Exceptions ---------------------------------------------------------------
from .exceptions import (
    AddonHealthError,
    ResourceReadError,
    WriteConflictError,
    WriteExhaustedError,
)

__all__ = [
    # enums
    "ConditionStatus",
    "KeyState",
    "ResourceKind",
    # values
    "AGENT_DEGRADED",
    "DEPLOYED_REASON",
    "AddOnStatus",
    "ChangeNotification",
    "CompositeCondition",
    "DegradedSignal",
    "ResourceKey",
    "StatusCondition",
    # resources
    "DaemonSet",
    "Deployment",
    "Submariner",
    "Subscription",
    "decode",
    # events
    "DomainEvent",
    "ReconcileCompleted",
    "ReconcileFailed",
    "ReconcileSkipped",
    "RecordedEvent",
    # exceptions
    "AddonHealthError",
    "ResourceReadError",
    "WriteConflictError",
    "WriteExhaustedError",
]
