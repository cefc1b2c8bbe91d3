"""Domain enumerations for the add-on health controller.

These enums capture the fixed vocabularies used across the domain layer:
watched resource kinds, condition statuses, and the per-key scheduling
states of the reconcile loop.
"""

from enum import Enum


class ResourceKind(Enum):
    """Kinds of resources observed on the managed cluster."""

    SUBSCRIPTION = "Subscription"
    DEPLOYMENT = "Deployment"
    DAEMONSET = "DaemonSet"
    SUBMARINER = "Submariner"  # the custom configuration resource


class ConditionStatus(Enum):
    """Boolean-as-enum status of a published condition."""

    TRUE = "True"
    FALSE = "False"


class KeyState(Enum):
    """Finite-state-machine states of a reconciliation key."""

    IDLE = "idle"
    QUEUED = "queued"
    RUNNING = "running"
