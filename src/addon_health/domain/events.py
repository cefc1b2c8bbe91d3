"""Domain events for the add-on health controller.

Every event is a frozen dataclass inheriting from ``DomainEvent``.  The
reconciler and loop emit events; listeners (event stores, log shippers,
tests) react.  Events are for observability only and never drive control
flow.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from .values import CompositeCondition

# ---------------------------------------------------------------------------
# Base event
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""

    timestamp: float = field(default_factory=time.time)
    source_id: str = ""


# ---------------------------------------------------------------------------
# Recorder events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecordedEvent(DomainEvent):
    """A free-form ``(reason, message)`` event, like a cluster Event object."""

    reason: str = ""
    message: str = ""


# ---------------------------------------------------------------------------
# Reconciliation events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReconcileCompleted(DomainEvent):
    """A pass finished and the condition was published (or already current)."""

    key: str = ""
    condition: CompositeCondition | None = None
    changed: bool = False


@dataclass(frozen=True)
class ReconcileSkipped(DomainEvent):
    """A pass exited early because a top-level resource is gone."""

    key: str = ""
    cause: str = ""


@dataclass(frozen=True)
class ReconcileFailed(DomainEvent):
    """A pass raised; the key will be retried with backoff."""

    key: str = ""
    error: str = ""
    failures: int = 0
    retry_in: float = 0.0
