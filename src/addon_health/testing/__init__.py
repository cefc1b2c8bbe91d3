"""Public testing utilities for the add-on health controller.

Provides resource builders and fakes for writing self-contained tests and
examples without a cluster.
"""

from addon_health.testing.fakes import (
    ConflictingStatusStore,
    daemonset,
    deployment,
    healthy_view,
    submariner,
    subscription,
)

__all__ = [
    "ConflictingStatusStore",
    "daemonset",
    "deployment",
    "healthy_view",
    "submariner",
    "subscription",
]
