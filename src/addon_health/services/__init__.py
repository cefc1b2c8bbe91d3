"""Service layer for the add-on health controller.

Re-exports public service types for convenient top-level access::

    from addon_health.services import (
        CheckPipeline, ConditionalCheck, synthesize,
        StatusPublisher, set_condition, update_condition_fn,
        Reconciler, ReconcileResult, ReconcileLoop,
        Controller, build_controller,
    )
"""

from addon_health.services.checks import (
    CheckPipeline,
    ConditionalCheck,
    check_deployment,
    check_gateway_daemonset,
    check_route_agent_daemonset,
    check_subscription,
)
from addon_health.services.controller import Controller, build_controller
from addon_health.services.loop import ReconcileLoop
from addon_health.services.publisher import (
    StatusPublisher,
    set_condition,
    update_condition_fn,
)
from addon_health.services.reconciler import ReconcileResult, Reconciler
from addon_health.services.synthesis import synthesize

__all__ = [
    # checks
    "CheckPipeline",
    "ConditionalCheck",
    "check_deployment",
    "check_gateway_daemonset",
    "check_route_agent_daemonset",
    "check_subscription",
    # synthesis
    "synthesize",
    # publishing
    "StatusPublisher",
    "set_condition",
    "update_condition_fn",
    # reconciliation
    "ReconcileLoop",
    "ReconcileResult",
    "Reconciler",
    # assembly
    "Controller",
    "build_controller",
]
