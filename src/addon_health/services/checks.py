"""Health checks over the add-on's deployed footprint.

Each check reads one resource from the ``ResourceView`` and returns zero or
more ``DegradedSignal`` values.  A missing resource becomes a signal; any
other read failure (``ResourceReadError``) propagates unmodified and aborts
the pass.

Functions
---------
check_subscription
    The subscription has installed its CSV.
check_deployment
    A deployment exists and has available replicas.
check_gateway_daemonset
    Gateways exist, are scheduled, and are all available.
check_route_agent_daemonset
    Route agents exist and are all available.

Classes
-------
ConditionalCheck
    A ``(predicate, check)`` pair gated on the configuration resource.
CheckPipeline
    Runs the checks in their fixed order.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from addon_health.domain.enums import ResourceKind
from addon_health.domain.resources import Submariner, Subscription
from addon_health.domain.values import DegradedSignal
from addon_health.infrastructure.resource_view import ResourceView

logger = logging.getLogger(__name__)

SUBSCRIPTION_NAME = "submariner"
OPERATOR_NAME = "submariner-operator"
GATEWAY_NAME = "submariner-gateway"
ROUTE_AGENT_NAME = "submariner-routeagent"
GLOBALNET_NAME = "submariner-globalnet"
NETWORK_PLUGIN_SYNCER_NAME = "submariner-networkplugin-syncer"
LIGHTHOUSE_AGENT_NAME = "submariner-lighthouse-agent"
LIGHTHOUSE_COREDNS_NAME = "submariner-lighthouse-coredns"
NETWORK_PLUGIN_OVN_KUBERNETES = "OVNKubernetes"

# (deployment name, reason infix), in evaluation order
REQUIRED_DEPLOYMENTS: tuple[tuple[str, str], ...] = (
    (OPERATOR_NAME, "Operator"),
    (LIGHTHOUSE_AGENT_NAME, "LighthouseAgent"),
    (LIGHTHOUSE_COREDNS_NAME, "LighthouseCoreDNS"),
)

Check = Callable[[ResourceView, str], list[DegradedSignal]]


# ===================================================================== #
#  Individual checks                                                     #
# ===================================================================== #


def check_subscription(subscription: Subscription) -> list[DegradedSignal]:
    """Signal ``CSVNotInstalled`` while the subscription has no installed CSV."""
    if subscription.status.installed_csv:
        return []

    spec = subscription.spec
    starting_csv = spec.starting_csv or "default"
    channel = spec.channel or "default"
    return [
        DegradedSignal(
            "CSVNotInstalled",
            f"The submariner-operator CSV ({starting_csv}) is not installed from "
            f"channel ({channel}) in catalog source "
            f"({spec.source_namespace}/{spec.source})",
        )
    ]


def check_deployment(
    view: ResourceView,
    namespace: str,
    name: str,
    reason_name: str,
) -> list[DegradedSignal]:
    """Signal ``No<reason_name>Deployment`` or ``No<reason_name>Available``."""
    deployment = view.get(ResourceKind.DEPLOYMENT, namespace, name)
    msg_name = name.replace("-", " ")

    if deployment is None:
        return [
            DegradedSignal(
                f"No{reason_name}Deployment",
                f"The {msg_name} deployment does not exist",
            )
        ]
    if deployment.status.available_replicas == 0:
        return [
            DegradedSignal(
                f"No{reason_name}Available",
                f"There are no {msg_name} replica available",
            )
        ]
    return []


def check_gateway_daemonset(view: ResourceView, namespace: str) -> list[DegradedSignal]:
    """Gateways must exist, be scheduled somewhere, and all be available."""
    gateways = view.get(ResourceKind.DAEMONSET, namespace, GATEWAY_NAME)
    if gateways is None:
        return [
            DegradedSignal("NoGatewayDaemonSet", "The gateway daemon set does not exist")
        ]

    signals: list[DegradedSignal] = []
    if gateways.status.desired_number_scheduled == 0:
        signals.append(
            DegradedSignal("NoScheduledGateways", "There are no nodes to run the gateways")
        )
    unavailable = gateways.status.number_unavailable
    if unavailable != 0:
        signals.append(
            DegradedSignal(
                "GatewaysUnavailable",
                f"There are {unavailable} unavailable gateways",
            )
        )
    return signals


def check_route_agent_daemonset(view: ResourceView, namespace: str) -> list[DegradedSignal]:
    """Route agents must exist and all be available."""
    route_agents = view.get(ResourceKind.DAEMONSET, namespace, ROUTE_AGENT_NAME)
    if route_agents is None:
        return [
            DegradedSignal("NoRouteAgentDaemonSet", "The route agents are not found")
        ]

    unavailable = route_agents.status.number_unavailable
    if unavailable != 0:
        return [
            DegradedSignal(
                "RouteAgentsUnavailable",
                f"There are {unavailable} unavailable route agents",
            )
        ]
    return []


# ===================================================================== #
#  Conditional checks                                                    #
# ===================================================================== #


@dataclass(frozen=True)
class ConditionalCheck:
    """A check that only runs when *applies* holds for the configuration."""

    name: str
    applies: Callable[[Submariner], bool]
    check: Check


def _globalnet_enabled(submariner: Submariner) -> bool:
    return submariner.spec.global_cidr != ""


def _ovn_kubernetes(submariner: Submariner) -> bool:
    return submariner.status.network_plugin == NETWORK_PLUGIN_OVN_KUBERNETES


CONDITIONAL_CHECKS: tuple[ConditionalCheck, ...] = (
    ConditionalCheck(
        name="globalnet",
        applies=_globalnet_enabled,
        check=functools.partial(
            check_deployment, name=GLOBALNET_NAME, reason_name="Globalnet"
        ),
    ),
    ConditionalCheck(
        name="network-plugin-syncer",
        applies=_ovn_kubernetes,
        check=functools.partial(
            check_deployment,
            name=NETWORK_PLUGIN_SYNCER_NAME,
            reason_name="NetworkPluginSyncer",
        ),
    ),
)


# ===================================================================== #
#  Check Pipeline                                                        #
# ===================================================================== #


class CheckPipeline:
    """Run the health checks in their fixed order and collect signals.

    The order is part of the output contract: reasons and messages of the
    composite condition follow it exactly.  No check suppresses a later one.

    Parameters
    ----------
    namespace:
        Installation namespace of the add-on's workloads.
    required_deployments:
        ``(name, reason infix)`` pairs checked on every pass.
    conditional_checks:
        Checks gated on the configuration resource, in evaluation order.
    """

    def __init__(
        self,
        namespace: str,
        required_deployments: Sequence[tuple[str, str]] = REQUIRED_DEPLOYMENTS,
        conditional_checks: Sequence[ConditionalCheck] = CONDITIONAL_CHECKS,
    ) -> None:
        self._namespace = namespace
        self._required = tuple(required_deployments)
        self._conditional = tuple(conditional_checks)

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def conditional_checks(self) -> tuple[ConditionalCheck, ...]:
        return self._conditional

    def run_required(
        self, view: ResourceView, subscription: Subscription
    ) -> list[DegradedSignal]:
        """Subscription, required deployments, then both daemonsets."""
        signals = check_subscription(subscription)
        for name, reason_name in self._required:
            signals.extend(check_deployment(view, self._namespace, name, reason_name))
        signals.extend(check_gateway_daemonset(view, self._namespace))
        signals.extend(check_route_agent_daemonset(view, self._namespace))
        return signals

    def run_conditional(
        self, view: ResourceView, submariner: Submariner
    ) -> list[DegradedSignal]:
        """Checks whose predicate holds for *submariner*, in declared order."""
        signals: list[DegradedSignal] = []
        for conditional in self._conditional:
            if not conditional.applies(submariner):
                logger.debug("CheckPipeline: skipping %s check", conditional.name)
                continue
            signals.extend(conditional.check(view, self._namespace))
        return signals

    def run(
        self,
        view: ResourceView,
        subscription: Subscription,
        submariner: Submariner | None,
    ) -> list[DegradedSignal]:
        """Full pipeline; conditional checks run only when *submariner* is set."""
        signals = self.run_required(view, subscription)
        if submariner is not None:
            signals.extend(self.run_conditional(view, submariner))
        return signals
