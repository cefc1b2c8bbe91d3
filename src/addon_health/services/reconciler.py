"""One reconciliation pass for a configuration resource.

The pass reads the subscription, runs the required checks, looks up the
configuration resource for the key, runs the conditional checks,
synthesizes the composite condition, and publishes it to the hub.

A missing subscription or configuration resource ends the pass silently:
nothing is published and no error is raised.  Any read or write error
propagates to the caller (the reconcile loop), which retries the key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from addon_health.domain.enums import ResourceKind
from addon_health.domain.events import ReconcileCompleted, ReconcileSkipped
from addon_health.domain.values import CompositeCondition, ResourceKey
from addon_health.infrastructure.config import ControllerConfig
from addon_health.infrastructure.event_bus import EventBus
from addon_health.infrastructure.resource_view import ResourceView
from addon_health.services.checks import SUBSCRIPTION_NAME, CheckPipeline
from addon_health.services.publisher import StatusPublisher
from addon_health.services.synthesis import synthesize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a pass.

    ``condition`` is ``None`` when the pass was skipped; ``skipped`` then
    names the missing resource.
    """

    key: ResourceKey
    condition: CompositeCondition | None = None
    changed: bool = False
    skipped: str = ""


class Reconciler:
    """Evaluate and publish the health condition for one key at a time.

    Parameters
    ----------
    config:
        Controller configuration (cluster name, installation namespace).
    view:
        Read-only resource cache.
    publisher:
        Writer for the hub-side status object.
    pipeline:
        Check pipeline; defaults to the standard one for the installation
        namespace.
    event_bus:
        Optional bus receiving ``ReconcileCompleted`` / ``ReconcileSkipped``.
    """

    def __init__(
        self,
        config: ControllerConfig,
        view: ResourceView,
        publisher: StatusPublisher,
        pipeline: CheckPipeline | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._config = config
        self._view = view
        self._publisher = publisher
        self._pipeline = pipeline or CheckPipeline(config.installation_namespace)
        self._event_bus = event_bus

    def evaluate(self, key: ResourceKey) -> tuple[CompositeCondition | None, str]:
        """Compute the condition for *key* without publishing it.

        Returns ``(condition, "")`` or ``(None, cause)`` when skipped.
        """
        namespace = self._config.installation_namespace
        subscription = self._view.get(ResourceKind.SUBSCRIPTION, namespace, SUBSCRIPTION_NAME)
        if subscription is None:
            return None, f"subscription {namespace}/{SUBSCRIPTION_NAME} not found"

        signals = self._pipeline.run_required(self._view, subscription)

        submariner = self._view.get(ResourceKind.SUBMARINER, key.namespace, key.name)
        if submariner is None:
            return None, f"configuration {key} not found"

        signals.extend(self._pipeline.run_conditional(self._view, submariner))
        return synthesize(signals, subscription.status.installed_csv), ""

    def reconcile(self, key: ResourceKey) -> ReconcileResult:
        """Run one full pass for *key*."""
        condition, cause = self.evaluate(key)
        if condition is None:
            logger.debug("Reconciler: skipping %s: %s", key, cause)
            self._emit(
                ReconcileSkipped(
                    source_id=self._config.cluster_name, key=str(key), cause=cause
                )
            )
            return ReconcileResult(key=key, skipped=cause)

        logger.debug(
            "Reconciler: %s -> %s (%s)", key, condition.status.value, condition.reason
        )
        _, changed = self._publisher.publish(self._config.cluster_name, condition)
        self._emit(
            ReconcileCompleted(
                source_id=self._config.cluster_name,
                key=str(key),
                condition=condition,
                changed=changed,
            )
        )
        return ReconcileResult(key=key, condition=condition, changed=changed)

    __call__ = reconcile

    def _emit(self, event: ReconcileCompleted | ReconcileSkipped) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
