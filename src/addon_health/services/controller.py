"""Assembly of the status controller from its collaborators.

Example
-------
::

    view = InMemoryResourceView()
    controller = build_controller(
        ControllerConfig(cluster_name="cluster1"),
        view=view,
        store=InMemoryStatusStore(),
    )
    controller.start()
    view.upsert(ResourceKind.DEPLOYMENT, {...})   # triggers a pass
    controller.stop()
"""

from __future__ import annotations

from dataclasses import dataclass

from addon_health.infrastructure.config import ControllerConfig
from addon_health.infrastructure.event_bus import EventBus, EventRecorder, EventStore
from addon_health.infrastructure.resource_view import ResourceView
from addon_health.infrastructure.status_store import StatusStore
from addon_health.services.checks import CheckPipeline
from addon_health.services.loop import ReconcileLoop
from addon_health.services.publisher import StatusPublisher
from addon_health.services.reconciler import Reconciler

CONTROLLER_NAME = "SubmarinerAgentStatusController"
HISTORY_SIZE = 256


@dataclass
class Controller:
    """The wired components; ``start`` / ``stop`` delegate to the loop."""

    config: ControllerConfig
    event_bus: EventBus
    publisher: StatusPublisher
    reconciler: Reconciler
    loop: ReconcileLoop
    history: EventStore

    def start(self) -> None:
        self.loop.start()

    def stop(self, timeout: float | None = None) -> None:
        self.loop.stop(timeout)


def build_controller(
    config: ControllerConfig,
    view: ResourceView,
    store: StatusStore,
    event_bus: EventBus | None = None,
    *,
    pipeline: CheckPipeline | None = None,
    conflict_delay: float = 0.01,
) -> Controller:
    """Validate *config* and wire a controller around *view* and *store*.

    When *view* exposes ``add_listener`` (as ``InMemoryResourceView`` does)
    the loop is subscribed to its change feed, and every object already
    cached is queued so that ``start`` reconciles the current state.
    """
    config.validate()
    bus = event_bus or EventBus()
    history = EventStore.attach(bus, max_size=HISTORY_SIZE)
    publisher = StatusPublisher(
        store,
        recorder=EventRecorder(bus, source_id=CONTROLLER_NAME),
        max_attempts=config.max_update_attempts,
        timeout=config.update_timeout,
        conflict_delay=conflict_delay,
    )
    reconciler = Reconciler(config, view, publisher, pipeline=pipeline, event_bus=bus)
    loop = ReconcileLoop(reconciler, config, event_bus=bus)

    add_listener = getattr(view, "add_listener", None)
    if callable(add_listener):
        add_listener(loop.notify, replay=True)

    return Controller(
        config=config,
        event_bus=bus,
        publisher=publisher,
        reconciler=reconciler,
        loop=loop,
        history=history,
    )
