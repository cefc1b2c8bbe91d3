"""Shared fixtures for the add-on health test suite."""

from __future__ import annotations

import pytest

from addon_health.infrastructure.config import ControllerConfig
from addon_health.infrastructure.event_bus import EventBus, EventRecorder, EventStore
from addon_health.infrastructure.resource_view import InMemoryResourceView
from addon_health.infrastructure.status_store import InMemoryStatusStore
from addon_health.services.publisher import StatusPublisher
from addon_health.services.reconciler import Reconciler
from addon_health.testing import healthy_view

CLUSTER = "cluster1"


# ---------------------------------------------------------------------------
# Infrastructure fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> ControllerConfig:
    """Config for ``cluster1`` with immediate retries."""
    return ControllerConfig(cluster_name=CLUSTER, retry_base_delay=0.0, retry_max_delay=0.0)


@pytest.fixture
def view() -> InMemoryResourceView:
    """A fully healthy deployment without optional components."""
    return healthy_view()


@pytest.fixture
def store() -> InMemoryStatusStore:
    return InMemoryStatusStore()


@pytest.fixture
def event_bus() -> EventBus:
    """A fresh event bus."""
    return EventBus()


@pytest.fixture
def event_store(event_bus: EventBus) -> EventStore:
    """Event store recording everything published on ``event_bus``."""
    return EventStore.attach(event_bus)


# ---------------------------------------------------------------------------
# Service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def publisher(store: InMemoryStatusStore, event_bus: EventBus) -> StatusPublisher:
    return StatusPublisher(store, recorder=EventRecorder(event_bus), conflict_delay=0.0)


@pytest.fixture
def reconciler(
    config: ControllerConfig,
    view: InMemoryResourceView,
    publisher: StatusPublisher,
    event_bus: EventBus,
) -> Reconciler:
    return Reconciler(config, view, publisher, event_bus=event_bus)
