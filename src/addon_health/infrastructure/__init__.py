"""Infrastructure layer for the add-on health controller.

Re-exports the public API surface for convenience::

    from addon_health.infrastructure import (
        EventBus, EventRecorder, EventStore,
        InMemoryResourceView, InMemoryStatusStore,
        ControllerConfig, load_config_from_json, load_config_from_yaml,
    )
"""

from addon_health.infrastructure.config import (
    ControllerConfig,
    load_config_from_json,
    load_config_from_yaml,
)
from addon_health.infrastructure.event_bus import (
    EventBus,
    EventRecorder,
    EventStore,
)
from addon_health.infrastructure.resource_view import (
    InMemoryResourceView,
    ResourceView,
)
from addon_health.infrastructure.status_store import (
    InMemoryStatusStore,
    StatusStore,
)

__all__ = [
    # Event bus
    "EventBus",
    "EventRecorder",
    "EventStore",
    # Resource view
    "InMemoryResourceView",
    "ResourceView",
    # Status store
    "InMemoryStatusStore",
    "StatusStore",
    # Configuration
    "ControllerConfig",
    "load_config_from_json",
    "load_config_from_yaml",
]
