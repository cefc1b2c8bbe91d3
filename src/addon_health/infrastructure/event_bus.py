"""Event bus infrastructure for the add-on health controller.

Provides a synchronous pub-sub event bus, a bounded event history queryable
per reconcile key, and the ``EventRecorder`` sink the status publisher
writes to.  The bus catches and logs handler errors so that a single failing
subscriber never breaks the publish pipeline or a reconciliation pass.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict, deque
from collections.abc import Callable, Sequence

from addon_health.domain.events import DomainEvent, RecordedEvent

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Type aliases
# ---------------------------------------------------------------------------
SyncHandler = Callable[[DomainEvent], None]


# ===================================================================== #
#  Synchronous Event Bus                                                 #
# ===================================================================== #

class EventBus:
    """Thread-safe synchronous pub-sub for domain events.

    Handlers are invoked **in registration order**.  A handler that raises is
    logged and skipped; subsequent handlers still execute.

    Usage::

        bus = EventBus()
        bus.subscribe(ReconcileCompleted, my_handler)
        bus.publish(ReconcileCompleted(...))
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[type[DomainEvent], list[SyncHandler]] = defaultdict(list)
        self._global_handlers: list[SyncHandler] = []

    # -- subscription -------------------------------------------------------

    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: SyncHandler,
    ) -> None:
        """Register *handler* for a specific *event_type*."""
        with self._lock:
            self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: SyncHandler) -> None:
        """Register *handler* to receive **every** published event."""
        with self._lock:
            self._global_handlers.append(handler)

    # -- publishing ---------------------------------------------------------

    def publish(self, event: DomainEvent) -> None:
        """Publish *event* to all matching handlers (global first, then typed)."""
        with self._lock:
            global_snapshot = list(self._global_handlers)
            typed_snapshot = list(self._handlers.get(type(event), []))

        for handler in global_snapshot:
            try:
                handler(event)
            except Exception:
                logger.exception("Error in global event handler %r", handler)

        for handler in typed_snapshot:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Error in handler %r for %s", handler, type(event).__name__
                )


# ===================================================================== #
#  Event Recorder                                                        #
# ===================================================================== #

class EventRecorder:
    """Fire-and-forget ``(reason, message)`` sink backed by an ``EventBus``.

    Recording never raises: the bus already isolates handler failures, and
    anything else is logged and dropped.
    """

    def __init__(self, bus: EventBus, source_id: str = "") -> None:
        self._bus = bus
        self._source_id = source_id

    def record_event(self, reason: str, message: str) -> None:
        try:
            self._bus.publish(
                RecordedEvent(source_id=self._source_id, reason=reason, message=message)
            )
        except Exception:
            logger.exception("EventRecorder: dropping event %s", reason)




# ===================================================================== #
#  Event Store                                                           #
# ===================================================================== #

class EventStore:
    """Bounded history of published events, queryable per reconcile key.

    ``build_controller`` attaches one to its bus so the outcome of recent
    passes (completed, skipped, failed) and the recorded status updates can
    be inspected::

        history = EventStore.attach(bus, max_size=256)
        history.last("submariner-operator/submariner")
    """

    def __init__(self, max_size: int = 0) -> None:
        self._events: deque[DomainEvent] = deque(maxlen=max_size or None)
        self._lock = threading.Lock()

    @classmethod
    def attach(cls, bus: EventBus, max_size: int = 0) -> EventStore:
        """Create a store that receives every event published on *bus*."""
        store = cls(max_size)
        bus.subscribe_all(store.append)
        return store

    def append(self, event: DomainEvent) -> None:
        """Append *event*; the oldest event is evicted once the store is full."""
        with self._lock:
            self._events.append(event)

    def query(
        self,
        event_type: type[DomainEvent] | None = None,
        key: str | None = None,
        limit: int = 0,
    ) -> Sequence[DomainEvent]:
        """Return events in publish order.

        *event_type* keeps instances of that type, *key* keeps events about
        that reconcile key, and *limit* keeps the most recent matches
        (0 = unlimited).
        """
        with self._lock:
            result: list[DomainEvent] = list(self._events)

        if event_type is not None:
            result = [e for e in result if isinstance(e, event_type)]
        if key is not None:
            result = [e for e in result if getattr(e, "key", None) == key]
        if limit > 0:
            result = result[-limit:]
        return result

    def last(self, key: str) -> DomainEvent | None:
        """The most recent reconcile outcome for *key*, or ``None``."""
        matches = self.query(key=key, limit=1)
        return matches[0] if matches else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
