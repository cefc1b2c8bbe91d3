"""Read-only projection of the watched resources.

``ResourceView`` is the read contract the checks rely on: a non-blocking
``get`` that returns the latest cached snapshot, ``None`` when the resource
does not exist, and raises ``ResourceReadError`` only on a malfunction.

``InMemoryResourceView`` is a thread-safe cache holding unstructured
mappings.  It plays the role of the watch collaborator in tests and
embedded setups: writers ``upsert`` / ``delete`` objects and every change is
fanned out as a ``ChangeNotification`` to registered listeners.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from addon_health.domain.enums import ResourceKind
from addon_health.domain.exceptions import ResourceReadError
from addon_health.domain.resources import decode
from addon_health.domain.values import ChangeNotification, ResourceKey

logger = logging.getLogger(__name__)

Listener = Callable[[ChangeNotification], None]


class ResourceView(Protocol):
    """Read contract over the locally cached resources."""

    def get(self, kind: ResourceKind, namespace: str, name: str) -> Any | None:
        ...


class InMemoryResourceView:
    """Dict-backed resource cache with a change-notification feed."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._objects: dict[tuple[ResourceKind, ResourceKey], dict[str, Any]] = {}
        self._errors: dict[tuple[ResourceKind, ResourceKey], Exception] = {}
        self._listeners: list[Listener] = []

    # -- reads ----------------------------------------------------------------

    def get(self, kind: ResourceKind, namespace: str, name: str) -> Any | None:
        """Return the decoded snapshot, or ``None`` if it is not cached."""
        key = ResourceKey(namespace, name)
        with self._lock:
            error = self._errors.get((kind, key))
            data = self._objects.get((kind, key))
        if error is not None:
            raise error
        if data is None:
            return None
        return decode(kind, data, key=str(key))

    def keys(self, kind: ResourceKind) -> list[ResourceKey]:
        """Return the cached keys of *kind*, sorted."""
        with self._lock:
            return sorted(k for (knd, k) in self._objects if knd is kind)

    # -- writes (watch side) --------------------------------------------------

    def upsert(self, kind: ResourceKind, obj: Mapping[str, Any]) -> ResourceKey:
        """Store *obj* (keyed by its ``metadata``) and notify listeners."""
        metadata = obj.get("metadata") or {}
        name = metadata.get("name")
        if not name:
            raise ValueError(f"{kind.value} object has no metadata.name")
        key = ResourceKey(metadata.get("namespace", ""), name)
        with self._lock:
            self._objects[(kind, key)] = copy.deepcopy(dict(obj))
        self._notify(ChangeNotification(kind, key.namespace, key.name))
        return key

    def delete(self, kind: ResourceKind, namespace: str, name: str) -> bool:
        """Drop a cached object. Returns ``True`` if it existed."""
        key = ResourceKey(namespace, name)
        with self._lock:
            existed = self._objects.pop((kind, key), None) is not None
        if existed:
            self._notify(ChangeNotification(kind, namespace, name))
        return existed

    def inject_error(
        self,
        kind: ResourceKind,
        namespace: str,
        name: str,
        error: Exception | None = None,
    ) -> None:
        """Make reads of one object raise *error* until cleared.

        The default error is a ``ResourceReadError`` for that object.
        """
        key = ResourceKey(namespace, name)
        with self._lock:
            self._errors[(kind, key)] = error or ResourceReadError(
                f"injected read failure for {kind.value} {key}",
                kind=kind.value,
                key=str(key),
            )

    def clear_error(self, kind: ResourceKind, namespace: str, name: str) -> None:
        with self._lock:
            self._errors.pop((kind, ResourceKey(namespace, name)), None)

    # -- notifications --------------------------------------------------------

    def add_listener(self, listener: Listener, replay: bool = False) -> None:
        """Register *listener* for every subsequent change.

        With *replay* the listener first receives one notification per
        object already cached, like the initial list of a watch.
        """
        with self._lock:
            self._listeners.append(listener)
            existing = sorted(self._objects, key=lambda item: (item[0].value, item[1]))
        if replay:
            for kind, key in existing:
                self._deliver([listener], ChangeNotification(kind, key.namespace, key.name))

    def _notify(self, notification: ChangeNotification) -> None:
        with self._lock:
            listeners = list(self._listeners)
        self._deliver(listeners, notification)

    @staticmethod
    def _deliver(listeners: list[Listener], notification: ChangeNotification) -> None:
        for listener in listeners:
            try:
                listener(notification)
            except Exception:
                logger.exception("Error in resource listener %r", listener)
