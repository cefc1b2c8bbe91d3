"""Domain exceptions for the add-on health controller.

All domain-specific exceptions inherit from ``AddonHealthError`` so callers
can catch the full family with a single ``except`` clause when needed.

A missing resource is never an exception: reads return ``None`` and the
check pipeline turns that into a degraded signal or a silent skip.
"""

from __future__ import annotations

from typing import Any


class AddonHealthError(Exception):
    """Base exception for all add-on health errors."""

    def __init__(self, message: str = "", details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class ResourceReadError(AddonHealthError):
    """Raised when the resource view cannot produce a snapshot.

    Covers malfunctions only (decode failures, broken caches).  Aborts the
    current reconciliation pass; the loop retries the key with backoff.
    """

    def __init__(
        self,
        message: str = "Resource read failed",
        kind: str = "",
        key: str = "",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind
        self.key = key


class WriteConflictError(AddonHealthError):
    """Raised by a status store when the object changed since it was read."""

    def __init__(
        self,
        message: str = "Status write conflict",
        cluster: str = "",
        expected_version: int = 0,
        actual_version: int = 0,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.cluster = cluster
        self.expected_version = expected_version
        self.actual_version = actual_version


class WriteExhaustedError(AddonHealthError):
    """Raised when the status update retry budget is spent."""

    def __init__(
        self,
        message: str = "Status update retries exhausted",
        cluster: str = "",
        attempts: int = 0,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.cluster = cluster
        self.attempts = attempts
