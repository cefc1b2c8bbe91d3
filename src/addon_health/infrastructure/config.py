"""Configuration dataclasses for the add-on health controller.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid combinations.  Configs are **frozen** so they can
be shared between worker threads without risking silent mutation.

Config files may be JSON or YAML; both are expected to hold a top-level
``controller`` section.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields
from typing import Any

import yaml

from addon_health.domain.values import ResourceKey

DEFAULT_INSTALLATION_NAMESPACE = "submariner-operator"
DEFAULT_TARGET_NAME = "submariner"


# ===================================================================== #
#  Controller Configuration                                              #
# ===================================================================== #

@dataclass(frozen=True)
class ControllerConfig:
    """Parameters governing the status controller.

    Attributes
    ----------
    cluster_name:
        Name of the managed cluster; also the namespace of the status
        object on the hub.
    installation_namespace:
        Namespace on the managed cluster holding the add-on's workloads.
    target_name:
        Name of the configuration resource that non-configuration
        notifications are mapped onto.
    workers:
        Number of worker threads reconciling distinct keys in parallel.
    max_update_attempts:
        Read-modify-write attempts before a status update is abandoned.
    update_timeout:
        Wall-clock bound in seconds around the status update retries.
    retry_base_delay:
        First backoff delay in seconds after a failed pass.
    retry_max_delay:
        Upper bound on the per-key backoff delay.
    """

    cluster_name: str = ""
    installation_namespace: str = DEFAULT_INSTALLATION_NAMESPACE
    target_name: str = DEFAULT_TARGET_NAME
    workers: int = 1
    max_update_attempts: int = 5
    update_timeout: float = 30.0
    retry_base_delay: float = 0.005
    retry_max_delay: float = 60.0

    @property
    def target_key(self) -> ResourceKey:
        """The well-known reconciliation key in the installation namespace."""
        return ResourceKey(self.installation_namespace, self.target_name)

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if not self.cluster_name:
            raise ValueError("cluster_name must not be empty")
        if not self.installation_namespace:
            raise ValueError("installation_namespace must not be empty")
        if not self.target_name:
            raise ValueError("target_name must not be empty")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.max_update_attempts < 1:
            raise ValueError(
                f"max_update_attempts must be >= 1, got {self.max_update_attempts}"
            )
        if self.update_timeout <= 0:
            raise ValueError(
                f"update_timeout must be > 0, got {self.update_timeout}"
            )
        if self.retry_base_delay < 0:
            raise ValueError(
                f"retry_base_delay must be >= 0, got {self.retry_base_delay}"
            )
        if self.retry_max_delay < self.retry_base_delay:
            raise ValueError(
                f"retry_max_delay ({self.retry_max_delay}) must be >= "
                f"retry_base_delay ({self.retry_base_delay})"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ControllerConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg


# ===================================================================== #
#  Loaders                                                               #
# ===================================================================== #

def _from_document(raw: Any) -> ControllerConfig:
    if not isinstance(raw, dict):
        raise ValueError("Top-level config document must be a mapping")
    section = raw.get("controller")
    if not isinstance(section, dict):
        raise ValueError("Config document must contain a 'controller' mapping")
    return ControllerConfig.from_dict(section)


def load_config_from_json(json_str: str) -> ControllerConfig:
    """Parse a JSON document with a ``controller`` section."""
    return _from_document(json.loads(json_str))


def load_config_from_yaml(yaml_str: str) -> ControllerConfig:
    """Parse a YAML document with a ``controller`` section."""
    return _from_document(yaml.safe_load(yaml_str))
