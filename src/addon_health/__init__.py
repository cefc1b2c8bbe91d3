"""Add-on health controller.

Observes the deployed footprint of the Submariner add-on on a managed
cluster and publishes one aggregated ``AgentDegraded`` condition to the
add-on's status object on the hub.
"""

__version__ = "0.1.0"

from addon_health.infrastructure.config import ControllerConfig
from addon_health.services.controller import Controller, build_controller

__all__ = [
    "build_controller",
    "Controller",
    "ControllerConfig",
]
